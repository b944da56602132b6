# Overview: Fixed product color palette and product code derivation.

from __future__ import annotations

from .validation import ValidationError

# key -> (hex, display name); order is the palette index used in product codes
PALETTE: dict[str, tuple[str, str]] = {
    "burgundimaron": ("#800020", "Burgundi Maron"),
    "burgundiungu": ("#660033", "Burgundi Ungu"),
    "emeralblue": ("#0F5A5E", "Emeral Blue"),
    "emeralgreen": ("#50C878", "Emeral Green"),
    "mahogani": ("#3D0C02", "Mahogani"),
    "dusty": ("#B2996E", "Dusty"),
    "rosegold": ("#DEA193", "Rose Gold"),
    "mocca": ("#9D7651", "Mocha"),
    "milo": ("#F2E4D4", "Milo"),
    "denim": ("#5A86AD", "Denim"),
    "hitam": ("#000000", "Black"),
    "putih": ("#FFFFFF", "White"),
    "terakota": ("#C86F47", "Terrakota"),
    "sage": ("#A3B899", "Sage"),
    "taro": ("#B56F76", "Taro"),
    "lilak": ("#DCA1A1", "Lilak"),
}

_PALETTE_KEYS = list(PALETTE)


def _key(color: str) -> str:
    return "".join(color.split()).lower()


def normalize_color(color) -> str:
    """Return the palette key for ``color`` or raise ValidationError."""
    if not isinstance(color, str) or _key(color) not in PALETTE:
        raise ValidationError(f"color must be one of: {', '.join(_PALETTE_KEYS)}")
    return _key(color)


def color_hex(color: str) -> str:
    entry = PALETTE.get(_key(color))
    return entry[0] if entry else color


def color_display_name(color: str) -> str:
    entry = PALETTE.get(_key(color))
    if entry:
        return entry[1]
    return color[:1].upper() + color[1:]


def color_index(color: str) -> int:
    """1-based position of ``color`` in the palette."""
    return _PALETTE_KEYS.index(normalize_color(color)) + 1


def color_options() -> list[dict]:
    return [
        {"key": key, "hex": hex_value, "display_name": name}
        for key, (hex_value, name) in PALETTE.items()
    ]


def build_product_code(sequence: int, color: str, prefix: str = "") -> str:
    """
    Product code = optional series prefix + sequence + two-digit color index.

    e.g. build_product_code(12, "denim", "TK") -> "TK1210"
    """
    if sequence < 1:
        raise ValidationError("sequence must be >= 1")
    return f"{prefix.strip().upper()}{sequence}{color_index(color):02d}"
