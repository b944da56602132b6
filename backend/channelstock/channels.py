# Overview: Sales channels and caller roles, plus the channel access table.

from __future__ import annotations

from enum import Enum

from .validation import ValidationError


class Channel(str, Enum):
    TIKTOK = "tiktok"
    SHOPEE = "shopee"
    TOKO = "toko"

    @property
    def stock_column(self) -> str:
        """Name of the Product column holding this channel's allocation."""
        return f"{self.value}_stock"


class Role(str, Enum):
    TIKTOK = "tiktok"
    SHOPEE = "shopee"
    TOKO = "toko"
    MANAGER = "manager"

    @property
    def channel(self) -> Channel | None:
        """The channel a seller role works on; None for manager."""
        if self is Role.MANAGER:
            return None
        return Channel(self.value)


# Which roles may operate each channel's cart.
CHANNEL_PERMISSIONS: dict[Channel, frozenset[Role]] = {
    Channel.TIKTOK: frozenset({Role.TIKTOK, Role.MANAGER}),
    Channel.SHOPEE: frozenset({Role.SHOPEE, Role.MANAGER}),
    Channel.TOKO: frozenset({Role.TOKO, Role.MANAGER}),
}


def _normalize(value) -> str:
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        return ""
    return "".join(value.split()).lower()


def parse_channel(value) -> Channel:
    key = _normalize(value)
    try:
        return Channel(key)
    except ValueError:
        allowed = ", ".join(c.value for c in Channel)
        raise ValidationError(f"unknown channel {value!r} (expected one of: {allowed})")


def parse_role(value) -> Role:
    key = _normalize(value)
    try:
        return Role(key)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise ValidationError(f"unknown role {value!r} (expected one of: {allowed})")


def allowed_channels(role: Role) -> list[Channel]:
    return [c for c in Channel if role in CHANNEL_PERMISSIONS[c]]


def can_access_channel(role: Role, channel: Channel) -> bool:
    return role in CHANNEL_PERMISSIONS[channel]
