import pytest

from channelstock.channels import (
    Channel,
    Role,
    allowed_channels,
    can_access_channel,
    parse_channel,
    parse_role,
)
from channelstock.colors import (
    PALETTE,
    build_product_code,
    color_display_name,
    color_hex,
    color_index,
    normalize_color,
)
from channelstock.validation import ValidationError


@pytest.mark.parametrize("raw,expected", [
    ("tiktok", Channel.TIKTOK),
    ("Shopee", Channel.SHOPEE),
    (" TOKO ", Channel.TOKO),
    (Channel.TOKO, Channel.TOKO),
])
def test_parse_channel(raw, expected):
    assert parse_channel(raw) is expected


@pytest.mark.parametrize("raw", ["lazada", "", None, 3])
def test_parse_channel_rejects_unknown(raw):
    with pytest.raises(ValidationError):
        parse_channel(raw)


def test_parse_role():
    assert parse_role("Manager") is Role.MANAGER
    assert parse_role("tiktok").channel is Channel.TIKTOK
    assert Role.MANAGER.channel is None
    with pytest.raises(ValidationError):
        parse_role("admin")


def test_channel_access_table():
    assert allowed_channels(Role.MANAGER) == [Channel.TIKTOK, Channel.SHOPEE, Channel.TOKO]
    assert allowed_channels(Role.SHOPEE) == [Channel.SHOPEE]

    assert can_access_channel(Role.TIKTOK, Channel.TIKTOK)
    assert not can_access_channel(Role.TIKTOK, Channel.SHOPEE)
    assert not can_access_channel(Role.TOKO, Channel.TIKTOK)


def test_palette_has_sixteen_colors_in_fixed_order():
    assert len(PALETTE) == 16
    assert color_index("burgundimaron") == 1
    assert color_index("denim") == 10
    assert color_index("lilak") == 16


def test_normalize_color():
    assert normalize_color("Rose Gold") == "rosegold"
    assert normalize_color("HITAM") == "hitam"
    with pytest.raises(ValidationError):
        normalize_color("navy")
    with pytest.raises(ValidationError):
        normalize_color(None)


def test_hex_and_display_name_fall_back_for_unknown_keys():
    assert color_hex("denim") == "#5A86AD"
    assert color_display_name("mocca") == "Mocha"
    assert color_hex("navy") == "navy"
    assert color_display_name("navy") == "Navy"


@pytest.mark.parametrize("sequence,color,prefix,expected", [
    (1, "denim", "", "110"),
    (12, "denim", "tk", "TK1210"),
    (3, "burgundimaron", " sp ", "SP301"),
    (7, "Lilak", "", "716"),
])
def test_build_product_code(sequence, color, prefix, expected):
    assert build_product_code(sequence, color, prefix) == expected


def test_build_product_code_rejects_bad_sequence():
    with pytest.raises(ValidationError):
        build_product_code(0, "denim")
