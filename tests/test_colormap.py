import pytest

from muksview.colormap import COLOR_MAP, parse_color, parse_hex


def test_parse_hex_long_form():
    assert parse_hex("#ff8000").rgb == (255, 128, 0)


def test_parse_hex_short_form_expands_digits():
    assert parse_hex("#fff").rgb == (255, 255, 255)
    assert parse_hex("#000").rgb == COLOR_MAP["black"]


def test_parse_hex_is_case_insensitive():
    assert parse_hex("#ABCDEF") == parse_hex("#abcdef")


@pytest.mark.parametrize("value", ["red", "", "ff0000", "#gg0000", "#12"])
def test_parse_hex_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_hex(value)


def test_parse_color_by_name_case_insensitive():
    assert parse_color("Red").rgb == (0xFF, 0x00, 0x00)
    assert parse_color("DarkGreen").rgb == COLOR_MAP["darkgreen"]


def test_parse_color_prefers_hex():
    assert parse_color("#00ff00") == parse_hex("#00ff00")


def test_parse_color_unknown_returns_none():
    assert parse_color("notacolour") is None


def test_parse_color_round_trips_every_named_colour():
    for name, rgb in COLOR_MAP.items():
        assert parse_color(name).rgb == rgb


def test_grey_and_gray_aliases_agree():
    assert parse_color("grey") == parse_color("gray")
    assert parse_color("darkslategrey") == parse_color("darkslategray")
    assert parse_color("aqua") == parse_color("cyan")
    assert parse_color("gray").rgb == (0x80, 0x80, 0x80)


def test_all_named_colours_parse_to_byte_range():
    for name in COLOR_MAP:
        assert name == name.lower()
        assert all(0 <= component <= 255 for component in parse_color(name).rgb)