import pytest

from muksview.entities import (
    BlockquoteEntity,
    BreakEntity,
    CodeBlockEntity,
    ContainerEntity,
    HorizontalLineEntity,
    ListEntity,
    TextEntity,
)
from muksview.htmlparser import (
    HTMLParser,
    adjust_style_background_color,
    adjust_style_bold,
    adjust_style_italic,
    adjust_style_strikethrough,
    adjust_style_text_color,
    adjust_style_underline,
    parse_message,
)
from muksview.styles import Color, Style, rgb_color


def html(formatted, **kwargs):
    return parse_message("", formatted, is_html=True, **kwargs)


def test_style_helpers():
    assert adjust_style_bold(Style.DEFAULT).is_bold
    assert adjust_style_italic(Style.DEFAULT).is_italic
    assert adjust_style_underline(Style.DEFAULT).is_underline
    assert adjust_style_strikethrough(Style.DEFAULT).is_strikethrough
    assert adjust_style_text_color(Color.RED)(Style.DEFAULT).fg == Color.RED
    assert adjust_style_background_color(Color.RED)(Style.DEFAULT).bg == Color.RED


def test_parse_returns_body_container():
    root = HTMLParser().parse("<b>hi</b>")
    assert isinstance(root, ContainerEntity)
    assert root.tag == "body"
    bold = root.children[0]
    assert bold.tag == "b"
    assert bold.children[0].style.is_bold
    assert root.plain_text() == "hi"


def test_plain_body_newlines_become_breaks():
    root = parse_message("a\nb")
    assert [type(child) for child in root.children] == [TextEntity, BreakEntity, TextEntity]
    assert root.plain_text() == "a\nb"


def test_plain_body_is_escaped():
    root = parse_message("<b>x</b>")
    assert root.plain_text() == "<b>x</b>"


def test_tabs_expand():
    root = parse_message("a\tb")
    assert root.plain_text() == "a    b"


def test_first_paragraph_not_block():
    root = html("<p>a</p><p>b</p>")
    assert root.block is False
    assert root.children[0].block is False
    assert root.children[1].block is True
    assert root.plain_text() == "a\nb"


def test_newlines_removed_from_text():
    assert html("<p>a\nb</p>").plain_text() == "ab"


def test_emote_wraps_root():
    root = parse_message("hi", msgtype="m.emote", sender_displayname="Alice", sender_color=Color.RED)
    assert root.tag == "emote"
    assert root.children[1].style.fg == Color.RED
    assert root.plain_text() == "* Alice hi"


def test_link_shows_url():
    root = html('<a href="https://example.com">x</a>')
    assert root.plain_text() == "x (https://example.com)"


def test_link_same_url_not_repeated():
    root = html('<a href="https://example.com">https://example.com</a>')
    assert root.plain_text() == "https://example.com"


def test_link_urls_hidden():
    root = html('<a href="https://example.com">x</a>', show_urls=False)
    assert root.plain_text() == "x"


def test_link_no_link_attribute():
    root = html('<a href="https://example.com" data-mautrix-no-link>x</a>')
    assert root.plain_text() == "x"


def test_user_pill_uses_member_name():
    pill = '<a href="https://matrix.to/#/@alice:example.com">Alice</a>'
    root = html(pill, members={"@alice:example.com": "Alice Smith"}, color_for=lambda _: Color.YELLOW)
    text = root.children[0].children[0]
    assert text.text == "Alice Smith"
    assert text.style.fg == Color.YELLOW
    assert root.plain_text() == "Alice Smith"


def test_user_pill_unknown_member():
    root = html('<a href="https://matrix.to/#/@bob:example.com">Bob</a>')
    assert root.plain_text() == "@bob:example.com"


def test_room_pill():
    root = html('<a href="https://matrix.to/#/#room:example.com">room</a>')
    assert root.plain_text() == "#room:example.com"


@pytest.mark.parametrize(
    "markup, expected",
    [
        ('<img alt="cat" title="t">', "cat"),
        ('<img title="t">', "t"),
        ("<img>", "[inline image]"),
    ],
)
def test_image_alt_text(markup, expected):
    root = html(markup)
    assert root.children[0].tag == "img"
    assert root.plain_text() == expected


def test_ordered_list_start():
    root = html('<ol start="3"><li>a</li><li>b</li></ol>')
    lst = root.children[0]
    assert isinstance(lst, ListEntity)
    assert lst.start == 3 and lst.ordered
    assert lst.plain_text() == "3. a\n4. b"


def test_list_bad_start_and_non_items():
    lst = html('<ol start="x"><li>a</li></ol>').children[0]
    assert lst.start == 1
    ul = html("<ul><li>a</li><p>no</p></ul>").children[0]
    assert [child.tag for child in ul.children] == ["li"]


def test_header():
    root = html("<h2>Title</h2>")
    header = root.children[0]
    assert header.plain_text() == "## Title"
    assert all(child.style.is_bold for child in header.children)


def test_font_colors():
    font = html('<font color="#ff0000" data-mx-bg-color="blue">r</font>').children[0]
    text = font.children[0]
    assert text.style.fg == rgb_color(255, 0, 0)
    assert text.style.bg == rgb_color(0, 0, 255)


def test_font_invalid_color_ignored():
    font = html('<font color="notacolor">r</font>').children[0]
    assert font.children[0].style.fg == Color.DEFAULT


def test_blockquote_and_hr():
    root = html("<blockquote>q</blockquote><hr>")
    assert isinstance(root.children[0], BlockquoteEntity)
    assert isinstance(root.children[1], HorizontalLineEntity)
    assert root.children[0].plain_text() == "> q"


def test_reply_fallback_dropped():
    root = html("<mx-reply><blockquote>old</blockquote></mx-reply>new")
    assert root.plain_text() == "new"


def test_code_block_highlighted():
    root = html('<pre><code class="language-python">x = 1\n</code></pre>')
    block = root.children[0]
    assert isinstance(block, CodeBlockEntity)
    assert block.plain_text() == "x = 1"


def test_code_block_unknown_language_dropped():
    root = html('<pre><code class="language-nonexistentlang">x</code></pre>')
    assert root.children == []


def test_syntax_highlight_splits_lines():
    block = HTMLParser().syntax_highlight("a\nb", "plaintext")
    assert [type(child) for child in block.children] == [TextEntity, BreakEntity, TextEntity]
    assert block.background.bg != Color.DEFAULT


def test_parsed_tree_renders_height():
    root = html("<p>a</p><p>b</p>")
    root.calculate_buffer(20, 0, False)
    assert root.height == 2