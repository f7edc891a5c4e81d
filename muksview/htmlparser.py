"""Conversion of the HTML in formatted messages into renderable entities."""

from __future__ import annotations

import html as _html
import re
from typing import Callable, Mapping
from xml.dom import Node

import html5lib
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.token import Token
from pygments.util import ClassNotFound

from .colormap import parse_color
from .entities import (
    BlockquoteEntity,
    BreakEntity,
    CodeBlockEntity,
    ContainerEntity,
    Entity,
    HorizontalLineEntity,
    ListEntity,
    TextEntity,
)
from .styles import Color, Style, rgb_color

ColorFunc = Callable[[str], Color]

MATRIX_TO_URL = re.compile(r"^(?:https?://)?(?:www\.)?matrix\.to/#/([#@!].*)")

BLOCK_TAGS = (
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "ol", "ul", "li",
    "pre", "blockquote", "div", "hr", "table",
)

TAB_LENGTH = 4

CODE_STYLE = "solarized-dark"

_LEXER_ALIASES = {"plaintext": "text", "plain": "text", "no-highlight": "text"}

_BASIC_FORMAT_TAGS = ("b", "strong", "i", "em", "s", "strike", "del", "u", "ins", "font")


def adjust_style_bold(style: Style) -> Style:
    return style.bold(True)


def adjust_style_italic(style: Style) -> Style:
    return style.italic(True)


def adjust_style_underline(style: Style) -> Style:
    return style.underline(True)


def adjust_style_strikethrough(style: Style) -> Style:
    return style.strikethrough(True)


def adjust_style_text_color(color: Color) -> Callable[[Style], Style]:
    return lambda style: style.foreground(color)


def adjust_style_background_color(color: Color) -> Callable[[Style], Style]:
    return lambda style: style.background(color)


def _pygments_color(value: str | None) -> Color:
    if not value:
        return Color.DEFAULT
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(char * 2 for char in value)
    return rgb_color(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def _entry_style(entry: Mapping[str, object]) -> Style:
    return (
        Style.DEFAULT.bold(bool(entry.get("bold")))
        .italic(bool(entry.get("italic")))
        .underline(bool(entry.get("underline")))
        .foreground(_pygments_color(entry.get("color")))  # type: ignore[arg-type]
        .background(_pygments_color(entry.get("bgcolor")))  # type: ignore[arg-type]
    )


def _is_element(node, tag: str | None = None) -> bool:
    return node is not None and node.nodeType == Node.ELEMENT_NODE and (tag is None or node.tagName == tag)


class HTMLParser:
    """Turns an HTML document into a tree of entities."""

    def __init__(
        self,
        show_urls: bool = True,
        members: Mapping[str, str] | None = None,
        color_for: ColorFunc | None = None,
    ) -> None:
        self.show_urls = show_urls
        self.members = dict(members or {})
        self.color_for = color_for
        self.keep_linebreak = False

    @staticmethod
    def _attribute(node, name: str) -> str:
        return node.getAttribute(name) if node.hasAttribute(name) else ""

    def _list_to_entity(self, node) -> Entity:
        children = self._nodes_to_entities(node.firstChild)
        ordered = node.tagName == "ol"
        start = 1
        if ordered:
            raw = self._attribute(node, "start")
            if raw:
                try:
                    start = int(raw)
                except ValueError:
                    start = 1
        items = [child for child in children if child.tag == "li"]
        return ListEntity(ordered, start, items)

    def _parse_color(self, node, main_name: str, alt_name: str) -> Color | None:
        value = self._attribute(node, main_name) or self._attribute(node, alt_name)
        if not value:
            return None
        return parse_color(value)

    def _basic_format_to_entity(self, node) -> Entity:
        tag = node.tagName
        entity = ContainerEntity(tag=tag, children=self._nodes_to_entities(node.firstChild))
        if tag in ("b", "strong"):
            entity.adjust_style(adjust_style_bold)
        elif tag in ("i", "em"):
            entity.adjust_style(adjust_style_italic)
        elif tag in ("s", "del", "strike"):
            entity.adjust_style(adjust_style_strikethrough)
        elif tag in ("u", "ins"):
            entity.adjust_style(adjust_style_underline)
        elif tag == "font":
            fg = self._parse_color(node, "data-mx-color", "color")
            if fg is not None:
                entity.adjust_style(adjust_style_text_color(fg))
            bg = self._parse_color(node, "data-mx-bg-color", "background-color")
            if bg is not None:
                entity.adjust_style(adjust_style_background_color(bg))
        return entity

    def _header_to_entity(self, node) -> Entity:
        level = int(node.tagName[1])
        children = [TextEntity("#" * level + " "), *self._nodes_to_entities(node.firstChild)]
        return ContainerEntity(tag=node.tagName, children=children).adjust_style(adjust_style_bold)

    def _link_to_entity(self, node) -> Entity:
        href = self._attribute(node, "href")
        entity = ContainerEntity(tag="a", children=self._nodes_to_entities(node.firstChild))
        if not href or node.hasAttribute("data-mautrix-exclude-plaintext"):
            return entity

        same_url = (
            len(entity.children) == 1
            and isinstance(entity.children[0], TextEntity)
            and entity.children[0].text == href
        )
        if self.show_urls and not node.hasAttribute("data-mautrix-no-link") and not same_url:
            entity.children.append(TextEntity(f" ({href})"))

        match = MATRIX_TO_URL.match(href)
        if match:
            target = match.group(1)
            text = TextEntity(target)
            if target.startswith("@"):
                displayname = self.members.get(target)
                if displayname is not None:
                    text.text = displayname
                    if self.color_for is not None:
                        text.style = text.style.foreground(self.color_for(target))
                entity.children = [text]
            elif target.startswith("#"):
                entity.children = [text]
        return entity

    def _image_to_entity(self, node) -> Entity:
        alt = self._attribute(node, "alt") or self._attribute(node, "title") or "[inline image]"
        return TextEntity(alt, tag="img")

    def syntax_highlight(self, text: str, language: str) -> Entity | None:
        """Highlight code into a code block; return None for an unknown language."""
        name = language.lower()
        name = _LEXER_ALIASES.get(name, name)
        try:
            lexer = get_lexer_by_name(name, stripnl=False, ensurenl=False)
        except ClassNotFound:
            return None
        style = get_style_by_name(CODE_STYLE)

        children: list[Entity] = []
        for token_type, value in lexer.get_tokens(text):
            tag = "".join(token_type) or "Text"
            token_style = _entry_style(style.style_for_token(token_type))
            for index, piece in enumerate(value.split("\n")):
                if index:
                    children.append(BreakEntity())
                if piece:
                    children.append(TextEntity(piece, tag=tag, style=token_style, default_height=1))

        background = (
            Style.DEFAULT.foreground(_pygments_color(style.style_for_token(Token)["color"]))
            .background(_pygments_color(style.background_color))
        )
        return CodeBlockEntity(children, background)

    def _codeblock_to_entity(self, node) -> Entity | None:
        lang = "plaintext"
        if _is_element(node.firstChild, "code"):
            node = node.firstChild
            for css_class in self._attribute(node, "class").split(" "):
                if css_class.startswith("language-"):
                    lang = css_class[len("language-"):]
                    break
        self.keep_linebreak = True
        try:
            text = ContainerEntity(children=self._nodes_to_entities(node.firstChild)).plain_text()
        finally:
            self.keep_linebreak = False
        return self.syntax_highlight(text, lang)

    def _tag_node_to_entity(self, node) -> Entity | None:
        tag = node.tagName
        if tag == "blockquote":
            return BlockquoteEntity(self._nodes_to_entities(node.firstChild))
        if tag in ("ol", "ul"):
            return self._list_to_entity(node)
        if tag in ("h1", "h2", "h3", "h4", "h5", "h6"):
            return self._header_to_entity(node)
        if tag == "br":
            return BreakEntity()
        if tag in _BASIC_FORMAT_TAGS:
            return self._basic_format_to_entity(node)
        if tag == "a":
            return self._link_to_entity(node)
        if tag == "img":
            return self._image_to_entity(node)
        if tag == "pre":
            return self._codeblock_to_entity(node)
        if tag == "hr":
            return HorizontalLineEntity()
        if tag == "mx-reply":
            return None
        return ContainerEntity(
            tag=tag,
            block=tag in BLOCK_TAGS,
            children=self._nodes_to_entities(node.firstChild),
        )

    def _single_node_to_entity(self, node) -> Entity | None:
        if node.nodeType == Node.TEXT_NODE:
            data = node.data if self.keep_linebreak else node.data.replace("\n", "")
            return TextEntity(data) if data else None
        if node.nodeType == Node.ELEMENT_NODE:
            return self._tag_node_to_entity(node)
        if node.nodeType == Node.DOCUMENT_NODE:
            first = node.firstChild
            if _is_element(first, "html") and first.nextSibling is None:
                return self._single_node_to_entity(first)
            return ContainerEntity(tag="html", block=True, children=self._nodes_to_entities(first))
        return None

    def _nodes_to_entities(self, node) -> list[Entity]:
        entities: list[Entity] = []
        while node is not None:
            entity = self._single_node_to_entity(node)
            if entity is not None:
                entities.append(entity)
            node = node.nextSibling
        return entities

    def parse(self, html_data: str) -> Entity | None:
        """Parse an HTML fragment and return the entity for its body."""
        document = html5lib.parse(html_data, treebuilder="dom")
        root = document.documentElement
        if root is not None:
            body = next((child for child in root.childNodes if _is_element(child, "body")), None)
            if body is not None:
                return self._single_node_to_entity(body)
        return self._single_node_to_entity(document)


def parse_message(
    body: str,
    formatted_body: str = "",
    is_html: bool = False,
    msgtype: str = "m.text",
    sender_displayname: str = "",
    sender_color: Color = Color.DEFAULT,
    show_urls: bool = True,
    members: Mapping[str, str] | None = None,
    color_for: ColorFunc | None = None,
) -> Entity:
    """Build the entity tree for a message body, plain or HTML-formatted."""
    if is_html:
        html_data = formatted_body
    else:
        html_data = _html.escape(body).replace("\n", "<br/>")
    html_data = html_data.replace("\t", " " * TAB_LENGTH)

    parser = HTMLParser(show_urls=show_urls, members=members, color_for=color_for)
    root = parser.parse(html_data)
    if not isinstance(root, ContainerEntity):
        raise TypeError(f"expected a container at the root, got {type(root).__name__}")
    root.block = False
    if root.children:
        first = root.children[0]
        if type(first) is ContainerEntity and first.tag == "p":
            first.block = False

    if msgtype == "m.emote":
        return ContainerEntity(
            tag="emote",
            children=[
                TextEntity("* "),
                TextEntity(sender_displayname).adjust_style(adjust_style_text_color(sender_color)),
                TextEntity(" "),
                root,
            ],
        )
    return root