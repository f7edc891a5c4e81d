# muksview

`muksview` is the rendering core of a terminal Matrix chat client. It turns
message content into styled cells on a character grid. It does not draw to a
real terminal. You give it a `Screen`, it fills in the cells, and you read them
back.

## What it provides

- **Styled text.** `muksview.styles` defines `Color`, `Style` (immutable, with
  `foreground`, `background`, `bold`, `italic`, `underline`, `strikethrough`
  and `decompose`), `Cell` and an in-memory `Screen`. `Screen.row_text(y)`
  reads back one row as a string. `ProxyScreen` is a window onto part of a
  parent screen. `write_line` writes text clipped to a width. `rune_width`
  gives the column width of a character.
- **Styled strings.** `muksview.tstring.TString` is a string whose every
  character has its own style. The constructors are `TString.plain`,
  `TString.colored` and `TString.styled`. A `TString` can be appended to,
  prepended to, trimmed, colorized or restyled in place over a span, truncated
  to a column width, split on a character, and drawn. `join` concatenates
  several with a separator.
- **Colours.** `muksview.colormap.parse_hex` accepts `#rgb` and `#rrggbb` and
  raises `ValueError` for anything else. `parse_color` also accepts CSS colour
  names, and returns `None` when it does not recognise the value.
- **HTML entities.** `muksview.entities` provides `TextEntity`,
  `ContainerEntity`, `ListEntity`, `BlockquoteEntity`, `CodeBlockEntity`,
  `BreakEntity` and `HorizontalLineEntity`. Each entity has these methods:
  - `calculate_buffer(width, start_x, bare)` wraps it to a width.
  - `height` is its height after that call.
  - `draw(screen)` draws it.
  - `plain_text()` returns its text.
  - `adjust_style(fn)` changes its style.
  - `clone()` copies it.
- **HTML parsing.** `muksview.htmlparser.parse_message` turns a message body,
  plain or HTML, into an entity tree. It handles:
  - formatting tags;
  - `<font>` colours;
  - links and `matrix.to` user pills;
  - images, shown by their alt text;
  - headers, lists and quotes;
  - `<pre><code class="language-…">` blocks, which are syntax-highlighted with
    Pygments.

  Emotes get a `* sender` prefix. You can use `HTMLParser` directly.
- **Rainbow text.**
  - `muksview.rainbow.render_rainbow_markdown` renders Markdown to HTML and
    wraps every visible grapheme in `<font color="…">`.
  - `rainbow_text` does the same for plain text.
  - `escape_html` and `escape_link` are the escaping helpers.
  - `random_hex` makes a random marker.
- **Messages.** `muksview.message.UIMessage` holds the data of one message:
  - event and transaction IDs;
  - sender;
  - sending state (`OutgoingState`);
  - highlight, service and selection flags;
  - reactions (`ReactionItem`);
  - the message it replies to.

  It computes the sender, text and timestamp colours and lays out its content.
  `calculate_buffer_with_text` wraps a `TString` at word boundaries. The layout
  options are in `Preferences`.
- **Content renderers.** `muksview.renderers` provides `TextMessage`,
  `ExpandedTextMessage`, `RedactedMessage` and `HTMLMessage`, together with
  `new_service_message` and `new_date_change_message`.
- **Room tags.** `muksview.taglist` has three functions:
  - `tag_order` gives a tag's fixed weight.
  - `sort_tags` sorts tags into display order.
  - `tag_display_name` gives a tag's heading, or `""` for hidden namespaced
    tags.
- **Message view.** `muksview.messageview.MessageView` keeps a room's message
  list and its line buffer.
  - Appending or prepending a message adds date-change markers where the date
    changes.
  - A message whose event or transaction ID is already known replaces the
    earlier one.
  - `add_scroll_offset` scrolls and `set_selected` selects a message.
  - `draw` draws the timestamps, the senders, a scroll bar and the messages.
  - `capture_plaintext` returns the visible lines as text.

## What it does not do

`muksview` has no Matrix networking. It does not sync, send, store or decrypt
events. It has no terminal front end either: no key or mouse handling, no room
list widget, no modals and no commands. Images in file messages are not
decoded or shown. The caller builds `UIMessage` objects, draws them onto a
`Screen` and puts that screen on a real terminal.

## Installation

```
pip install muksview
```

## Example

```python
from muksview.htmlparser import parse_message
from muksview.styles import Screen

root = parse_message(
    body="hello world",
    formatted_body="<b>hello</b> <i>world</i>",
    is_html=True,
)
root.calculate_buffer(40, 0, False)
screen = Screen(40, root.height)
root.draw(screen)
print(screen.row_text(0))
print(root.plain_text())
```

## Running the tests

```
pip install -e ".[test]"
pytest
```