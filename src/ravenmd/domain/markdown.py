"""Structural scanner: headings, code regions and type-declaration lines.

Block structure comes from markdown-it-py's CommonMark tokenizer; its
token ``map`` gives 0-indexed ``[start, end)`` line ranges relative to
the body, which are shifted by the body's first line to give absolute
1-indexed file lines.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ravenmd.domain.typedecl import TypeDeclaration, is_declaration_line, parse_type_declaration

_CODE_BLOCK_TOKENS = frozenset({"fence", "code_block"})


def _new_markdown() -> MarkdownIt:
    return MarkdownIt("commonmark")


@dataclass(frozen=True)
class Heading:
    """A heading event.

    ``line`` is the heading's first line; ``end_line`` its last, which
    differs only for setext headings (text line plus underline).
    """

    level: int
    text: str
    line: int
    end_line: int


@dataclass(frozen=True)
class ScannedLine:
    """A body line outside code blocks.

    ``text`` has inline code spans blanked out with spaces; ``raw`` is the
    line as written. Both have the same length.
    """

    number: int
    text: str
    raw: str


@dataclass
class BodyScan:
    """Everything the hierarchy builder and binder need from the body."""

    headings: list[Heading] = field(default_factory=list)
    declarations: dict[int, TypeDeclaration] = field(default_factory=dict)
    code_lines: set[int] = field(default_factory=set)
    lines: list[ScannedLine] = field(default_factory=list)

    def declaration_after(self, heading: Heading) -> TypeDeclaration | None:
        """Return the declaration on the line right after *heading*, if any."""
        return self.declarations.get(heading.end_line + 1)


# ---------------------------------------------------------------------------
# Inline code
# ---------------------------------------------------------------------------


def remove_inline_code(line: str) -> str:
    """Replace inline code spans with spaces, keeping character offsets.

    A span opens with a run of N backticks and closes at the next run of
    exactly N backticks. An opening run with no closing run is left as is.

    Examples:
        >>> remove_inline_code("see `#tag` here")
        'see        here'
    """
    chars = list(line)
    n = len(chars)
    i = 0
    while i < n:
        if chars[i] != "`":
            i += 1
            continue
        start = i
        while i < n and chars[i] == "`":
            i += 1
        open_len = i - start

        j = i
        close_end: int | None = None
        while j < n:
            if chars[j] != "`":
                j += 1
                continue
            run_start = j
            while j < n and chars[j] == "`":
                j += 1
            if j - run_start == open_len:
                close_end = j
                break

        if close_end is not None:
            for k in range(start, close_end):
                chars[k] = " "
            i = close_end
    return "".join(chars)


# ---------------------------------------------------------------------------
# Block scanning
# ---------------------------------------------------------------------------


def _heading_text(inline: Token | None) -> str:
    """Concatenate the plain-text children of a heading's inline token.

    Inline code spans are ``code_inline`` children and are skipped.
    """
    if inline is None or not inline.children:
        return ""
    return "".join(child.content for child in inline.children if child.type == "text").strip()


def _iter_headings(tokens: list[Token], start_line: int) -> Iterator[Heading]:
    for idx, token in enumerate(tokens):
        if token.type != "heading_open" or token.map is None:
            continue
        following = tokens[idx + 1] if idx + 1 < len(tokens) else None
        inline = following if following is not None and following.type == "inline" else None
        first, last_exclusive = token.map
        yield Heading(
            level=int(token.tag[1]),
            text=_heading_text(inline),
            line=start_line + first,
            end_line=start_line + last_exclusive - 1,
        )


def _iter_code_lines(tokens: list[Token], start_line: int) -> Iterator[int]:
    for token in tokens:
        if token.type in _CODE_BLOCK_TOKENS and token.map is not None:
            first, last_exclusive = token.map
            yield from range(start_line + first, start_line + last_exclusive)


def scan_body(body: str, start_line: int = 1) -> BodyScan:
    """Scan a document body.

    Args:
        body: Text after the frontmatter block (or the whole document).
        start_line: Absolute 1-indexed line on which *body* begins.

    Raises:
        ParseError: If a non-code line begins with ``::`` but is not a
            well-formed type declaration.
    """
    tokens = _new_markdown().parse(body)
    scan = BodyScan(
        headings=list(_iter_headings(tokens, start_line)),
        code_lines=set(_iter_code_lines(tokens, start_line)),
    )

    for offset, raw in enumerate(body.split("\n")):
        number = start_line + offset
        if number in scan.code_lines:
            continue
        if is_declaration_line(raw):
            declaration = parse_type_declaration(raw, number)
            if declaration is not None:
                scan.declarations[number] = declaration
        scan.lines.append(ScannedLine(number=number, text=remove_inline_code(raw), raw=raw))

    return scan
