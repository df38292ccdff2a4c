"""Shared layout of the text viewers.

A document is rendered like a man page::

    kuchiki::NodeRef            rustdoc-man            Struct

    SYNOPSIS
        pub struct NodeRef(pub Rc<Node>);

    DESCRIPTION
        A strong reference to a node.

    METHODS
        ...

The layout is built from rich renderables; each viewer decides how its
``Console`` styles them.
"""

from __future__ import annotations

import logging
import shutil
import sys
from typing import TextIO

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.segment import Segment
from rich.text import Text as RichText

from .. import config
from ..models.doc import Code, Doc, Example, MemberGroup

logger = logging.getLogger(__name__)

PROGRAM_NAME = "rustdoc-man"
INDENT = 4


def get_line_width(width: int | None = None) -> int:
    """Explicit width, else the terminal width capped at ``config.LINE_WIDTH``."""
    if width is not None:
        return width
    columns = shutil.get_terminal_size(fallback=(config.LINE_WIDTH, 24)).columns
    return min(columns, config.LINE_WIDTH)


def format_title(width: int, left: str, middle: str, right: str) -> str:
    """Spread three strings over one line: left, centered and right aligned."""
    inner = width - len(left) - len(right)
    if inner < len(middle) + 2:
        return f"{left}  {middle}  {right}"
    pad_left = (width - len(middle)) // 2 - len(left)
    pad_left = max(pad_left, 1)
    pad_right = max(inner - pad_left - len(middle), 1)
    return f"{left}{' ' * pad_left}{middle}{' ' * pad_right}{right}"


class Indented:
    """Render a renderable shifted right, wrapped to the remaining width.

    Unlike ``rich.padding.Padding`` this leaves no trailing spaces behind.
    """

    def __init__(self, renderable: RenderableType, indent: int):
        self.renderable = renderable
        self.indent = indent

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = max(options.max_width - self.indent, 10)
        lines = console.render_lines(self.renderable, options.update_width(width), pad=False)
        margin = Segment(" " * self.indent)
        for line in lines:
            line = _rstrip_line(line)
            if line:
                yield margin
                yield from line
            yield Segment.line()


def _rstrip_line(line: list[Segment]) -> list[Segment]:
    """Drop the whitespace rich leaves at the end of wrapped lines."""
    line = list(line)
    while line and not line[-1].control and not line[-1].text.rstrip():
        line.pop()
    if line and not line[-1].control:
        last = line.pop()
        line.append(Segment(last.text.rstrip(), last.style))
    return line


class TextViewer:
    """Base class writing documents as indented text to a stream."""

    name = "text"
    heading_style = ""
    title_style = ""

    def __init__(self, width: int | None = None, stream: TextIO | None = None):
        self.width = get_line_width(width)
        self.stream = stream

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def _console(self) -> Console:
        return Console(
            width=self.width,
            color_system=None,
            markup=False,
            highlight=False,
            emoji=False,
        )

    # Building blocks

    def _text(self, s: str, indent: int) -> RenderableType:
        return Indented(RichText(s.rstrip()), indent)

    def _code(self, code: Code, indent: int) -> RenderableType:
        return Indented(RichText(code.text.rstrip()), indent)

    def _heading(self, s: str, indent: int = 0) -> RichText:
        return RichText.assemble(" " * indent, (s, self.heading_style))

    def _title(self, doc: Doc) -> list[RenderableType]:
        title = format_title(self.width, str(doc.name), PROGRAM_NAME, doc.ty.display_name)
        return [RichText(title, style=self.title_style, no_wrap=True, overflow="ignore"), ""]

    # Layout

    def _group(self, group_name: str, groups: tuple[MemberGroup, ...]) -> list[RenderableType]:
        blocks: list[RenderableType] = ["", self._heading(group_name.upper())]
        for group in groups:
            indent = INDENT
            if group.title:
                blocks.append(self._heading(group.title, INDENT))
                indent += INDENT
            for member in group.members:
                blocks.append(Indented(RichText(member.name.last()), indent))
                if member.description is not None:
                    summary = member.description.plain.split("\n", 1)[0]
                    blocks.append(self._text(summary, indent + INDENT))
        return blocks

    def render_doc(self, doc: Doc) -> list[RenderableType]:
        blocks = self._title(doc)
        if doc.definition is not None:
            blocks.append(self._heading("SYNOPSIS"))
            blocks.append(self._code(doc.definition, INDENT))
            blocks.append("")
        if doc.description is not None:
            blocks.append(self._heading("DESCRIPTION"))
            blocks.append(self._text(doc.description.plain, INDENT))
        for ty, groups in doc.groups.items():
            blocks.extend(self._group(ty.group_name, groups))
        return blocks

    def render_examples(self, doc: Doc, examples: list[Example]) -> list[RenderableType]:
        blocks = self._title(doc)
        for i, example in enumerate(examples, start=1):
            if i > 1:
                blocks.append("")
            blocks.append(self._heading(f"EXAMPLE {i}"))
            if example.description is not None:
                blocks.append(self._text(example.description.plain, INDENT))
                blocks.append("")
            blocks.append(self._code(example.code, INDENT))
        return blocks

    def _write(self, blocks: list[RenderableType]) -> None:
        while blocks and isinstance(blocks[-1], str) and not blocks[-1]:
            blocks.pop()
        console = self._console()
        with console.capture() as capture:
            for block in blocks:
                console.print(block, crop=False)
        out = self._out()
        try:
            out.write(capture.get())
            out.flush()
        except BrokenPipeError:
            # The reader went away (e.g. `| head`); nothing left to show
            logger.debug("Output pipe closed")

    def open(self, doc: Doc) -> None:
        self._write(self.render_doc(doc))

    def open_examples(self, doc: Doc, examples: list[Example]) -> None:
        self._write(self.render_examples(doc, examples))
