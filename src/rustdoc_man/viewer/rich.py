"""Rich text viewer: styled headings and highlighted Rust code."""

from __future__ import annotations

import logging
from typing import TextIO

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound
from rich.console import Console, RenderableType
from rich.syntax import Syntax

from .. import config
from ..errors import RustdocManError
from ..models.doc import Code
from .base import Indented, TextViewer

logger = logging.getLogger(__name__)


class RichViewer(TextViewer):
    name = "rich"
    heading_style = "bold"
    title_style = "underline"

    def __init__(
        self,
        width: int | None = None,
        stream: TextIO | None = None,
        theme: str | None = None,
        syntax_highlight: bool = True,
    ):
        super().__init__(width=width, stream=stream)
        self.syntax_highlight = syntax_highlight
        self.theme = theme or config.DEFAULT_THEME
        if syntax_highlight:
            # rich falls back to the default style for unknown theme names
            try:
                get_style_by_name(self.theme)
            except ClassNotFound as e:
                raise RustdocManError(f"Could not find theme {self.theme}") from e
            logger.debug("Highlighting code with theme %s", self.theme)

    def _console(self) -> Console:
        return Console(
            width=self.width,
            force_terminal=True,
            color_system="256",
            markup=False,
            highlight=False,
            emoji=False,
        )

    def _code(self, code: Code, indent: int) -> RenderableType:
        if not self.syntax_highlight:
            return super()._code(code, indent)
        syntax = Syntax(
            code.text.rstrip(),
            "rust",
            theme=self.theme,
            background_color="default",
            word_wrap=True,
        )
        return Indented(syntax, indent)
