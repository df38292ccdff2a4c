"""CLI entry point for rustdoc-man."""

from __future__ import annotations

import argparse
import logging
import sys

import structlog

from . import config
from .errors import AmbiguousMatchError, ItemNotFoundError, RustdocManError
from .models.doc import Doc, ItemType, Name
from .models.index import IndexItem
from .sources import Sources, load_sources
from .viewer import VIEWERS, get_default_viewer, get_viewer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rustdoc-man",
        description="Command-line viewer for documentation generated by rustdoc",
    )
    parser.add_argument(
        "keyword",
        help="The keyword to open the documentation for, e. g. rand_core::RngCore",
    )
    parser.add_argument(
        "-s",
        "--source",
        action="append",
        default=[],
        help="Directory with rustdoc output for one or more crates (repeatable)",
    )
    parser.add_argument(
        "--viewer",
        choices=sorted(VIEWERS),
        default=None,
        help="The viewer for the documentation (default: rich on a terminal, else plain)",
    )
    parser.add_argument(
        "--no-default-sources",
        action="store_true",
        default=None,
        help="Do not search the toolchain documentation and ./target/doc",
    )
    parser.add_argument(
        "--no-search",
        action="store_true",
        default=None,
        help="Do not read the search indexes if there is no exact match",
    )
    parser.add_argument(
        "-e",
        "--examples",
        action="store_true",
        help="Show only the examples of the item",
    )
    parser.add_argument(
        "--no-syntax-highlight",
        action="store_true",
        default=None,
        help="Disable syntax highlighting in the rich viewer",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help=f"Pygments style for syntax highlighting (default: {config.DEFAULT_THEME})",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help=f"Line width (default: terminal width, at most {config.LINE_WIDTH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-v for info, -vv for debug)",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    """Route stdlib and structlog output to stderr."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def find_doc(sources: Sources, name: Name, ty_hint: ItemType | None = None) -> Doc | None:
    item = sources.find(name, ty_hint)
    if item is None:
        return None
    return item.load_doc()


def select_item(
    items: list[IndexItem], name: str, stdin=None, stdout=None
) -> IndexItem | None:
    """Let the user choose one of several search results.

    Returns:
        The selected item, or None if the selection was cancelled

    Raises:
        AmbiguousMatchError: If stdin is not a terminal
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    if not stdin.isatty():
        raise AmbiguousMatchError(name, items)

    width = len(str(len(items) - 1))
    stdout.write(f"Found multiple matches for {name} - select one of:\n\n")
    for i, item in enumerate(items):
        stdout.write(f"[ {i:>{width}} ] {item}\n")
    stdout.write("\n> ")
    stdout.flush()

    choice = stdin.readline().strip()
    if choice.isdigit() and int(choice) < len(items):
        return items[int(choice)]
    return None


def search_doc(sources: Sources, keyword: Name) -> Doc | None:
    """Search the indexes for ``keyword`` and load the chosen match.

    Returns:
        The document, or None if the selection was cancelled

    Raises:
        ItemNotFoundError: If nothing matches or the match has no page
    """
    items = sources.search(keyword)
    if not items:
        raise ItemNotFoundError(str(keyword), sources.suggest(keyword))

    item = items[0] if len(items) == 1 else select_item(items, str(keyword))
    if item is None:
        return None
    doc = find_doc(sources, item.full_name, item.ty)
    if doc is None:
        raise ItemNotFoundError(str(item.full_name))
    return doc


def _run(args: argparse.Namespace) -> int:
    cfg = config.load_config_file()

    def pick(cli_value, file_value):
        return cli_value if cli_value is not None else file_value

    no_default_sources = pick(args.no_default_sources, cfg.no_default_sources)
    no_search = pick(args.no_search, cfg.no_search)
    no_syntax_highlight = pick(args.no_syntax_highlight, cfg.no_syntax_highlight)

    sources = load_sources(cfg.source + args.source, not no_default_sources)
    keyword = Name(args.keyword)

    doc = find_doc(sources, keyword)
    if doc is None:
        if no_search:
            raise ItemNotFoundError(str(keyword))
        doc = search_doc(sources, keyword)
    if doc is None:
        # Selection cancelled
        return 0

    options = {
        "width": pick(args.width, cfg.width),
        "theme": pick(args.theme, cfg.theme),
        "syntax_highlight": not no_syntax_highlight,
    }
    viewer_name = args.viewer or cfg.viewer or config.DEFAULT_VIEWER
    viewer = get_viewer(viewer_name, **options) if viewer_name else get_default_viewer(**options)

    if args.examples:
        examples = doc.find_examples()
        if not examples:
            raise RustdocManError(f"Could not find examples for {doc.name}")
        viewer.open_examples(doc, examples)
    else:
        viewer.open(doc)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the rustdoc-man command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        return _run(args)
    except (RustdocManError, OSError) as e:
        logger.debug("Lookup failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
