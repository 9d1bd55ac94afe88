"""Command-line front door for lazydir.

Renders one directory listing through the same surface pipeline the
interactive host uses, then prints it.
"""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from .adapters import url_for_path
from .errors import LazydirError
from .runtime.config import KNOWN_COLUMNS, LazydirConfig, save_columns, save_show_hidden
from .runtime.event_loop import EventLoop
from .text import colorize_lines
from .view.controller import ViewController
from .view.surface import Workspace

RENDER_TIMEOUT_SECONDS = 30.0


def _columns_arg(value: str) -> list[str]:
    """argparse type for a comma-separated column list."""
    names = [name.strip() for name in value.split(",") if name.strip()]
    unknown = [name for name in names if name not in KNOWN_COLUMNS]
    if unknown:
        raise argparse.ArgumentTypeError(
            f"unknown column(s): {', '.join(unknown)} (choose from {', '.join(KNOWN_COLUMNS)})"
        )
    return names


def render_listing(
    path: Path,
    *,
    config: LazydirConfig,
    color: bool = False,
    timeout: float = RENDER_TIMEOUT_SECONDS,
) -> str:
    """Render the listing of directory ``path`` and return it as text."""
    loop = EventLoop()
    term = shutil.get_terminal_size((120, 40))
    workspace = Workspace(width=term.columns, height=term.lines)
    controller = ViewController(workspace, loop=loop, config=config)
    surface = workspace.create_surface(url_for_path(path))
    workspace.open_window(surface)
    results: list[LazydirError | None] = []
    try:
        controller.registry.register(surface)
        controller.render_surface_async(surface, callback=results.append)
        if not loop.run_until(lambda: bool(results), timeout=timeout):
            raise SystemExit(f"Timed out listing {path}")
        if results[0] is not None:
            raise SystemExit(f"Error: {results[0]}")
        lines = colorize_lines(surface.lines, surface.highlights) if color else list(surface.lines)
    finally:
        controller.close()
    return "\n".join(lines) + "\n"


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and print the listing of a directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    parser = argparse.ArgumentParser(description="Render a directory as an editable lazydir listing.")
    parser.add_argument("path", nargs="?", default=None, help="Directory to list. Defaults to current directory.")
    parser.add_argument("--show-hidden", action="store_true", default=None, help="Include hidden entries.")
    parser.add_argument(
        "--columns",
        type=_columns_arg,
        default=None,
        help=f"Comma-separated columns ({', '.join(KNOWN_COLUMNS)}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--save", action="store_true", help="Persist --show-hidden/--columns as defaults.")
    args = parser.parse_args()

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")

    config = LazydirConfig.from_persisted()
    if args.show_hidden is not None:
        config.view_options.show_hidden = args.show_hidden
    if args.columns is not None:
        config.columns = args.columns
    if args.save:
        save_show_hidden(config.view_options.show_hidden)
        save_columns(config.columns)

    color = not args.no_color and sys.stdout.isatty()
    sys.stdout.write(render_listing(path, config=config, color=color))


if __name__ == "__main__":
    main()
