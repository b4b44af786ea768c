"""CLI for math-preview.

Provides direct terminal access to math rendering without MCP.
"""
import argparse
import base64
import json
import sys
from pathlib import Path

from math_preview import __version__
from math_preview.config import Config


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="math-preview-cli",
        description="Typeset TeX math into themed SVG previews"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # render command
    r = subparsers.add_parser("render", help="Render a TeX math expression")
    r.add_argument("math", help="TeX math source, e.g. 'x^2 + y^2 = z^2'")
    r.add_argument(
        "--svg", type=Path,
        help="Write the styled SVG to this file instead of printing Markdown"
    )
    r.add_argument("--scale", type=float, help="Override rendering scale")
    r.add_argument("--theme", choices=["light", "dark"], help="Override color theme")

    # hover command
    h = subparsers.add_parser("hover", help="Print the hover for a position in a file")
    h.add_argument("path", type=Path, help="Markdown document")
    h.add_argument("line", type=int, help="Zero-based line")
    h.add_argument("character", type=int, help="Zero-based character")

    # check command
    subparsers.add_parser("check", help="Show settings, extensions and a probe render")

    args = parser.parse_args()

    if args.command == "render":
        render_command(args)
    elif args.command == "hover":
        hover_command(args)
    elif args.command == "check":
        check_command()


def _load_config() -> Config:
    from math_preview.core.adaptor import load_math_extensions

    config = Config.load()
    load_math_extensions(config)
    return config


def render_command(args):
    """Execute the render command."""
    from math_preview.core.encoder import SVG_DATA_URL_PREFIX
    from math_preview.core.hover import ERROR_LABEL, typeset_to_markdown

    config = _load_config()
    if args.scale is not None:
        if args.scale <= 0:
            print("Error: --scale must be positive", file=sys.stderr)
            sys.exit(1)
        config.math_scale = args.scale
    if args.theme:
        config.math_theme = args.theme

    contents = typeset_to_markdown(args.math, config)
    if contents.value.startswith(ERROR_LABEL):
        print(contents.value, file=sys.stderr)
        sys.exit(1)

    if not args.svg:
        print(contents.value)
        return

    data_url = contents.value[len("![equation]("):-1]
    svg = base64.b64decode(data_url[len(SVG_DATA_URL_PREFIX):])
    out_path = args.svg.expanduser()
    out_path.write_bytes(svg)
    print(f"Wrote {out_path}")


def hover_command(args):
    """Execute the hover command."""
    from math_preview.core.hover import math_hover
    from math_preview.core.math_range import TextDocument
    from math_preview.core.models import Position

    path = args.path.expanduser().resolve()
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    config = _load_config()
    doc = TextDocument(uri=path.as_uri(), text=path.read_text(encoding="utf-8"))
    hover = math_hover(doc, Position(line=args.line, character=args.character), config)
    print(json.dumps(hover.to_dict() if hover else None, indent=2))


def check_command():
    """Execute the check command."""
    from rich.console import Console
    from rich.table import Table

    from math_preview.core.adaptor import adaptor
    from math_preview.core.extensions import BASE_EXTENSIONS, SUPPORTED_EXTENSIONS
    from math_preview.core.hover import ERROR_LABEL, typeset_to_markdown

    console = Console()
    console.print(f"[bold]Math Preview v{__version__}[/bold]")

    config = _load_config()

    settings = Table(title="Settings", show_header=False)
    settings.add_column(style="bold")
    settings.add_column()
    settings.add_row("Settings file", str(config.settings_path))
    settings.add_row("Exists", "yes" if config.settings_path.exists() else "no")
    settings.add_row("Scale", f"{config.math_scale:g}")
    settings.add_row("Theme", config.math_theme)
    console.print(settings)

    active = set(adaptor.extensions)
    extensions = Table(title="Extensions")
    extensions.add_column("Name", style="bold")
    extensions.add_column("Status")
    for name in BASE_EXTENSIONS:
        extensions.add_row(name, "baseline")
    for name in SUPPORTED_EXTENSIONS:
        extensions.add_row(name, "[green]enabled[/green]" if name in active else "available")
    ignored = [name for name in config.math_extensions if name not in active]
    for name in ignored:
        extensions.add_row(name, "[red]ignored (unknown)[/red]")
    console.print(extensions)

    contents = typeset_to_markdown(r"\frac{a}{b} + \sqrt{x^2 + y^2}", config)
    if contents.value.startswith(ERROR_LABEL):
        console.print(f"[red]Probe render failed:[/red] {contents.value[len(ERROR_LABEL):]}")
        sys.exit(1)

    console.print(f"[green]Probe render OK[/green] ({len(contents.value)} bytes of Markdown)")


if __name__ == "__main__":
    main()
