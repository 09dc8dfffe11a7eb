#!/usr/bin/env python3
"""
Competitor Watcher CLI Interface
Render, sanitize and inspect report glossaries from the command line
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.annotator import GLOSSARY_CSS, GlossaryAnnotator, glossary_css
from .core.config import CompWatchConfig, default_config, setup_logging
from .core.glossary import GlossaryError, GlossaryStore
from .core.render import RenderSurface
from .core.sanitizer import HTMLSanitizer

console = Console()
# Rendered HTML goes to stdout; status and errors go to stderr
err_console = Console(stderr=True)

STANDALONE_TEMPLATE = """<!DOCTYPE html>
<html lang="{locale}">
<head>
<meta charset="utf-8">
<title>Competitor Report</title>
<style>{css}</style>
</head>
<body>
{body}
</body>
</html>
"""


class CompWatchCLI:
    """Command-line interface for the report rendering pipeline"""

    def __init__(self, config: Optional[CompWatchConfig] = None, store: Optional[GlossaryStore] = None):
        self.config = config or default_config
        self.store = store if store is not None else GlossaryStore.from_config(self.config.glossary)
        self.sanitizer = HTMLSanitizer(self.config.sanitizer)
        self.annotator = GlossaryAnnotator(self.store, config=self.config.annotator)

    @staticmethod
    def read_input(source: str) -> str:
        """Read HTML from a file path or '-' for stdin"""
        if source == "-":
            return sys.stdin.read()
        return Path(source).read_text(encoding="utf-8")

    @staticmethod
    def write_output(content: str, output: Optional[str]):
        if output:
            Path(output).write_text(content, encoding="utf-8")
            err_console.print(f"✅ Wrote {escape(output)}", style="green")
        else:
            sys.stdout.write(content)
            if not content.endswith("\n"):
                sys.stdout.write("\n")

    def render(self, source: str, locale: Optional[str] = None, output: Optional[str] = None,
               standalone: bool = False) -> str:
        """Render a report file with glossary tooltips"""
        surface = RenderSurface(self.annotator, self.sanitizer, locale=locale)
        body = surface.render(self.read_input(source))

        if standalone:
            css = GLOSSARY_CSS
            if self.config.annotator.term_class != "glossary-term":
                css = glossary_css(self.config.annotator.term_class)
            body = STANDALONE_TEMPLATE.format(locale=surface.locale, css=css, body=body)

        self.write_output(body, output)
        err_console.print(f"Annotated {surface.term_count} glossary terms ({surface.locale})", style="cyan")
        return body

    def sanitize(self, source: str, output: Optional[str] = None) -> str:
        """Sanitize a report file without annotation"""
        cleaned = self.sanitizer.sanitize(self.read_input(source))
        self.write_output(cleaned, output)
        return cleaned

    def show_glossary(self, locale: Optional[str] = None, search: Optional[str] = None,
                      export: Optional[str] = None):
        """Print, search or export a locale glossary"""
        resolved = self.store.normalize_locale(locale)

        if export:
            sys.stdout.write(self.store.export_glossary(resolved, format=export))
            sys.stdout.write("\n")
            return

        if search:
            entries = self.store.search_terms(search, resolved)
            title = f"Glossary ({resolved}) matching '{escape(search)}'"
        else:
            entries = list(self.store.get_glossary(resolved).values())
            title = f"Glossary ({resolved})"

        if not entries:
            console.print("No matching terms", style="yellow")
            return

        table = Table(title=title, show_lines=False)
        table.add_column("Term", style="bold cyan", no_wrap=True)
        table.add_column("Full form", style="green")
        table.add_column("Definition")
        for entry in entries:
            table.add_row(escape(entry.term), escape(entry.full), escape(entry.definition))
        console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compwatch",
        description="Competitor Watcher - render AI market reports with glossary tooltips"
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser("render", help="Sanitize and annotate a report")
    render_parser.add_argument("file", help="HTML file, or '-' for stdin")
    render_parser.add_argument("--locale", "-l", help="Display locale (en, pt, es, fr, de)")
    render_parser.add_argument("--output", "-o", help="Write result to file")
    render_parser.add_argument("--standalone", action="store_true",
                               help="Wrap in a full HTML document with tooltip styles")

    sanitize_parser = subparsers.add_parser("sanitize", help="Sanitize a report only")
    sanitize_parser.add_argument("file", help="HTML file, or '-' for stdin")
    sanitize_parser.add_argument("--output", "-o", help="Write result to file")

    glossary_parser = subparsers.add_parser("glossary", help="Show glossary terms")
    glossary_parser.add_argument("--locale", "-l", help="Locale to show")
    glossary_parser.add_argument("--search", "-s", help="Search terms and definitions")
    glossary_parser.add_argument("--export", choices=["json", "yaml", "csv", "html"],
                                 help="Export instead of printing a table")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = CompWatchConfig.load_from_file(args.config) if args.config else default_config
    except ValueError as e:
        err_console.print(f"❌ {escape(str(e))}", style="red")
        return 2

    if args.log_level:
        config.log_level = args.log_level.upper()
    setup_logging(config.log_level)

    if args.command == "serve":
        # Imported lazily so the other commands do not need Flask loaded
        from .api_server import run_server
        run_server(host=args.host, port=args.port, app_config=config)
        return 0

    try:
        cli = CompWatchCLI(config)

        if args.command == "render":
            cli.render(args.file, locale=args.locale, output=args.output, standalone=args.standalone)
        elif args.command == "sanitize":
            cli.sanitize(args.file, output=args.output)
        elif args.command == "glossary":
            cli.show_glossary(locale=args.locale, search=args.search, export=args.export)

    except (OSError, GlossaryError) as e:
        err_console.print(f"❌ {escape(str(e))}", style="red")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
