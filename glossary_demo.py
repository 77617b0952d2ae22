"""
Example: read a glossary page and print the flags handed to the application core.

Usage:
    python3 glossary_demo.py --html /path/to/glossary.html --theme dark
"""

import argparse
import json
import logging
from pathlib import Path

from glossary_page.host import SqlAlchemyKeyValueStore, ThemePersistence, build_flags
from glossary_page.parsing import HtmlGlossaryParser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--html", required=True, type=Path, help="Path to the glossary page")
    parser.add_argument("--db", default=Path("./data/glossary_page.db"), type=Path, help="SQLite settings DB path")
    parser.add_argument("--theme", default=None, help="Persist a theme (light, dark, system) or '' to clear it")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    if not args.html.exists():
        raise FileNotFoundError(f"Glossary page not found: {args.html}")

    page = HtmlGlossaryParser().parse(args.html.read_bytes())

    args.db.parent.mkdir(parents=True, exist_ok=True)
    store = SqlAlchemyKeyValueStore(f"sqlite+pysqlite:///{args.db}")
    theme = ThemePersistence(store, page.config.default_theme)
    if args.theme is not None:
        theme.change_theme(args.theme)

    document = page.document
    transient = sum(1 for item in document.items if not item.id_is_persisted)
    print(f"Title: {document.title}")
    print(f"Items: {len(document.items)} ({transient} without a persisted id)")
    print(f"Theme: {theme.resolve().value}")
    print(json.dumps(build_flags(page, theme), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
