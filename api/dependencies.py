from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi import Depends, HTTPException

from glossary_page.config import HostConfig
from glossary_page.host import KeyValueStore, SqlAlchemyKeyValueStore, ThemePersistence
from glossary_page.parsing import HtmlGlossaryParser, ParsedPage


@lru_cache(maxsize=1)
def get_config() -> HostConfig:
    return HostConfig.from_env()


@lru_cache(maxsize=4)
def store_for(database_url: str) -> KeyValueStore:
    if database_url.startswith("sqlite") and ":///" in database_url:
        Path(database_url.split(":///", 1)[1]).parent.mkdir(parents=True, exist_ok=True)
    return SqlAlchemyKeyValueStore(database_url)


@lru_cache(maxsize=4)
def page_at(glossary_html_path: str) -> ParsedPage:
    path = Path(glossary_html_path)
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Glossary file not found: {path}")
    return HtmlGlossaryParser().parse(path.read_bytes())


def get_store(config: HostConfig = Depends(get_config)) -> KeyValueStore:
    return store_for(config.database_url)


def get_page(config: HostConfig = Depends(get_config)) -> ParsedPage:
    return page_at(config.glossary_html_path)


def get_theme(
    store: KeyValueStore = Depends(get_store),
    page: ParsedPage = Depends(get_page),
) -> ThemePersistence:
    return ThemePersistence(store, page.config.default_theme)
