from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from glossary_page.host import Theme, ThemePersistence

from api.dependencies import get_theme

router = APIRouter(prefix="/theme", tags=["theme"])


class ThemeChange(BaseModel):
    theme: str


def _describe(theme: ThemePersistence) -> dict:
    stored = theme.stored_theme()
    return {
        "theme": theme.resolve().value,
        "stored": stored.value if stored else None,
        "dark": theme.is_dark(),
    }


@router.get("")
def get_current_theme(theme: ThemePersistence = Depends(get_theme)):
    return _describe(theme)


@router.put("")
def change_theme(change: ThemeChange, theme: ThemePersistence = Depends(get_theme)):
    if Theme.parse(change.theme) is None:
        raise HTTPException(status_code=400, detail=f"Unknown theme: {change.theme}")
    theme.change_theme(change.theme)
    return _describe(theme)


@router.delete("")
def clear_theme(theme: ThemePersistence = Depends(get_theme)):
    theme.change_theme(None)
    return _describe(theme)
