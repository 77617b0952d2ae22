from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from glossary_page.host import ThemePersistence, build_flags
from glossary_page.parsing import ParsedPage

from api.dependencies import get_page, get_theme

router = APIRouter(prefix="/glossary", tags=["glossary"])


@router.get("")
def get_glossary(page: ParsedPage = Depends(get_page), theme: ThemePersistence = Depends(get_theme)):
    return build_flags(page, theme)


@router.get("/items")
def list_items(page: ParsedPage = Depends(get_page)):
    return [item.as_flags() for item in page.document.items]


@router.get("/items/{item_id}")
def get_item(item_id: str, page: ParsedPage = Depends(get_page)):
    item = page.document.item_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return item.as_flags()
