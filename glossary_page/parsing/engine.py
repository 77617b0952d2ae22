from __future__ import annotations

import logging
import re
import uuid
from typing import Callable, List, Optional, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .models import (
    AboutLink,
    GlossaryDocument,
    GlossaryItem,
    ItemChildRole,
    PageConfig,
    ParsedPage,
    RelatedTerm,
    TagWithDescription,
    Term,
)

logger = logging.getLogger(__name__)

CONTAINER_ID = "glossary-page-container"
TITLE_ID = "glossary-page-title"
ABOUT_ID = "glossary-page-about"
TAGS_ID = "glossary-page-tags"
ITEMS_ID = "glossary-page-items"

DISAMBIGUATION_CLASS = "disambiguation"
THEME_NAMES = ("light", "dark", "system")

Markup = Union[str, bytes, Tag]

_WHITESPACE_RE = re.compile(r"\s+")


def normalise_whitespace(s: str) -> str:
    return _WHITESPACE_RE.sub(" ", s).strip()


def _text(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return normalise_whitespace(tag.get_text())


def _data(tag: Optional[Tag], name: str) -> Optional[str]:
    if tag is None:
        return None
    value = tag.get(f"data-{name}")
    if isinstance(value, list):
        value = " ".join(value)
    return value or None


def _classes(tag: Tag) -> List[str]:
    value = tag.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


class GlossaryParser:
    """
    Abstract glossary parser. Implementations should be stateless and reusable.
    """

    def parse(self, markup: Markup) -> ParsedPage:
        raise NotImplementedError

    def parse_document(self, markup: Markup) -> GlossaryDocument:
        return self.parse(markup).document


class HtmlGlossaryParser(GlossaryParser):
    """
    Reads the glossary page markup into a `GlossaryDocument`.

    Sections are located by element id rather than by position. Every section
    except the item list is optional and degrades to an empty value; a page
    without an item list yields a document with no items instead of an error.

    Items and tag descriptions that carry no `data-id` get an id from
    `id_factory` and are flagged with `id_is_persisted=False`.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None, features: str = "html.parser"):
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.features = features

    def to_soup(self, markup: Markup) -> Tag:
        if isinstance(markup, Tag):
            return markup
        return BeautifulSoup(markup, self.features)

    def parse(self, markup: Markup) -> ParsedPage:
        root = self.to_soup(markup)
        return ParsedPage(document=self.parse_document(root), config=self.parse_page_config(root))

    def parse_document(self, markup: Markup) -> GlossaryDocument:
        root = self.to_soup(markup)

        about_element = root.find(id=ABOUT_ID)
        about_paragraph = _text(about_element.find("p")) if about_element else ""
        about_list = about_element.find("ul") if about_element else None
        about_links = [self._about_link(li) for li in about_list.find_all("li")] if about_list else []

        tags = [self._tag_with_description(div) for div in root.select(f"#{TAGS_ID} > dl > div")]

        items_element = root.find(id=ITEMS_ID)
        dl_element = items_element.find("dl") if items_element else None
        if dl_element is None:
            logger.debug("No item list found under #%s; document has no items", ITEMS_ID)
            item_divs: List[Tag] = []
        else:
            item_divs = dl_element.find_all("div", recursive=False)

        document = GlossaryDocument(
            title=_text(root.find(id=TITLE_ID)),
            about_paragraph=about_paragraph,
            about_links=tuple(about_links),
            tags_with_descriptions=tuple(tags),
            items=tuple(self.parse_item(div) for div in item_divs),
        )
        logger.debug("Parsed glossary %r with %d items", document.title, len(document.items))
        return document

    def parse_page_config(self, markup: Markup) -> PageConfig:
        root = self.to_soup(markup)
        container = root.find(id=CONTAINER_ID)
        body = root.find("body")

        default_theme = _data(container, "default-theme")
        if default_theme not in THEME_NAMES:
            default_theme = "system"

        return PageConfig(
            enable_help_for_making_changes=_data(container, "enable-help-for-making-changes") == "true",
            enable_saving_changes_in_memory=_data(container, "enable-saving-changes-in-memory") == "true",
            enable_export_menu=_data(container, "enable-export-menu") != "false",
            enable_order_items_buttons=_data(container, "enable-order-items-buttons") != "false",
            enable_last_updated_dates=_data(container, "enable-last-updated-dates") == "true",
            card_width=_data(container, "card-width") or "compact",
            version_number=self._version_number(_data(container, "version-number")),
            editor_is_running=_data(container, "editor-is-running") == "true",
            default_theme=default_theme,
            separate_backend_base_url=_data(body, "separate-backend-base-url"),
            bearer_token=_data(body, "bearer-token"),
            user_name=_data(body, "user-name"),
            user_email_address=_data(body, "user-email-address"),
        )

    def parse_item(self, item_element: Tag) -> GlossaryItem:
        dt_elements = item_element.find_all("dt")
        dd_elements = item_element.find_all("dd")

        by_role = {role: [] for role in ItemChildRole}
        for dd_element in dd_elements:
            by_role[ItemChildRole.from_classes(_classes(dd_element))].append(dd_element)

        # Older pages allowed several definitions per item; they are joined here.
        definitions = [_text(dd) for dd in by_role[ItemChildRole.DEFINITION]]
        definition = "\n\n".join(d for d in definitions if d) or None

        tags: List[str] = []
        if by_role[ItemChildRole.TAGS]:
            tags = [_text(button) for button in by_role[ItemChildRole.TAGS][0].find_all("button")]

        related_terms: List[RelatedTerm] = []
        if by_role[ItemChildRole.RELATED_TERMS]:
            related_terms = self.parse_related_terms(by_role[ItemChildRole.RELATED_TERMS][0])

        if dt_elements:
            preferred_term = self.parse_term(dt_elements[0])
            has_disambiguation_tag = self._has_disambiguation_marker(dt_elements[0])
        else:
            logger.debug("Glossary item without any term: %s", item_element.get("data-id"))
            preferred_term = Term(is_abbreviation=False, body="")
            has_disambiguation_tag = False

        item_id, id_is_persisted = self._element_id(item_element)

        return GlossaryItem(
            id=item_id,
            preferred_term=preferred_term,
            alternative_terms=tuple(self.parse_term(dt) for dt in dt_elements[1:]),
            disambiguation_tag=tags[0] if has_disambiguation_tag and tags else None,
            normal_tags=tuple(tags[1:] if has_disambiguation_tag else tags),
            definition=definition,
            related_terms=tuple(related_terms),
            needs_updating=bool(by_role[ItemChildRole.NEEDS_UPDATING]),
            last_updated_date=_data(item_element, "last-updated"),
            last_updated_by_name=_data(item_element, "last-updated-by-name"),
            last_updated_by_email_address=_data(item_element, "last-updated-by-email-address"),
            id_is_persisted=id_is_persisted,
        )

    def parse_term(self, term_element: Tag) -> Term:
        dfn_element = term_element.find("dfn") or term_element
        is_abbreviation = dfn_element.find("abbr") is not None
        parts = [
            str(s)
            for s in dfn_element.find_all(string=True)
            if not isinstance(s, Comment) and not self._inside_disambiguation_marker(s, dfn_element)
        ]
        return Term(is_abbreviation=is_abbreviation, body=normalise_whitespace("".join(parts)))

    def parse_related_terms(self, element: Tag) -> List[RelatedTerm]:
        related_terms = []
        for a_element in element.find_all("a"):
            href = a_element.get("href") or ""
            fragment = href.split("#", 1)[1] if "#" in href else ""
            related_terms.append(RelatedTerm(id_reference=fragment or None, body=_text(a_element)))
        return related_terms

    def _about_link(self, li_element: Tag) -> AboutLink:
        a_element = li_element.find("a")
        if a_element is None:
            return AboutLink(href="", body=_text(li_element))
        return AboutLink(href=(a_element.get("href") or "").strip(), body=_text(a_element))

    def _tag_with_description(self, div_element: Tag) -> TagWithDescription:
        tag_id, id_is_persisted = self._element_id(div_element)
        return TagWithDescription(
            id=tag_id,
            tag=_text(div_element.find("dt")),
            description=_text(div_element.find("dd")),
            id_is_persisted=id_is_persisted,
        )

    def _element_id(self, element: Tag):
        persisted = (_data(element, "id") or element.get("id") or "").strip()
        if persisted:
            return persisted, True
        return self.id_factory(), False

    def _has_disambiguation_marker(self, term_element: Tag) -> bool:
        dfn_element = term_element.find("dfn")
        if dfn_element is None:
            return False
        return any(DISAMBIGUATION_CLASS in _classes(span) for span in dfn_element.find_all("span"))

    def _inside_disambiguation_marker(self, string: NavigableString, stop: Tag) -> bool:
        for parent in string.parents:
            if parent is stop:
                return False
            if parent.name == "span" and DISAMBIGUATION_CLASS in _classes(parent):
                return True
        return False

    def _version_number(self, value: Optional[str]) -> Optional[int]:
        if value is None:
            return None
        try:
            return int(value.strip()) or None
        except ValueError:
            return None
