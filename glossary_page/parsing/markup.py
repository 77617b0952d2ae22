from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup, Tag

from .engine import ABOUT_ID, DISAMBIGUATION_CLASS, ITEMS_ID, TAGS_ID, TITLE_ID
from .models import GlossaryDocument, GlossaryItem, ItemChildRole, Term


def render_document(document: GlossaryDocument) -> str:
    """
    Render a document back into the page markup schema, so that parsing the
    result yields the same document. Generated ids are written out as
    `data-id`, which makes them persisted on the next parse.
    """
    soup = BeautifulSoup("", "html.parser")

    title = soup.new_tag("h1", id=TITLE_ID)
    title.string = document.title
    soup.append(title)

    about = soup.new_tag("div", id=ABOUT_ID)
    paragraph = soup.new_tag("p")
    paragraph.string = document.about_paragraph
    about.append(paragraph)
    links = soup.new_tag("ul")
    for link in document.about_links:
        li = soup.new_tag("li")
        li.append(_text_tag(soup, "a", link.body, href=link.href))
        links.append(li)
    about.append(links)
    soup.append(about)

    if document.tags_with_descriptions:
        tags = soup.new_tag("div", id=TAGS_ID)
        tags_dl = soup.new_tag("dl")
        for tag in document.tags_with_descriptions:
            div = soup.new_tag("div", attrs={"data-id": tag.id})
            div.append(_text_tag(soup, "dt", tag.tag))
            div.append(_text_tag(soup, "dd", tag.description))
            tags_dl.append(div)
        tags.append(tags_dl)
        soup.append(tags)

    items = soup.new_tag("article", id=ITEMS_ID)
    items_dl = soup.new_tag("dl")
    for item in document.items:
        items_dl.append(render_item(soup, item))
    items.append(items_dl)
    soup.append(items)

    return str(soup)


def render_item(soup: BeautifulSoup, item: GlossaryItem) -> Tag:
    attrs = {"data-id": item.id}
    if item.last_updated_date:
        attrs["data-last-updated"] = item.last_updated_date
    if item.last_updated_by_name:
        attrs["data-last-updated-by-name"] = item.last_updated_by_name
    if item.last_updated_by_email_address:
        attrs["data-last-updated-by-email-address"] = item.last_updated_by_email_address
    div = soup.new_tag("div", attrs=attrs)

    div.append(_render_term(soup, item.preferred_term, item.disambiguation_tag))
    for term in item.alternative_terms:
        div.append(_render_term(soup, term, None))

    tags = ([item.disambiguation_tag] if item.disambiguation_tag else []) + list(item.normal_tags)
    if tags:
        dd = soup.new_tag("dd", attrs={"class": ItemChildRole.TAGS.value})
        for tag in tags:
            dd.append(_text_tag(soup, "button", tag))
        div.append(dd)

    if item.definition is not None:
        # Joined legacy definitions are written back as separate blocks.
        for block in item.definition.split("\n\n"):
            div.append(_text_tag(soup, "dd", block))

    if item.related_terms:
        dd = soup.new_tag("dd", attrs={"class": ItemChildRole.RELATED_TERMS.value})
        for related_term in item.related_terms:
            href = f"#{related_term.id_reference}" if related_term.id_reference else ""
            dd.append(_text_tag(soup, "a", related_term.body, href=href))
        div.append(dd)

    if item.needs_updating:
        div.append(soup.new_tag("dd", attrs={"class": ItemChildRole.NEEDS_UPDATING.value}))

    return div


def _render_term(soup: BeautifulSoup, term: Term, disambiguation_tag: Optional[str]) -> Tag:
    dt = soup.new_tag("dt")
    dfn = soup.new_tag("dfn")
    body = _text_tag(soup, "abbr", term.body) if term.is_abbreviation else _text_tag(soup, "span", term.body)
    dfn.append(body)
    if disambiguation_tag:
        dfn.append(" ")
        marker = _text_tag(soup, "span", f"({disambiguation_tag})")
        marker["class"] = DISAMBIGUATION_CLASS
        dfn.append(marker)
    dt.append(dfn)
    return dt


def _text_tag(soup: BeautifulSoup, name: str, text: str, **attrs) -> Tag:
    tag = soup.new_tag(name, attrs=attrs)
    tag.string = text
    return tag
