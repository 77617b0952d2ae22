from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ItemChildRole(str, Enum):
    """
    Role of a `<dd>` child inside a glossary item, decided once from its class.
    Anything without a recognised class is a definition.
    """

    DEFINITION = "definition"
    TAGS = "tags"
    NEEDS_UPDATING = "needs-updating"
    RELATED_TERMS = "related-terms"

    @classmethod
    def from_classes(cls, classes: List[str]) -> "ItemChildRole":
        for class_name in classes:
            if class_name == cls.TAGS.value:
                return cls.TAGS
            if class_name == cls.NEEDS_UPDATING.value:
                return cls.NEEDS_UPDATING
            if class_name == cls.RELATED_TERMS.value:
                return cls.RELATED_TERMS
        return cls.DEFINITION


class CardWidth(str, Enum):
    COMPACT = "compact"
    INTERMEDIATE = "intermediate"
    WIDE = "wide"


@dataclass(frozen=True)
class Term:
    is_abbreviation: bool
    body: str

    def as_flags(self) -> Dict[str, Any]:
        return {"isAbbreviation": self.is_abbreviation, "body": self.body}


@dataclass(frozen=True)
class RelatedTerm:
    # Soft reference: never checked against the item set.
    id_reference: Optional[str]
    body: str

    def as_flags(self) -> Dict[str, Any]:
        return {"idReference": self.id_reference, "body": self.body}


@dataclass(frozen=True)
class AboutLink:
    href: str
    body: str

    def as_flags(self) -> Dict[str, Any]:
        return {"href": self.href, "body": self.body}


@dataclass(frozen=True)
class TagWithDescription:
    id: str
    tag: str
    description: str
    id_is_persisted: bool = True

    def as_flags(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "idIsPersisted": self.id_is_persisted,
            "tag": self.tag,
            "description": self.description,
        }


@dataclass(frozen=True)
class GlossaryItem:
    """
    One glossary entry. `id_is_persisted` is False when the markup carried no id
    and the parser had to mint one; such ids are not stable across loads.
    """

    id: str
    preferred_term: Term
    alternative_terms: Tuple[Term, ...] = ()
    disambiguation_tag: Optional[str] = None
    normal_tags: Tuple[str, ...] = ()
    definition: Optional[str] = None
    related_terms: Tuple[RelatedTerm, ...] = ()
    needs_updating: bool = False
    last_updated_date: Optional[str] = None
    last_updated_by_name: Optional[str] = None
    last_updated_by_email_address: Optional[str] = None
    id_is_persisted: bool = True

    @property
    def all_terms(self) -> Tuple[Term, ...]:
        return (self.preferred_term,) + self.alternative_terms

    def as_flags(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "preferredTerm": self.preferred_term.as_flags(),
            "alternativeTerms": [t.as_flags() for t in self.alternative_terms],
            "disambiguationTag": self.disambiguation_tag,
            "normalTags": list(self.normal_tags),
            "definition": self.definition,
            "relatedTerms": [r.as_flags() for r in self.related_terms],
            "needsUpdating": self.needs_updating,
            "lastUpdatedDate": self.last_updated_date,
            "lastUpdatedByName": self.last_updated_by_name,
            "lastUpdatedByEmailAddress": self.last_updated_by_email_address,
            "idIsPersisted": self.id_is_persisted,
        }


@dataclass(frozen=True)
class GlossaryDocument:
    title: str = ""
    about_paragraph: str = ""
    about_links: Tuple[AboutLink, ...] = ()
    tags_with_descriptions: Tuple[TagWithDescription, ...] = ()
    items: Tuple[GlossaryItem, ...] = ()

    def item_by_id(self, item_id: str) -> Optional[GlossaryItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def as_flags(self) -> Dict[str, Any]:
        return {
            "titleString": self.title,
            "aboutParagraph": self.about_paragraph,
            "aboutLinks": [link.as_flags() for link in self.about_links],
            "tagsWithDescriptions": [t.as_flags() for t in self.tags_with_descriptions],
            "glossaryItems": [item.as_flags() for item in self.items],
        }


@dataclass(frozen=True)
class PageConfig:
    """
    Feature flags read from the page container and body `data-*` attributes.
    """

    enable_help_for_making_changes: bool = False
    enable_saving_changes_in_memory: bool = False
    enable_export_menu: bool = True
    enable_order_items_buttons: bool = True
    enable_last_updated_dates: bool = False
    card_width: str = CardWidth.COMPACT.value
    version_number: Optional[int] = None
    editor_is_running: bool = False
    default_theme: str = "system"
    separate_backend_base_url: Optional[str] = None
    bearer_token: Optional[str] = None
    user_name: Optional[str] = None
    user_email_address: Optional[str] = None

    def as_flags(self) -> Dict[str, Any]:
        return {
            "enableHelpForMakingChanges": self.enable_help_for_making_changes,
            "enableSavingChangesInMemory": self.enable_saving_changes_in_memory,
            "enableExportMenu": self.enable_export_menu,
            "enableOrderItemsButtons": self.enable_order_items_buttons,
            "enableLastUpdatedDates": self.enable_last_updated_dates,
            "cardWidth": self.card_width,
            "versionNumber": self.version_number,
            "editorIsRunning": self.editor_is_running or self.separate_backend_base_url is not None,
            "separateBackendBaseUrl": self.separate_backend_base_url,
            "bearerToken": self.bearer_token,
            "userName": self.user_name,
            "userEmailAddress": self.user_email_address,
        }


@dataclass(frozen=True)
class ParsedPage:
    """
    Everything read from the markup at load time.
    """

    document: GlossaryDocument
    config: PageConfig = field(default_factory=PageConfig)
