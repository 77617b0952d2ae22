from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


def _class_list(element: Tag) -> List[str]:
    value = element.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


@dataclass
class MutationRecord:
    target: Tag
    added_nodes: List[Tag] = field(default_factory=list)
    removed_nodes: List[Tag] = field(default_factory=list)


class MutationObserver:
    """
    Child-list observer over one subtree of a `HostDocument`.
    Callbacks run synchronously on the mutating call.
    """

    def __init__(self, document: "HostDocument", target: Tag, callback: Callable[[MutationRecord], None]):
        self.document = document
        self.target = target
        self.callback = callback
        self.connected = True

    def covers(self, node: Tag) -> bool:
        return node is self.target or any(parent is self.target for parent in node.parents)

    def disconnect(self) -> None:
        if self.connected:
            self.connected = False
            self.document._forget(self)


class HostDocument:
    """
    The host page as seen by the bridge: a BeautifulSoup tree plus the bits of
    browser state that commands act on (focus, selection, scroll, drag).

    Embedders with a real UI subclass it and override `scroll_into_view`,
    `focus`, `select_all` and `begin_drag`; the defaults only record what
    happened.
    """

    def __init__(self, markup: Union[str, bytes, BeautifulSoup], url: Optional[str] = None):
        self.soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup, "html.parser")
        self.url = url
        self.active_element: Optional[Tag] = None
        self.selected_element: Optional[Tag] = None
        self.scrolled_into_view: List[Tag] = []
        self.drag_in_progress = False
        self._observers: List[MutationObserver] = []

    @property
    def root(self) -> Tag:
        return self.soup.find("html") or self.soup

    @property
    def body(self) -> Tag:
        return self.soup.find("body") or self.soup

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        if not element_id:
            return None
        return self.soup.find(id=element_id)

    def contains(self, element: Optional[Tag]) -> bool:
        if element is None:
            return False
        return element is self.soup or any(parent is self.soup for parent in element.parents)

    # region tree mutation
    def create_element(self, name: str, **attrs) -> Tag:
        return self.soup.new_tag(name, attrs=attrs)

    def append_child(self, parent: Tag, child: Tag) -> Tag:
        parent.append(child)
        self._notify(MutationRecord(target=parent, added_nodes=[child]))
        return child

    def remove_element(self, element: Tag) -> None:
        parent = element.parent
        element.extract()
        if element is self.active_element:
            self.active_element = None
        if parent is not None:
            self._notify(MutationRecord(target=parent, removed_nodes=[element]))

    def observe(self, target: Tag, callback: Callable[[MutationRecord], None]) -> MutationObserver:
        observer = MutationObserver(self, target, callback)
        self._observers.append(observer)
        return observer

    def _forget(self, observer: MutationObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, record: MutationRecord) -> None:
        for observer in list(self._observers):
            if observer.connected and observer.covers(record.target):
                observer.callback(record)

    # endregion

    # region classes
    def has_class(self, element: Tag, class_name: str) -> bool:
        return class_name in _class_list(element)

    def toggle_class(self, element: Tag, class_name: str, force: bool) -> None:
        classes = _class_list(element)
        if force and class_name not in classes:
            classes.append(class_name)
        elif not force and class_name in classes:
            classes.remove(class_name)
        if classes:
            element["class"] = classes
        elif "class" in element.attrs:
            del element["class"]

    # endregion

    # region host side effects
    def scroll_into_view(self, element: Tag, block: str = "nearest") -> None:
        logger.debug("Scrolling %s into view (block=%s)", element.get("id"), block)
        self.scrolled_into_view.append(element)

    def focus(self, element: Optional[Tag]) -> bool:
        if not self.contains(element):
            return False
        self.active_element = element
        return True

    def select_all(self, element: Tag) -> bool:
        if element.name != "input":
            return False
        self.selected_element = element
        return True

    def begin_drag(self) -> None:
        self.drag_in_progress = True

    def set_body_visible(self) -> None:
        self.body["style"] = "visibility: visible"

    # endregion
