from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Optional, Protocol, Union
from urllib.parse import unquote, urlparse

from bs4 import Tag

from ..config import HostConfig
from ..parsing import GlossaryParser, HtmlGlossaryParser, ParsedPage
from ..parsing.engine import CONTAINER_ID
from .bridge import ApplicationPorts, PortBridge
from .dom import HostDocument
from .services import Clipboard
from .storage import KeyValueStore
from .theme import ThemePersistence

logger = logging.getLogger(__name__)

OUTER_ELEMENT_ID = "glossary-page-outer"

FILE_URL_NOTICE = (
    "This page includes a web interface for making changes that are saved back to the HTML file itself. "
    "This is meant to be used locally by a single user at a time and works best if the file is kept "
    "under version control."
)
FILE_URL_RUN_HINT = "If you're on macOS, Linux, or Cygwin and have Node.js installed, then run the following command."
EDITOR_COMMAND_TEMPLATE = "sed -n '/START OF editor.js$/,$p' {file_name} | FILE={file_name} node"


def editor_command(file_name: str = "glossary.html") -> str:
    return EDITOR_COMMAND_TEMPLATE.format(file_name=file_name)


class ApplicationCore(Protocol):
    ports: ApplicationPorts


CoreFactory = Callable[[Dict[str, Any]], ApplicationCore]


def build_flags(page: ParsedPage, theme: ThemePersistence, katex_is_available: bool = False) -> Dict[str, Any]:
    flags: Dict[str, Any] = {}
    flags.update(page.document.as_flags())
    flags.update(page.config.as_flags())
    flags["theme"] = theme.resolve().value
    flags["katexIsAvailable"] = katex_is_available
    return flags


@dataclass
class GlossaryHost:
    """
    A started page. `core` and `bridge` are None when the page could only
    show the file:// notice; the DOM-ready steps still apply to it.
    """

    document: HostDocument
    page: ParsedPage
    flags: Dict[str, Any]
    theme: ThemePersistence
    core: Optional[ApplicationCore] = None
    bridge: Optional[PortBridge] = None

    def on_dom_ready(self) -> None:
        self.theme.reflect_in_class_list()
        self.document.set_body_visible()
        self._focus_outer()
        self.scroll_fragment_identifier_into_view()

    def on_focus_lost(self, related_target: Optional[Tag] = None) -> None:
        # Keep keyboard shortcuts working when focus would otherwise go nowhere.
        if related_target is None:
            self._focus_outer()

    def scroll_fragment_identifier_into_view(self) -> None:
        if not self.document.url:
            return
        fragment = unquote(urlparse(self.document.url).fragment)
        element = self.document.get_element_by_id(fragment)
        if element is not None:
            self.document.scroll_into_view(element)

    def _focus_outer(self) -> None:
        outer = self.document.get_element_by_id(OUTER_ELEMENT_ID)
        if outer is not None:
            self.document.focus(outer)


def start_host(
    markup: Union[str, bytes, HostDocument],
    core_factory: CoreFactory,
    store: KeyValueStore,
    clipboard: Clipboard,
    url: Optional[str] = None,
    config: Optional[HostConfig] = None,
    parser: Optional[GlossaryParser] = None,
    prefers_dark: Optional[Callable[[], bool]] = None,
    katex_is_available: bool = False,
) -> Optional[GlossaryHost]:
    """
    Read the page once, initialise the application core with the resulting
    flags and wire its ports to the host.

    Returns None when the page has no glossary container. A page opened from
    a file:// URL gets a host without a core: the container shows how to run
    the editor instead.
    """
    document = markup if isinstance(markup, HostDocument) else HostDocument(markup, url=url)
    container = document.get_element_by_id(CONTAINER_ID)
    if container is None:
        logger.warning("No #%s element; not starting the glossary", CONTAINER_ID)
        return None

    page = (parser or HtmlGlossaryParser()).parse(document.soup)
    theme = ThemePersistence(store, page.config.default_theme, prefers_dark=prefers_dark, document=document)
    flags = build_flags(page, theme, katex_is_available=katex_is_available)

    if document.url and urlparse(document.url).scheme == "file":
        logger.warning("Glossary opened from %s; editor must be served over HTTP", document.url)
        show_file_url_notice(document, container)
        return GlossaryHost(document=document, page=page, flags=flags, theme=theme)

    core = core_factory(flags)
    bridge = PortBridge(core.ports, document, theme, clipboard, config=config)
    bridge.connect()
    logger.info("Glossary host started with %d items", len(page.document.items))
    return GlossaryHost(document=document, page=page, flags=flags, theme=theme, core=core, bridge=bridge)


def show_file_url_notice(document: HostDocument, container: Tag) -> None:
    file_name = PurePosixPath(unquote(urlparse(document.url or "").path)).name or "glossary.html"
    container.clear()

    notice = document.create_element("div")
    for tag_name, text in (
        ("h1", "Glossary Page Template"),
        ("p", FILE_URL_NOTICE),
        ("p", FILE_URL_RUN_HINT),
    ):
        element = document.create_element(tag_name)
        element.string = text
        notice.append(element)

    command = document.create_element("code", **{"class": "select-all"})
    command.string = editor_command(file_name)
    pre = document.create_element("pre")
    pre.append(command)
    notice.append(pre)

    document.append_child(container, notice)
