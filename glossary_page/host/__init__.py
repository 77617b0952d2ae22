"""
Host-side exports: the page document, wait helpers, settings storage, theme
handling and the port bridge to the application core.
"""

from .bridge import (
    ApplicationPorts,
    Port,
    PortBridge,
    PortDirection,
    PortName,
    ScrollRateLimiter,
)
from .dom import HostDocument, MutationObserver, MutationRecord
from .services import Clipboard, InMemoryClipboard, current_date_time_iso, new_uuid
from .startup import ApplicationCore, GlossaryHost, build_flags, start_host
from .storage import InMemoryKeyValueStore, KeyValueStore, SqlAlchemyKeyValueStore
from .theme import THEME_STORAGE_KEY, Theme, ThemePersistence
from .waiting import until_async, wait_for_element, wait_for_element_bounded

__all__ = [
    "ApplicationCore",
    "ApplicationPorts",
    "Clipboard",
    "GlossaryHost",
    "HostDocument",
    "InMemoryClipboard",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "MutationObserver",
    "MutationRecord",
    "Port",
    "PortBridge",
    "PortDirection",
    "PortName",
    "ScrollRateLimiter",
    "SqlAlchemyKeyValueStore",
    "THEME_STORAGE_KEY",
    "Theme",
    "ThemePersistence",
    "build_flags",
    "current_date_time_iso",
    "new_uuid",
    "start_host",
    "until_async",
    "wait_for_element",
    "wait_for_element_bounded",
]
