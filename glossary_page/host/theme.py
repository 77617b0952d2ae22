from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Union

from .dom import HostDocument
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

THEME_STORAGE_KEY = "glossaryPageTheme"
DARK_CLASS = "dark"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Theme"]:
        try:
            return cls(value)
        except ValueError:
            return None


class ThemePersistence:
    """
    Resolves and persists the light/dark/system display preference.

    Resolution: a recognised stored value wins, then `default_theme`. `SYSTEM`
    is only turned into light or dark when the effect is applied, by asking
    `prefers_dark` for the host's current color scheme.

    Storage failures are logged and treated as "nothing stored".
    """

    def __init__(
        self,
        store: KeyValueStore,
        default_theme: Union[Theme, str] = Theme.SYSTEM,
        prefers_dark: Optional[Callable[[], bool]] = None,
        document: Optional[HostDocument] = None,
    ):
        self.store = store
        self.default_theme = Theme.parse(default_theme) or Theme.SYSTEM
        self.prefers_dark = prefers_dark or (lambda: False)
        self.document = document

    def stored_theme(self) -> Optional[Theme]:
        try:
            value = self.store.get(THEME_STORAGE_KEY)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not read theme preference, using default: %s", exc)
            return None
        return Theme.parse(value)

    def resolve(self) -> Theme:
        return self.stored_theme() or self.default_theme

    def is_dark(self) -> bool:
        theme = self.resolve()
        if theme == Theme.SYSTEM:
            return bool(self.prefers_dark())
        return theme == Theme.DARK

    def reflect_in_class_list(self) -> bool:
        dark = self.is_dark()
        if self.document is not None:
            self.document.toggle_class(self.document.root, DARK_CLASS, dark)
        return dark

    def change_theme(self, value: Optional[str]) -> None:
        """
        Persist `value`, or forget the stored preference when it is empty, then
        reflect the result immediately. Unrecognised names are not stored.
        """
        try:
            if not value:
                self.store.clear(THEME_STORAGE_KEY)
            elif Theme.parse(value) is None:
                logger.warning("Ignoring unknown theme %r", value)
            else:
                self.store.set(THEME_STORAGE_KEY, Theme(value).value)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not persist theme preference %r: %s", value, exc)
        self.reflect_in_class_list()
