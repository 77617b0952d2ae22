from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set, Tuple, Union

from ..config import HostConfig
from .dom import HostDocument
from .services import Clipboard, current_date_time_iso, new_uuid
from .theme import ThemePersistence
from .waiting import until_async, wait_for_element_bounded

logger = logging.getLogger(__name__)

BACKGROUND_SCROLL_LOCK_CLASS = "overflow-hidden"
EDITOR_COMMAND_FIELD_ID = "glossary-page-text-field-with-command-to-run-editor"

Handler = Callable[[Any], None]


class PortName(str, Enum):
    # core -> host
    ALLOW_BACKGROUND_SCROLLING = "allowBackgroundScrolling"
    PREVENT_BACKGROUND_SCROLLING = "preventBackgroundScrolling"
    SCROLL_ELEMENT_INTO_VIEW = "scrollElementIntoView"
    SCROLL_SEARCH_RESULT_INTO_VIEW = "scrollSearchResultIntoView"
    GIVE_SEARCH_FIELD_FOCUS_ONCE_IT_IS_PRESENT = "giveSearchFieldFocusOnceItIsPresent"
    CHANGE_THEME = "changeTheme"
    GET_CURRENT_DATE_TIME_FOR_SAVING = "getCurrentDateTimeForSaving"
    GET_CURRENT_DATE_TIME_AND_NEW_ID_FOR_SAVING = "getCurrentDateTimeAndNewIdForSaving"
    GENERATE_UUID = "generateUuid"
    COPY_EDITOR_COMMAND_TO_CLIPBOARD = "copyEditorCommandToClipboard"
    SELECT_ALL_IN_TEXT_FIELD_WITH_COMMAND_TO_RUN_EDITOR = "selectAllInTextFieldWithCommandToRunEditor"
    DRAG_START = "dragStart"
    # host -> core
    RECEIVE_CURRENT_DATE_TIME_FOR_SAVING = "receiveCurrentDateTimeForSaving"
    RECEIVE_CURRENT_DATE_TIME_AND_NEW_ID_FOR_SAVING = "receiveCurrentDateTimeAndNewIdForSaving"
    RECEIVE_UUID_FOR_ADDING_ROW = "receiveUuidForAddingRow"
    ATTEMPTED_TO_COPY_EDITOR_COMMAND_TO_CLIPBOARD = "attemptedToCopyEditorCommandToClipboard"
    SCROLLING_UP_WHILE_FAR_AWAY_FROM_THE_TOP = "scrollingUpWhileFarAwayFromTheTop"


class PortDirection(str, Enum):
    COMMAND = "core-to-host"
    EVENT = "host-to-core"


EVENT_PORTS = frozenset(
    {
        PortName.RECEIVE_CURRENT_DATE_TIME_FOR_SAVING,
        PortName.RECEIVE_CURRENT_DATE_TIME_AND_NEW_ID_FOR_SAVING,
        PortName.RECEIVE_UUID_FOR_ADDING_ROW,
        PortName.ATTEMPTED_TO_COPY_EDITOR_COMMAND_TO_CLIPBOARD,
        PortName.SCROLLING_UP_WHILE_FAR_AWAY_FROM_THE_TOP,
    }
)


def port_direction(name: PortName) -> PortDirection:
    return PortDirection.EVENT if name in EVENT_PORTS else PortDirection.COMMAND


class Port:
    """
    One named, one-way channel. Every `send` is delivered once to each current
    subscriber, synchronously and in subscription order. Nothing is queued for
    subscribers that arrive later.
    """

    def __init__(self, name: PortName):
        self.name = name
        self.direction = port_direction(name)
        self._subscribers: List[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        self._subscribers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def send(self, payload: Any = None) -> None:
        for handler in list(self._subscribers):
            handler(payload)


class ApplicationPorts:
    """
    The full port catalog shared by the host and the application core.
    """

    def __init__(self):
        self._ports: Dict[PortName, Port] = {name: Port(name) for name in PortName}

    def __getitem__(self, name: Union[str, PortName]) -> Port:
        try:
            return self._ports[PortName(name)]
        except ValueError:
            raise KeyError(name) from None

    def __iter__(self):
        return iter(self._ports.values())

    def commands(self) -> List[Port]:
        return [port for port in self if port.direction == PortDirection.COMMAND]

    def events(self) -> List[Port]:
        return [port for port in self if port.direction == PortDirection.EVENT]


class ScrollRateLimiter:
    """
    Leaky bucket for "scrolling up while far from the top". Each qualifying
    tick uses one unit of budget; the tick that empties it fires and refills it.
    """

    def __init__(self, far_from_top_px: float = 1000, budget: int = 5):
        self.far_from_top_px = far_from_top_px
        self.budget = max(1, budget)
        self.remaining = self.budget
        self.last_offset: Optional[float] = None

    def record(self, offset: float) -> bool:
        previous, self.last_offset = self.last_offset, offset
        if previous is None or offset >= previous or offset <= self.far_from_top_px:
            return False
        self.remaining -= 1
        if self.remaining > 0:
            return False
        self.remaining = self.budget
        return True


class PortBridge:
    """
    Routes commands from the application core to host side effects, and sends
    the host's answers back as events.

    Delivery is fire-and-forget. A command is handled in the order the core
    emits it, but commands that wait on the document (focus) finish whenever
    their wait does. A command that fails is logged and dropped; nothing is
    raised back into the core. Documented fallbacks:

    - `scrollElementIntoView` for a missing element releases the background
      scroll lock so the page cannot stay locked.
    - `scrollSearchResultIntoView` and `selectAllInTextFieldWithCommandToRunEditor`
      for a missing element do nothing.
    - `giveSearchFieldFocusOnceItIsPresent` gives up quietly after its deadline.
    - a failed clipboard write is reported as `False`, not raised. So is a
      copy requested while no event loop is running.

    Commands that wait (focus, clipboard) run as tasks on the running event
    loop. Without one, focus requests are logged and dropped.
    """

    def __init__(
        self,
        ports: ApplicationPorts,
        document: HostDocument,
        theme: ThemePersistence,
        clipboard: Clipboard,
        config: Optional[HostConfig] = None,
        clock: Callable[[], str] = current_date_time_iso,
        id_factory: Callable[[], str] = new_uuid,
    ):
        self.ports = ports
        self.document = document
        self.theme = theme
        self.clipboard = clipboard
        self.config = config or HostConfig()
        self.clock = clock
        self.id_factory = id_factory
        self.scroll_limiter = ScrollRateLimiter(self.config.scroll_far_from_top_px, self.config.scroll_event_budget)
        self._subscriptions: List[Tuple[PortName, Handler]] = []
        self._tasks: Set[asyncio.Task] = set()

        self._handlers: Dict[PortName, Handler] = {
            PortName.ALLOW_BACKGROUND_SCROLLING: self.allow_background_scrolling,
            PortName.PREVENT_BACKGROUND_SCROLLING: self.prevent_background_scrolling,
            PortName.SCROLL_ELEMENT_INTO_VIEW: self.scroll_element_into_view,
            PortName.SCROLL_SEARCH_RESULT_INTO_VIEW: self.scroll_search_result_into_view,
            PortName.GIVE_SEARCH_FIELD_FOCUS_ONCE_IT_IS_PRESENT: self.give_search_field_focus_once_it_is_present,
            PortName.CHANGE_THEME: self.change_theme,
            PortName.GET_CURRENT_DATE_TIME_FOR_SAVING: self.get_current_date_time_for_saving,
            PortName.GET_CURRENT_DATE_TIME_AND_NEW_ID_FOR_SAVING: self.get_current_date_time_and_new_id_for_saving,
            PortName.GENERATE_UUID: self.generate_uuid,
            PortName.COPY_EDITOR_COMMAND_TO_CLIPBOARD: self.copy_editor_command_to_clipboard,
            PortName.SELECT_ALL_IN_TEXT_FIELD_WITH_COMMAND_TO_RUN_EDITOR: self.select_all_in_text_field,
            PortName.DRAG_START: self.drag_start,
        }

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def connect(self) -> None:
        for name, handler in self._handlers.items():
            delivered = self._guarded(name, handler)
            self.ports[name].subscribe(delivered)
            self._subscriptions.append((name, delivered))
        logger.info("Port bridge connected (%d commands)", len(self._subscriptions))

    def disconnect(self) -> None:
        for name, delivered in self._subscriptions:
            self.ports[name].unsubscribe(delivered)
        self._subscriptions = []

    def cancel_pending(self) -> None:
        """Cancel every command still in flight, e.g. on shutdown."""
        for task in list(self._tasks):
            task.cancel()

    async def drain(self) -> None:
        """Wait for every command still in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def send_event(self, name: PortName, payload: Any = None) -> None:
        self.ports[name].send(payload)

    # region commands
    def allow_background_scrolling(self, _: Any = None) -> None:
        self.document.toggle_class(self.document.body, BACKGROUND_SCROLL_LOCK_CLASS, False)

    def prevent_background_scrolling(self, _: Any = None) -> None:
        self.document.toggle_class(self.document.body, BACKGROUND_SCROLL_LOCK_CLASS, True)

    def scroll_element_into_view(self, element_id: str) -> None:
        element = self.document.get_element_by_id(element_id)
        if element is not None:
            self.document.scroll_into_view(element, block="nearest")
        else:
            logger.debug("No element %s to scroll to; releasing background scroll lock", element_id)
            self.allow_background_scrolling()

    def scroll_search_result_into_view(self, element_id: str) -> None:
        element = self.document.get_element_by_id(element_id)
        if element is not None:
            self.document.scroll_into_view(element, block="nearest")
        else:
            logger.debug("No search result %s to scroll to", element_id)

    def give_search_field_focus_once_it_is_present(self, element_id: str) -> None:
        self._spawn(self.focus_once_present(element_id))

    def change_theme(self, theme_name: Optional[str]) -> None:
        self.theme.change_theme(theme_name)

    def get_current_date_time_for_saving(self, _: Any = None) -> None:
        self.send_event(PortName.RECEIVE_CURRENT_DATE_TIME_FOR_SAVING, self.clock())

    def get_current_date_time_and_new_id_for_saving(self, _: Any = None) -> None:
        self.send_event(
            PortName.RECEIVE_CURRENT_DATE_TIME_AND_NEW_ID_FOR_SAVING,
            {"currentDateTime": self.clock(), "newId": self.id_factory()},
        )

    def generate_uuid(self, _: Any = None) -> None:
        self.send_event(PortName.RECEIVE_UUID_FOR_ADDING_ROW, self.id_factory())

    def copy_editor_command_to_clipboard(self, text: str) -> None:
        try:
            self._spawn(self.copy_to_clipboard(text))
        except RuntimeError:
            logger.warning("No running event loop; clipboard write not attempted")
            self.send_event(PortName.ATTEMPTED_TO_COPY_EDITOR_COMMAND_TO_CLIPBOARD, False)

    def select_all_in_text_field(self, _: Any = None) -> None:
        element = self.document.get_element_by_id(EDITOR_COMMAND_FIELD_ID)
        if element is None or not self.document.select_all(element):
            logger.debug("No text input %s to select", EDITOR_COMMAND_FIELD_ID)

    def drag_start(self, _: Any = None) -> None:
        self.document.begin_drag()

    # endregion

    # region host events
    def on_scroll(self, offset: float) -> bool:
        """
        Feed one host scroll tick. Returns True when the tick produced a
        `scrollingUpWhileFarAwayFromTheTop` event.
        """
        if not self.scroll_limiter.record(offset):
            return False
        self.send_event(PortName.SCROLLING_UP_WHILE_FAR_AWAY_FROM_THE_TOP)
        return True

    # endregion

    async def focus_once_present(self, element_id: str) -> bool:
        interval = self.config.focus_poll_interval_ms
        try:
            element = await wait_for_element_bounded(
                self.document, element_id, interval, self.config.element_wait_timeout_ms
            )

            def focused() -> bool:
                self.document.focus(element)
                return self.document.active_element is self.document.get_element_by_id(element_id)

            await until_async(focused, interval, self.config.focus_timeout_ms)
        except TimeoutError:
            logger.warning("Gave up trying to focus %s", element_id)
            return False
        return True

    async def copy_to_clipboard(self, text: str) -> bool:
        try:
            await self.clipboard.write_text(text)
            copied = True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Clipboard write failed: %s", exc)
            copied = False
        self.send_event(PortName.ATTEMPTED_TO_COPY_EDITOR_COMMAND_TO_CLIPBOARD, copied)
        return copied

    def _guarded(self, name: PortName, handler: Handler) -> Handler:
        def deliver(payload: Any) -> None:
            try:
                handler(payload)
            except Exception:  # noqa: BLE001
                logger.exception("Command %s failed", name.value)

        return deliver

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background command failed", exc_info=task.exception())
