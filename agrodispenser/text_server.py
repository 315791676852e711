"""Text channel to a connected client: notifications out, commands in."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .preferences import PreferenceStore

logger = logging.getLogger(__name__)

BUFFER_SIZE = 256
STORE_NAMESPACE = "bletext"
DEVICE_NAME_KEY = "devicename"


class TextServer:
    """Holds the device name, sends notifications and double-buffers incoming writes.

    ``sink`` receives each notified text. The callbacks ``on_write(text)``,
    ``on_read() -> str``, ``on_connect()`` and ``on_disconnect()`` are optional.
    """

    def __init__(
        self,
        store: PreferenceStore | None = None,
        default_name: str = "BLE-TextServer",
        sink: Callable[[str], None] | None = None,
    ) -> None:
        self._store = store
        self._sink = sink
        if store is not None:
            self.device_name = str(store.get(STORE_NAMESPACE, DEVICE_NAME_KEY, default_name))
        else:
            self.device_name = default_name
        self.value = ""
        self.on_write: Callable[[str], None] | None = None
        self.on_read: Callable[[], str] | None = None
        self.on_connect: Callable[[], None] | None = None
        self.on_disconnect: Callable[[], None] | None = None
        self._active = ""
        self._inactive = ""

    def set_device_name(self, name: str, persist: bool = True) -> None:
        self.device_name = name
        if persist and self._store is not None:
            self._store.put(STORE_NAMESPACE, DEVICE_NAME_KEY, name)

    def notify(self, text: str) -> None:
        """Publish ``text`` as the current value and pass it to the sink."""
        self.value = text
        if self._sink is not None:
            self._sink(text)

    def notify_formatted(self, fmt: str, *args: object) -> None:
        """Format with printf-style ``fmt``, cut to the buffer size, and notify."""
        text = fmt % args if args else fmt
        self.notify(text[: BUFFER_SIZE - 1])

    def notify_string(self, prefix: str, value: str) -> None:
        self.notify_formatted("%s=%s", prefix, value)

    def notify_value(self, prefix: str, value: int | float) -> None:
        if isinstance(value, float):
            self.notify_formatted("%s=%.2f", prefix, value)
        else:
            self.notify_formatted("%s=%d", prefix, value)

    def notify_indexed_value(self, prefix: str, index: int, value: int | float) -> None:
        if isinstance(value, float):
            self.notify_formatted("%s%d=%.2f", prefix, index, value)
        else:
            self.notify_formatted("%s%d=%d", prefix, index, value)

    def handle_write(self, data: str | bytes) -> None:
        """Accept a write from the client and hand it to ``on_write``."""
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        text = raw[: BUFFER_SIZE - 1].decode("utf-8", errors="ignore")
        self._inactive = text
        self._active, self._inactive = self._inactive, self._active
        if self.on_write is not None:
            self.on_write(self._active)

    def received(self) -> str | None:
        """The message held in the spare buffer (the one before the latest), if any."""
        return self._inactive or None

    def read(self) -> str:
        """Value a client reading now would get, refreshed by ``on_read``."""
        if self.on_read is not None:
            self.value = self.on_read()
        return self.value

    def connect(self) -> None:
        logger.info("Client connected")
        if self.on_connect is not None:
            self.on_connect()

    def disconnect(self) -> None:
        logger.info("Client disconnected")
        if self.on_disconnect is not None:
            self.on_disconnect()