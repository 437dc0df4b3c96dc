"""
Mouse/keyboard input listeners — the agent's device event source.

pynput is imported when the listeners start, so a host without an input
backend fails with CaptureError instead of at import. Its callbacks run
on the OS hook threads. They only classify and enqueue; the queue is
drained by the capture thread through events(), a lazy, unbounded
sequence of ClassifiedEvent. Counts only: key identities are reduced to
physical key names, no text is assembled.
"""

import enum
import queue

from ..classifier import ClassifiedEvent, key_name, click_name, button_code, classify_scroll
from .config import log
from .constants import PYNPUT_SCROLL_STEP, QUEUE_POLL_SEC


class CaptureError(Exception):
    """The input listeners could not be started. Fatal at startup."""


def key_identifier(key):
    """Canonical identifier for a pynput Key / KeyCode."""
    # Key members are enum values; KeyCode carries char/vk
    if isinstance(key, enum.Enum):
        return key_name(name=key.name)
    return key_name(char=getattr(key, "char", None), vk=getattr(key, "vk", None))


def button_identifier(button):
    return click_name(button_code(getattr(button, "name", None)))


class InputListeners:
    """Owns the pynput listeners and the queue they feed."""

    def __init__(self, input_queue=None):
        self._queue = input_queue if input_queue is not None else queue.Queue()
        self._mouse = None
        self._keyboard = None
        self._running = False

    # ── pynput callbacks (OS hook threads) ──────────────────

    def _on_press(self, key):
        self._queue.put(ClassifiedEvent(key_identifier(key), 1))

    def _on_click(self, x, y, button, pressed):
        if pressed:
            self._queue.put(ClassifiedEvent(button_identifier(button), 1))

    def _on_scroll(self, x, y, dx, dy):
        for event in classify_scroll(dx, dy, PYNPUT_SCROLL_STEP):
            self._queue.put(event)

    # ── Lifecycle ────────────────────────────────────────────

    def _new_mouse(self):
        from pynput import mouse
        listener = mouse.Listener(on_click=self._on_click, on_scroll=self._on_scroll)
        listener.daemon = True
        return listener

    def _new_keyboard(self):
        from pynput import keyboard
        # Only presses are counted; releases would double-count
        listener = keyboard.Listener(on_press=self._on_press)
        listener.daemon = True
        return listener

    def start(self):
        """Start both listeners. Raises CaptureError if either fails."""
        try:
            self._mouse = self._new_mouse()
            self._keyboard = self._new_keyboard()
            self._mouse.start()
            self._keyboard.start()
            self._mouse.wait()
            self._keyboard.wait()
        except Exception as e:
            raise CaptureError(f"Could not start input listeners: {e}") from e

        if not (self._mouse.is_alive() and self._keyboard.is_alive()):
            raise CaptureError("Input listeners exited immediately")

        self._running = True
        log.info("Input listeners started (counts only — no keylogging)")

    def stop(self):
        self._running = False
        for listener in (self._mouse, self._keyboard):
            if listener is not None:
                try:
                    listener.stop()
                except Exception as e:
                    log.warning("Error stopping listener: %s", e)

    def check(self):
        """Watchdog: restart listeners that died silently."""
        if not self._running:
            return
        if self._mouse is not None and not self._mouse.is_alive():
            log.warning("Mouse listener died — restarting")
            self._mouse = self._new_mouse()
            self._mouse.start()
        if self._keyboard is not None and not self._keyboard.is_alive():
            log.warning("Keyboard listener died — restarting")
            self._keyboard = self._new_keyboard()
            self._keyboard.start()

    # ── Event source ─────────────────────────────────────────

    def events(self):
        """Yield classified events until stop() is called."""
        while self._running:
            try:
                yield self._queue.get(timeout=QUEUE_POLL_SEC)
            except queue.Empty:
                continue
