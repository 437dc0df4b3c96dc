"""
Event classifier — shared by the agent and the server.

Maps raw device input to a stable identifier string (KEY_A, CLICK_LEFT,
WHEEL_VERTICAL, ...) and derives a category from the identifier prefix.
Pure functions only. Nothing in here raises on unknown input: unknown
buttons become CLICK_OTHER and unknown keys get an opaque UNKNOWN_* name.
"""

import math
from collections import namedtuple

# ─── Categories ──────────────────────────────────────────────────
KEY = "KEY"
CLICK = "CLICK"
WHEEL = "WHEEL"
OTHER = "OTHER"

WHEEL_VERTICAL = "WHEEL_VERTICAL"
WHEEL_HORIZONTAL = "WHEEL_HORIZONTAL"

# One notch of a degree-valued scroll axis (libinput reports 15° per detent)
WHEEL_NOTCH_SIZE = 15.0

ClassifiedEvent = namedtuple("ClassifiedEvent", ["identifier", "delta"])


def event_type(identifier):
    """Category of an identifier, by prefix."""
    if identifier.startswith("KEY_"):
        return KEY
    if identifier.startswith("CLICK_"):
        return CLICK
    if identifier.startswith("WHEEL_"):
        return WHEEL
    return OTHER


# ─── Mouse buttons ───────────────────────────────────────────────
# Linux input-event-codes: BTN_LEFT, BTN_RIGHT, BTN_MIDDLE
BUTTON_CODES = {
    0x110: "CLICK_LEFT",
    0x111: "CLICK_RIGHT",
    0x112: "CLICK_MIDDLE",
}

BUTTON_NAME_CODES = {
    "left": 0x110,
    "right": 0x111,
    "middle": 0x112,
}


def click_name(code):
    return BUTTON_CODES.get(code, "CLICK_OTHER")


def button_code(name):
    """Button code for a backend button name ('left', 'right', ...), or None."""
    return BUTTON_NAME_CODES.get(name)


# ─── Scroll ──────────────────────────────────────────────────────

def scroll_notches(value, notch_size=WHEEL_NOTCH_SIZE):
    """Whole notches in a continuous scroll delta (direction is dropped, halves round up)."""
    return int(math.floor(abs(value / notch_size) + 0.5))


def classify_scroll(dx, dy, notch_size=WHEEL_NOTCH_SIZE):
    """
    Split one scroll event into per-axis wheel events.
    Axes with no full notch are skipped.
    """
    events = []
    if dy:
        notches = scroll_notches(dy, notch_size)
        if notches:
            events.append(ClassifiedEvent(WHEEL_VERTICAL, notches))
    if dx:
        notches = scroll_notches(dx, notch_size)
        if notches:
            events.append(ClassifiedEvent(WHEEL_HORIZONTAL, notches))
    return events


# ─── Keys ────────────────────────────────────────────────────────
# Special keys by backend name → evdev-style canonical name.
SPECIAL_KEYS = {
    "alt": "KEY_LEFTALT",
    "alt_l": "KEY_LEFTALT",
    "alt_r": "KEY_RIGHTALT",
    "alt_gr": "KEY_RIGHTALT",
    "backspace": "KEY_BACKSPACE",
    "caps_lock": "KEY_CAPSLOCK",
    "cmd": "KEY_LEFTMETA",
    "cmd_l": "KEY_LEFTMETA",
    "cmd_r": "KEY_RIGHTMETA",
    "ctrl": "KEY_LEFTCTRL",
    "ctrl_l": "KEY_LEFTCTRL",
    "ctrl_r": "KEY_RIGHTCTRL",
    "delete": "KEY_DELETE",
    "down": "KEY_DOWN",
    "end": "KEY_END",
    "enter": "KEY_ENTER",
    "esc": "KEY_ESC",
    "home": "KEY_HOME",
    "insert": "KEY_INSERT",
    "left": "KEY_LEFT",
    "menu": "KEY_COMPOSE",
    "num_lock": "KEY_NUMLOCK",
    "page_down": "KEY_PAGEDOWN",
    "page_up": "KEY_PAGEUP",
    "pause": "KEY_PAUSE",
    "print_screen": "KEY_SYSRQ",
    "right": "KEY_RIGHT",
    "scroll_lock": "KEY_SCROLLLOCK",
    "shift": "KEY_LEFTSHIFT",
    "shift_l": "KEY_LEFTSHIFT",
    "shift_r": "KEY_RIGHTSHIFT",
    "space": "KEY_SPACE",
    "tab": "KEY_TAB",
    "up": "KEY_UP",
    "media_play_pause": "KEY_PLAYPAUSE",
    "media_volume_mute": "KEY_MUTE",
    "media_volume_down": "KEY_VOLUMEDOWN",
    "media_volume_up": "KEY_VOLUMEUP",
    "media_previous": "KEY_PREVIOUSSONG",
    "media_next": "KEY_NEXTSONG",
}
SPECIAL_KEYS.update({f"f{n}": f"KEY_F{n}" for n in range(1, 25)})

# Printable characters → the physical key that produces them (US layout).
CHAR_KEYS = {
    " ": "KEY_SPACE",
    "\t": "KEY_TAB",
    "\r": "KEY_ENTER",
    "\n": "KEY_ENTER",
    "-": "KEY_MINUS", "_": "KEY_MINUS",
    "=": "KEY_EQUAL", "+": "KEY_EQUAL",
    "[": "KEY_LEFTBRACE", "{": "KEY_LEFTBRACE",
    "]": "KEY_RIGHTBRACE", "}": "KEY_RIGHTBRACE",
    ";": "KEY_SEMICOLON", ":": "KEY_SEMICOLON",
    "'": "KEY_APOSTROPHE", '"': "KEY_APOSTROPHE",
    "`": "KEY_GRAVE", "~": "KEY_GRAVE",
    "\\": "KEY_BACKSLASH", "|": "KEY_BACKSLASH",
    ",": "KEY_COMMA", "<": "KEY_COMMA",
    ".": "KEY_DOT", ">": "KEY_DOT",
    "/": "KEY_SLASH", "?": "KEY_SLASH",
}
CHAR_KEYS.update({c: f"KEY_{c.upper()}" for c in "abcdefghijklmnopqrstuvwxyz"})
CHAR_KEYS.update({c: f"KEY_{c}" for c in "0123456789"})
CHAR_KEYS.update(dict(zip("!@#$%^&*()", (f"KEY_{c}" for c in "1234567890"))))


def _char_key(char):
    if len(char) != 1:
        return None
    code = ord(char)
    # Ctrl+letter arrives as a control character on some backends
    if 1 <= code <= 26 and char not in "\t\r\n":
        char = chr(code + 96)
    return CHAR_KEYS.get(char.lower())


def key_name(name=None, char=None, vk=None):
    """
    Canonical identifier for a key press.

    name: backend name of a special key ('enter', 'shift_l', ...)
    char: the character produced, for printable keys
    vk:   raw virtual key code, used only for the opaque fallback
    """
    if name:
        canonical = SPECIAL_KEYS.get(name)
        if canonical:
            return canonical
    if char:
        canonical = _char_key(char)
        if canonical:
            return canonical
    if vk is not None:
        return f"UNKNOWN_{vk}"
    if name:
        return f"UNKNOWN_{name.upper()}"
    return "UNKNOWN"
