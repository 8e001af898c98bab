"""
Keypad for CHIP-8 Emulator
==========================

The CHIP-8 input device is a 16-key hexadecimal keypad:

    +---+---+---+---+
    | 1 | 2 | 3 | C |
    +---+---+---+---+
    | 4 | 5 | 6 | D |
    +---+---+---+---+
    | 7 | 8 | 9 | E |
    +---+---+---+---+
    | A | 0 | B | F |
    +---+---+---+---+

The keypad itself only stores 16 up/down states. Hosts map their own
keyboard onto it; QWERTY_KEYMAP is the conventional layout that places the
keypad on the left-hand block of a PC keyboard:

    1 2 3 4        1 2 3 C
    Q W E R   ->   4 5 6 D
    A S D F        7 8 9 E
    Z X C V        A 0 B F

Copyright (c) 2026 chip8-vm Contributors
"""

from typing import Dict, Optional, Tuple

from ..errors import KeyRangeError

# Number of keys on the keypad
NUM_KEYS = 16


# =============================================================================
# HOST KEYBOARD MAP
# =============================================================================
# Host key name (lower case) -> keypad key code.

QWERTY_KEYMAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def key_for_name(name: str) -> Optional[int]:
    """
    Translate a host key name to a keypad key code.

    Names are matched case-insensitively against QWERTY_KEYMAP.

    Returns:
        Key code 0x0-0xF, or None if the host key is not mapped
    """
    return QWERTY_KEYMAP.get(name.lower())


# =============================================================================
# KEYPAD
# =============================================================================

class Keypad:
    """
    Sixteen boolean key states.

    Every method taking a key checks it is in 0x0-0xF and raises
    KeyRangeError otherwise.

    Example:
        >>> keypad = Keypad()
        >>> keypad.press(0xA)
        >>> keypad.is_down(0xA)
        True
        >>> keypad.resolve_wait()
        10
    """

    def __init__(self):
        self._state = [False] * NUM_KEYS

    def press(self, key: int) -> None:
        """Mark `key` as held down."""
        self._check_key(key)
        self._state[key] = True

    def release(self, key: int) -> None:
        """Mark `key` as released."""
        self._check_key(key)
        self._state[key] = False

    def is_down(self, key: int) -> bool:
        """Return True if `key` is currently held down."""
        self._check_key(key)
        return self._state[key]

    def resolve_wait(self) -> Optional[int]:
        """
        Return the lowest key currently down, or None.

        Used by the wait-for-key instruction to resolve immediately when a
        key is already held. Does not change any key state.
        """
        for key, down in enumerate(self._state):
            if down:
                return key
        return None

    def pressed_keys(self) -> Tuple[int, ...]:
        """All keys currently down, in ascending order."""
        return tuple(key for key, down in enumerate(self._state) if down)

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key < NUM_KEYS:
            raise KeyRangeError(key)

    def __repr__(self) -> str:
        keys = ", ".join(f"{k:X}" for k in self.pressed_keys())
        return f"Keypad(pressed=[{keys}])"
