"""
vaultguard.generator
Password generator using Python's secrets module.

Every character is an independent draw from the combined alphabet of the
enabled classes. There is no per-class coverage guarantee: a password may
miss an enabled class entirely.
"""

import logging
from enum import Enum
from secrets import choice
from typing import Iterable, List

from .errors import InvalidPolicy

logger = logging.getLogger(__name__)


class CharClass(str, Enum):
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    NUMBERS = "numbers"
    SYMBOLS = "symbols"


SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# alphabet order follows this mapping's order
CHARSETS = {
    CharClass.LOWERCASE: "abcdefghijklmnopqrstuvwxyz",
    CharClass.UPPERCASE: "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    CharClass.NUMBERS: "0123456789",
    CharClass.SYMBOLS: SYMBOLS,
}

MIN_LENGTH = 8
MAX_LENGTH = 32
DEFAULT_LENGTH = 16
DEFAULT_CLASSES = frozenset(CharClass)


def clamp_length(length: int) -> int:
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidPolicy(f"length must be an integer, got {length!r}")
    clamped = max(MIN_LENGTH, min(MAX_LENGTH, length))
    if clamped != length:
        logger.debug("Clamped generator length %d to %d", length, clamped)
    return clamped


def _normalize_classes(classes: Iterable) -> frozenset:
    try:
        return frozenset(CharClass(c) for c in classes)
    except ValueError as e:
        raise InvalidPolicy(str(e)) from e


def build_alphabet(classes: Iterable) -> str:
    """
    Concatenate the enabled classes' character sets.
    Raises InvalidPolicy for an empty selection, or one with neither
    lowercase nor numbers.
    """
    enabled = _normalize_classes(classes)
    if not enabled:
        raise InvalidPolicy("Please select at least one character type")
    if CharClass.LOWERCASE not in enabled and CharClass.NUMBERS not in enabled:
        raise InvalidPolicy("Either lowercase letters or numbers must be selected")
    alphabet = "".join(chars for cls, chars in CHARSETS.items() if cls in enabled)
    if not alphabet:
        raise InvalidPolicy("Character alphabet is empty")
    return alphabet


def generate(length: int = DEFAULT_LENGTH, classes: Iterable = DEFAULT_CLASSES) -> str:
    """
    Generate a password of `length` characters (clamped to 8..32) drawn
    uniformly from the enabled classes.
    """
    length = clamp_length(length)
    alphabet = build_alphabet(classes)
    return "".join(choice(alphabet) for _ in range(length))


def length_hint(length: int) -> str:
    """Badge shown next to a freshly generated password."""
    if length >= 12:
        return "Strong"
    if length >= 8:
        return "Good"
    return "Weak"


class GeneratorOptions:
    """
    The generator panel's switches. Lowercase and numbers back each other up:
    turning one off while the other is already off switches the other on.
    """

    def __init__(self, length: int = DEFAULT_LENGTH, classes: Iterable = DEFAULT_CLASSES):
        self._length = clamp_length(length)
        self._enabled = set(_normalize_classes(classes))
        build_alphabet(self._enabled)

    @property
    def length(self) -> int:
        return self._length

    @length.setter
    def length(self, value: int) -> None:
        self._length = clamp_length(value)

    def is_enabled(self, cls) -> bool:
        return CharClass(cls) in self._enabled

    def set_class(self, cls, enabled: bool) -> None:
        cls = CharClass(cls)
        if enabled:
            self._enabled.add(cls)
            return
        self._enabled.discard(cls)
        backstop = {
            CharClass.LOWERCASE: CharClass.NUMBERS,
            CharClass.NUMBERS: CharClass.LOWERCASE,
        }.get(cls)
        if backstop is not None and backstop not in self._enabled:
            self._enabled.add(backstop)

    def classes(self) -> List[CharClass]:
        return [cls for cls in CHARSETS if cls in self._enabled]

    def generate(self) -> str:
        return generate(self._length, self._enabled)
