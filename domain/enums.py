from enum import Enum


class RecognitionPhase(str, Enum):
    """States of the letter stabilization machine."""
    IDLE   = "IDLE"
    LOCKED = "LOCKED"


class ShortcutLabel(str, Enum):
    """Whole-hand gestures mapped directly to a word."""
    HOLA    = "HOLA"
    OK      = "OK"
    GRACIAS = "GRACIAS"


class EventKind(str, Enum):
    """Events emitted by the recognition pipeline."""
    LETTER   = "LETTER"
    WORD     = "WORD"
    SHORTCUT = "SHORTCUT"
