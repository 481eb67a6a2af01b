from enum import Enum


class Signal(Enum):
    """Completion status returned by every statement handler."""
    NORMAL = "normal"
    BREAK = "break"
    CONTINUE = "continue"
