from __future__ import annotations


class UndefinedType:
    """Sentinel for an unresolved name or a missing member.

    Falsy, renders as empty text and iterates as an empty sequence.
    """
    _instance: UndefinedType | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self): return "Undefined"
    def __str__(self): return ""
    def __bool__(self): return False

    def __iter__(self):
        return iter(())

    def __reduce__(self):
        return (UndefinedType, ())


Undefined = UndefinedType()
