"""The ``UNDEFINED`` sentinel.

A value host keeps two kinds of "nothing" apart: ``None`` is a real absence
(the user cleared the field), while ``UNDEFINED`` means the value could not
be produced at all, e.g. the input text failed to convert. Conditions treat
``UNDEFINED`` as Undetermined and ``None`` according to their own rules.
"""

from typing import Any


class _Undefined:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED: Any = _Undefined()


def is_missing(value: Any) -> bool:
    """True for both ``UNDEFINED`` and ``None``."""
    return value is UNDEFINED or value is None


def values_equal(first: Any, second: Any) -> bool:
    """Deep equality that does not treat ``1``, ``1.0`` and ``True`` as the same value."""
    if first is second:
        return True
    if type(first) is not type(second):
        return False
    if isinstance(first, (list, tuple)):
        return len(first) == len(second) and all(
            values_equal(a, b) for a, b in zip(first, second)
        )
    if isinstance(first, dict):
        return first.keys() == second.keys() and all(
            values_equal(first[key], second[key]) for key in first
        )
    return bool(first == second)
