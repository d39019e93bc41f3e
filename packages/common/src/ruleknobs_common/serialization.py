"""Helpers for objects persisted through ``to_dict``/``from_dict``.

Value host states, issues, business logic errors and the manager state are
saved by the application between requests and handed back later. Each of
them has a ``to_dict()`` method returning JSON-friendly data and a
``from_dict()`` classmethod. These helpers call those methods and turn any
failure into a ``SerializationError`` naming the type involved.
"""

from typing import Any, Dict, Type, TypeVar

from ruleknobs_common.exceptions import SerializationError

T = TypeVar("T")


def serialize(obj: Any) -> Dict[str, Any]:
    """Return ``obj.to_dict()``.

    Raises:
        SerializationError: If the object has no ``to_dict``, it fails, or it
            returns something other than a dict
    """
    type_name = type(obj).__name__
    if not hasattr(obj, "to_dict"):
        raise SerializationError(f"{type_name} has no to_dict method", context={"type": type_name})
    try:
        result = obj.to_dict()
    except SerializationError:
        raise
    except Exception as e:
        raise SerializationError(
            f"Failed to serialize {type_name}: {e}",
            context={"type": type_name, "error": str(e)},
        ) from e
    if not isinstance(result, dict):
        raise SerializationError(
            f"{type_name}.to_dict() returned {type(result).__name__}, not a dict",
            context={"type": type_name, "result_type": type(result).__name__},
        )
    return result


def deserialize(cls: Type[T], data: Dict[str, Any]) -> T:
    """Return ``cls.from_dict(data)``.

    Raises:
        SerializationError: If ``cls`` has no ``from_dict``, ``data`` is not a
            dict, or restoring fails
    """
    if not hasattr(cls, "from_dict"):
        raise SerializationError(f"{cls.__name__} has no from_dict method", context={"class": cls.__name__})
    if not isinstance(data, dict):
        raise SerializationError(
            f"Cannot restore {cls.__name__} from {type(data).__name__}",
            context={"class": cls.__name__, "data_type": type(data).__name__},
        )
    try:
        return cls.from_dict(data)  # type: ignore[attr-defined]
    except SerializationError:
        raise
    except Exception as e:
        raise SerializationError(
            f"Failed to restore {cls.__name__}: {e}",
            context={"class": cls.__name__, "error": str(e), "data": data},
        ) from e


def serialize_list(items: list[Any]) -> list[Dict[str, Any]]:
    return [serialize(item) for item in items]


__all__ = ["serialize", "deserialize", "serialize_list"]
