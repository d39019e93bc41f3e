"""Conversion, comparison and message services consumed by conditions.

Conditions never compare values directly. They route both operands through
the comparer service together with an optional *lookup key* per operand (a
data type name such as ``"Integer"`` or ``"CaseInsensitive"``). The comparer
first converts each operand with the converter registered for its lookup
key, then compares the resulting primitives.

Both services are registry based, so applications add their own data types:

    ```python
    services.converter_service.register("Cents", lambda v: round(v * 100))
    services.comparer_service.register("Version", compare_versions)
    ```
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable

from ruleknobs_common import Registry

from .enums import ComparersResult
from .types import TokenLabelAndValue
from .undefined import UNDEFINED, is_missing

logger = logging.getLogger(__name__)

Converter = Callable[[Any], Any]
Comparer = Callable[[Any, Any], ComparersResult]


class LookupKey:
    """Well known data type lookup keys."""

    STRING = "String"
    INTEGER = "Integer"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    DATETIME = "DateTime"
    CASE_INSENSITIVE = "CaseInsensitive"


# -- converters --------------------------------------------------------------

def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if value != int(value):
            raise ValueError(f"{value} has a fractional part")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty string cannot be converted to int")
        try:
            return int(text)
        except ValueError:
            return _to_integer(float(text))
    raise TypeError(f"Cannot convert {type(value).__name__} to int")


def _to_number(value: Any) -> int | float | Decimal:
    if isinstance(value, bool):
        raise TypeError("Booleans are not numbers")
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty string cannot be converted to a number")
        try:
            return int(text)
        except ValueError:
            return float(text)
    raise TypeError(f"Cannot convert {type(value).__name__} to a number")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "on", "1"):
            return True
        if text in ("false", "no", "off", "0"):
            return False
        raise ValueError(f"Cannot convert {value!r} to bool")
    raise TypeError(f"Cannot convert {type(value).__name__} to bool")


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to date")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to datetime")


def _to_case_insensitive(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Cannot fold case of {type(value).__name__}")
    return value.casefold()


class ConverterService:
    """Converts values toward a primitive type identified by a lookup key."""

    def __init__(self, register_defaults: bool = True):
        self._converters: Registry[Converter] = Registry("converters", case_sensitive=False)
        if register_defaults:
            self.register(LookupKey.STRING, _to_string)
            self.register(LookupKey.INTEGER, _to_integer)
            self.register(LookupKey.NUMBER, _to_number)
            self.register("Float", _to_number)
            self.register(LookupKey.BOOLEAN, _to_boolean)
            self.register(LookupKey.DATE, _to_date)
            self.register(LookupKey.DATETIME, _to_datetime)
            self.register(LookupKey.CASE_INSENSITIVE, _to_case_insensitive)

    def register(self, lookup_key: str, converter: Converter) -> None:
        self._converters.register(lookup_key, converter, allow_overwrite=True)

    def supports(self, lookup_key: str) -> bool:
        return self._converters.has(lookup_key)

    def convert_to_primitive(self, value: Any, lookup_key: str | None) -> Any:
        """Convert ``value`` using the converter for ``lookup_key``.

        Args:
            value: Value to convert
            lookup_key: Data type lookup key; None leaves the value unchanged

        Returns:
            The converted value, the unchanged value when no converter is
            registered, or ``UNDEFINED`` when the conversion failed
        """
        if is_missing(value) or not lookup_key:
            return value
        converter = self._converters.get_optional(lookup_key)
        if converter is None:
            logger.debug(f"No converter for lookup key {lookup_key}; value used as is")
            return value
        try:
            return converter(value)
        except (ValueError, TypeError, ArithmeticError) as e:
            logger.debug(f"Conversion of {value!r} with {lookup_key} failed: {e}")
            return UNDEFINED


# -- comparison --------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _comparable_types(first: Any, second: Any) -> bool:
    if _is_number(first) and _is_number(second):
        return True
    if isinstance(first, datetime) or isinstance(second, datetime):
        return isinstance(first, datetime) and isinstance(second, datetime)
    if isinstance(first, date) and isinstance(second, date):
        return True
    return isinstance(first, str) and isinstance(second, str)


def default_compare(first: Any, second: Any) -> ComparersResult:
    """Compare two primitives.

    Numbers, strings and dates are ordered. Other values of the same type
    are only tested for equality. Values of unrelated types, or a missing
    value on either side, give ``UNDETERMINED``.
    """
    if is_missing(first) or is_missing(second):
        return ComparersResult.UNDETERMINED
    if _comparable_types(first, second):
        if first == second:
            return ComparersResult.EQUALS
        if first < second:
            return ComparersResult.LESS_THAN
        if first > second:
            return ComparersResult.GREATER_THAN
        return ComparersResult.UNDETERMINED  # NaN
    if type(first) is not type(second):
        return ComparersResult.UNDETERMINED
    return ComparersResult.EQUALS if first == second else ComparersResult.NOT_EQUALS


class ComparerService:
    """Compares two values, each with its own optional lookup key.

    A comparer registered for a lookup key receives the raw values when both
    operands share that key (or only one operand names a key). Otherwise
    each operand is converted independently and compared with
    ``default_compare``.
    """

    def __init__(self, converter_service: ConverterService):
        self._converter_service = converter_service
        self._comparers: Registry[Comparer] = Registry("comparers", case_sensitive=False)

    def register(self, lookup_key: str, comparer: Comparer) -> None:
        self._comparers.register(lookup_key, comparer, allow_overwrite=True)

    def compare(
        self,
        first: Any,
        second: Any,
        lookup_key_first: str | None = None,
        lookup_key_second: str | None = None,
    ) -> ComparersResult:
        shared_key = _shared_key(lookup_key_first, lookup_key_second)
        if shared_key:
            comparer = self._comparers.get_optional(shared_key)
            if comparer is not None:
                return comparer(first, second)
        converted_first = self._converter_service.convert_to_primitive(first, lookup_key_first)
        converted_second = self._converter_service.convert_to_primitive(second, lookup_key_second)
        return default_compare(converted_first, converted_second)


def _shared_key(first: str | None, second: str | None) -> str | None:
    if first and second:
        return first if first.lower() == second.lower() else None
    return first or second


# -- messages ----------------------------------------------------------------

@dataclass(frozen=True)
class LocalizationContext:
    """Culture and lookup function used to localize labels and messages.

    It is passed explicitly to whatever resolves text. Nothing reads a
    global culture.

    Attributes:
        culture_id: Culture such as ``"en"`` or ``"fr-CA"``
        localizer: ``(culture_id, l10n_key, fallback) -> text or None``
    """

    culture_id: str = "en"
    localizer: Callable[[str, str, str | None], str | None] | None = None

    def localize(self, l10n_key: str | None, fallback: str | None) -> str | None:
        if not l10n_key or self.localizer is None:
            return fallback
        text = self.localizer(self.culture_id, l10n_key, fallback)
        return fallback if text is None else text


_TOKEN_PATTERN = re.compile(r"\{(\w+)\}")


class MessageTokenResolver:
    """Replaces ``{Token}`` placeholders with values supplied by the rule.

    Unknown tokens are left untouched so a template problem stays visible.
    """

    def resolve_tokens(self, template: str, tokens: list[TokenLabelAndValue]) -> str:
        values = {token.token_label: token.associated_value for token in tokens}

        def replace(match: re.Match[str]) -> str:
            label = match.group(1)
            if label not in values:
                return match.group(0)
            return self.format_value(values[label])

        return _TOKEN_PATTERN.sub(replace, template)

    def format_value(self, value: Any) -> str:
        if is_missing(value):
            return ""
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return str(value)
