"""
Safe Field Access

Venue payloads are loosely typed: the same field can arrive as a JSON number,
a numeric string, null, or not at all. These helpers read a field and coerce
it without raising, so normalizers can treat "missing" uniformly as None.

Numbers are coerced to *strings* first so that money values never pass through
a float before reaching Precise.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Union


def safe_value(container: Any, key: Union[str, int], default: Any = None) -> Any:
    """Read container[key] for dicts and lists, returning default when absent or None."""
    if isinstance(container, Mapping):
        value = container.get(key)
    elif isinstance(container, (list, tuple)) and isinstance(key, int):
        value = container[key] if -len(container) <= key < len(container) else None
    else:
        value = None
    return default if value is None else value


def safe_string(container: Any, key: Union[str, int], default: Optional[str] = None) -> Optional[str]:
    """
    Read a field as a string.

    Floats are rendered with their shortest repr ("0.1", not the binary
    expansion); booleans and nested structures are not considered strings.
    """
    value = safe_value(container, key)
    if value is None or isinstance(value, (bool, dict, list)):
        return default
    if isinstance(value, str):
        return value if value != "" else default
    return str(value)


def safe_string_2(container: Any, key1: str, key2: str, default: Optional[str] = None) -> Optional[str]:
    """Read key1, falling back to key2."""
    value = safe_string(container, key1)
    if value is None:
        value = safe_string(container, key2, default)
    return value


def safe_number_string(container: Any, key: Union[str, int]) -> Optional[str]:
    """Read a field as a decimal string, None when it is not numeric."""
    value = safe_string(container, key)
    if value is None:
        return None
    try:
        if not Decimal(value).is_finite():
            return None
    except InvalidOperation:
        return None
    return value


def safe_number(container: Any, key: Union[str, int]) -> Optional[float]:
    value = safe_number_string(container, key)
    return None if value is None else float(value)


def safe_integer(container: Any, key: Union[str, int]) -> Optional[int]:
    value = safe_number_string(container, key)
    return None if value is None else int(Decimal(value))
