"""
Key-case conversion between the camelCase documents/API and snake_case columns.
"""
import re
from typing import Any

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def snake_key(key: str) -> str:
    """
    >>> snake_key("householdId")
    'household_id'
    >>> snake_key("receiptURL")
    'receipt_url'
    """
    s = _FIRST_CAP.sub(r"\1_\2", key)
    return _ALL_CAP.sub(r"\1_\2", s).lower()


def to_snake_case(obj: Any) -> Any:
    """Recursively rename every dict key to snake_case, descending into lists."""
    if isinstance(obj, dict):
        return {
            (snake_key(k) if isinstance(k, str) else k): to_snake_case(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [to_snake_case(v) for v in obj]
    return obj
