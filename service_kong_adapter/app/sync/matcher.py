"""
Subset matching between desired and observed gateway objects.
"""

from numbers import Number
from typing import Any, Iterable, Tuple

from shared.logging import get_logger

logger = get_logger("sync.matcher")

_MISSING = object()


def matches(desired: Any, observed: Any) -> bool:
    """Check that ``desired`` is contained in ``observed``, NOT vice versa.

    Every property of ``desired`` must exist in ``observed`` with the same
    kind of value. Mappings and lists recurse; scalars compare with ``==``.
    Properties only present in ``observed`` are ignored. An object holding
    ``nan`` does not match itself, since ``nan != nan``.
    """
    result = _matches(desired, observed)
    if not result:
        logger.debug("Objects do not match", desired=desired, observed=observed)
    return result


def _matches(desired: Any, observed: Any) -> bool:
    for key, value in _members(desired):
        other = _lookup(observed, key)
        if other is _MISSING:
            return False
        if _kind(value) != _kind(other):
            return False
        if _kind(value) == "object":
            if not _matches(value, other):
                return False
        elif value != other:
            return False
    return True


def _kind(value: Any) -> str:
    """Run-time type category, as JSON sees it."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, Number):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def _members(value: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(value, dict):
        return value.items()
    if isinstance(value, (list, tuple)):
        return enumerate(value)
    return ()


def _lookup(container: Any, key: Any) -> Any:
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    if isinstance(container, (list, tuple)) and isinstance(key, int):
        return container[key] if 0 <= key < len(container) else _MISSING
    return _MISSING
