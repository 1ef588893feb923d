"""
Field enumeration for exporting composite objects.

Python has no declared visibility, so the usual naming conventions stand in for it:

- ``name`` is public,
- ``_name`` is protected,
- ``__name`` (stored name-mangled as ``_Owner__name``) is private.

Dunder names are never treated as fields. Objects may replace field enumeration
altogether by implementing ``__debug_info__()``, see ``SupportsDebugInfo``.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
from dataclasses import dataclass
from enum import StrEnum, unique
from typing import Any, Protocol, runtime_checkable

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import class_name


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class Visibility(StrEnum):
    """Field visibility tiers, in export order."""
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


@dataclass(frozen=True)
class DebugField:
    """One field of an object as shown by the exporter."""
    name: str
    visibility: Visibility
    value: Any


@runtime_checkable
class SupportsDebugInfo(Protocol):
    """
    Protocol for objects that summarize their own state for debugging.

    ``__debug_info__()`` returns a mapping (or a sequence, keyed by position)
    which the exporter renders instead of the object's raw fields.

    Examples:
        >>> class Connection:
        ...     def __init__(self, host, password):
        ...         self.host, self._password = host, password
        ...     def __debug_info__(self):
        ...         return {"host": self.host}
    """

    def __debug_info__(self) -> abc.Mapping | abc.Sequence: ...


# Methods --------------------------------------------------------------------------------------------------------------

def debug_fields(obj: Any) -> list[DebugField]:
    """
    Enumerate the fields of an object across the three visibility tiers.

    Instance ``__dict__`` entries come first in insertion order, then ``__slots__``
    values along the MRO; unset slots are skipped. Exceptions also report ``args``.
    The result is ordered public, then protected, then private. Private names are
    reported unmangled (``__secret``).

    Args:
        obj: Any object instance.

    Returns:
        List of DebugField records.

    Examples:
        >>> class Point:
        ...     def __init__(self):
        ...         self.x, self._y, self.__z = 1, 2, 3
        >>> [(f.name, f.visibility.value) for f in debug_fields(Point())]
        [('x', 'public'), ('_y', 'protected'), ('__z', 'private')]
    """
    owners = _mangle_prefixes(type(obj))
    tiers: dict[Visibility, list[DebugField]] = {v: [] for v in Visibility}

    for name, value in _raw_fields(obj):
        if _is_dunder(name):
            continue
        field = _classify(name, value, owners)
        tiers[field.visibility].append(field)

    return [field for visibility in Visibility for field in tiers[visibility]]


def debug_view(obj: Any) -> list[tuple[Any, Any]] | None:
    """
    Return the key/value pairs an object should be exported as, or None.

    ``__debug_info__()`` takes precedence. Without it, mappings, named tuples and
    non-text sequences or sets use their entries. None means the object should be
    exported field by field with ``debug_fields()``.

    Raises:
        TypeError: If ``__debug_info__()`` returns neither a mapping nor a sequence.
        Exception: Anything raised by ``__debug_info__()`` itself is propagated.
    """
    if isinstance(obj, SupportsDebugInfo) and not isinstance(obj, type):
        info = obj.__debug_info__()
        if isinstance(info, abc.Mapping):
            return list(info.items())
        if isinstance(info, abc.Sequence) and not isinstance(info, (str, bytes, bytearray)):
            return list(enumerate(info))
        raise TypeError(f"__debug_info__() must return a mapping or a sequence, but got {class_name(info)}")

    if isinstance(obj, abc.Mapping):
        return list(obj.items())
    if isinstance(obj, tuple) and hasattr(obj, "_asdict"):
        return list(obj._asdict().items())
    if isinstance(obj, (abc.Sequence, abc.Set)) and not isinstance(obj, (str, bytes, bytearray)):
        return list(enumerate(obj))
    return None


# Private Methods ------------------------------------------------------------------------------------------------------

def _raw_fields(obj: Any) -> list[tuple[str, Any]]:
    fields = []
    if isinstance(obj, BaseException):
        fields.append(("args", obj.args))
    try:
        fields.extend(vars(obj).items())
    except TypeError:
        # No __dict__
        pass

    seen = {name for name, _ in fields}
    for cls in type(obj).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            name = _mangle(cls, slot)
            if name in seen:
                continue
            try:
                value = getattr(obj, name)
            except AttributeError:
                continue
            seen.add(name)
            fields.append((name, value))
    return fields


def _classify(name: str, value: Any, owners: tuple[str, ...]) -> DebugField:
    for prefix in owners:
        if name.startswith(prefix) and len(name) > len(prefix):
            return DebugField(name[len(prefix) - 2:], Visibility.PRIVATE, value)
    if name.startswith("__"):
        return DebugField(name, Visibility.PRIVATE, value)
    if name.startswith("_"):
        return DebugField(name, Visibility.PROTECTED, value)
    return DebugField(name, Visibility.PUBLIC, value)


def _mangle_prefixes(cls: type) -> tuple[str, ...]:
    """Name-mangling prefixes of a class and its bases, like ``_Owner__``."""
    prefixes = []
    for base in cls.__mro__:
        stripped = base.__name__.lstrip("_")
        if stripped:
            prefixes.append(f"_{stripped}__")
    return tuple(prefixes)


def _mangle(cls: type, name: str) -> str:
    if not name.startswith("__") or name.endswith("__"):
        return name
    stripped = cls.__name__.lstrip("_")
    return f"_{stripped}{name}" if stripped else name


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")
