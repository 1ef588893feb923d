"""
Export arbitrary values to indented, depth-bounded text for debugging output.

Scalars render as literal tokens, containers as ``key => value`` lists and objects
as ``object(ClassName) { ... }`` blocks listing their public, protected and private
fields. Rendering never raises on odd input: depth exhaustion, self references and
failing debug views all degrade to marker strings.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import types
from enum import StrEnum, unique
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .fields import SupportsDebugInfo, Visibility, debug_fields, debug_view
from .options import ExportOptions
from .utils import class_name

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

MAX_DEPTH_MARKER = "[maximum depth reached]"
RECURSION_MARKER = "[recursion]"
UNEXPORTABLE_MARKER = "(unable to export object)"

ARRAY_TYPES = (list, tuple, dict, set, frozenset)

RESOURCE_TYPES = (
    type,
    types.FunctionType,
    types.LambdaType,
    types.MethodType,
    types.BuiltinFunctionType,
    types.BuiltinMethodType,
    types.WrapperDescriptorType,
    types.MethodWrapperType,
    types.MethodDescriptorType,
    types.ModuleType,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    types.CodeType,
    types.FrameType,
    types.TracebackType,
    memoryview,
)


# Enums ----------------------------------------------------------------------------------------------------------------

@unique
class TypeTag(StrEnum):
    """
    Type tags of non-object values.

    Object instances are not tagged, they are identified by their class name instead.
    """
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    RESOURCE = "resource"
    NULL = "null"
    UNKNOWN = "unknown"


# Methods --------------------------------------------------------------------------------------------------------------

def export_var(value: Any, depth: int | None = None, *, options: ExportOptions | None = None) -> str:
    """
    Convert a value to a string for debug output.

    Args:
        value: The value to export.
        depth: Number of container/object boundaries to descend into.
            Defaults to ``options.max_depth`` (3).
        options: Export options, ``ExportOptions()`` if None.

    Returns:
        The value as formatted, indented text.

    Raises:
        TypeError: If depth is not an int or options is not ExportOptions.

    Examples:
        >>> export_var(True)
        'true'
        >>> export_var(42)
        '(int) 42'
        >>> export_var("hi")
        "'hi'"
        >>> print(export_var({"a": [1]}))
        [
        	'a' => [
        		(int) 0 => (int) 1
        	]
        ]
        >>> export_var([[1]], 1)
        '[\\n\\t(int) 0 => [\\n\\t\\t[maximum depth reached]\\n\\t]\\n]'

    Notes:
        - Strings are quoted verbatim: embedded quotes are not escaped unless
          ``options.escape_strings`` is set.
        - Only direct self references are detected (a dict containing itself);
          longer cycles are cut by the depth limit.
    """
    if options is not None and not isinstance(options, ExportOptions):
        raise TypeError(f"options must be an ExportOptions instance, but got {class_name(options)}")
    opt = options or ExportOptions()

    if depth is None:
        depth = opt.max_depth
    if not isinstance(depth, int) or isinstance(depth, bool):
        raise TypeError(f"depth must be an int, but got {class_name(depth)}")

    return _export(value, depth, 0, opt)


def get_type(value: Any) -> str:
    """
    Get the type of a value, or its class name for objects.

    Objects win over every other check, so a ``str`` or ``dict`` subclass defined
    outside builtins reports its own class name.

    Examples:
        >>> get_type(None)
        'null'
        >>> get_type([1, 2])
        'array'
        >>> class Foo: ...
        >>> get_type(Foo())
        'Foo'
    """
    return str(_classify(value))


# Private Methods ------------------------------------------------------------------------------------------------------

def _classify(value: Any) -> TypeTag | str:
    """Return a TypeTag, or the class name (a plain str) for objects."""
    if _is_object(value):
        return class_name(value)
    if value is None:
        return TypeTag.NULL
    if isinstance(value, (str, bytes, bytearray)):
        return TypeTag.STRING
    if isinstance(value, ARRAY_TYPES):
        return TypeTag.ARRAY
    if isinstance(value, int) and not isinstance(value, bool):
        return TypeTag.INTEGER
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, float):
        return TypeTag.FLOAT
    if isinstance(value, RESOURCE_TYPES):
        return TypeTag.RESOURCE
    return TypeTag.UNKNOWN


def _is_object(value: Any) -> bool:
    if isinstance(value, type):
        return False
    return (type(value).__module__ != "builtins"
            or isinstance(value, BaseException)
            or isinstance(value, SupportsDebugInfo))


def _export(value: Any, depth: int, indent: int, opt: ExportOptions) -> str:
    tag = _classify(value)

    if not isinstance(tag, TypeTag):
        return _object(value, depth - 1, indent + 1, opt)
    if tag is TypeTag.BOOLEAN:
        return "true" if value else "false"
    if tag is TypeTag.INTEGER:
        return f"(int) {value}"
    if tag is TypeTag.FLOAT:
        return f"(float) {value!r}"
    if tag is TypeTag.STRING:
        return _string(value, opt)
    if tag is TypeTag.ARRAY:
        return _array(value, depth - 1, indent + 1, opt)
    if tag is TypeTag.RESOURCE:
        return f"resource({type(value).__name__})"
    if tag is TypeTag.NULL:
        return "null"
    return "unknown"


def _string(value: str | bytes | bytearray, opt: ExportOptions) -> str:
    if not isinstance(value, str):
        return repr(value)
    if value.strip() == "":
        return "''"
    if opt.escape_strings:
        value = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{value}'"


def _array(var: list | tuple | dict | set | frozenset, depth: int, indent: int, opt: ExportOptions) -> str:
    """Export a builtin container, dicts by key and everything else by position."""
    entries = list(var.items()) if isinstance(var, dict) else list(enumerate(var))

    if not entries:
        return "[" + MAX_DEPTH_MARKER + "]" if depth < 0 else "[]"
    if depth < 0:
        return "[" + _break(indent, opt) + MAX_DEPTH_MARKER + _break(indent - 1, opt) + "]"

    brk = _break(indent, opt)
    items = [brk + _entry(key, val, var, depth, indent, opt) for key, val in entries]
    return "[" + ",".join(items) + _break(indent - 1, opt) + "]"


def _object(obj: Any, depth: int, indent: int, opt: ExportOptions) -> str:
    """Export an object through its debug view, or field by field."""
    out = f"object({class_name(obj)}) {{"
    brk = _break(indent, opt)
    end = _break(indent - 1, opt)

    if depth < 0:
        return out + brk + MAX_DEPTH_MARKER + end + "}"

    try:
        view = debug_view(obj)
    except Exception:
        logger.debug("Debug view of %s failed", class_name(obj, fully_qualified=True), exc_info=True)
        return out + brk + UNEXPORTABLE_MARKER + end + "}"

    if view is not None:
        if not view:
            return out + "}"
        items = [brk + _entry(key, val, obj, depth, indent, opt) for key, val in view]
        return out + ",".join(items) + end + "}"

    fields = debug_fields(obj)
    if not fields:
        text = _own_repr(obj)
        return out + brk + text + end + "}" if text else out + "}"

    props = []
    for field in fields:
        value = _value(field.name, field.value, obj, depth, indent, opt)
        if field.visibility is Visibility.PUBLIC:
            props.append(f"{field.name} => {value}")
        else:
            props.append(f"[{field.visibility}] {field.name} => {value}")
    return out + brk + brk.join(props) + end + "}"


def _entry(key: Any, val: Any, parent: Any, depth: int, indent: int, opt: ExportOptions) -> str:
    return _export(key, depth, indent, opt) + " => " + _value(key, val, parent, depth, indent, opt)


def _value(key: Any, val: Any, parent: Any, depth: int, indent: int, opt: ExportOptions) -> str:
    if val is parent:
        return RECURSION_MARKER
    if opt.is_masked(key):
        return _string(opt.mask, opt)
    return _export(val, depth, indent, opt)


def _own_repr(obj: Any) -> str | None:
    """repr() of an object whose class defines one, None for the default ``<X object at ...>``."""
    if type(obj).__repr__ is object.__repr__:
        return None
    try:
        return repr(obj)
    except Exception:
        logger.debug("repr() of %s failed", class_name(obj, fully_qualified=True), exc_info=True)
        return UNEXPORTABLE_MARKER


def _break(indent: int, opt: ExportOptions) -> str:
    return "\n" + opt.indent * max(indent, 0)
