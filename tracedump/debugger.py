"""
Debugger: value export and stack traces behind one configurable object.

A ``Debugger`` owns the output templates, the current output format and the export
options. Create one explicitly and pass it around, or use the process-wide instance
from ``get_instance()`` and the module-level shortcuts ``export_var()``, ``trace()``
and ``get_type()``.

Examples:
    >>> from tracedump.debugger import Debugger, export_var
    >>> export_var([1])
    '[\\n\\t(int) 0 => (int) 1\\n]'
    >>> debugger = Debugger(output_format="log")
    >>> print(debugger.trace(depth=1))  # doctest: +SKIP
    test_trace - ROOT/tests/test_debugger.py, line 42
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import logging
import threading
from os import PathLike
from typing import Any, Mapping

# Local ----------------------------------------------------------------------------------------------------------------
from .export import export_var as _export_var, get_type as _get_type
from .options import ExportOptions, TraceOptions, merge_options
from .templates import STRUCTURED_FORMATS, default_templates, get_template, insert, load_formats
from .trace import Frame, TracePoint, capture_frames, format_trace
from .utils import class_name, trim_path

logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------

class Debugger:
    """
    Formatter context for debug output.

    Attributes:
        export_options: Options used by export_var() and by argument rendering in traces.
        path_roots: Display roots for trim_path(); None uses the current directory,
            site-packages and the standard library.

    Args:
        output_format: Initial output format, ``js`` by default.
        templates: Extra template sets merged over the default registry.
        export_options: ExportOptions, ``ExportOptions()`` if None.
        path_roots: Mapping of display label to directory for trim_path().

    Raises:
        ValueError: If output_format is not a registered format.
    """

    default_format = "js"

    def __init__(self,
                 *,
                 output_format: str | None = None,
                 templates: Mapping[str, Mapping[str, Any]] | None = None,
                 export_options: ExportOptions | None = None,
                 path_roots: Mapping[str, str] | None = None,
                 ):
        if export_options is not None and not isinstance(export_options, ExportOptions):
            raise TypeError(f"export_options must be an ExportOptions instance, but got {class_name(export_options)}")

        self._templates = default_templates()
        for name, template_set in (templates or {}).items():
            self.add_format(name, template_set)

        self._output_format = self.default_format
        if output_format is not None:
            self.output_as(output_format)

        self.export_options = export_options or ExportOptions()
        self.path_roots = path_roots

    def __repr__(self) -> str:
        return f"{class_name(self)}(output_format={self._output_format!r})"

    @property
    def templates(self) -> dict[str, dict[str, Any]]:
        """The template registry of this debugger, format name to template set."""
        return self._templates

    def output_as(self, format: str | None = None) -> str:
        """
        Get or set the output format.

        Args:
            format: Format name to switch to, or None to only read the current one.

        Returns:
            The current output format.

        Raises:
            TypeError: If format is not a str.
            ValueError: If format is not registered.
        """
        if format is None:
            return self._output_format
        if not isinstance(format, str):
            raise TypeError(f"format must be a str, but got {class_name(format)}")
        if format not in self._templates:
            raise ValueError(f"invalid output format '{format}', expected one of: {', '.join(self._templates)}")
        self._output_format = format
        return format

    def add_format(self, format: str, templates: Mapping[str, Any]) -> "Debugger":
        """
        Register a new output format, or add templates to an existing one.

        Args:
            format: Format name.
            templates: Template key to template string mapping.

        Returns:
            Self, to allow chaining.

        Raises:
            TypeError: If format is not a str or templates is not a mapping.
            ValueError: If format names a structured trace format (array, points).
        """
        if not isinstance(format, str):
            raise TypeError(f"format must be a str, but got {class_name(format)}")
        if format in STRUCTURED_FORMATS:
            raise ValueError(f"'{format}' is reserved for structured traces")
        if not isinstance(templates, abc.Mapping):
            raise TypeError(f"templates must be a mapping, but got {class_name(templates)}")

        self._templates.setdefault(format, {}).update(templates)
        logger.debug("Registered output format '%s' with keys %s", format, sorted(templates))
        return self

    def load_formats(self, path: str | PathLike) -> "Debugger":
        """Register every template set found in a TOML file, see templates.load_formats()."""
        for name, template_set in load_formats(path).items():
            self.add_format(name, template_set)
        return self

    def render(self, key: str, values: Mapping[str, Any], format: str | None = None) -> str:
        """
        Render a named template of a format, falling back to the ``base`` set.

        Args:
            key: Template key, like ``trace`` or ``context``.
            values: Placeholder values.
            format: Format name, the current output format if None.

        Returns:
            The rendered template, or an empty string if no template exists.
        """
        template = get_template(self._templates, format or self._output_format, key)
        return insert(template, values) if template else ""

    def export_var(self, value: Any, depth: int | None = None) -> str:
        """Convert a value to a string for debug output, see export.export_var()."""
        return _export_var(value, depth, options=self.export_options)

    def get_type(self, value: Any) -> str:
        """Return the type tag of a value, or its class name for objects."""
        return _get_type(value)

    def trim_path(self, path: str) -> str:
        """Shorten a file path for display using path_roots."""
        return trim_path(path, self.path_roots)

    def trace(self, options: TraceOptions | None = None, **kwargs) -> str | list[Frame] | list[TracePoint]:
        """
        Return a stack trace of the current call stack.

        Options may be given as a TraceOptions instance, as keyword arguments, or both
        (keywords override):

        - ``depth`` - The number of stack frames to return. Defaults to 999
        - ``format`` - The output format. Defaults to the current output format. If
          format is ``array`` or ``points`` the return value is a list.
        - ``args`` - Render arguments of method calls.
        - ``start`` - The stack frame to start generating a trace from. Defaults to 0
        - ``exclude`` - Function signatures to skip.

        The trace starts at the function that called trace(), frames of the tracing
        machinery itself are never part of it.

        Returns:
            The formatted trace, most recent call first.

        Raises:
            TypeError, ValueError: On invalid option values.
        """
        return self._trace(merge_options(options, **kwargs), skip=1)

    def _trace(self, opt: TraceOptions, skip: int) -> str | list[Frame] | list[TracePoint]:
        """Format the stack above the given number of entry point frames."""
        return format_trace(
            # One more frame for _trace() itself
            capture_frames(skip=skip + 1),
            depth=opt.depth,
            format=opt.format or self._output_format,
            args=opt.args,
            start=opt.start,
            exclude=opt.exclude,
            templates=self._templates,
            export=self.export_var,
            trim=self.trim_path,
        )


# Singleton ------------------------------------------------------------------------------------------------------------

_instance: Debugger | None = None
_instance_lock = threading.Lock()


def get_instance(cls: type[Debugger] | str | None = None) -> Debugger:
    """
    Return the process-wide Debugger, creating it on first use.

    Args:
        cls: Debugger subclass, or its name (case-insensitive), to use instead of
            the current instance's class. The held instance is replaced only when
            its class differs.

    Returns:
        The shared Debugger instance.

    Raises:
        TypeError: If cls is not a Debugger subclass, a str or None.
        ValueError: If no Debugger subclass has the given name.
    """
    global _instance

    target = None if cls is None else _resolve_class(cls)
    with _instance_lock:
        if target is not None and type(_instance) is not target:
            if _instance is not None:
                logger.debug("Replacing %r with a new %s", _instance, target.__name__)
            _instance = target()
        if _instance is None:
            _instance = Debugger()
        return _instance


def reset_instance() -> None:
    """Drop the process-wide Debugger, the next get_instance() creates a fresh one."""
    global _instance
    with _instance_lock:
        _instance = None


def export_var(value: Any, depth: int | None = None) -> str:
    """Export a value with the shared Debugger, see Debugger.export_var()."""
    return get_instance().export_var(value, depth)


def get_type(value: Any) -> str:
    """Return the type of a value, see export.get_type()."""
    return get_instance().get_type(value)


def trace(options: TraceOptions | None = None, **kwargs) -> str | list[Frame] | list[TracePoint]:
    """Return a stack trace from the shared Debugger, see Debugger.trace()."""
    return get_instance()._trace(merge_options(options, **kwargs), skip=1)


# Private Methods ------------------------------------------------------------------------------------------------------

def _resolve_class(cls: type[Debugger] | str) -> type[Debugger]:
    if isinstance(cls, type):
        if not issubclass(cls, Debugger):
            raise TypeError(f"cls must be a Debugger subclass, but got {cls.__name__}")
        return cls
    if not isinstance(cls, str):
        raise TypeError(f"cls must be a Debugger subclass or a class name, but got {class_name(cls)}")

    wanted = cls.lower()
    for candidate in _subclasses(Debugger):
        if wanted in (candidate.__name__.lower(), class_name(candidate, fully_qualified=True).lower()):
            return candidate
    raise ValueError(f"no Debugger subclass named '{cls}'")


def _subclasses(cls: type) -> list[type]:
    """The class itself followed by all its subclasses, depth first."""
    found = [cls]
    for sub in cls.__subclasses__():
        found.extend(_subclasses(sub))
    return found
