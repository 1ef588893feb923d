"""
Configuration options for value export and stack traces.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, field, replace as dataclasses_replace
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import class_name

# Constants ------------------------------------------------------------------------------------------------------------

# Keys holding datasource credentials
SENSITIVE_KEYS = frozenset({"password", "login", "host", "database", "port", "prefix", "schema"})


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass
class ExportOptions:
    """
    Options controlling how values are exported to text.

    Attributes:
        max_depth: Number of container/object boundaries to descend into (default: 3).
        indent: Indent unit, repeated once per nesting level (default: tab).
        mask_keys: Keys whose values are replaced by ``mask``. Matched case-insensitively
            against string container keys and object field names. Empty by default,
            so nothing is masked unless asked for.
        mask: Replacement shown for masked values.
        escape_strings: Backslash-escape quotes and backslashes in exported strings.
            Off by default: the output is meant for reading, not for parsing back.

    Examples:
        >>> ExportOptions.redacted().mask_keys == SENSITIVE_KEYS
        True
        >>> ExportOptions(max_depth=1).merge(indent="  ").indent
        '  '
    """
    max_depth: int = 3
    indent: str = "\t"
    mask_keys: frozenset[str] = field(default_factory=frozenset)
    mask: str = "*****"
    escape_strings: bool = False

    def __post_init__(self):
        if not isinstance(self.max_depth, int) or isinstance(self.max_depth, bool):
            raise TypeError(f"max_depth must be an int, but got {class_name(self.max_depth)}")
        if not isinstance(self.indent, str):
            raise TypeError(f"indent must be a str, but got {class_name(self.indent)}")
        self.mask_keys = frozenset(str(k).lower() for k in self.mask_keys)

    @classmethod
    def redacted(cls, **kwargs) -> "ExportOptions":
        """
        Create options masking the usual datasource credential keys.

        Returns:
            ExportOptions: Options with mask_keys set to SENSITIVE_KEYS.
        """
        return cls(mask_keys=SENSITIVE_KEYS, **kwargs)

    def is_masked(self, key: Any) -> bool:
        """Return True if values under this key must be masked."""
        return bool(self.mask_keys) and isinstance(key, str) and key.lower() in self.mask_keys

    def merge(self, **kwargs) -> "ExportOptions":
        """Return a copy with the given fields replaced."""
        return dataclasses_replace(self, **kwargs)


@dataclass
class TraceOptions:
    """
    Options for Debugger.trace().

    Attributes:
        depth: Maximum number of frames to emit (default: 999).
        format: Output format name; None uses the debugger's current output format.
            ``array`` and ``points`` return lists instead of text.
        args: Render call arguments of methods in the trace.
        start: Index of the first stack frame to consider.
        exclude: Function signatures to leave out, e.g. ``trace`` or ``Debugger::trace``.
    """
    depth: int = 999
    format: str | None = None
    args: bool = False
    start: int = 0
    exclude: tuple[str, ...] = ("trace", "Debugger::trace")

    def __post_init__(self):
        for name in ("depth", "start"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int, but got {class_name(value)}")
            if value < 0:
                raise ValueError(f"{name} must be 0 or greater, but got {value}")
        if self.format is not None and not isinstance(self.format, str):
            raise TypeError(f"format must be a str or None, but got {class_name(self.format)}")
        if isinstance(self.exclude, str):
            self.exclude = (self.exclude,)
        self.exclude = tuple(self.exclude)


# Methods --------------------------------------------------------------------------------------------------------------

def merge_options(options: TraceOptions | None, **kwargs) -> TraceOptions:
    """Return TraceOptions built from kwargs, or a copy of options with kwargs replaced."""
    if options is not None and not isinstance(options, TraceOptions):
        raise TypeError(f"options must be a TraceOptions instance, but got {class_name(options)}")
    return TraceOptions(**kwargs) if options is None else dataclasses_replace(options, **kwargs)
