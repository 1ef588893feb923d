"""
Tracedump utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import os
import sysconfig
from typing import Any, Mapping

# Constants ------------------------------------------------------------------------------------------------------------

INTERNAL_FILE = "[internal]"
UNKNOWN_LINE = "??"


# Methods --------------------------------------------------------------------------------------------------------------


def class_name(obj: Any, fully_qualified: bool = False) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, returns the fully qualified name for non-builtin classes.

    Returns:
        str: The class name.

    Examples:
        >>> class_name(10)
        'int'
        >>> class C: ...
        >>> class_name(C())
        'C'
    """
    cls = obj if isinstance(obj, type) else obj.__class__

    if fully_qualified and cls.__module__ != "builtins":
        return cls.__module__ + "." + cls.__qualname__
    return cls.__name__


def default_path_roots() -> dict[str, str]:
    """
    Return the display prefixes used by trim_path().

    Keys are short labels, values are absolute directories: the current working
    directory (ROOT), third-party packages (SITE) and the standard library (STDLIB).
    """
    paths = sysconfig.get_paths()
    roots = {"ROOT": os.getcwd()}
    if paths.get("purelib"):
        roots["SITE"] = paths["purelib"]
    if paths.get("stdlib"):
        roots["STDLIB"] = paths["stdlib"]
    return roots


def trim_path(path: str, roots: Mapping[str, str] | None = None) -> str:
    """
    Shorten an absolute file path for display.

    The longest matching root directory is replaced with its label, so
    `/home/me/project/app/main.py` becomes `ROOT/app/main.py` when the
    current directory is `/home/me/project`. Paths outside every root and
    pseudo-files such as `<string>` and the `[internal]` placeholder are
    returned unchanged.

    Parameters:
        path (str): File path to shorten.
        roots (Mapping[str, str] | None): Label to directory mapping, default_path_roots() if None.

    Returns:
        str: The display path, always with forward slashes after the label.
    """
    if not path or path == INTERNAL_FILE or path.startswith("<"):
        return path

    roots = default_path_roots() if roots is None else roots
    full = os.path.abspath(path)

    # Longest directory first, so site-packages wins over the stdlib dir that contains it
    for label, root in sorted(roots.items(), key=lambda item: len(item[1]), reverse=True):
        root = os.path.abspath(root)
        if full == root:
            return label
        if full.startswith(root.rstrip(os.sep) + os.sep):
            rel = os.path.relpath(full, root).replace(os.sep, "/")
            return f"{label}/{rel}"
    return path
