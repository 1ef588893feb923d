"""
Output templates for debugger messages.

A template set maps a template key (``trace``, ``error``, ``context``, ``traceLine``, ...)
to a string with ``{:name}`` placeholders. There is one set per output format name,
plus the ``base`` set holding the fallbacks used when a format lacks its own entry.

New formats need no code changes: register them with ``Debugger.add_format()``
or load them from a TOML file with ``load_formats()``.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import copy
import logging
import re
from os import PathLike
from typing import Any, Mapping

# Third-party ----------------------------------------------------------------------------------------------------------
import toml

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import class_name

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

BASE_FORMAT = "base"

# Formats that trace() returns as lists instead of rendering through templates
STRUCTURED_FORMATS = ("array", "points")

DEFAULT_TEMPLATES: dict[str, dict[str, Any]] = {
    "log": {
        "trace": "{:reference} - {:path}, line {:line}",
        "error": "{:error} ({:code}): {:description} in [{:file}, line {:line}]",
    },
    "js": {
        "error": "",
        "info": "",
        "trace": '<pre class="stack-trace">{:trace}</pre>',
        "code": "",
        "context": "",
        "links": {},
        "escapeContext": True,
    },
    "html": {
        "trace": '<pre class="cake-error trace"><b>Trace</b> <p>{:trace}</p></pre>',
        "context": '<pre class="cake-error context"><b>Context</b> <p>{:context}</p></pre>',
        "escapeContext": True,
    },
    "txt": {
        "error": "{:error}: {:code} :: {:description} on line {:line} of {:path}\n{:info}",
        "code": "",
        "info": "",
    },
    BASE_FORMAT: {
        "traceLine": "{:reference} - {:path}, line {:line}",
        "trace": "Trace:\n{:trace}\n",
        "context": "Context:\n{:context}\n",
    },
}


# Methods --------------------------------------------------------------------------------------------------------------

def default_templates() -> dict[str, dict[str, Any]]:
    """Return a private deep copy of DEFAULT_TEMPLATES, safe to mutate."""
    return copy.deepcopy(DEFAULT_TEMPLATES)


def insert(template: str, values: Mapping[str, Any], before: str = "{:", after: str = "}") -> str:
    """
    Replace ``{:key}`` placeholders in a template with values.

    Placeholders whose key is missing from ``values`` are left untouched. Values
    are converted with ``str()``, so ``None`` renders as ``'None'``.

    Args:
        template: Template string.
        values: Mapping of placeholder names to values.
        before: Opening placeholder delimiter.
        after: Closing placeholder delimiter.

    Returns:
        The rendered string.

    Examples:
        >>> insert("{:reference} - {:path}, line {:line}", {"reference": "main", "path": "app.py", "line": 7})
        'main - app.py, line 7'
        >>> insert("{:a} {:b}", {"a": 1})
        '1 {:b}'
    """
    if not isinstance(template, str):
        raise TypeError(f"template must be a str, but got {class_name(template)}")
    if not values:
        return template

    pattern = re.compile(re.escape(before) + r"([A-Za-z0-9_.\-]+)" + re.escape(after))

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key in values:
            return str(values[key])
        return match.group(0)

    return pattern.sub(_replace, template)


def get_template(templates: Mapping[str, Mapping[str, Any]], format: str, key: str) -> str | None:
    """
    Look up a template of a format, falling back to the ``base`` set.

    Returns None when neither the format nor ``base`` defines a string template for ``key``.
    """
    for name in (format, BASE_FORMAT):
        template = templates.get(name, {}).get(key)
        if isinstance(template, str):
            return template
    return None


def load_formats(path: str | PathLike) -> dict[str, dict[str, str]]:
    """
    Load extra template sets from a TOML file.

    Every top-level table is one format, its string keys are template keys::

        [slack]
        traceLine = "`{:reference}` {:path}:{:line}"
        trace = "```{:trace}```"

    Args:
        path: Path to the TOML file.

    Returns:
        Mapping of format name to template set.

    Raises:
        ValueError: If a top-level entry is not a table or a template is not a string.
    """
    data = toml.load(path)
    formats = {}
    for name, templates in data.items():
        if not isinstance(templates, dict):
            raise ValueError(f"format '{name}' must be a table, but got {class_name(templates)}")
        for key, template in templates.items():
            if not isinstance(template, str):
                raise ValueError(
                    f"template '{name}.{key}' must be a string, but got {class_name(template)}"
                )
        formats[name] = dict(templates)
    logger.debug("Loaded %d output format(s) from %s", len(formats), path)
    return formats
