"""
Call stack capture and stack trace formatting.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import inspect
from dataclasses import dataclass
from types import FrameType
from typing import Any, Callable, Iterable, Mapping, Sequence

# Local ----------------------------------------------------------------------------------------------------------------
from .export import export_var
from .templates import BASE_FORMAT, DEFAULT_TEMPLATES, STRUCTURED_FORMATS, get_template, insert
from .utils import INTERNAL_FILE, UNKNOWN_LINE, trim_path

# Constants ------------------------------------------------------------------------------------------------------------

MAIN_FUNCTION = "[main]"


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Frame:
    """
    Snapshot of one call stack entry.

    ``function``, ``class_name`` and ``args`` describe the function that was called;
    ``file`` and ``line`` locate the call site inside its caller. The outermost
    frame has no caller, its location is ``[internal]``, line ``??``.
    """
    function: str
    class_name: str | None = None
    file: str = INTERNAL_FILE
    line: int | str = UNKNOWN_LINE
    args: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the frame as a plain dict."""
        return {
            "file": self.file,
            "line": self.line,
            "class": self.class_name,
            "function": self.function,
            "args": list(self.args),
        }


@dataclass(frozen=True)
class TracePoint:
    """File and line of a stack frame, as returned by the ``points`` trace format."""
    file: str
    line: int | str


# Methods --------------------------------------------------------------------------------------------------------------

def capture_frames(skip: int = 0) -> list[Frame]:
    """
    Capture the current call stack, most recent call first.

    The frame of capture_frames() itself is never included.

    Args:
        skip: Number of additional most recent frames to drop.

    Returns:
        List of Frame snapshots.

    Warning:
        Depends on `inspect.stack()`, which is slow; avoid calling it in tight loops.
    """
    stack = inspect.stack(context=0)[1 + skip:]
    try:
        frames = []
        for i, info in enumerate(stack):
            caller = stack[i + 1] if i + 1 < len(stack) else None
            owner = _owner_class(info.frame)
            frames.append(Frame(
                function=info.function,
                class_name=owner,
                file=_frame_file(caller.filename) if caller else INTERNAL_FILE,
                line=caller.lineno if caller and caller.lineno is not None else UNKNOWN_LINE,
                args=_frame_args(info.frame, bound=owner is not None),
            ))
        return frames
    finally:
        # Frame objects keep every local alive
        del stack


def format_trace(frames: Sequence[Frame],
                 *,
                 depth: int = 999,
                 format: str = BASE_FORMAT,
                 args: bool = False,
                 start: int = 0,
                 exclude: Iterable[str] = (),
                 templates: Mapping[str, Mapping[str, Any]] | None = None,
                 export: Callable[[Any], str] = export_var,
                 trim: Callable[[str], str] = trim_path,
                 ) -> str | list[Frame] | list[TracePoint]:
    """
    Format captured frames as a stack trace.

    Each entry pairs the call site of frame ``i`` with the function found in frame
    ``i + 1``, the function that contains that call site. Only frames with an index
    below both ``depth`` and the number of frames are considered. Frames whose
    signature (``function`` or ``Class::function``) is in ``exclude`` are skipped
    and emit nothing.

    Args:
        frames: Frames from capture_frames(), most recent call first.
        depth: Index bound of the frames to consider, so at most depth entries are emitted.
        format: ``array`` returns Frame records, ``points`` returns TracePoint records
            of frames with a known file; any other name renders the format's
            ``traceLine`` template (or the ``base`` one) and joins lines with newlines.
        args: Render the arguments of method calls in the reference.
        start: Index of the first frame to consider.
        exclude: Signatures to skip.
        templates: Template registry, DEFAULT_TEMPLATES if None.
        export: Value exporter used for arguments.
        trim: Path shortener used for the ``{:path}`` placeholder.

    Returns:
        The rendered trace, or a list of records for ``array`` and ``points``.

    Examples:
        >>> frames = [Frame("inner", file="/app/a.py", line=3), Frame("outer", file="/app/b.py", line=9)]
        >>> format_trace(frames, trim=str)
        'outer - /app/a.py, line 3\\n[main] - /app/b.py, line 9'
    """
    templates = DEFAULT_TEMPLATES if templates is None else templates
    exclude = set(exclude)
    back = []

    for i in range(start, min(len(frames), depth)):
        frame = frames[i]
        signature, reference = _describe_caller(frames[i + 1] if i + 1 < len(frames) else None, args, export)

        if signature in exclude:
            continue

        if format == "points":
            if frame.file != INTERNAL_FILE:
                back.append(TracePoint(frame.file, frame.line))
        elif format == "array":
            back.append(frame)
        else:
            template = (get_template(templates, format, "traceLine")
                        or DEFAULT_TEMPLATES[BASE_FORMAT]["traceLine"])
            back.append(insert(template, {
                "reference": reference,
                "path": trim(frame.file),
                "file": frame.file,
                "line": frame.line,
                "function": frame.function,
                "class": frame.class_name or "",
            }))

    if format in STRUCTURED_FORMATS:
        return back
    return "\n".join(back)


# Private Methods ------------------------------------------------------------------------------------------------------

def _signature(frame: Frame) -> str:
    if frame.class_name:
        return f"{frame.class_name}::{frame.function}"
    return frame.function


def _describe_caller(frame: Frame | None, args: bool, export: Callable[[Any], str]) -> tuple[str, str]:
    """Return (signature, reference) of the function running in frame."""
    if frame is None:
        return MAIN_FUNCTION, MAIN_FUNCTION
    if not frame.class_name:
        return frame.function, frame.function

    signature = _signature(frame)
    reference = signature + "("
    if args and frame.args:
        reference += ", ".join(export(arg) for arg in frame.args)
    reference += ")"
    return signature, reference


def _owner_class(frame: FrameType) -> str | None:
    """Name of the class a frame's function is defined in, from its qualified name."""
    qualname = getattr(frame.f_code, "co_qualname", frame.f_code.co_name)
    parts = qualname.split(".")
    if len(parts) < 2 or parts[-2] == "<locals>":
        return None
    return parts[-2]


def _frame_args(frame: FrameType, bound: bool) -> tuple[Any, ...]:
    """Argument values of a frame: parameters, then *args, then **kwargs values."""
    try:
        spec = inspect.getargvalues(frame)
    except (TypeError, ValueError):
        return ()

    names = list(spec.args)
    if bound and names and names[0] in ("self", "cls"):
        names = names[1:]

    values = [spec.locals[name] for name in names if name in spec.locals]
    if spec.varargs and isinstance(spec.locals.get(spec.varargs), tuple):
        values.extend(spec.locals[spec.varargs])
    if spec.keywords and isinstance(spec.locals.get(spec.keywords), dict):
        values.extend(spec.locals[spec.keywords].values())
    return tuple(values)


def _frame_file(filename: str | None) -> str:
    # Pseudo-files like <frozen importlib._bootstrap> or <string> have no source on disk
    if not filename or (filename.startswith("<") and filename.endswith(">")):
        return INTERNAL_FILE
    return filename
