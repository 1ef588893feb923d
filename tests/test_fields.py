#
# Tracedump - Fields Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
from collections import OrderedDict, deque, namedtuple

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from tracedump.fields import DebugField, SupportsDebugInfo, Visibility, debug_fields, debug_view


# Local Classes & Methods ----------------------------------------------------------------------------------------------

class Mixed:
    """Attributes assigned out of tier order."""

    def __init__(self):
        self.__secret = "s"
        self._internal = 2
        self.public = 1
        self.__dunder__ = "skipped"


class Base:
    def __init__(self):
        self.__token = "t"


class Child(Base):
    def __init__(self):
        super().__init__()
        self.name = "child"


class Slotted:
    __slots__ = ("a", "_b", "__c", "unset")

    def __init__(self):
        self.a = 1
        self._b = 2
        self.__c = 3


class _Underscored:
    def __init__(self):
        self.__hidden = 1


class WithInfo:
    def __init__(self):
        self.password = "p"

    def __debug_info__(self):
        return {"state": "ok"}


class ListInfo:
    def __debug_info__(self):
        return ["a", "b"]


class BadInfo:
    def __debug_info__(self):
        return 42


class RaisingInfo:
    def __debug_info__(self):
        raise RuntimeError("boom")


Point = namedtuple("Point", "x y")


# Tests ----------------------------------------------------------------------------------------------------------------

class TestDebugFields:
    def test_tier_order(self):
        """Order fields public, protected, private and skip dunders."""
        fields = debug_fields(Mixed())
        assert fields == [
            DebugField("public", Visibility.PUBLIC, 1),
            DebugField("_internal", Visibility.PROTECTED, 2),
            DebugField("__secret", Visibility.PRIVATE, "s"),
        ]

    def test_inherited_private(self):
        """Unmangle private names declared in a base class."""
        fields = debug_fields(Child())
        assert [(f.name, f.visibility) for f in fields] == [
            ("name", Visibility.PUBLIC),
            ("__token", Visibility.PRIVATE),
        ]

    def test_slots(self):
        """Read slot values and skip unset slots."""
        fields = debug_fields(Slotted())
        assert [(f.name, f.visibility, f.value) for f in fields] == [
            ("a", Visibility.PUBLIC, 1),
            ("_b", Visibility.PROTECTED, 2),
            ("__c", Visibility.PRIVATE, 3),
        ]

    def test_underscored_class_name(self):
        """Handle name mangling of classes whose name starts with underscores."""
        fields = debug_fields(_Underscored())
        assert fields == [DebugField("__hidden", Visibility.PRIVATE, 1)]

    def test_exception_args(self):
        """Report exception args as a public field."""
        fields = debug_fields(ValueError("bad", 2))
        assert fields == [DebugField("args", Visibility.PUBLIC, ("bad", 2))]

    def test_no_fields(self):
        """Return an empty list for objects without state."""
        assert debug_fields(object()) == []


class TestDebugView:
    def test_debug_info_mapping(self):
        """Use __debug_info__() instead of fields."""
        assert debug_view(WithInfo()) == [("state", "ok")]

    def test_debug_info_sequence(self):
        """Key sequence results by position."""
        assert debug_view(ListInfo()) == [(0, "a"), (1, "b")]

    def test_debug_info_bad_result(self):
        """Reject results that are neither mappings nor sequences."""
        with pytest.raises(TypeError, match=r"__debug_info__\(\) must return"):
            debug_view(BadInfo())

    def test_debug_info_raises(self):
        """Propagate failures of __debug_info__()."""
        with pytest.raises(RuntimeError, match="boom"):
            debug_view(RaisingInfo())

    @pytest.mark.parametrize(
        "obj, expected",
        [
            pytest.param(OrderedDict(a=1), [("a", 1)], id="mapping"),
            pytest.param(Point(1, 2), [("x", 1), ("y", 2)], id="namedtuple"),
            pytest.param(deque(["q"]), [(0, "q")], id="sequence"),
        ],
    )
    def test_container_views(self, obj, expected):
        """Use entries of container objects as their view."""
        assert debug_view(obj) == expected

    def test_plain_object(self):
        """Return None for objects that are exported field by field."""
        assert debug_view(Mixed()) is None

    def test_protocol(self):
        """Recognize __debug_info__() implementations structurally."""
        assert isinstance(WithInfo(), SupportsDebugInfo)
        assert not isinstance(Mixed(), SupportsDebugInfo)
