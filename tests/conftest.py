#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import pathlib

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from tracedump.debugger import reset_instance


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def fresh_debugger():
    """Drop the shared Debugger before and after the test."""
    reset_instance()
    yield
    reset_instance()


@pytest.fixture
def formats_toml(tmp_path: pathlib.Path):
    """Fixture to write a TOML file with template sets and return its path."""

    def _write(content: str) -> pathlib.Path:
        path = tmp_path / "formats.toml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write
