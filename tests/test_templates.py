#
# Tracedump - Templates Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from tracedump.templates import (BASE_FORMAT,
                                 DEFAULT_TEMPLATES,
                                 default_templates,
                                 get_template,
                                 insert,
                                 load_formats,
                                 )


# Tests ----------------------------------------------------------------------------------------------------------------

class TestInsert:
    def test_placeholders(self):
        """Substitute every known placeholder."""
        out = insert("{:reference} - {:path}, line {:line}", {"reference": "main", "path": "a.py", "line": 7})
        assert out == "main - a.py, line 7"

    def test_repeated_placeholder(self):
        """Substitute each occurrence of a placeholder."""
        assert insert("{:a}/{:a}", {"a": "x"}) == "x/x"

    def test_missing_key_kept(self):
        """Keep placeholders without a value verbatim."""
        assert insert("{:a} {:b}", {"a": 1}) == "1 {:b}"

    def test_no_values(self):
        """Return the template unchanged without values."""
        assert insert("{:a}", {}) == "{:a}"

    def test_custom_delimiters(self):
        """Support other placeholder delimiters."""
        assert insert("Hello %name%!", {"name": "bot"}, before="%", after="%") == "Hello bot!"

    def test_plain_braces_untouched(self):
        """Leave format-style braces alone."""
        assert insert("{name} {:name}", {"name": "x"}) == "{name} x"

    def test_template_type(self):
        """Reject non-string templates."""
        with pytest.raises(TypeError, match=r"(?i)template must be a str"):
            insert(None, {"a": 1})


class TestGetTemplate:
    @pytest.mark.parametrize(
        "format, key, expected",
        [
            pytest.param("log", "trace", DEFAULT_TEMPLATES["log"]["trace"], id="own-template"),
            pytest.param("log", "traceLine", DEFAULT_TEMPLATES[BASE_FORMAT]["traceLine"], id="base-fallback"),
            pytest.param("unknown", "traceLine", DEFAULT_TEMPLATES[BASE_FORMAT]["traceLine"], id="unknown-format"),
            pytest.param("txt", "context", DEFAULT_TEMPLATES[BASE_FORMAT]["context"], id="context-fallback"),
            pytest.param("html", "context", DEFAULT_TEMPLATES["html"]["context"], id="html-context"),
        ],
    )
    def test_lookup(self, format, key, expected):
        """Resolve the format's template, falling back to base."""
        assert get_template(DEFAULT_TEMPLATES, format, key) == expected

    def test_missing(self):
        """Return None when no string template exists anywhere."""
        assert get_template(DEFAULT_TEMPLATES, "js", "links") is None
        assert get_template(DEFAULT_TEMPLATES, "js", "nothing") is None

    def test_default_templates_copy(self):
        """Mutating a copy leaves the defaults untouched."""
        templates = default_templates()
        templates[BASE_FORMAT]["traceLine"] = "changed"
        assert DEFAULT_TEMPLATES[BASE_FORMAT]["traceLine"] == "{:reference} - {:path}, line {:line}"


class TestLoadFormats:
    def test_load(self, formats_toml):
        """Read one template set per table."""
        path = formats_toml(
            '[slack]\n'
            'traceLine = "`{:reference}` {:path}:{:line}"\n'
            'trace = "```{:trace}```"\n'
            '\n'
            '[short]\n'
            'traceLine = "{:path}:{:line}"\n'
        )
        formats = load_formats(path)
        assert formats == {
            "slack": {"traceLine": "`{:reference}` {:path}:{:line}", "trace": "```{:trace}```"},
            "short": {"traceLine": "{:path}:{:line}"},
        }

    def test_not_a_table(self, formats_toml):
        """Reject top-level values that are not tables."""
        path = formats_toml('traceLine = "{:path}"\n')
        with pytest.raises(ValueError, match=r"must be a table"):
            load_formats(path)

    def test_not_a_string(self, formats_toml):
        """Reject templates that are not strings."""
        path = formats_toml('[bad]\ntraceLine = 42\n')
        with pytest.raises(ValueError, match=r"bad\.traceLine"):
            load_formats(path)
