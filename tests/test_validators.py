"""Tests for Spiegel input validators."""

import pytest


class TestStepNames:
    """Test step name validation."""

    @pytest.mark.parametrize("name", ["welcome", "select_data", "step-2", "A1"])
    def test_valid(self, name):
        from spiegel.wizard.validators import validate_step_name

        valid, msg = validate_step_name(name)
        assert valid is True

    @pytest.mark.parametrize("name", ["", "a b", "../x", "x/y", "x.y", None, 3])
    def test_invalid(self, name):
        from spiegel.wizard.validators import validate_step_name

        valid, msg = validate_step_name(name)
        assert valid is False
        assert msg


class TestResourceNames:
    """Test resource name validation."""

    @pytest.mark.parametrize("name", ["view.html", "select_data/csv.css", "a.b.js"])
    def test_valid(self, name):
        from spiegel.wizard.validators import validate_resource_name

        valid, msg = validate_resource_name(name)
        assert valid is True

    @pytest.mark.parametrize("name", ["", "  ", "/abs.css", "a\\b.css", "a/b/c.css", "../x.css", "a/..", "bad name/x.css"])
    def test_invalid(self, name):
        from spiegel.wizard.validators import validate_resource_name

        valid, msg = validate_resource_name(name)
        assert valid is False


class TestRegions:
    """Test page region validation."""

    def test_valid(self):
        from spiegel.wizard.validators import validate_region

        assert validate_region("#content-holder")[0] is True

    @pytest.mark.parametrize("region", ["", "content", "#", "#1abc", ".class", None])
    def test_invalid(self, region):
        from spiegel.wizard.validators import validate_region

        assert validate_region(region)[0] is False


class TestDescriptorData:
    """Test descriptor payload validation."""

    def test_valid(self):
        from spiegel.wizard.validators import validate_descriptor_data

        valid, msg = validate_descriptor_data({
            "name": "intro", "view": "intro.html", "styles": ["intro.css"], "scripts": [],
        })
        assert valid is True

    def test_not_an_object(self):
        from spiegel.wizard.validators import validate_descriptor_data

        valid, msg = validate_descriptor_data(["intro"])
        assert valid is False
        assert "object" in msg

    @pytest.mark.parametrize("missing", ["name", "view"])
    def test_missing_required(self, missing):
        from spiegel.wizard.validators import validate_descriptor_data

        data = {"name": "intro", "view": "intro.html"}
        del data[missing]
        valid, msg = validate_descriptor_data(data)
        assert valid is False
        assert missing in msg

    def test_bad_script_entry(self):
        from spiegel.wizard.validators import validate_descriptor_data

        valid, msg = validate_descriptor_data({"name": "intro", "view": "intro.html", "scripts": [5]})
        assert valid is False
        assert "scripts" in msg


class TestManifestData:
    """Test manifest payload validation."""

    def test_valid(self):
        from spiegel.wizard.validators import validate_manifest_data

        assert validate_manifest_data(["a", "b"])[0] is True
        assert validate_manifest_data([])[0] is True

    def test_duplicates(self):
        from spiegel.wizard.validators import validate_manifest_data

        valid, msg = validate_manifest_data(["a", "a"])
        assert valid is False
        assert "more than once" in msg

    def test_not_a_list(self):
        from spiegel.wizard.validators import validate_manifest_data

        assert validate_manifest_data({"a": 1})[0] is False
