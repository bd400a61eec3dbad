"""Tests for activities/merge.py"""

import pytest

from activities.merge import (
    append_step_definitions,
    insert_page_object_methods,
    read_support_file,
    write_feature_file,
)
from models.errors import MergeError


class TestWriteFeatureFile:

    def test_creates_parent_dirs(self, tmp_path):
        target = tmp_path / "features" / "new.feature"
        write_feature_file(target, "Feature: x\n")
        assert target.read_text() == "Feature: x\n"

    def test_overwrites(self, tmp_path):
        target = tmp_path / "a.feature"
        target.write_text("old")
        write_feature_file(target, "new")
        assert target.read_text() == "new"


class TestAppendStepDefinitions:

    def test_original_is_prefix_followed_by_blank_line(self, tmp_path):
        target = tmp_path / "steps.js"
        original = "Given('a', async () => {})\n"
        target.write_text(original)
        fragment = "When('b', async () => {})"

        assert append_step_definitions(target, fragment) is True
        assert target.read_text() == original + "\n\n" + fragment

    @pytest.mark.parametrize("fragment", ["", "   ", "\n\t\n"])
    def test_blank_fragment_is_noop(self, tmp_path, fragment):
        target = tmp_path / "steps.js"
        target.write_bytes(b"Given('a')\r\n")
        assert append_step_definitions(target, fragment) is False
        assert target.read_bytes() == b"Given('a')\r\n"

    def test_does_not_deduplicate(self, tmp_path):
        target = tmp_path / "steps.js"
        target.write_text("X")
        append_step_definitions(target, "X")
        assert target.read_text() == "X\n\nX"

    def test_missing_file_raises_merge_error(self, tmp_path):
        with pytest.raises(MergeError):
            append_step_definitions(tmp_path / "missing.js", "When('b')")


class TestInsertPageObjectMethods:

    def test_inserts_before_last_brace(self, tmp_path):
        target = tmp_path / "page.js"
        target.write_text(
            "class SettingsPage {\n"
            "    async launchApp () {\n"
            "    }\n"
            "}\n"
            "\n"
            "export default new SettingsPage()\n"
        )
        insert_page_object_methods(target, "    async openFonts () {\n    }")

        assert target.read_text() == (
            "class SettingsPage {\n"
            "    async launchApp () {\n"
            "    }\n"
            "\n"
            "    async openFonts () {\n"
            "    }\n"
            "}\n"
            "\n"
            "export default new SettingsPage()\n"
        )

    def test_trailing_structure_preserved(self, tmp_path):
        target = tmp_path / "page.js"
        original = "class P {\n}\nexport default new P()\n"
        target.write_text(original)
        insert_page_object_methods(target, "m () {}")
        assert target.read_text().endswith("}\nexport default new P()\n")

    def test_no_brace_appends(self, tmp_path):
        target = tmp_path / "page.js"
        target.write_text("// empty\n")
        insert_page_object_methods(target, "m () {}")
        assert target.read_text() == "// empty\n\nm () {}\n"

    def test_blank_fragment_is_noop(self, tmp_path):
        target = tmp_path / "page.js"
        target.write_text("class P {\n}\n")
        assert insert_page_object_methods(target, "  ") is False
        assert target.read_text() == "class P {\n}\n"

    def test_missing_file_raises_merge_error(self, tmp_path):
        with pytest.raises(MergeError) as exc:
            insert_page_object_methods(tmp_path / "missing.js", "m () {}")
        assert "missing.js" in str(exc.value)


class TestReadSupportFile:

    def test_reads_text(self, tmp_path):
        target = tmp_path / "steps.js"
        target.write_text("Given('a')")
        assert read_support_file(target) == "Given('a')"
        assert read_support_file(str(target)) == "Given('a')"

    def test_missing_file_raises_merge_error(self, tmp_path):
        missing = tmp_path / "missing.js"
        with pytest.raises(MergeError) as exc:
            read_support_file(missing)
        assert exc.value.path == str(missing)
