"""
Tests for output renderers — table, detail, json, auto-detection
"""

import orjson
import pytest

from gitloupe.output import OutputSpec, render, auto_detect_shape, get_renderer
from gitloupe.output.json import dumps
from gitloupe.presentation.symbols import ASCII


ROWS = [
    {"alias": "KM-XP", "type": "commit", "hash": "3b18e512", "summary": "Fix bug"},
    {"alias": "AB-CD", "type": "blob", "hash": "e69de29b", "summary": "hello"},
]


class TestAutoDetect:

    def test_list_of_dicts_is_table(self):
        assert auto_detect_shape(ROWS) == "table"

    def test_dict_is_detail(self):
        assert auto_detect_shape({"a": 1}) == "detail"
        assert auto_detect_shape([]) == "detail"

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            get_renderer("xml", ASCII)


class TestTableRenderer:

    def test_columns_aligned(self):
        spec = OutputSpec(data=ROWS, columns=["ALIAS", "TYPE", "HASH", "SUMMARY"],
                          column_keys=["alias", "type", "hash", "summary"], footer="2 of 2 objects")
        lines = render(spec, format="table", symbols=ASCII, width=80).split("\n")

        assert lines[0] == "ALIAS  TYPE    HASH      SUMMARY"
        assert lines[1] == "-----  ------  --------  -------"
        assert lines[2] == "KM-XP  commit  3b18e512  Fix bug"
        assert lines[3] == "AB-CD  blob    e69de29b  hello"
        assert lines[-1] == "2 of 2 objects"

    def test_last_column_truncated_to_width(self):
        rows = [{"type": "blob", "summary": "x" * 200}]
        output = render(OutputSpec(data=rows), format="table", symbols=ASCII, width=40)
        assert all(len(line) <= 40 for line in output.split("\n"))
        assert output.split("\n")[-1].endswith("...")

    def test_full_disables_truncation(self):
        rows = [{"type": "blob", "summary": "x" * 200}]
        output = render(OutputSpec(data=rows), format="table", symbols=ASCII, width=40, full=True)
        assert "x" * 200 in output

    def test_inferred_columns(self):
        output = render(OutputSpec(data=[{"object_type": "tag"}]), format="table", symbols=ASCII, width=80)
        assert output.split("\n")[0] == "OBJECT TYPE"

    def test_empty_message(self):
        spec = OutputSpec(data=[], shape="table", empty_message="No objects found.")
        assert render(spec, symbols=ASCII, width=80) == "No objects found."


class TestDetailRenderer:

    def test_body_wins(self):
        spec = OutputSpec(data={"hash": "x"}, shape="detail", title="[C] commit x", body="tree: y")
        assert render(spec, symbols=ASCII, width=80) == "[C] commit x\n\ntree: y"

    def test_fields(self):
        spec = OutputSpec(data={"object_count": 3, "packed": True, "types": ["blob", "tree"],
                                "_internal": 1}, shape="detail")
        output = render(spec, symbols=ASCII, width=80)
        assert "  Object Count: 3" in output
        assert "  Packed: Yes" in output
        assert "    * blob" in output
        assert "_internal" not in output and "Internal" not in output


class TestJsonRenderer:

    def test_plain_data(self):
        output = render(OutputSpec(data=ROWS), format="json", symbols=ASCII, width=80)
        assert orjson.loads(output) == ROWS

    def test_internal_keys_stripped(self):
        spec = OutputSpec(data={"count": 1, "_cache": {"x": 1}, "nested": [{"_y": 2, "z": 3}]})
        assert orjson.loads(render(spec, format="json", symbols=ASCII)) == {"count": 1, "nested": [{"z": 3}]}

    def test_title_wraps_data(self):
        spec = OutputSpec(data=[1, 2], title="Numbers")
        assert orjson.loads(render(spec, format="json", symbols=ASCII)) == {"title": "Numbers", "data": [1, 2]}

    def test_dumps_fallbacks(self):
        data = {"raw": b"hi", "items": {3}, "obj": object}
        decoded = orjson.loads(dumps(data))
        assert decoded["raw"] == "hi"
        assert decoded["items"] == [3]
        assert isinstance(decoded["obj"], str)

    def test_compact(self):
        assert dumps({"a": [1, 2]}, compact=True) == '{"a":[1,2]}'
        assert "\n" in dumps({"a": [1, 2]})
