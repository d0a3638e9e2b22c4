"""Tests for grid view models and cell id helpers."""

import pytest

from sheetsync.cells import canonical_cell_id, col_index, is_sheet_name, make_cell_id, row_index
from sheetsync.engine import Spreadsheet
from sheetsync.errors import AppError
from sheetsync.store import MemoryStore
from sheetsync.views import build_view_model, grid_size


class TestCells:
    """Test cell id helpers."""

    def test_canonical_cell_id(self):
        assert canonical_cell_id(" B12 ") == "b12"

    @pytest.mark.parametrize("bad", ["", "1a", "ab1", "a123", "a"])
    def test_bad_cell_id(self, bad):
        with pytest.raises(AppError) as exc_info:
            canonical_cell_id(bad)
        assert exc_info.value.code == "BAD_CELL_ID"

    def test_indexes(self):
        assert (col_index("C7"), row_index("C7")) == (2, 6)
        assert make_cell_id(25, 98) == "z99"

    def test_make_cell_id_out_of_range(self):
        with pytest.raises(AppError):
            make_cell_id(26, 0)

    @pytest.mark.parametrize("name,ok", [("my sheet-1", True), ("a_b", True), ("a/b", False), ("", False)])
    def test_sheet_names(self, name, ok):
        assert is_sheet_name(name) is ok


class TestGridSize:
    """Test display grid sizing."""

    def test_minimum(self):
        assert grid_size([], 10, 10) == (10, 10)

    def test_grows_past_minimum(self):
        assert grid_size(["a15", "l2"], 10, 10) == (15, 12)


class TestBuildViewModel:
    """Test the full-grid view model."""

    @pytest.mark.asyncio
    async def test_values_and_blanks(self):
        ss = await Spreadsheet.make("s", MemoryStore())
        await ss.eval("a1", "2")
        await ss.eval("c2", "a1 * 1.5")

        view = build_view_model(ss, min_rows=3, min_cols=3)

        assert view["ss_name"] == "s"
        assert view["header"] == ["s", "A", "B", "C"]
        assert [row["row_num"] for row in view["cells"]] == [1, 2, 3]
        assert view["cells"][0]["values"] == [2, "", ""]
        assert view["cells"][1]["values"] == ["", "", 3]

    @pytest.mark.asyncio
    async def test_unevaluated_cell_is_blank(self):
        store = MemoryStore()
        await store.update_cell("s", "b1", "1 +")
        ss = await Spreadsheet.make("s", store)

        view = build_view_model(ss, min_rows=1, min_cols=2)

        assert view["cells"][0]["values"] == ["", ""]
