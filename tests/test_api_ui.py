"""Tests for the server-rendered form UI."""

from unittest.mock import AsyncMock, patch

import pytest

from sheetsync.api.ui_routes import UpdateController
from sheetsync.cells import make_cell_id
from sheetsync.errors import AppError
from sheetsync.store import MemoryStore


class TestOpenPage:
    """Test the spreadsheet open page."""

    def test_render_open_page(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert 'name="ssName"' in response.text

    def test_valid_name_redirects(self, client):
        response = client.post("/", data={"ssName": " sheet1 "}, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/ss/sheet1"

    def test_invalid_name_rerenders_with_error(self, client):
        response = client.post("/", data={"ssName": "bad/name"})
        assert response.status_code == 200
        assert "Bad spreadsheet name" in response.text
        assert 'value="bad/name"' in response.text

    def test_missing_name(self, client):
        response = client.post("/", data={"ssName": ""})
        assert "The Spreadsheet Name field must be specified" in response.text


class TestUpdatePage:
    """Test the spreadsheet update page."""

    def test_render_empty_grid(self, client):
        response = client.get("/ss/sheet1")
        assert response.status_code == 200
        assert "<th>sheet1</th>" in response.text
        assert "<th>J</th>" in response.text
        assert "<th>10</th>" in response.text

    def test_update_cell_shows_value(self, client, store):
        response = client.post(
            "/ss/sheet1", data={"ssAct": "updateCell", "cellId": "a1", "formula": "6 * 7"}
        )
        assert response.status_code == 200
        assert "<td>42</td>" in response.text
        assert ("update_cell", "sheet1", "a1", "6 * 7") in store.calls

    def test_validation_errors_echo_input(self, client, store):
        response = client.post(
            "/ss/sheet1", data={"ssAct": "copyCell", "cellId": " b2 ", "formula": "xyz"}
        )

        assert "Copy requires formula to specify a cell ID" in response.text
        assert 'value=" b2 "' in response.text
        assert 'value="xyz"' in response.text
        assert 'value="copyCell" checked="checked"' in response.text
        assert store.mutations == []

    def test_syntax_error_reported_on_formula(self, client, store):
        response = client.post(
            "/ss/sheet1", data={"ssAct": "updateCell", "cellId": "a1", "formula": "1 +"}
        )
        assert response.status_code == 200
        assert "SYNTAX" in response.text
        assert store.mutations == []

    def test_bad_sheet_name_in_path(self, client):
        response = client.get("/ss/bad$name")
        assert response.status_code == 400
        assert "Bad spreadsheet name" in response.text

    def test_renders_long_chain_stored_tail_first(self, client):
        chain = [make_cell_id(i // 99, i % 99) for i in range(600)]
        pairs = [[cur, f"{prev} + 1"] for prev, cur in zip(chain, chain[1:])]
        pairs.append([chain[0], "1"])
        assert client.put("/api/store/deep", json=pairs[::-1]).status_code == 201

        response = client.get("/ss/deep")

        assert response.status_code == 200
        assert "<td>600</td>" in response.text

    def test_unknown_page(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert "GET not supported for /nowhere" in response.text


@pytest.fixture
def controller() -> UpdateController:
    return UpdateController(MemoryStore())


class TestUpdateController:
    """Test the update controller state machine directly."""

    @pytest.mark.asyncio
    async def test_apply_then_render(self, controller):
        view = await controller.submit("s", {"ssAct": "updateCell", "cellId": "b3", "formula": "5"})

        assert "errors" not in view
        assert view["header"][:3] == ["s", "A", "B"]
        assert view["cells"][2]["values"][1] == 5

    @pytest.mark.asyncio
    async def test_copy_and_clear(self, controller):
        await controller.submit("s", {"ssAct": "updateCell", "cellId": "a1", "formula": "2"})
        await controller.submit("s", {"ssAct": "updateCell", "cellId": "b1", "formula": "a1 + 1"})
        view = await controller.submit("s", {"ssAct": "copyCell", "cellId": "b2", "formula": "B1"})
        assert view["cells"][1]["values"][1] == 1

        view = await controller.submit("s", {"ssAct": "clear", "cellId": "", "formula": ""})
        assert all(v == "" for row in view["cells"] for v in row["values"])

    @pytest.mark.asyncio
    async def test_delete_cell(self, controller):
        await controller.submit("s", {"ssAct": "updateCell", "cellId": "a1", "formula": "2"})
        view = await controller.submit("s", {"ssAct": "deleteCell", "cellId": "A1"})
        assert view["cells"][0]["values"][0] == ""

    @pytest.mark.asyncio
    async def test_validation_failure_keeps_action(self, controller):
        view = await controller.submit("s", {"ssAct": "clear", "cellId": "a1"})

        assert view["errors"] == {"cellId": "Cell ID must not be specified for Clear action"}
        assert view["actions"] == {
            "clear": True,
            "deleteCell": False,
            "updateCell": False,
            "copyCell": False,
        }
        assert view["body"] == {"ssAct": "clear", "cellId": "a1"}

    @pytest.mark.asyncio
    async def test_circular_reference_is_formula_error(self, controller):
        await controller.submit("s", {"ssAct": "updateCell", "cellId": "a1", "formula": "b1"})
        view = await controller.submit("s", {"ssAct": "updateCell", "cellId": "b1", "formula": "a1"})
        assert "CIRCULAR_REF" in view["errors"]["formula"]

    @pytest.mark.asyncio
    async def test_other_domain_errors_propagate(self, controller):
        with patch(
            "sheetsync.api.ui_routes.apply_to_spreadsheet",
            AsyncMock(side_effect=AppError("DB", "store offline")),
        ):
            with pytest.raises(AppError):
                await controller.submit("s", {"ssAct": "clear"})

    @pytest.mark.asyncio
    async def test_grid_grows_to_cover_cells(self, controller):
        view = await controller.submit("s", {"ssAct": "updateCell", "cellId": "m12", "formula": "1"})

        assert len(view["cells"]) == 12
        assert view["header"][-1] == "M"
        assert view["cells"][11]["values"][12] == 1
