"""Server-rendered form UI for opening and updating spreadsheets."""

import logging
from collections.abc import Mapping
from urllib.parse import quote

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from ..commands import apply_to_spreadsheet
from ..engine import Spreadsheet
from ..errors import AppError, FORMULA_ERROR_CODES
from ..store.base import SpreadsheetStore
from ..validation import ACTIONS, FieldErrors, validate_action, validate_sheet_name
from ..views import build_view_model
from .errors import BadRequest

logger = logging.getLogger(__name__)


def _trim_values(params: Mapping) -> dict[str, str]:
    return {k: str(v).strip() for k, v in params.items()}


class UpdateController:
    """Applies one submitted update form to a spreadsheet.

    Each submission goes Validate -> (Apply | ReportErrors) -> Render; the
    returned view always contains a freshly built view model.
    """

    def __init__(self, store: SpreadsheetStore):
        self.store = store

    async def view_model(self, ss_name: str) -> dict:
        spreadsheet = await Spreadsheet.make(ss_name, self.store)
        return build_view_model(spreadsheet)

    async def submit(self, ss_name: str, form: Mapping) -> dict:
        """Validate and apply form, returning the template context."""
        submitted = {k: str(v) for k, v in form.items()}
        trimmed = _trim_values(submitted)
        act = trimmed.get("ssAct", "")
        view: dict = {}

        result = validate_action(act, trimmed)
        if isinstance(result, FieldErrors):
            view["errors"] = dict(result)
            view["body"] = submitted
            view["actions"] = {a: a == act for a in ACTIONS}
        else:
            spreadsheet = await Spreadsheet.make(ss_name, self.store)
            try:
                await apply_to_spreadsheet(spreadsheet, result)
            except AppError as e:
                if e.code not in FORMULA_ERROR_CODES:
                    raise
                logger.info(f"Rejected formula for {ss_name}: {e}")
                view["errors"] = {"formula": str(e)}
                view["body"] = submitted
                view["actions"] = {a: a == act for a in ACTIONS}

        view.update(await self.view_model(ss_name))
        return view


def _checked_sheet_name(ss_name: str) -> str:
    error = validate_sheet_name(ss_name)
    if error:
        raise BadRequest(error)
    return ss_name


def build_ui_router(store: SpreadsheetStore, templates: Jinja2Templates) -> APIRouter:
    """Create the form UI routes bound to store."""
    router = APIRouter()
    controller = UpdateController(store)

    @router.get("/")
    async def open_page(request: Request):
        return templates.TemplateResponse(request, "spreadsheet-open.html", {})

    @router.post("/")
    async def submit_open_page(request: Request):
        form = await request.form()
        ss_name = str(form.get("ssName", "")).strip()
        error = validate_sheet_name(ss_name)
        if error:
            return templates.TemplateResponse(
                request,
                "spreadsheet-open.html",
                {"errors": [{"msg": error}], "ss_name": ss_name},
            )
        return RedirectResponse(f"/ss/{quote(ss_name)}", status_code=303)

    @router.get("/ss/{ssName}")
    async def update_page(request: Request, ssName: str):
        ss_name = _checked_sheet_name(ssName)
        return templates.TemplateResponse(
            request, "spreadsheet-update.html", await controller.view_model(ss_name)
        )

    @router.post("/ss/{ssName}")
    async def submit_update_page(request: Request, ssName: str):
        ss_name = _checked_sheet_name(ssName)
        form = await request.form()
        view = await controller.submit(ss_name, form)
        return templates.TemplateResponse(request, "spreadsheet-update.html", view)

    return router
