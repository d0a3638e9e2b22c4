"""REST routes of the spreadsheet store web service.

Only stores formulas: it does not check formula syntax or circular
references, which is left to the evaluation engine of the calling layer.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError

from ..cells import is_cell_id, is_sheet_name
from ..commands import ClearAll, DeleteCell, ReplaceAll, UpdateCell, apply_to_store
from ..store.base import SpreadsheetStore
from .errors import BadRequest
from .schemas import CellBody, ErrorResponse, SheetBody

logger = logging.getLogger(__name__)

OK = 200
CREATED = 201
NO_CONTENT = 204

SHEET_BODY_ERROR = "request body must be a list of cellId, formula pairs"
CELL_BODY_ERROR = "request body must be a { formula } object"


def sheet_name(spreadSheetName: str) -> str:
    if not is_sheet_name(spreadSheetName):
        raise BadRequest(
            f'bad spreadsheet name "{spreadSheetName}": must contain only '
            "alphanumeric characters, underscore, hyphen or space"
        )
    return spreadSheetName


def cell_id(cellId: str) -> str:
    if not is_cell_id(cellId):
        raise BadRequest(f'bad cell id "{cellId}": must be a letter followed by one or two digits')
    return cellId.lower()


async def _json_body(request: Request, message: str):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest(message)


async def sheet_body(request: Request) -> SheetBody:
    data = await _json_body(request, SHEET_BODY_ERROR)
    try:
        return SheetBody.model_validate(data)
    except ValidationError:
        raise BadRequest(SHEET_BODY_ERROR)


async def cell_body(request: Request) -> CellBody:
    data = await _json_body(request, CELL_BODY_ERROR)
    try:
        return CellBody.model_validate(data)
    except ValidationError:
        raise BadRequest(CELL_BODY_ERROR)


def build_store_router(store: SpreadsheetStore) -> APIRouter:
    """Create the store routes bound to store."""
    router = APIRouter(responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})

    @router.get("/{spreadSheetName}")
    async def read_spreadsheet(name: str = Depends(sheet_name)) -> list[list[str]]:
        """Return the [cellId, formula] pairs of a spreadsheet."""
        pairs = await store.read_formulas(name)
        return [[cid, formula] for cid, formula in pairs]

    @router.put("/{spreadSheetName}", status_code=CREATED)
    async def replace_spreadsheet(
        name: str = Depends(sheet_name), body: SheetBody = Depends(sheet_body)
    ):
        """Clear the spreadsheet then set every pair in order."""
        logger.info(f"Replacing spreadsheet {name} with {len(body.root)} cells")
        await apply_to_store(store, name, ReplaceAll(tuple(body.root)))
        return Response(status_code=CREATED)

    @router.patch("/{spreadSheetName}", status_code=NO_CONTENT)
    async def update_spreadsheet(
        name: str = Depends(sheet_name), body: SheetBody = Depends(sheet_body)
    ):
        """Set every pair in order without clearing the spreadsheet."""
        logger.info(f"Updating {len(body.root)} cells of spreadsheet {name}")
        for cid, formula in body.root:
            await apply_to_store(store, name, UpdateCell(cid, formula))
        return Response(status_code=NO_CONTENT)

    @router.delete("/{spreadSheetName}", status_code=NO_CONTENT)
    async def clear_spreadsheet(name: str = Depends(sheet_name)):
        """Remove every cell of the spreadsheet."""
        await apply_to_store(store, name, ClearAll())
        return Response(status_code=NO_CONTENT)

    @router.put("/{spreadSheetName}/{cellId}", status_code=CREATED)
    async def replace_cell(
        name: str = Depends(sheet_name),
        cid: str = Depends(cell_id),
        body: CellBody = Depends(cell_body),
    ):
        """Delete the cell, then set it to the formula."""
        await apply_to_store(store, name, DeleteCell(cid))
        await apply_to_store(store, name, UpdateCell(cid, body.formula))
        return Response(status_code=CREATED)

    @router.patch("/{spreadSheetName}/{cellId}", status_code=NO_CONTENT)
    async def update_cell(
        name: str = Depends(sheet_name),
        cid: str = Depends(cell_id),
        body: CellBody = Depends(cell_body),
    ):
        """Set the cell to the formula, creating it if needed."""
        await apply_to_store(store, name, UpdateCell(cid, body.formula))
        return Response(status_code=NO_CONTENT)

    @router.delete("/{spreadSheetName}/{cellId}", status_code=NO_CONTENT)
    async def delete_cell(name: str = Depends(sheet_name), cid: str = Depends(cell_id)):
        """Remove the cell; deleting a missing cell is a no-op."""
        await apply_to_store(store, name, DeleteCell(cid))
        return Response(status_code=NO_CONTENT)

    return router
