"""Request and response schemas for the store web service."""

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

from ..cells import is_cell_id


class CellBody(BaseModel):
    """Body of a single-cell PUT or PATCH: exactly ``{"formula": "..."}``."""

    model_config = ConfigDict(extra="forbid")

    formula: str = Field(min_length=1)


class SheetBody(RootModel[list[tuple[str, str]]]):
    """Body of a whole-sheet PUT or PATCH: a list of [cellId, formula] pairs."""

    @field_validator("root")
    @classmethod
    def _canonical_cell_ids(cls, pairs: list[tuple[str, str]]) -> list[tuple[str, str]]:
        for cell_id, _ in pairs:
            if not is_cell_id(cell_id):
                raise ValueError(f'bad cell id "{cell_id}"')
        return [(cell_id.lower(), formula) for cell_id, formula in pairs]


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Shape shared by every error the store web service returns."""

    status: int
    error: ErrorDetail
