"""Validation of user actions into typed commands.

``validate_action`` is pure: it never raises for bad input and never touches
a store. It returns either a Command or a FieldErrors mapping holding every
problem found, so a form can show all of them at once.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from .cells import is_cell_id, is_sheet_name
from .commands import ClearAll, Command, CopyCell, DeleteCell, UpdateCell

ACTIONS = ("clear", "deleteCell", "updateCell", "copyCell")


class FieldErrors(Mapping):
    """Immutable mapping of field name to error message."""

    def __init__(self, errors: Optional[Mapping] = None):
        self._errors = dict(errors or {})

    def __getitem__(self, name: str) -> str:
        return self._errors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __repr__(self) -> str:
        return f"FieldErrors({self._errors!r})"

    def with_error(self, name: str, message: str) -> "FieldErrors":
        """Return a copy with message recorded for name (first error wins)."""
        if name in self._errors:
            return self
        return FieldErrors({**self._errors, name: message})


@dataclass(frozen=True)
class FieldInfo:
    friendly_name: str
    err: Optional[Callable[[str], Optional[str]]] = None


def _sheet_name_err(value: str) -> Optional[str]:
    if is_sheet_name(value):
        return None
    return (
        f'Bad spreadsheet name "{value}": must contain only alphanumeric '
        "characters, underscore, hyphen or space."
    )


def _cell_id_err(value: str) -> Optional[str]:
    if is_cell_id(value):
        return None
    return f'Bad cell id "{value}": must consist of a letter followed by one or two digits.'


FIELD_INFOS: dict[str, FieldInfo] = {
    "ssName": FieldInfo("Spreadsheet Name", _sheet_name_err),
    "cellId": FieldInfo("Cell ID", _cell_id_err),
    "formula": FieldInfo("cell formula"),
}

# action -> (friendly name, required fields, forbidden fields)
ACTION_FIELDS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "clear": ("Clear", (), ("cellId", "formula")),
    "deleteCell": ("Delete Cell", ("cellId",), ("formula",)),
    "updateCell": ("Update Cell", ("cellId", "formula"), ()),
    "copyCell": ("Copy Cell", ("cellId", "formula"), ()),
}


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_field(name: str, value) -> Optional[str]:
    """Return an error message for value of field name, or None if valid."""
    info = FIELD_INFOS[name]
    if _is_empty(value):
        return f"The {info.friendly_name} field must be specified"
    if info.err:
        return info.err(str(value).strip())
    return None


def validate_sheet_name(value) -> Optional[str]:
    return validate_field("ssName", value)


def _check_fields(
    act: str,
    required: tuple[str, ...],
    forbidden: tuple[str, ...],
    fields: Mapping,
    errors: FieldErrors,
) -> FieldErrors:
    for name in forbidden:
        if not _is_empty(fields.get(name)):
            errors = errors.with_error(
                name,
                f"{FIELD_INFOS[name].friendly_name} must not be specified for {act} action",
            )
    for name in required:
        message = validate_field(name, fields.get(name))
        if message:
            errors = errors.with_error(name, message)
    return errors


def validate_action(action: Optional[str], fields: Mapping) -> Union[Command, FieldErrors]:
    """Turn a raw action and its form fields into a Command or FieldErrors."""
    act = (action or "").strip()
    if not act:
        return FieldErrors({"ssAct": "Action must be specified."})
    if act not in ACTION_FIELDS:
        return FieldErrors({"ssAct": f'Invalid action "{act}"'})

    friendly, required, forbidden = ACTION_FIELDS[act]
    errors = _check_fields(friendly, required, forbidden, fields, FieldErrors())
    if errors:
        return errors

    cell_id = str(fields.get("cellId") or "").strip().lower()
    formula = str(fields.get("formula") or "").strip()

    if act == "clear":
        return ClearAll()
    if act == "deleteCell":
        return DeleteCell(cell_id)
    if act == "updateCell":
        return UpdateCell(cell_id, formula)
    if not is_cell_id(formula):
        return errors.with_error("formula", "Copy requires formula to specify a cell ID")
    return CopyCell(cell_id, formula.lower())
