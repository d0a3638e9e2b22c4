"""Formula evaluation engine."""

from .parser import parse, references, evaluate, shift_references
from .spreadsheet import Spreadsheet

__all__ = ["Spreadsheet", "parse", "references", "evaluate", "shift_references"]
