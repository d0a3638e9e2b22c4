"""Domain errors raised by the evaluation engine and stores."""

SYNTAX = "SYNTAX"
CIRCULAR_REF = "CIRCULAR_REF"
BAD_CELL_ID = "BAD_CELL_ID"
BAD_REF = "BAD_REF"
DB = "DB"

# Codes which describe a problem with a submitted formula
FORMULA_ERROR_CODES = frozenset({SYNTAX, CIRCULAR_REF, BAD_REF})


class AppError(Exception):
    """An error with a succinct code and a human readable message."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}
