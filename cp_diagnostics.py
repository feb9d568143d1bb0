#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Optional

from cp_address import AddressError
from cp_errors import (
    PreprocessorError,
    SourceReadError,
    DuplicateModuleError,
    WorkingSetFrozenError,
    UnresolvedImportError,
    ImportCycleError,
    OutputCollisionError,
)
from cp_lexer import LexerError, Token
from cp_parser import ParseError


DIAGNOSTIC_CODE_FAMILIES = {
    "LEX": [
        "LEX-0010",
        "LEX-0020",
        "LEX-0021",
        "LEX-0030",
        "LEX-0031",
        "LEX-0040",
        "LEX-0070",
    ],
    "PAR": [
        "PAR-0010",
        "PAR-0011",
        "PAR-0012",
        "PAR-0020",
        "PAR-0021",
        "PAR-0022",
    ],
    "PRE": [
        "PRE-0010",
        "PRE-0020",
        "PRE-0021",
        "PRE-0030",
        "PRE-0040",
        "PRE-0050",
    ],
    "ADR": [
        "ADR-0010",
    ],
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    module_name: Optional[str] = None  # contract name
    filename: Optional[str] = None  # file path

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of span (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    # Return the one-line header; snippets will be printed at the call site
    def format(self) -> str:
        loc = ""
        if self.filename is not None:
            loc += f"{os.path.abspath(str(self.filename))}"
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
            if self.module_name is not None:
                loc += f"({self.module_name})"
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"


def diag_from_token(
        kind: str,
        message: str,
        *,
        module_name: Optional[str],
        filename: Optional[str],
        token: Optional[Token],
) -> Diagnostic:
    line = column = None
    if token is not None:
        line = token.line
        column = token.column
    return Diagnostic(
        kind=kind,
        message=message,
        module_name=module_name,
        filename=filename,
        line=line,
        column=column,
    )


def diag_from_exception(error: Exception) -> Diagnostic:
    """
    Convert a registration or resolution failure into an error diagnostic.

    Anything that is not one of the known failure kinds is a bug and is re-raised.
    """
    if isinstance(error, LexerError):
        return Diagnostic(
            kind="error",
            message=f"syntax: {error.message}",
            filename=error.filename,
            line=error.line,
            column=error.column,
        )
    if isinstance(error, ParseError):
        return diag_from_token(
            kind="error",
            message=f"syntax: {error.message}",
            module_name=None,
            filename=error.filename,
            token=error.token,
        )
    if isinstance(error, UnresolvedImportError):
        span = error.span
        return Diagnostic(
            kind="error",
            message=f"import: {error.message}",
            module_name=error.module_name,
            filename=error.filename,
            line=span.start_line if span else None,
            column=span.start_column if span else None,
            end_line=span.end_line if span else None,
            end_column=span.end_column if span else None,
        )
    if isinstance(error, ImportCycleError):
        return Diagnostic(kind="error", message=f"import: {error.message}")
    if isinstance(error, SourceReadError):
        return Diagnostic(kind="error", message=f"file: {error.message}")
    if isinstance(error, (DuplicateModuleError, WorkingSetFrozenError)):
        return Diagnostic(kind="error", message=f"input: {error.message}")
    if isinstance(error, OutputCollisionError):
        return Diagnostic(kind="error", message=f"output: {error.message}")
    if isinstance(error, PreprocessorError):
        return Diagnostic(kind="error", message=error.message)
    if isinstance(error, AddressError):
        return Diagnostic(kind="error", message=f"input: {error}")
    raise error
