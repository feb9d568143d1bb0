#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
Failures raised while registering contracts and resolving their imports.

Every failure aborts the operation in progress; nothing is retried and no partial
result is returned. The command layer turns these into diagnostics.
"""

from typing import List, Optional

from cp_ast import Span


class PreprocessorError(Exception):
    """Base class for registration and resolution failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SourceReadError(PreprocessorError):
    """Raised when a contract source file cannot be read."""

    def __init__(self, source_path: str, reason: str):
        super().__init__(f"[PRE-0010] cannot read contract source '{source_path}': {reason}")
        self.source_path = source_path
        self.reason = reason


class DuplicateModuleError(PreprocessorError):
    """Raised when a second contract is registered at an already used source path."""

    def __init__(self, source_path: str, existing_name: str):
        super().__init__(
            f"[PRE-0020] contract source '{source_path}' is already registered as '{existing_name}'"
        )
        self.source_path = source_path
        self.existing_name = existing_name


class WorkingSetFrozenError(PreprocessorError):
    """Raised when a contract is registered after import resolution has started."""

    def __init__(self, name: str):
        super().__init__(
            f"[PRE-0021] cannot register contract '{name}': imports have already been resolved"
        )
        self.name = name


class UnresolvedImportError(PreprocessorError):
    """Raised when an import location matches neither a registered contract nor an alias."""

    def __init__(
        self,
        module_name: str,
        location: str,
        import_path: str,
        filename: Optional[str] = None,
        span: Optional[Span] = None,
    ):
        super().__init__(
            f"[PRE-0030] import from '{module_name}' could not be resolved: \"{location}\" "
            f"(looked up as '{import_path}'), make sure the import path is correct or configure an alias"
        )
        self.module_name = module_name
        self.location = location
        self.import_path = import_path
        self.filename = filename
        self.span = span


class ImportCycleError(PreprocessorError):
    """Raised when a cyclic import is detected; `cycle` lists the contract names, first == last."""

    def __init__(self, cycle: List[str]):
        super().__init__(f"[PRE-0040] cyclic import detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class OutputCollisionError(PreprocessorError):
    """Raised when two contracts would be written to the same output file."""

    def __init__(self, output_path: str, first: str, second: str):
        super().__init__(
            f"[PRE-0050] contracts '{first}' and '{second}' would both be written to '{output_path}'"
        )
        self.output_path = output_path
        self.first = first
        self.second = second
