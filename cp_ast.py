#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional

from cp_address import Address


# ==========================
# AST definitions
# ==========================


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- import locations ---

class ImportLocationKind(Enum):
    ADDRESS = "address"        # import Foo from 0x01
    STRING = "string"          # import Foo from "./Foo.cdc"
    IDENTIFIER = "identifier"  # import Crypto


@dataclass(frozen=True)
class ImportLocation:
    kind: ClassVar[ImportLocationKind]


@dataclass(frozen=True)
class AddressLocation(ImportLocation):
    """An already deployed contract; needs no resolution."""
    kind: ClassVar[ImportLocationKind] = ImportLocationKind.ADDRESS
    address: Address

    def __str__(self) -> str:
        return self.address.literal()


@dataclass(frozen=True)
class StringLocation(ImportLocation):
    """A source path or symbolic name, spelled exactly as between the quotes."""
    kind: ClassVar[ImportLocationKind] = ImportLocationKind.STRING
    path: str

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class IdentifierLocation(ImportLocation):
    """A name known to the target chain, such as a built-in contract; needs no resolution."""
    kind: ClassVar[ImportLocationKind] = ImportLocationKind.IDENTIFIER
    name: str

    def __str__(self) -> str:
        return self.name


# --- declarations ---

@dataclass
class ImportDeclaration(Node):
    identifiers: List[str]  # empty for `import "./Foo.cdc"`
    location: ImportLocation


@dataclass
class Program(Node):
    imports: List[ImportDeclaration]
    filename: Optional[str] = field(default=None, repr=False, compare=False, kw_only=True)

    def import_declarations(self) -> List[ImportDeclaration]:
        return list(self.imports)

    def file_imports(self) -> List[str]:
        """String locations in declaration order, duplicates preserved; address and identifier imports are left out."""
        return [
            imp.location.path
            for imp in self.imports
            if imp.location.kind is ImportLocationKind.STRING
        ]

    def has_file_imports(self) -> bool:
        return len(self.file_imports()) > 0

    def find_import(self, location: str) -> Optional[ImportDeclaration]:
        """First declaration importing from the string location `location`, if any."""
        for imp in self.imports:
            if imp.location.kind is ImportLocationKind.STRING and imp.location.path == location:
                return imp
        return None
