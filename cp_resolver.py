#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Dict, List, Mapping, Optional

from cp_address import Address, AddressLike
from cp_context import PreprocessorContext
from cp_errors import UnresolvedImportError
from cp_logger import log_debug, log_stage
from cp_parser import ProgramParser, parse_program
from cp_paths import ImportPaths
from cp_transpile import replace_imports


class Resolver:
    """
    Resolves the file imports of a single piece of code (a script or a transaction)
    straight to addresses, without building a dependency graph.

    The code is parsed when the resolver is created.
    """

    def __init__(
        self,
        code: str,
        filename: str = "<input>",
        context: Optional[PreprocessorContext] = None,
        parser: ProgramParser = parse_program,
    ):
        self.code = code
        self.filename = filename
        self.context = context or PreprocessorContext.default()
        self.paths = ImportPaths(self.context.source_extensions)
        self.program = parser(code, filename)

    def has_file_imports(self) -> bool:
        """Check if there is a file import statement present in the code."""
        return self.program.has_file_imports()

    def file_imports(self) -> List[str]:
        return self.program.file_imports()

    def resolve_imports(
        self,
        code_path: str,
        contracts: Mapping[str, AddressLike],
        aliases: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Return the code with every file import replaced by an address.

        Resolving is based on `code_path`: each import location is resolved relative
        to it and looked up in `contracts` (source path -> target address); failing
        that, its alias key is looked up in `aliases` (alias key -> hex address).

        Raises UnresolvedImportError for the first import matching neither.
        """
        log_stage(self.context, "Resolving imports", code_path)
        aliases = aliases if aliases is not None else {}
        source_targets = self._source_targets(contracts)
        resolved: Dict[str, Address] = {}

        for location in self.file_imports():
            if location in resolved:
                continue
            import_path = self.paths.normalize(code_path, location)
            alias_key = self.paths.alias_key(location)

            if import_path in source_targets:
                resolved[location] = source_targets[import_path]
            elif alias_key in aliases:
                resolved[location] = Address.coerce(aliases[alias_key])
            else:
                decl = self.program.find_import(location)
                raise UnresolvedImportError(
                    code_path,
                    location,
                    import_path,
                    filename=self.filename,
                    span=decl.span if decl is not None else None,
                )
            log_debug(self.context, f"{code_path}: \"{location}\" -> {resolved[location].literal()}")

        return replace_imports(self.code, resolved.items(), self.context.replace_all_occurrences)

    def _source_targets(self, contracts: Mapping[str, AddressLike]) -> Dict[str, Address]:
        """Map cleaned contract source paths to their target addresses."""
        return {
            self.paths.clean(source): Address.coerce(target)
            for source, target in contracts.items()
        }
