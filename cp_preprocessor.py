#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from cp_address import Address, AddressLike
from cp_context import PreprocessorContext
from cp_errors import ImportCycleError, UnresolvedImportError
from cp_graph import DependencyGraph, GraphCycleError
from cp_logger import log_debug, log_info, log_stage
from cp_module import Module, WorkingSet, read_source
from cp_parser import ProgramParser, parse_program
from cp_paths import ImportPaths


@dataclass
class Deployment:
    """One step of a deployment: submit `code` as `module` to account `target`."""
    module: Module
    code: str
    target: Address


class Preprocessor:
    """
    Prepares a set of contracts for deployment:
      - register each contract with its target address (source is read and parsed immediately)
      - resolve every file import to a registered contract or to a configured alias
      - order contracts so that each one follows everything it imports
      - rewrite import locations to the target addresses

    Entry points:
      - add_contract_source(name, path, target) / add_contract_code(name, path, code, target)
      - prepare_for_deployment(): contracts in deployment order.
      - deployment_plan(): (contract, rewritten code, target) in deployment order.

    Instances are not safe for concurrent use; callers must serialize access.
    """

    def __init__(
        self,
        aliases: Optional[Mapping[str, str]] = None,
        context: Optional[PreprocessorContext] = None,
        parser: ProgramParser = parse_program,
    ):
        # Alias table: alias key -> hex address. Owned by the caller, only read here.
        self.aliases: Mapping[str, str] = aliases if aliases is not None else {}
        self.context = context or PreprocessorContext.default()
        self.paths = ImportPaths(self.context.source_extensions)
        self.parser = parser
        self.modules = WorkingSet()
        self._resolved = False

    # --- Public API ---

    def add_contract_source(self, name: str, source_path: str, target: AddressLike) -> Module:
        """Read, parse and register the contract at `source_path`."""
        self.modules.check_open(name, self.paths.clean(source_path))
        code = read_source(source_path)
        return self.add_contract_code(name, source_path, code, target)

    def add_contract_code(self, name: str, source_path: str, code: str, target: AddressLike) -> Module:
        """Parse and register contract `code` as if it had been read from `source_path`."""
        key = self.paths.clean(source_path)
        self.modules.check_open(name, key)
        address = Address.coerce(target)

        program = self.parser(code, source_path)
        module = Module(self.modules.next_id(), name, key, address, code, program)
        self.modules.add(module)
        log_debug(
            self.context,
            f"Registered contract '{name}' from {key} for {address.literal()} "
            f"({len(program.file_imports())} file import(s))",
        )
        return module

    def prepare_for_deployment(self) -> List[Module]:
        """
        Resolve imports for the whole working set and return the contracts in deployment order.

        Raises UnresolvedImportError or ImportCycleError. After the first call no more
        contracts can be registered; repeated calls return the same order.
        """
        self.modules.freeze()
        if not self._resolved:
            self._resolve_imports()
            self._resolved = True

        log_stage(self.context, "Sorting contracts by deployment order")
        ordered = sort_by_deployment_order(self.modules.modules())
        log_info(self.context, f"Deployment order: {', '.join(m.name for m in ordered) or '<empty>'}")
        return ordered

    def deployment_plan(self) -> List[Deployment]:
        replace_all = self.context.replace_all_occurrences
        return [
            Deployment(module=m, code=m.transpiled_code(replace_all), target=m.target)
            for m in self.prepare_for_deployment()
        ]

    # --- Internal helpers ---

    def _resolve_imports(self) -> None:
        log_stage(self.context, f"Resolving imports of {len(self.modules)} contract(s)")

        # Look everything up first; modules are only touched once the whole batch resolved.
        links: List[Tuple[Module, Dict[str, Module], Dict[str, Address]]] = []
        for module in self.modules:
            dependencies: Dict[str, Module] = {}
            aliases: Dict[str, Address] = {}

            for location in module.import_locations():
                import_path = self.paths.normalize(module.source_path, location)
                alias_key = self.paths.alias_key(location)
                dep = self.modules.get(import_path)

                if dep is not None:
                    log_debug(self.context, f"{module.name}: \"{location}\" -> contract '{dep.name}'")
                    dependencies[location] = dep
                elif alias_key in self.aliases:
                    log_debug(self.context, f"{module.name}: \"{location}\" -> alias '{alias_key}'")
                    aliases[location] = Address.coerce(self.aliases[alias_key])
                else:
                    decl = module.program.find_import(location)
                    raise UnresolvedImportError(
                        module.name,
                        location,
                        import_path,
                        filename=module.source_path,
                        span=decl.span if decl is not None else None,
                    )

            links.append((module, dependencies, aliases))

        for module, dependencies, aliases in links:
            for location, dep in dependencies.items():
                module.add_dependency(location, dep)
            for location, target in aliases.items():
                module.add_alias(location, target)


def sort_by_deployment_order(modules: Sequence[Module]) -> List[Module]:
    """
    Sort the given contracts in order of deployment.

    The resulting ordering ensures that each contract is deployed after all of its
    dependencies are deployed. Raises ImportCycleError if an import cycle exists.

    Contracts are graph nodes (keyed by id) and imports are edges from the imported
    contract to the importing one; nodes and edges are added in registration order.
    """
    by_id = {m.id: m for m in modules}
    graph = DependencyGraph()

    for m in modules:
        graph.add_node(m.id)

    for m in modules:
        for dep in m.dependencies.values():
            graph.add_edge(dep.id, m.id)

    try:
        sorted_ids = graph.topological_sort()
    except GraphCycleError as e:
        raise ImportCycleError([by_id[node].name for node in e.nodes]) from e

    return [by_id[node] for node in sorted_ids]
