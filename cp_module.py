#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from pathlib import Path
from typing import Dict, Iterator, List, Optional

from cp_address import Address
from cp_ast import Program
from cp_errors import DuplicateModuleError, SourceReadError, WorkingSetFrozenError
from cp_transpile import replace_imports


def read_source(source_path: str) -> str:
    """Read a contract source file as UTF-8 text, raising SourceReadError on failure."""
    path = Path(source_path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SourceReadError(source_path, "file not found")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(source_path, str(e))


class Module:
    """
    A contract source unit destined for one target address.

    `code` and `target` are fixed at creation. Resolution only fills in
    `dependencies` (import location -> registered module) and `aliases`
    (import location -> configured address); the rewritten code is derived
    from them on every call to transpiled_code().
    """

    def __init__(
        self,
        index: int,
        name: str,
        source_path: str,
        target: Address,
        code: str,
        program: Program,
    ):
        self._index = index
        self._name = name
        self._source_path = source_path
        self._target = target
        self._code = code
        self._program = program
        self._dependencies: Dict[str, "Module"] = {}
        self._aliases: Dict[str, Address] = {}

    def __repr__(self) -> str:
        return f"Module({self._name!r}, {self._source_path!r}, {self._target.literal()})"

    @property
    def id(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_path(self) -> str:
        return self._source_path

    @property
    def target(self) -> Address:
        return self._target

    @property
    def code(self) -> str:
        return self._code

    @property
    def program(self) -> Program:
        return self._program

    @property
    def dependencies(self) -> Dict[str, "Module"]:
        return dict(self._dependencies)

    @property
    def aliases(self) -> Dict[str, Address]:
        return dict(self._aliases)

    def import_locations(self) -> Iterator[str]:
        """Yield the string import locations of this module; each call starts over."""
        yield from self._program.file_imports()

    def add_dependency(self, location: str, dep: "Module") -> None:
        self._dependencies[location] = dep

    def add_alias(self, location: str, target: Address) -> None:
        self._aliases[location] = target

    def transpiled_code(self, replace_all: bool = False) -> str:
        """Code with every resolved import location replaced by its target address literal."""
        replacements = [(location, dep.target) for location, dep in self._dependencies.items()]
        replacements.extend(self._aliases.items())
        return replace_imports(self._code, replacements, replace_all)


class WorkingSet:
    """
    Registered modules keyed by normalized source path, in registration order.

    Source paths are unique. Once frozen (resolution has started) no more modules
    can be added.
    """

    def __init__(self) -> None:
        self._modules: Dict[str, Module] = {}
        self._frozen = False

    def __contains__(self, source_path: str) -> bool:
        return source_path in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(list(self._modules.values()))

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def next_id(self) -> int:
        return len(self._modules)

    def get(self, source_path: str) -> Optional[Module]:
        return self._modules.get(source_path)

    def modules(self) -> List[Module]:
        return list(self._modules.values())

    def check_open(self, name: str, source_path: str) -> None:
        if self._frozen:
            raise WorkingSetFrozenError(name)
        existing = self._modules.get(source_path)
        if existing is not None:
            raise DuplicateModuleError(source_path, existing.name)

    def add(self, module: Module) -> None:
        self.check_open(module.name, module.source_path)
        self._modules[module.source_path] = module
