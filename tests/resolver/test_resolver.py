#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from cp_context import PreprocessorContext
from cp_errors import UnresolvedImportError
from cp_parser import ParseError
from cp_resolver import Resolver


SCRIPT = """\
import Token from "../contracts/Token.cdc"
import Registry from "./Registry.cdc"
import Crypto from 0x0ae53cb6e3f42a79

access(all) fun main(): Int { return 1 }
"""


def test_has_file_imports():
    assert Resolver(SCRIPT).has_file_imports()
    assert not Resolver("import Crypto from 0x01\n").has_file_imports()
    assert not Resolver("access(all) fun main() {}\n").has_file_imports()


def test_file_imports_in_source_order():
    assert Resolver(SCRIPT).file_imports() == ["../contracts/Token.cdc", "./Registry.cdc"]


def test_resolve_from_contracts_and_aliases():
    resolver = Resolver(SCRIPT, filename="scripts/get.cdc")

    resolved = resolver.resolve_imports(
        "scripts/get.cdc",
        {"./contracts/Token.cdc": "0x01"},
        {"Registry": "0x0a"},
    )

    assert resolved.splitlines()[:3] == [
        "import Token from 0x01",
        "import Registry from 0x0a",
        "import Crypto from 0x0ae53cb6e3f42a79",
    ]
    assert resolved.endswith("access(all) fun main(): Int { return 1 }\n")


def test_contract_path_takes_precedence_over_alias():
    resolver = Resolver('import Token from "./Token.cdc"\n')

    resolved = resolver.resolve_imports("Main.cdc", {"Token.cdc": "01"}, {"Token": "02"})

    assert resolved == "import Token from 0x01\n"


def test_code_without_file_imports_is_unchanged():
    code = "import Crypto from 0x01\naccess(all) fun main() {}\n"

    assert Resolver(code).resolve_imports("main.cdc", {}) == code


def test_unresolved_import_raises():
    resolver = Resolver('\n  import Nope from "./Nope.cdc"\n', filename="tx/send.cdc")

    with pytest.raises(UnresolvedImportError) as excinfo:
        resolver.resolve_imports("tx/send.cdc", {"tx/Other.cdc": "01"}, {"Other": "02"})

    err = excinfo.value
    assert err.location == "./Nope.cdc"
    assert err.import_path == "tx/Nope.cdc"
    assert err.filename == "tx/send.cdc"
    assert (err.span.start_line, err.span.start_column) == (2, 3)


def test_repeated_location_rewritten_once_by_default():
    code = 'import A from "./A.cdc"\nlet s = "./A.cdc"\n'

    assert Resolver(code).resolve_imports("m.cdc", {"A.cdc": "01"}) == 'import A from 0x01\nlet s = "./A.cdc"\n'


def test_repeated_location_with_replace_all():
    code = 'import A from "./A.cdc"\nimport A2 from "./A.cdc"\n'
    context = PreprocessorContext(replace_all_occurrences=True)

    resolved = Resolver(code, context=context).resolve_imports("m.cdc", {"A.cdc": "01"})

    assert resolved == "import A from 0x01\nimport A2 from 0x01\n"


def test_custom_source_extensions_for_alias_keys():
    code = 'import Lib from "./lib/Lib.cadence"\n'
    context = PreprocessorContext(source_extensions=(".cadence",))

    resolved = Resolver(code, context=context).resolve_imports("m.cdc", {}, {"Lib": "0x0b"})

    assert resolved == "import Lib from 0x0b\n"


def test_syntax_error_at_construction():
    with pytest.raises(ParseError):
        Resolver('import A from "./A.cdc" )\n')


def test_bare_identifier_imports_need_no_resolution():
    code = 'import Crypto\nimport A from "./A.cdc"\n'

    resolved = Resolver(code).resolve_imports("m.cdc", {"A.cdc": "01"})

    assert resolved == "import Crypto\nimport A from 0x01\n"
