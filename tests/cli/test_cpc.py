#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

import cpc
from cp_context import LogLevel


@pytest.fixture(autouse=True)
def _no_env_aliases(monkeypatch):
    monkeypatch.delenv(cpc.ALIASES_ENV, raising=False)


@pytest.fixture
def chain(write_source):
    a = write_source("contracts/A.cdc", "access(all) contract A {}\n")
    b = write_source("contracts/B.cdc", 'import A from "./A.cdc"\naccess(all) contract B {}\n')
    c = write_source("contracts/C.cdc", 'import B from "./B.cdc"\nimport Ext from "./lib/Ext.cdc"\n')
    return a, b, c


def _run_main(argv):
    with pytest.raises(SystemExit) as exc:
        cpc.main(argv)
    return exc.value.code


def _patch_handlers(monkeypatch):
    calls = []

    def _mk_handler(name):
        def _handler(args):
            calls.append((name, args))
            return 0

        return _handler

    monkeypatch.setattr(cpc, "cmd_order", _mk_handler("order"))
    monkeypatch.setattr(cpc, "cmd_resolve", _mk_handler("resolve"))
    monkeypatch.setattr(cpc, "cmd_imports", _mk_handler("imports"))
    monkeypatch.setattr(cpc, "cmd_tok", _mk_handler("tok"))
    return calls


def test_deploy_is_an_alias_of_order(monkeypatch):
    calls = _patch_handlers(monkeypatch)

    rc = _run_main(["deploy", "-c", "A", "A.cdc", "0x01", "-a", "Ext", "04"])

    assert rc == 0
    name, args = calls[0]
    assert name == "order"
    assert args.contract == [["A", "A.cdc", "0x01"]]
    assert args.alias == [["Ext", "04"]]


def test_command_is_required(capsys):
    assert _run_main([]) == 2


def test_build_context_from_flags():
    args = cpc.argparse.Namespace(verbosity=3, log=True, ext=["cadence", ".cdc"], replace_all=True)

    context = cpc.build_context(args)

    assert context.log_level is LogLevel.DEBUG
    assert context.log_rich_format
    assert context.source_extensions == (".cadence", ".cdc")
    assert context.replace_all_occurrences


def test_build_context_defaults():
    context = cpc.build_context(cpc.argparse.Namespace())

    assert context.log_level is LogLevel.ERROR
    assert context.source_extensions == (".cdc", ".src")
    assert not context.replace_all_occurrences


def test_aliases_from_environment_overridden_by_flags(monkeypatch):
    monkeypatch.setenv(cpc.ALIASES_ENV, "Ext=0x04, Other=0x05,")
    args = cpc.argparse.Namespace(alias=[["Other", "0x06"]])

    aliases = cpc.build_aliases(cpc.build_context(args), args)

    assert aliases == {"Ext": "0x04", "Other": "0x06"}


def test_order_prints_deployment_order(chain, capsys):
    a, b, c = chain

    rc = _run_main([
        "order",
        "-c", "C", str(c), "0x03",
        "-c", "B", str(b), "0x02",
        "-c", "A", str(a), "0x01",
        "-a", "Ext", "04",
    ])

    assert rc == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        f"1. A -> 0x01 ({a})",
        f"2. B -> 0x02 ({b})",
        f"3. C -> 0x03 ({c})",
    ]


def test_order_uses_aliases_from_environment(chain, monkeypatch, capsys):
    a, b, c = chain
    monkeypatch.setenv(cpc.ALIASES_ENV, "Ext=0x04")

    rc = _run_main(["order", "-c", "C", str(c), "03", "-c", "B", str(b), "02", "-c", "A", str(a), "01", "--show-code"])

    assert rc == 0
    out = capsys.readouterr().out
    assert "=== Contract C ===\nimport B from 0x02\nimport Ext from 0x04\n" in out


def test_order_writes_rewritten_contracts(chain, tmp_path):
    a, b, _ = chain
    out_dir = tmp_path / "out"

    rc = _run_main(["order", "-c", "B", str(b), "02", "-c", "A", str(a), "01", "-o", str(out_dir)])

    assert rc == 0
    assert (out_dir / "A.cdc").read_text() == "access(all) contract A {}\n"
    assert (out_dir / "B.cdc").read_text() == "import A from 0x01\naccess(all) contract B {}\n"


def test_order_reports_unresolved_import(chain, capsys):
    a, b, c = chain

    rc = _run_main(["order", "-c", "C", str(c), "03", "-c", "B", str(b), "02", "-c", "A", str(a), "01"])

    assert rc == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "import: [PRE-0030]" in captured.err
    assert '"./lib/Ext.cdc"' in captured.err
    assert 'import Ext from "./lib/Ext.cdc"' in captured.err
    assert "^" in captured.err


def test_order_reports_cycle(write_source, capsys):
    a = write_source("A.cdc", 'import B from "./B.cdc"\n')
    b = write_source("B.cdc", 'import A from "./A.cdc"\n')

    rc = _run_main(["order", "-c", "A", str(a), "01", "-c", "B", str(b), "02"])

    assert rc == 1
    assert "[PRE-0040] cyclic import detected" in capsys.readouterr().err


def test_order_reports_missing_file(tmp_path, capsys):
    rc = _run_main(["order", "-c", "A", str(tmp_path / "missing.cdc"), "01"])

    assert rc == 1
    assert "file: [PRE-0010]" in capsys.readouterr().err


def test_order_reports_bad_environment_alias(chain, monkeypatch, capsys):
    monkeypatch.setenv(cpc.ALIASES_ENV, "Ext")

    rc = _run_main(["order"])

    assert rc == 1
    assert "[ADR-0010]" in capsys.readouterr().err


def test_resolve_prints_rewritten_code(chain, write_source, capsys):
    a, _, _ = chain
    script = write_source("scripts/get.cdc", 'import A from "../contracts/A.cdc"\nimport Ext from "./Ext.cdc"\n')

    rc = _run_main(["resolve", "-c", "A", str(a), "0x01", "-a", "Ext", "0x04", str(script)])

    assert rc == 0
    assert capsys.readouterr().out == "import A from 0x01\nimport Ext from 0x04\n"


def test_resolve_writes_output_file(write_source, tmp_path):
    script = write_source("tx.cdc", 'import Ext from "./Ext.cdc"\n')
    out = tmp_path / "resolved.cdc"

    rc = _run_main(["--replace-all", "resolve", "-a", "Ext", "04", "-o", str(out), str(script)])

    assert rc == 0
    assert out.read_text() == "import Ext from 0x04\n"


def test_imports_lists_declarations(write_source, capsys):
    src = write_source("M.cdc", 'import Crypto from 0x01\n\nimport A, B from "./AB.cdc"\n')

    rc = _run_main(["imports", str(src)])

    assert rc == 0
    assert capsys.readouterr().out.splitlines() == [
        f"{src}:1:1:\taddress  0x01  [Crypto]",
        f"{src}:3:1:\tstring   ./AB.cdc  [A, B]",
    ]


def test_imports_reports_syntax_error(write_source, capsys):
    src = write_source("Bad.cdc", "import A from\n")

    rc = _run_main(["imports", str(src)])

    assert rc == 1
    assert "syntax: [PAR-0012]" in capsys.readouterr().err


def test_tok_dumps_tokens(write_source, capsys):
    src = write_source("T.cdc", 'import A from "./A.cdc"\n')

    rc = _run_main(["tokens", str(src)])

    assert rc == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 4
    assert out[0] == f"{src}:1:1:\tIMPORT       'import'"
    assert out[3] == f"{src}:1:15:\tSTRING       './A.cdc'"


def test_tok_includes_eof_on_request(write_source, capsys):
    src = write_source("T.cdc", "")

    rc = _run_main(["tok", "-I", str(src)])

    assert rc == 0
    assert "EOF" in capsys.readouterr().out


def test_order_refuses_colliding_output_files(write_source, tmp_path, capsys):
    first = write_source("a/Token.cdc", "access(all) contract Token {}\n")
    second = write_source("b/Token.cdc", "access(all) contract Token {}\n")
    out_dir = tmp_path / "out"

    rc = _run_main(["order", "-c", "TokenA", str(first), "01", "-c", "TokenB", str(second), "02", "-o", str(out_dir)])

    assert rc == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "output: [PRE-0050]" in captured.err
    assert "'TokenA' and 'TokenB'" in captured.err
    assert not out_dir.exists()


def test_imports_lists_bare_identifier_imports(write_source, capsys):
    src = write_source("S.cdc", "import Crypto\n")

    rc = _run_main(["imports", str(src)])

    assert rc == 0
    assert capsys.readouterr().out.splitlines() == [f"{src}:1:1:\tidentifier Crypto"]
