#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cp_context import PreprocessorContext
from cp_preprocessor import Preprocessor


@pytest.fixture
def repo_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def temp_project(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def write_source(temp_project: Path):
    """Write contract source to a path relative to the temporary project.

    Usage:
        def test_something(write_source):
            path = write_source("contracts/Token.cdc", '''
                access(all) contract Token {}
            ''')
    """

    def _write(rel_path: str, content: str) -> Path:
        file_path = temp_project / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(dedent(content))
        return file_path

    return _write


@pytest.fixture
def context() -> PreprocessorContext:
    return PreprocessorContext.default()


@pytest.fixture
def abc_preprocessor() -> Preprocessor:
    """
    A (no imports), B imports A, C imports B; targets 0x01, 0x02, 0x03.
    Registered in reverse order so that registration order alone cannot explain the result.
    """
    pp = Preprocessor()
    pp.add_contract_code(
        "C",
        "contracts/C.src",
        'import B from "./B.src"\naccess(all) contract C {}\n',
        "0x03",
    )
    pp.add_contract_code(
        "B",
        "contracts/B.src",
        'import A from "./A.src"\naccess(all) contract B {}\n',
        "0x02",
    )
    pp.add_contract_code("A", "contracts/A.src", "access(all) contract A {}\n", "0x01")
    return pp
