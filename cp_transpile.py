#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Iterable, Tuple

from cp_address import Address


def replace_import(code: str, location: str, target: Address, replace_all: bool = False) -> str:
    """
    Replace the quoted import location `"<location>"` with the address literal `0x<hex>`.

    Only the first occurrence is replaced unless `replace_all` is set.
    """
    return code.replace(f'"{location}"', target.literal(), -1 if replace_all else 1)


def replace_imports(
    code: str,
    replacements: Iterable[Tuple[str, Address]],
    replace_all: bool = False,
) -> str:
    """Apply replace_import for each (location, target) pair, in order; `code` itself is untouched."""
    for location, target in replacements:
        code = replace_import(code, location, target, replace_all)
    return code
