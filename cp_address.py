#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Union

HEX_CHARS = "0123456789abcdefABCDEF"


class AddressError(ValueError):
    """Raised when text cannot be parsed as a hexadecimal account address."""
    pass


@dataclass(frozen=True)
class Address:
    """
    An account address, kept as the raw bytes spelled by its hex text.

    Only the syntax is checked: an optional 0x prefix, hex digits and `_`
    separators. No particular address length is enforced.
    """
    value: bytes

    @classmethod
    def from_hex(cls, text: str) -> "Address":
        digits = text.strip()
        if digits[:2] in ("0x", "0X"):
            digits = digits[2:]
        digits = digits.replace("_", "")
        if not digits or any(c not in HEX_CHARS for c in digits):
            raise AddressError(f"[ADR-0010] invalid address {text!r}: expected hexadecimal digits")
        if len(digits) % 2:
            digits = "0" + digits
        return cls(bytes.fromhex(digits))

    @classmethod
    def coerce(cls, value: Union["Address", str]) -> "Address":
        if isinstance(value, Address):
            return value
        return cls.from_hex(value)

    def hex(self) -> str:
        return self.value.hex()

    def literal(self) -> str:
        """The address as it is written in contract code, e.g. `0x01`."""
        return f"0x{self.hex()}"

    def __str__(self) -> str:
        return self.hex()


AddressLike = Union[Address, str]
