"""Numeric literal parsing with partial support for Verilog-style numbers."""

from __future__ import annotations

import re
from dataclasses import dataclass

_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"0[xX]([0-9a-fA-F]+)")
_VERILOG = re.compile(r"(?:([0-9]+)\s*)?'[sS]?([bBoOdDhH])\s*([0-9a-fA-F_]+)")

_BASES = {"b": 2, "o": 8, "d": 10, "h": 16}


@dataclass(frozen=True)
class Number:
    """A parsed unsigned number and its declared bit width (0 if none was given)."""

    value: int
    width: int = 0

    @classmethod
    def parse(cls, text: str) -> "Number":
        """Parse decimal, ``0x`` hexadecimal or Verilog sized/based literals.

        Raises ValueError when the text is not a number.
        """
        if text is None:
            raise ValueError("no number given")
        stripped = text.strip()
        if not stripped:
            raise ValueError("empty number")

        if _DECIMAL.fullmatch(stripped):
            return cls(int(stripped, 10))

        match = _HEX.fullmatch(stripped)
        if match:
            return cls(int(match.group(1), 16))

        match = _VERILOG.fullmatch(stripped)
        if match:
            width_text, base_char, digits = match.groups()
            digits = digits.replace("_", "")
            if not digits:
                raise ValueError(f"invalid number: {text!r}")
            base = _BASES[base_char.lower()]
            try:
                value = int(digits, base)
            except ValueError:
                raise ValueError(f"invalid digits for base {base}: {text!r}") from None
            width = int(width_text) if width_text else 0
            return cls(value, width)

        raise ValueError(f"invalid number: {text!r}")