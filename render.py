"""Decimal, hexadecimal and grouped binary views of an evaluation result."""
from __future__ import annotations
from typing import List, Tuple

import numpy as np

GROUP_WIDTH = 4
INDEX_WIDTH = 4


def to_unsigned64(value: int) -> int:
    # Negative results are shown as their 64-bit two's complement.
    return int(np.int64(value).view(np.uint64))


def render_decimal(value: int) -> str:
    return str(value)


def render_hex(value: int) -> str:
    return f"0x{to_unsigned64(value):X}"


def padded_binary(value: int) -> str:
    bits = format(to_unsigned64(value), "b")
    padding = (GROUP_WIDTH - len(bits) % GROUP_WIDTH) % GROUP_WIDTH
    return "0" * padding + bits


def split_into_groups(bits: str) -> List[str]:
    return [bits[i:i + GROUP_WIDTH] for i in range(0, len(bits), GROUP_WIDTH)]


def bit_positions(bits: str) -> List[int]:
    """Exponent of the least significant bit of each group, most significant first."""
    top = len(bits) - GROUP_WIDTH
    return [top - i * GROUP_WIDTH for i in range(len(bits) // GROUP_WIDTH)]


def render_binary(value: int) -> Tuple[str, str]:
    bits = padded_binary(value)
    groups_line = " ".join(split_into_groups(bits))
    index_line = " ".join(f"{position:>{INDEX_WIDTH}}" for position in bit_positions(bits))
    return groups_line, index_line


def render_result(value: int) -> List[str]:
    groups_line, index_line = render_binary(value)
    return [
        f"Decimal: {render_decimal(value)}",
        f"Hex: {render_hex(value)}",
        "Binary:",
        groups_line,
        index_line,
    ]
