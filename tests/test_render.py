import pytest

from render import (
    bit_positions,
    padded_binary,
    render_binary,
    render_decimal,
    render_hex,
    render_result,
    split_into_groups,
    to_unsigned64,
)


def test_binary_of_five():
    assert padded_binary(5) == "0101"
    assert render_binary(5) == ("0101", "   0")


def test_binary_of_eighteen():
    assert padded_binary(18) == "00010010"
    assert split_into_groups("00010010") == ["0001", "0010"]
    assert render_binary(18) == ("0001 0010", "   4    0")


def test_binary_of_zero():
    assert render_binary(0) == ("0000", "   0")


def test_binary_exact_multiple_of_four_needs_no_padding():
    assert padded_binary(0xF0) == "11110000"
    assert bit_positions("11110000") == [4, 0]


def test_wide_value_index_line():
    groups, indices = render_binary(0x123456789AB)
    assert groups.split() == ["0001", "0010", "0011", "0100", "0101", "0110", "0111", "1000", "1001", "1010", "1011"]
    assert indices.split() == [str(n) for n in range(40, -1, -4)]
    assert indices.startswith("  40    36")


def test_hex_is_upper_case_with_prefix():
    assert render_hex(26) == "0x1A"
    assert render_hex(0) == "0x0"
    assert render_hex(0xDEADBEEF) == "0xDEADBEEF"


@pytest.mark.parametrize("n", [0, 1, 15, 16, 255, 4096, 123456789, 2 ** 63 - 1])
def test_hex_round_trips_decimal(n):
    assert int(render_hex(int(render_decimal(n))), 16) == n


def test_negative_values_use_twos_complement():
    assert to_unsigned64(-1) == 2 ** 64 - 1
    assert render_hex(-1) == "0xFFFFFFFFFFFFFFFF"
    assert render_hex(-26) == "0xFFFFFFFFFFFFFFE6"
    groups, indices = render_binary(-1)
    assert groups == " ".join(["1111"] * 16)
    assert indices.split()[0] == "60"
    assert indices.split()[-1] == "0"


def test_minimum_value():
    assert render_hex(-(2 ** 63)) == "0x8000000000000000"
    assert padded_binary(-(2 ** 63)) == "1" + "0" * 63


def test_render_result_lines():
    assert render_result(18) == [
        "Decimal: 18",
        "Hex: 0x12",
        "Binary:",
        "0001 0010",
        "   4    0",
    ]


def test_render_result_negative_decimal_keeps_sign():
    assert render_result(-3)[0] == "Decimal: -3"
