import math
from decimal import Decimal
from fractions import Fraction

import pytest

from opskit.numbers import missing_items, to_float, to_float_numeric


@pytest.mark.parametrize("value", [3, -7, 2.5, 0])
def test_to_float_numbers(value):
    assert to_float(value) == float(value)
    assert isinstance(to_float(value), float)


def test_to_float_strings_and_bytes():
    assert to_float("2.5") == 2.5
    assert to_float("-1e3") == -1000.0
    assert to_float(b"1.5") == 1.5
    assert math.isinf(to_float("+Inf"))
    assert math.isnan(to_float("NaN"))


def test_to_float_hex_string():
    assert to_float("0x1p-2") == 0.25


def test_to_float_objects_with_float():
    assert to_float(Decimal("4.25")) == 4.25
    assert to_float(Fraction(1, 4)) == 0.25


@pytest.mark.parametrize("text", ["abc", " 1.0", "1_000", "", "1e400"])
def test_to_float_bad_text(text):
    with pytest.raises(ValueError):
        to_float(text)


@pytest.mark.parametrize("value", [True, None, object(), [1.0]])
def test_to_float_unsupported(value):
    with pytest.raises(TypeError):
        to_float(value)


def test_to_float_numeric_accepts_numbers():
    assert to_float_numeric(7) == 7.0
    assert to_float_numeric(1.25) == 1.25


@pytest.mark.parametrize("value", ["1", b"1", False, None, Decimal("1")])
def test_to_float_numeric_rejects_others(value):
    with pytest.raises(TypeError):
        to_float_numeric(value)


def test_missing_items_keeps_order():
    assert missing_items([1, 2], [4, 1, 3, 2]) == [4, 3]


def test_missing_items_none_missing():
    assert missing_items([1, 2, 3], [3, 1]) == []
    assert missing_items([], []) == []


def test_missing_items_is_subset_of_old():
    current, old = [5, 6], [1, 5, 9, 6, 2]
    result = missing_items(current, old)
    assert all(item in old and item not in current for item in result)
    assert len(result) + len([i for i in old if i in current]) == len(old)