"""Tests for stockflow.metrics.derivation."""

from __future__ import annotations

import numpy as np
import pytest

from stockflow.metrics.derivation import (
    change_rate,
    parse_number,
    parse_rate,
    trade_value,
)


class TestParseRate:
    """Change-rate normalisation."""

    def test_percentage_number_unchanged(self) -> None:
        assert parse_rate(2.34) == pytest.approx(2.34)

    def test_percentage_string(self) -> None:
        assert parse_rate("2.34%") == pytest.approx(2.34)

    def test_fraction_rescaled(self) -> None:
        assert parse_rate(0.0234) == pytest.approx(2.34)

    def test_negative_fraction_rescaled(self) -> None:
        assert parse_rate(-0.05) == pytest.approx(-5.0)

    def test_thousands_separator(self) -> None:
        assert parse_rate("1,234.5%") == pytest.approx(1234.5)

    def test_small_true_percentage_also_rescaled(self) -> None:
        # Known heuristic limitation: a genuine 0.8% reads as 80%.
        assert parse_rate("0.8%") == pytest.approx(80.0)

    def test_exactly_one_not_rescaled(self) -> None:
        assert parse_rate(1.0) == 1.0
        assert parse_rate(-1.0) == -1.0

    def test_zero(self) -> None:
        assert parse_rate(0) == 0.0
        assert parse_rate("0%") == 0.0

    def test_leading_numeric_prefix(self) -> None:
        assert parse_rate(" 3.5 pct") == pytest.approx(3.5)

    @pytest.mark.parametrize("value", ["", "n/a", None, True, [1], float("nan")])
    def test_unparsable_is_zero(self, value: object) -> None:
        assert parse_rate(value) == 0.0

    def test_numpy_scalar(self) -> None:
        assert parse_rate(np.float64(0.0234)) == pytest.approx(2.34)


class TestParseNumber:
    def test_numbers(self) -> None:
        assert parse_number(1500) == 1500.0
        assert parse_number(-2.5) == -2.5
        assert parse_number(np.int64(7)) == 7.0

    def test_numeric_string(self) -> None:
        assert parse_number(" 1200 ") == 1200.0
        assert parse_number("-3.5e2") == -350.0

    def test_thousands_separator_not_accepted(self) -> None:
        assert parse_number("1,200") == 0.0

    @pytest.mark.parametrize("value", ["1_000", "1_0.5", "nan", "infinity", "-inf", "0x10"])
    def test_non_decimal_strings_are_zero(self, value: str) -> None:
        assert parse_number(value) == 0.0

    @pytest.mark.parametrize("value", ["", "  ", "abc", None, False, True, float("inf")])
    def test_unparsable_is_zero(self, value: object) -> None:
        assert parse_number(value) == 0.0


class TestRecordAccessors:
    def test_change_rate_by_alias(self) -> None:
        assert change_rate({"ChangeRate": "-1.25%"}) == pytest.approx(-1.25)

    def test_trade_value_by_alias(self) -> None:
        assert trade_value({"거래대금": "2500"}) == 2500.0

    def test_trade_value_missing_record(self) -> None:
        assert trade_value(None) == 0.0

    def test_trade_value_short_record(self) -> None:
        assert trade_value({"Code": "A", "Name": "x"}) == 0.0
