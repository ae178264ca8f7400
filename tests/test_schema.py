"""Tests for stockflow.data.schema."""

from __future__ import annotations

from stockflow.config import CODE_ALIASES, CODE_POSITION
from stockflow.data.schema import (
    canonical_code,
    index_by_code,
    raw_change_rate,
    raw_trade_value,
    resolve_field,
    stock_code,
    stock_name,
)


def _korean_row(code: str = "005930", value: object = 1500) -> dict[str, object]:
    """Row with localised headers, full 8-column layout."""
    return {
        "종목코드": code,
        "종목명": "삼성전자",
        "현재가": 71000,
        "대비": 500,
        "거래량": 100,
        "등락률": 0.0071,
        "시가총액": 1,
        "거래대금": value,
    }


class TestResolveField:
    """Alias lookup with positional fallback."""

    def test_first_alias_wins(self) -> None:
        record = {"Code": "B", "종목코드": "A"}
        assert resolve_field(record, ("종목코드", "Code"), 0) == "A"

    def test_second_alias_used_when_first_absent(self) -> None:
        record = {"x": 1, "Code": "B"}
        assert resolve_field(record, ("종목코드", "Code"), 0) == "B"

    def test_positional_fallback(self) -> None:
        record = {"col_a": "AAA", "col_b": "Acme"}
        assert resolve_field(record, ("종목명", "Name"), 1) == "Acme"

    def test_position_out_of_range_is_none(self) -> None:
        record = {"col_a": "AAA"}
        assert resolve_field(record, ("거래대금",), 7) is None

    def test_none_record(self) -> None:
        assert resolve_field(None, CODE_ALIASES, CODE_POSITION) is None

    def test_empty_record(self) -> None:
        assert resolve_field({}, CODE_ALIASES, CODE_POSITION) is None

    def test_alias_present_with_falsy_value(self) -> None:
        # Present key is returned even when its value is falsy.
        record = {"a": 5, "거래대금": 0}
        assert resolve_field(record, ("거래대금",), 0) == 0


class TestCanonicalCode:
    def test_strips_strings(self) -> None:
        assert canonical_code("  005930 ") == "005930"

    def test_integral_float(self) -> None:
        assert canonical_code(5930.0) == "5930"

    def test_int(self) -> None:
        assert canonical_code(5930) == "5930"

    def test_non_integral_float_kept(self) -> None:
        assert canonical_code(1.5) == "1.5"

    def test_missing(self) -> None:
        assert canonical_code(None) is None
        assert canonical_code("   ") is None
        assert canonical_code(float("nan")) is None


class TestIdentityFields:
    def test_localised_headers(self) -> None:
        row = _korean_row()
        assert stock_code(row) == "005930"
        assert stock_name(row) == "삼성전자"
        assert raw_change_rate(row) == 0.0071
        assert raw_trade_value(row) == 1500

    def test_romanised_headers(self) -> None:
        row = {"Code": "AAA", "Name": "Acme", "ChangeRate": "1.5%"}
        assert stock_code(row) == "AAA"
        assert stock_name(row) == "Acme"
        assert raw_change_rate(row) == "1.5%"

    def test_positional_layout(self) -> None:
        values = ["BBB", "Beta", 0, 0, 0, "-2.1%", 0, 900]
        row = {f"c{i}": v for i, v in enumerate(values)}
        assert stock_code(row) == "BBB"
        assert stock_name(row) == "Beta"
        assert raw_change_rate(row) == "-2.1%"
        assert raw_trade_value(row) == 900


class TestIndexByCode:
    def test_first_occurrence_wins(self) -> None:
        rows = [_korean_row("A", 1), _korean_row("B", 2), _korean_row("A", 3)]
        index = index_by_code(rows)
        assert set(index) == {"A", "B"}
        assert raw_trade_value(index["A"]) == 1

    def test_rows_without_code_skipped(self) -> None:
        rows = [{}, {"종목코드": None}, _korean_row("A")]
        assert list(index_by_code(rows)) == ["A"]

    def test_numeric_and_text_codes_join(self) -> None:
        index = index_by_code([{"Code": 5930.0}])
        assert "5930" in index
