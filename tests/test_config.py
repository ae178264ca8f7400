"""Tests for stockflow.config."""

import pytest

from stockflow.config import (
    FILTER_FIELDS,
    TIME_SERIES_ROLES,
    DashboardConfig,
    DataRole,
    FilterBounds,
    SnapshotParams,
)
from stockflow.data.models import StockRow


class TestDataRole:
    def test_slot_values(self) -> None:
        assert [r.value for r in DataRole] == ["1", "2", "3", "4"]

    def test_labels(self) -> None:
        assert DataRole.FOREIGN_FLOW.label == "3. Foreign (f_)"
        assert DataRole.INSTITUTIONAL_FLOW.label == "4. Institutional (inst_)"

    def test_time_series_roles(self) -> None:
        assert DataRole.ROSTER not in TIME_SERIES_ROLES
        assert all(r.is_time_series for r in TIME_SERIES_ROLES)
        assert not DataRole.ROSTER.is_time_series


class TestFilterBounds:
    def test_inactive_by_default(self) -> None:
        assert not FilterBounds().is_active

    def test_active_with_either_bound(self) -> None:
        assert FilterBounds(min=0).is_active
        assert FilterBounds(max=0).is_active

    def test_frozen(self) -> None:
        bounds = FilterBounds(min=1)
        with pytest.raises(AttributeError):
            bounds.min = 2  # type: ignore[misc]


class TestDashboardConfig:
    def test_defaults(self) -> None:
        config = DashboardConfig()
        assert config.snapshot == SnapshotParams("2024-01-01", "2024-12-31", "2024-01-15")
        assert config.range_role is DataRole.INSTITUTIONAL_FLOW
        assert config.filters == {}
        assert config.preview_rows == 50

    def test_filter_fields_exist_on_rows(self) -> None:
        row = StockRow(code="A", name="Alpha")
        for field_name in FILTER_FIELDS:
            assert isinstance(getattr(row, field_name), float)
