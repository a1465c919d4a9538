import pytest

from dataset_transfer.analysis.emptiness import (
    FieldEmptinessTracker,
    emptiness_percentage,
    field_status,
    is_empty,
)


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_empty_values(self, value: object) -> None:
        assert is_empty(value) is True

    @pytest.mark.parametrize("value", [0, False, "x", [None], {"a": None}])
    def test_non_empty_values(self, value: object) -> None:
        assert is_empty(value) is False


class TestFieldStatus:
    def test_array_element_paths(self) -> None:
        discovered, present = field_status({"items": [{"id": 1}, {"id": None}]})
        assert discovered == {"items", "items[].id"}
        assert present == {"items", "items[].id"}

    def test_does_not_descend_into_empty_values(self) -> None:
        discovered, present = field_status({"meta": {}, "items": []})
        assert discovered == {"meta", "items"}
        assert present == set()

    def test_scalar_array_elements_add_no_paths(self) -> None:
        discovered, _ = field_status({"tags": ["a", "b"]})
        assert discovered == {"tags"}

    def test_prefix(self) -> None:
        discovered, _ = field_status({"a": 1}, prefix="root")
        assert discovered == {"root.a"}


class TestEmptinessPercentage:
    def test_rounds_half_up(self) -> None:
        assert emptiness_percentage(3, 1) == 66.67
        assert emptiness_percentage(3, 2) == 33.33
        assert emptiness_percentage(8, 7) == 12.5

    def test_zero_records(self) -> None:
        assert emptiness_percentage(0, 0) == 0.0


class TestFieldEmptinessTracker:
    def test_field_missing_from_later_records(self) -> None:
        tracker = FieldEmptinessTracker()
        tracker.observe({"a": 1, "b": 2})
        tracker.observe({"a": 1})
        assert tracker.emptiness(2) == {"b": 50.0, "a": 0.0}
