"""Unit tests for datasets, row normalization and aggregation."""

import math

import pytest

from chartdeck_core.template.datasets import (
    Dataset,
    KeyedRow,
    PositionalRow,
    aggregate,
    classify_row,
    coerce_dataset,
    column_index,
    count_rows,
    iter_positional_rows,
    to_number,
)
from chartdeck_core.types import AggregateOp


@pytest.fixture
def sales():
    return Dataset(columns=["amount"], data=[[10], [20], ["bad"]])


class TestRows:
    """Tests for the row variants."""

    def test_classify_positional(self):
        row = classify_row([1, 2])
        assert isinstance(row, PositionalRow)
        assert row.as_positional(["a", "b"]) == (1, 2)

    def test_classify_keyed(self):
        row = classify_row({"b": 2, "a": 1})
        assert isinstance(row, KeyedRow)
        assert row.as_positional(["a", "b", "c"]) == (1, 2, None)

    @pytest.mark.parametrize("raw", [None, 5, "row"])
    def test_non_rows(self, raw):
        assert classify_row(raw) is None

    def test_iter_positional_rows_mixes_shapes(self):
        dataset = Dataset(columns=["x", "y"], data=[[1, 2], {"y": 4, "x": 3}, 9])
        assert list(iter_positional_rows(dataset)) == [(1, 2), (3, 4)]


class TestToNumber:
    """Tests for numeric coercion."""

    @pytest.mark.parametrize(
        "value,expected", [(3, 3), (2.5, 2.5), ("4", 4.0), (" 1.5 ", 1.5), ("-2", -2.0)]
    )
    def test_numeric(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize(
        "value", [None, True, False, "", "  ", "abc", "1_000", math.nan, math.inf, "inf", [1]]
    )
    def test_not_numeric(self, value):
        assert to_number(value) is None


class TestAggregate:
    """Tests for column aggregation."""

    def test_sum_skips_non_numeric(self, sales):
        assert aggregate(sales, "amount", AggregateOp.SUM) == 30

    def test_avg_does_not_count_non_numeric(self, sales):
        assert aggregate(sales, "amount", "avg") == 15

    def test_min_max(self, sales):
        assert aggregate(sales, "amount", "min") == 10
        assert aggregate(sales, "amount", "max") == 20

    def test_column_by_index(self, sales):
        assert aggregate(sales, 0, "sum") == 30

    def test_unknown_column(self, sales):
        assert aggregate(sales, "missing", "sum") is None
        assert aggregate(sales, 3, "sum") is None

    def test_no_numeric_values(self):
        dataset = Dataset(columns=["a"], data=[["x"], [None]])
        assert aggregate(dataset, "a", "avg") is None

    def test_keyed_rows(self):
        dataset = Dataset(columns=["sku", "qty"], data=[{"sku": "a", "qty": 2}, {"qty": "3"}])
        assert aggregate(dataset, "qty", "sum") == 5

    def test_short_rows_are_skipped(self):
        dataset = Dataset(columns=["a", "b"], data=[[1, 2], [3]])
        assert aggregate(dataset, "b", "sum") == 2

    def test_invalid_op(self, sales):
        with pytest.raises(ValueError):
            aggregate(sales, "amount", "median")


class TestDatasetHelpers:
    """Tests for dataset construction and lookups."""

    def test_from_dict(self):
        dataset = Dataset.from_dict({"columns": ["a"], "data": [[1]], "id": "d"})
        assert dataset.columns == ["a"]
        assert dataset.data == [[1]]
        assert dataset.id == "d"
        assert dataset.format == "table"

    def test_to_dict_keeps_supplied_keys(self):
        raw = {"data": [[1]], "label": "kept"}
        assert Dataset.from_dict(raw).to_dict() == raw
        assert Dataset(columns=["a"], data=[[1]]).to_dict()["columns"] == ["a"]

    def test_coerce_dataset(self):
        assert isinstance(coerce_dataset({"columns": [], "data": []}), Dataset)
        assert coerce_dataset("other") == "other"

    def test_column_index(self, sales):
        assert column_index(sales, "amount") == 0
        assert column_index(sales, 7) == 7
        assert column_index(sales, -1) is None
        assert column_index(sales, True) is None

    def test_count_rows(self, sales):
        assert count_rows(sales) == 3
        assert count_rows(None) == 0
