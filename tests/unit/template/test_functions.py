"""Unit tests for the allowlisted template functions."""

import pytest

from chartdeck_core.template.functions import (
    FUNCTION_NAMES,
    call_function,
    create_helpers,
    evaluate_allowlisted,
    parse_call,
)
from chartdeck_core.template.types import TemplateContext


@pytest.fixture
def context():
    return TemplateContext(
        datasets={
            "sales": {"columns": ["amount"], "data": [[10], [20], ["bad"]]},
            "empty": {"columns": ["amount"], "data": []},
        },
        props={"total": 1234.7, "symbol": "€", "ratio": 0.42},
    )


class TestHelpers:
    """Tests for create_helpers."""

    def test_all_functions_present(self, context):
        helpers = create_helpers(context)
        assert set(helpers) == set(FUNCTION_NAMES)

    def test_helpers_are_read_only(self, context):
        helpers = create_helpers(context)
        with pytest.raises(TypeError):
            helpers["eval"] = eval  # type: ignore[index]

    def test_aggregates(self, context):
        helpers = create_helpers(context)
        assert helpers["sum"]("sales", "amount") == 30
        assert helpers["avg"]("sales", "amount") == 15
        assert helpers["min"]("sales", "amount") == 10
        assert helpers["max"]("sales", "amount") == 20

    def test_count(self, context):
        helpers = create_helpers(context)
        assert helpers["count"]("sales") == 3
        assert helpers["count"]("empty") == 0
        assert helpers["count"]("missing") == 0

    def test_unknown_dataset(self, context):
        helpers = create_helpers(context)
        assert helpers["sum"]("missing", "amount") is None
        assert helpers["sum"](None, "amount") is None


class TestParseCall:
    """Tests for parse_call."""

    def test_call(self):
        assert parse_call("sum('sales', 'amount')") == ("sum", ["'sales'", "'amount'"])

    def test_no_arguments(self):
        assert parse_call("count()") == ("count", [])

    def test_not_a_call(self):
        assert parse_call("props.total") is None
        assert parse_call("a.b(1)") is None


class TestCallFunction:
    """Tests for call_function."""

    def test_literal_arguments(self, context):
        assert call_function("sum", ["'sales'", "'amount'"], context) == 30

    def test_path_arguments(self, context):
        assert call_function("formatCurrency", ["props.total", "props.symbol", "0"], context) == (
            "€1,235"
        )

    def test_currency_symbol_defaults_to_dollar(self, context):
        assert call_function("formatCurrency", ["props.total"], context) == "$1,234.70"

    def test_percent(self, context):
        assert call_function("formatPercent", ["props.ratio"], context) == "42.0%"

    def test_missing_arguments_are_none(self, context):
        assert call_function("count", [], context) == 0
        assert call_function("formatNumber", [], context) is None

    def test_unknown_function(self, context):
        assert call_function("eval", ["'1'"], context) is None


class TestEvaluateAllowlisted:
    """Tests for the path-or-call grammar."""

    def test_path(self, context):
        assert evaluate_allowlisted("props.symbol", context) == "€"

    def test_call(self, context):
        assert evaluate_allowlisted("avg('sales', 'amount')", context) == 15

    def test_empty(self, context):
        assert evaluate_allowlisted("   ", context) == ""

    def test_nested_calls_are_not_evaluated(self, context):
        # The inner call is treated as a path and resolves to nothing
        assert evaluate_allowlisted("formatNumber(sum('sales', 'amount'))", context) is None

    def test_arbitrary_code_is_not_evaluated(self, context):
        assert evaluate_allowlisted("__import__('os')", context) is None
        assert evaluate_allowlisted("1 + 1", context) is None
