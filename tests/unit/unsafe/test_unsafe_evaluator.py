"""Unit tests for the unsafe expression evaluator."""

import pytest

from chartdeck_core.template.types import TemplateContext
from chartdeck_core.unsafe import AttrDict, UnsafeExpressionEvaluator, wrap_data


@pytest.fixture
def evaluator():
    return UnsafeExpressionEvaluator()


class TestWrapData:
    """Tests for attribute-style data wrapping."""

    def test_nested(self):
        data = wrap_data({"a": {"b": [{"c": 1}]}})
        assert isinstance(data, AttrDict)
        assert data.a.b[0].c == 1

    def test_missing_attribute(self):
        with pytest.raises(AttributeError):
            AttrDict({"a": 1}).b

    def test_scalars_unchanged(self):
        assert wrap_data(5) == 5


class TestUnsafeEvaluate:
    """Tests for evaluate()."""

    def test_attribute_access(self, evaluator, sales_context):
        assert evaluator.evaluate("props.title", sales_context) == "Quarterly"
        assert evaluator.evaluate("datasets.sales.data[0][1]", sales_context) == 100

    def test_helpers(self, evaluator, sales_context):
        assert evaluator.evaluate("helpers.count('sales')", sales_context) == 2
        assert evaluator.evaluate("formatCurrency(sum('sales', 'amount'))", sales_context) == (
            "$350.00"
        )

    def test_full_python(self, evaluator, sales_context):
        code = "', '.join(sorted(r[0] for r in datasets.sales.data))"
        assert evaluator.evaluate(code, sales_context) == "north, south"

    def test_aliases(self, evaluator):
        assert evaluator.evaluate("null if true else false", TemplateContext()) is None

    def test_errors_propagate(self, evaluator):
        with pytest.raises(NameError):
            evaluator.evaluate("undefinedVar.x", TemplateContext())
        with pytest.raises(SyntaxError):
            evaluator.evaluate("1 +", TemplateContext())

    def test_validate_code(self, evaluator):
        assert evaluator.validate_code("a + b") == []
        errors = evaluator.validate_code("a +")
        assert len(errors) == 1
        assert errors[0].startswith("Syntax error")

    def test_statements_are_not_expressions(self, evaluator):
        assert evaluator.validate_code("import os") != []
