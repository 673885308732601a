"""Property-based tests for template rendering.

Tests that rendering is total, that plain text passes through untouched and
that user-supplied data is never evaluated as template code.
"""

import keyword

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chartdeck_core.template import TemplateContext, TemplateEngine, render_template
from chartdeck_core.template.arguments import split_args
from chartdeck_core.template.datasets import Dataset, aggregate
from chartdeck_core.template.paths import resolve_path

text_without_open = st.text(max_size=300).filter(lambda s: "{{" not in s)

identifiers = st.from_regex(r"^[a-z][a-z0-9_]{0,10}$", fullmatch=True).filter(
    lambda name: not keyword.iskeyword(name)
)

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**9), max_value=10**9),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=30),
)


def make_context(props=None, datasets=None):
    """Create a TemplateContext for testing."""
    return TemplateContext(datasets=datasets or {}, props=props or {})


# =============================================================================
# Test Classes
# =============================================================================


@pytest.mark.property
class TestPlainText:
    """Text without placeholders is returned unchanged."""

    @given(text_without_open)
    @settings(max_examples=200)
    def test_text_without_placeholders_unchanged(self, text):
        assert render_template(text, make_context()) == text

    @given(text_without_open)
    @settings(max_examples=100)
    def test_rendering_is_idempotent_on_plain_text(self, text):
        once = render_template(text)
        assert render_template(once) == once


@pytest.mark.property
class TestTotality:
    """Rendering never raises."""

    @given(st.text(max_size=300))
    @settings(max_examples=300)
    def test_arbitrary_template_text(self, text):
        result = TemplateEngine().render(text, make_context(props={"a": 1}))
        assert isinstance(result, str)

    @given(st.text(max_size=100))
    @settings(max_examples=200)
    def test_arbitrary_placeholder_code(self, code):
        result = TemplateEngine(mode="allowlist").render("{{" + code + "}}", make_context())
        assert isinstance(result, str)

    @given(st.text(max_size=100))
    @settings(max_examples=200)
    def test_arbitrary_expression(self, code):
        result = TemplateEngine().render({"expr": code}, make_context())
        assert isinstance(result, str)

    @given(st.text(max_size=100))
    @settings(max_examples=200)
    def test_arbitrary_path(self, path):
        root = {"props": {"a": {"b": [1, 2]}}, "datasets": {}}
        resolve_path(root, path)


@pytest.mark.property
class TestUserData:
    """User-provided values are data, never template code."""

    @given(st.text(max_size=200))
    @settings(max_examples=200)
    def test_prop_value_rendered_verbatim(self, user_input):
        context = make_context(props={"user_data": user_input})
        result = render_template("User said: {{ props.user_data }}", context)
        assert result == f"User said: {user_input}"

    @given(st.dictionaries(keys=identifiers, values=json_scalars, max_size=5))
    @settings(max_examples=100)
    def test_prop_access(self, props):
        context = make_context(props=props)
        for key, value in props.items():
            rendered = render_template(f"{{{{ props.{key} }}}}", context)
            if value is None:
                assert rendered == ""
            elif isinstance(value, str):
                assert rendered == value


@pytest.mark.property
class TestAggregation:
    """Aggregates agree with Python over the numeric cells."""

    @given(
        st.lists(
            st.one_of(
                st.integers(min_value=-1000, max_value=1000),
                st.text(alphabet="abc", max_size=3),
                st.none(),
            ),
            max_size=20,
        )
    )
    @settings(max_examples=200)
    def test_sum_skips_non_numeric(self, cells):
        dataset = Dataset(columns=["v"], data=[[cell] for cell in cells])
        numbers = [c for c in cells if isinstance(c, int)]
        expected = sum(numbers) if numbers else None
        assert aggregate(dataset, "v", "sum") == expected

    @given(st.lists(st.integers(min_value=0, max_value=10**6), max_size=10))
    @settings(max_examples=100)
    def test_split_args_keeps_quoted_commas(self, values):
        joined = ", ".join(f"'{v},{v}'" for v in values)
        assert split_args(joined) == [f"'{v},{v}'" for v in values]
