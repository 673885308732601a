"""Unit tests for TemplateContext, TemplateSpec and ContextBuilder."""

from chartdeck_core.template import ContextBuilder, Dataset, TemplateContext, TemplateSpec


class TestTemplateContext:
    """Tests for TemplateContext."""

    def test_datasets_are_coerced(self):
        context = TemplateContext(datasets={"a": {"columns": ["x"], "data": [[1]]}})
        assert isinstance(context.datasets["a"], Dataset)
        assert context.datasets["a"].columns == ["x"]

    def test_coerce_mapping(self):
        context = TemplateContext.coerce({"props": {"t": 1}})
        assert context.props == {"t": 1}
        assert context.datasets == {}

    def test_coerce_none(self):
        context = TemplateContext.coerce(None)
        assert context.datasets == {}
        assert context.props == {}

    def test_coerce_returns_same_instance(self):
        context = TemplateContext()
        assert TemplateContext.coerce(context) is context

    def test_get_dataset(self):
        context = TemplateContext(datasets={"a": {"columns": [], "data": []}, "b": "junk"})
        assert context.get_dataset("a") is context.datasets["a"]
        assert context.get_dataset("b") is None
        assert context.get_dataset(1) is None
        assert context.get_dataset("missing") is None

    def test_root(self):
        context = TemplateContext(props={"a": 1})
        assert context.root() == {"datasets": {}, "props": {"a": 1}}


class TestTemplateSpec:
    """Tests for TemplateSpec.from_mapping."""

    def test_camel_case_unsafe_key(self):
        spec = TemplateSpec.from_mapping({"unsafeJs": "1", "unsafe_js": "2"})
        assert spec.unsafe_js == "1"

    def test_snake_case_unsafe_key(self):
        assert TemplateSpec.from_mapping({"unsafe_js": "2"}).unsafe_js == "2"

    def test_non_string_fields_dropped(self):
        spec = TemplateSpec.from_mapping({"template": 5, "expr": None})
        assert spec.template is None
        assert spec.expr is None


class TestContextBuilder:
    """Tests for ContextBuilder."""

    def test_build(self):
        context = (
            ContextBuilder(props={"title": "Q1"})
            .add_dataset("sales", ["amount"], [[1], [2]])
            .add_prop("region", "north")
            .get_context()
        )
        assert context.props == {"title": "Q1", "region": "north"}
        dataset = context.get_dataset("sales")
        assert dataset is not None
        assert dataset.id == "sales"
        assert dataset.data == [[1], [2]]

    def test_dataset_is_copied(self):
        rows = [[1]]
        context = ContextBuilder().add_dataset("a", ["x"], rows, format="list").get_context()
        rows.append([2])
        assert context.datasets["a"].data == [[1]]
        assert context.datasets["a"].format == "list"

    def test_renders_with_engine(self, engine):
        context = ContextBuilder().add_dataset("sales", ["amount"], [[100], [250]]).get_context()
        assert engine.render("{{ sum('sales', 'amount') }}", context) == "350"
