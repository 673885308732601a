"""Template Engine type definitions."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from chartdeck_core.errors import ChartdeckError

from .datasets import Dataset, coerce_dataset


@dataclass
class TemplateContext:
    """Context available to templates.

    Access patterns:
    - {{ props.title }} → self.props["title"]
    - {{ datasets.sales.data[0][1] }} → self.datasets["sales"].data[0][1]
    - {{ sum('sales', 'amount') }} → aggregate over self.datasets["sales"]
    """

    datasets: dict[str, Dataset] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Coerce JSON-shaped datasets into Dataset objects."""
        self.datasets = {k: coerce_dataset(v) for k, v in (self.datasets or {}).items()}
        self.props = dict(self.props or {})

    @classmethod
    def coerce(cls, value: Any) -> "TemplateContext":
        """Accept a TemplateContext, a ``{datasets, props}`` mapping, or None."""
        if isinstance(value, TemplateContext):
            return value
        if isinstance(value, Mapping):
            return cls(datasets=value.get("datasets") or {}, props=value.get("props") or {})
        return cls()

    def get_dataset(self, dataset_id: Any) -> Dataset | None:
        """Look up a dataset by id; non-string ids never match."""
        if not isinstance(dataset_id, str):
            return None
        dataset = self.datasets.get(dataset_id)
        return dataset if isinstance(dataset, Dataset) else None

    def root(self) -> dict[str, Any]:
        """Root object that paths are resolved against."""
        return {"datasets": self.datasets, "props": self.props}


@dataclass
class TemplateSpec:
    """Structured template value from a report definition.

    ``unsafe_js`` keeps the report-format field name; its content is Python
    expression code evaluated with host privileges.
    """

    template: str | None = None
    expr: str | None = None
    unsafe_js: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TemplateSpec":
        """Build from a report-definition mapping (``unsafeJs`` or ``unsafe_js``)."""
        unsafe = data.get("unsafeJs")
        if unsafe is None:
            unsafe = data.get("unsafe_js")
        return cls(
            template=_as_text(data.get("template")),
            expr=_as_text(data.get("expr")),
            unsafe_js=_as_text(unsafe),
        )


def _as_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


TemplateValue = Union[str, TemplateSpec, Mapping[str, Any], None]


@dataclass
class RenderResult:
    """Result of template rendering."""

    value: str  # Rendered text
    had_templates: bool  # Whether any placeholders were found
    templates_rendered: list[str] = field(default_factory=list)  # Placeholder code found
    errors: list[ChartdeckError] = field(default_factory=list)  # Isolated failures
