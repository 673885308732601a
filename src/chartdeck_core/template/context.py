"""Template context builder."""

from typing import Any

from .datasets import Dataset
from .types import TemplateContext


class ContextBuilder:
    """Build TemplateContext incrementally as datasets finish loading."""

    def __init__(self, props: dict[str, Any] | None = None):
        """Initialize context builder.

        Args:
            props: Report-level properties
        """
        self._context = TemplateContext(props=props or {})

    def add_dataset(
        self,
        dataset_id: str,
        columns: list[str],
        data: list[Any],
        dtypes: list[str] | None = None,
        format: str = "table",
    ) -> "ContextBuilder":
        """Add a loaded dataset to context.

        Args:
            dataset_id: Dataset identifier used by templates
            columns: Column names
            data: Rows (positional lists or keyed records)
            dtypes: Optional column types
            format: Source format of the rows
        """
        self._context.datasets[dataset_id] = Dataset(
            columns=list(columns),
            data=list(data),
            id=dataset_id,
            dtypes=list(dtypes or []),
            format=format,
        )
        return self

    def add_prop(self, name: str, value: Any) -> "ContextBuilder":
        """Set a report property."""
        self._context.props[name] = value
        return self

    def get_context(self) -> TemplateContext:
        """Get current context.

        Returns:
            Current template context
        """
        return self._context
