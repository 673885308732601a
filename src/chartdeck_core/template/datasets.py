"""Dataset model, row normalization and column aggregation."""

import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from numbers import Real
from typing import Any

from chartdeck_core.types import AggregateOp


@dataclass
class Dataset:
    """Tabular data source supplied by the dataset provider.

    Only ``columns`` and ``data`` take part in evaluation; the other fields are
    carried so report definitions round-trip.
    """

    columns: list[str] = field(default_factory=list)
    data: list[Any] = field(default_factory=list)
    id: str | None = None
    dtypes: list[str] = field(default_factory=list)
    format: str = "table"  # table | records | record | list
    _source: Mapping[str, Any] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Dataset":
        """Build a Dataset from its JSON shape.

        Args:
            data: Mapping with ``columns`` and ``data`` keys

        Returns:
            Dataset instance
        """
        return cls(
            columns=list(data.get("columns") or []),
            data=list(data.get("data") or []),
            id=data.get("id"),
            dtypes=list(data.get("dtypes") or []),
            format=data.get("format") or "table",
            _source=data,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON view: the mapping the dataset was built from, as the author wrote it."""
        if self._source is not None:
            return dict(self._source)
        return {
            "id": self.id,
            "columns": self.columns,
            "data": self.data,
            "dtypes": self.dtypes,
            "format": self.format,
        }


@dataclass(frozen=True)
class PositionalRow:
    """Row whose cells are addressed by column position."""

    values: tuple[Any, ...]

    def as_positional(self, columns: Sequence[str]) -> tuple[Any, ...]:
        return self.values


@dataclass(frozen=True)
class KeyedRow:
    """Row whose cells are addressed by column name."""

    values: Mapping[str, Any]

    def as_positional(self, columns: Sequence[str]) -> tuple[Any, ...]:
        """Project the record onto the dataset's column order."""
        return tuple(self.values.get(name) for name in columns)


Row = PositionalRow | KeyedRow


def classify_row(raw: Any) -> Row | None:
    """Tag a raw row with its shape.

    Lists and tuples are positional, mappings are keyed. Anything else
    (scalars from ``list``-format datasets, ``None``) is not a row.
    """
    if isinstance(raw, (list, tuple)):
        return PositionalRow(tuple(raw))
    if isinstance(raw, Mapping):
        return KeyedRow(raw)
    return None


def iter_positional_rows(dataset: Dataset) -> Iterator[tuple[Any, ...]]:
    """Yield every row of a dataset in canonical positional form."""
    for raw in dataset.data or ():
        row = classify_row(raw)
        if row is not None:
            yield row.as_positional(dataset.columns)


def to_number(value: Any) -> float | int | None:
    """Coerce a cell to a finite number.

    Real numbers pass through, non-blank numeric strings are parsed. Booleans,
    NaN and infinities are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        return value if math.isfinite(value) else None  # type: ignore[return-value]
    if isinstance(value, str) and value.strip() and "_" not in value:
        try:
            number = float(value)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def column_index(dataset: Dataset, column: Any) -> int | None:
    """Map a column reference to its position.

    Non-negative integers are returned unchanged (no bounds check); strings
    are looked up in ``dataset.columns``.
    """
    if isinstance(column, int) and not isinstance(column, bool):
        return column if column >= 0 else None
    if isinstance(column, str):
        try:
            return dataset.columns.index(column)
        except ValueError:
            return None
    return None


def aggregate(dataset: Dataset, column: Any, op: AggregateOp | str) -> float | int | None:
    """Aggregate the numeric cells of one column.

    Args:
        dataset: Dataset to scan
        column: Column name or index
        op: One of sum, avg, min, max

    Returns:
        Aggregated value, or None when the column is unknown or holds no
        numeric cells
    """
    op = AggregateOp(op)
    index = column_index(dataset, column)
    if index is None:
        return None

    values: list[float | int] = []
    for row in iter_positional_rows(dataset):
        if index >= len(row):
            continue
        number = to_number(row[index])
        if number is not None:
            values.append(number)

    if not values:
        return None

    if op is AggregateOp.SUM:
        return sum(values)
    if op is AggregateOp.AVG:
        return sum(values) / len(values)
    if op is AggregateOp.MIN:
        return min(values)
    return max(values)


def count_rows(dataset: Dataset | None) -> int:
    """Number of rows in a dataset, 0 when it is absent."""
    if dataset is None:
        return 0
    return len(dataset.data or ())


def coerce_dataset(value: Any) -> Any:
    """Turn a JSON-shaped dataset mapping into a Dataset.

    Values that are already Datasets, or that do not look like one, are
    returned unchanged.
    """
    if isinstance(value, Mapping) and ("columns" in value or "data" in value):
        return Dataset.from_dict(value)
    return value
