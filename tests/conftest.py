"""
Pytest configuration and shared fixtures for chartdeck tests.
"""

import io
import sys
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chartdeck_core.logging import ChartdeckLogger, LogConfig  # noqa: E402
from chartdeck_core.template import TemplateContext, TemplateEngine  # noqa: E402
from chartdeck_core.types import LogFormat, LogLevel  # noqa: E402

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def sales_data() -> dict[str, Any]:
    """Report data with one positional and one keyed dataset."""
    return {
        "datasets": {
            "sales": {
                "id": "sales",
                "columns": ["region", "amount"],
                "data": [["north", 100], ["south", 250]],
            },
            "orders": {
                "id": "orders",
                "columns": ["sku", "qty"],
                "data": [{"sku": "a", "qty": 2}, {"sku": "b", "qty": "3"}],
                "format": "records",
            },
        },
        "props": {"title": "Quarterly", "region": "north", "ratio": 0.256},
    }


@pytest.fixture
def sales_context(sales_data: dict[str, Any]) -> TemplateContext:
    """TemplateContext built from sales_data."""
    return TemplateContext.coerce(sales_data)


# =============================================================================
# Logger Fixtures
# =============================================================================


@pytest.fixture
def log_output() -> io.StringIO:
    """Buffer that captured log lines are written to."""
    return io.StringIO()


@pytest.fixture
def json_logger(log_output: io.StringIO) -> ChartdeckLogger:
    """Logger writing JSON lines at DEBUG level into log_output."""
    return ChartdeckLogger(
        LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=log_output)
    )


@pytest.fixture
def engine(json_logger: ChartdeckLogger) -> TemplateEngine:
    """Default-mode engine with a captured logger."""
    return TemplateEngine(logger=json_logger)

