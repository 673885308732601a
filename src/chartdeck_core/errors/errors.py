"""Chartdeck error types and error matcher base."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Where an error originated."""

    TEMPLATE = "TEMPLATE"
    EXPRESSION = "EXPRESSION"
    SECURITY = "SECURITY"
    CONFIG = "CONFIG"
    SYSTEM = "SYSTEM"


@dataclass
class ChartdeckError(Exception):
    """Base exception for chartdeck.

    Carries a stable ``code`` (for example ``FORBIDDEN_ACCESS``) plus the
    placeholder code and report field it was raised for, so render failures
    can be reported without re-parsing messages.
    """

    code: str
    category: ErrorCategory
    message: str
    detail: str | None = None
    suggestion: str | None = None

    expression: str | None = None
    template_id: str | None = None

    cause: "ChartdeckError | None" = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view, including the cause chain."""
        data: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
        }
        for name in ("message", "detail", "suggestion", "expression", "template_id"):
            data[name] = getattr(self, name)
        data["timestamp"] = self.timestamp.isoformat()
        data["cause"] = self.cause.to_dict() if self.cause else None
        return data

    def with_context(
        self,
        expression: str | None = None,
        template_id: str | None = None,
    ) -> "ChartdeckError":
        """Copy of this error with the given context filled in.

        Values already set on the error are kept when the argument is empty.
        """
        return replace(
            self,
            expression=expression or self.expression,
            template_id=template_id or self.template_id,
        )


@dataclass
class ErrorTemplate:
    """Registered error shape; the ``*_template`` strings use str.format fields."""

    code: str
    category: ErrorCategory
    message_template: str
    detail_template: str | None = None
    suggestion_template: str | None = None


@dataclass
class MatchResult:
    """Error code chosen by a matcher and the values for its template."""

    code: str
    context: dict[str, Any]


class ErrorMatcher(ABC):
    """Maps a family of Python exceptions onto a chartdeck error code."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Whether this matcher handles ``error``."""

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Error code and template values for ``error``."""
