"""Error factory: one place to turn codes and foreign exceptions into ChartdeckErrors."""

from typing import Any

from .errors import ChartdeckError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Builds ChartdeckErrors from error codes or arbitrary exceptions."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        expression: str | None = None,
        template_id: str | None = None,
    ) -> ChartdeckError:
        """Classify ``error`` and attach the code and field it was raised for.

        ChartdeckErrors keep their code and only gain the missing context.
        """
        if isinstance(error, ChartdeckError):
            return error.with_context(expression=expression, template_id=template_id)

        result = self.matcher_chain.match(error)
        context = dict(result.context)
        context.update(
            {k: v for k, v in (("expression", expression), ("template_id", template_id)) if v}
        )
        return self.registry.create(code=result.code, context=context)

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> ChartdeckError:
        """Registry error for ``code``; keyword arguments extend ``context``."""
        return self.registry.create(code=code, context={**(context or {}), **kwargs})


_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Process-wide ErrorFactory."""
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> ChartdeckError:
    """Shorthand for ``get_error_factory().create(code, context)``.

    Raises:
        ValueError: If ``code`` is not registered
    """
    return get_error_factory().create(code, context)
