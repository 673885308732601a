"""Error registry: error codes and the message templates behind them."""

from typing import Any

from .errors import ChartdeckError, ErrorCategory, ErrorTemplate

BUILTIN_TEMPLATES = (
    ErrorTemplate(
        code="TEMPLATE_SYNTAX",
        category=ErrorCategory.TEMPLATE,
        message_template="Invalid template expression",
        detail_template="The placeholder code could not be parsed",
        # format() turns the doubled braces back into a literal placeholder
        suggestion_template="Check quoting and brackets inside the {{{{ }}}} placeholder",
    ),
    ErrorTemplate(
        code="EXPRESSION_UNSUPPORTED",
        category=ErrorCategory.EXPRESSION,
        message_template="Unsupported expression syntax: {construct}",
        detail_template="Template expressions only support literals, data access, "
        "arithmetic, comparisons, conditionals and the built-in helpers",
        suggestion_template="Move complex logic into the dataset that feeds the report",
    ),
    ErrorTemplate(
        code="NAME_UNDEFINED",
        category=ErrorCategory.EXPRESSION,
        message_template="Name '{name}' is not defined",
        detail_template="Expressions can only reference datasets, props and the helpers",
        suggestion_template="Use datasets.<id> or props.<key> to reach report data",
    ),
    ErrorTemplate(
        code="FUNCTION_NOT_ALLOWED",
        category=ErrorCategory.EXPRESSION,
        message_template="Function '{function_name}' is not allowed",
        suggestion_template="Allowed functions: {allowed_functions}",
    ),
    ErrorTemplate(
        code="EVALUATION_ERROR",
        category=ErrorCategory.EXPRESSION,
        message_template="Expression evaluation failed",
        detail_template="{error_type} raised while evaluating the expression",
    ),
    ErrorTemplate(
        code="FORBIDDEN_ACCESS",
        category=ErrorCategory.SECURITY,
        message_template="Access to '{key}' is forbidden",
        detail_template="Prototype and dunder members cannot be reached from templates",
    ),
    ErrorTemplate(
        code="UNSAFE_DISABLED",
        category=ErrorCategory.SECURITY,
        message_template="Unsafe expression evaluation is disabled",
        detail_template="Unsafe code runs with full host privileges and must be "
        "enabled explicitly",
        suggestion_template="Set template.allow_unsafe: true only for trusted report content",
    ),
    ErrorTemplate(
        code="CONFIG_INVALID",
        category=ErrorCategory.CONFIG,
        message_template="Configuration is invalid",
        suggestion_template="Check the configuration file and environment variables",
    ),
    ErrorTemplate(
        code="INTERNAL_ERROR",
        category=ErrorCategory.SYSTEM,
        message_template="Internal error",
        detail_template="Unexpected {error_type}",
    ),
)


def _fill(text: str | None, context: dict[str, Any]) -> str | None:
    """Format ``text`` with ``context``; unresolved placeholders leave it untouched."""
    if text is None:
        return None
    try:
        return text.format(**context)
    except (KeyError, IndexError):
        return text


class ErrorRegistry:
    """Maps error codes to templates and builds ChartdeckErrors from them."""

    def __init__(self) -> None:
        self._templates: dict[str, ErrorTemplate] = {}
        for template in BUILTIN_TEMPLATES:
            self.register(template)

    def register(self, template: ErrorTemplate) -> None:
        """Add or replace the template for ``template.code``."""
        self._templates[template.code] = template

    def get_template(self, code: str) -> ErrorTemplate | None:
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        return list(self._templates)

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: ChartdeckError | None = None,
    ) -> ChartdeckError:
        """Build the error registered under ``code``.

        ``context`` fills the template placeholders. A ``detail`` entry in it
        replaces the template's own detail text, and ``expression`` and
        ``template_id`` entries are copied onto the error.

        Raises:
            ValueError: If ``code`` is not registered
        """
        template = self._templates.get(code)
        if template is None:
            raise ValueError(f"Unknown error code: {code}")

        values = context or {}
        return ChartdeckError(
            code=template.code,
            category=template.category,
            message=_fill(template.message_template, values) or f"Error {code}",
            detail=values.get("detail") or _fill(template.detail_template, values),
            suggestion=_fill(template.suggestion_template, values),
            expression=values.get("expression"),
            template_id=values.get("template_id"),
            cause=cause,
        )
