"""Template Engine implementation."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from chartdeck_core.errors import ChartdeckError, create_error, get_error_factory
from chartdeck_core.logging import ChartdeckLogger, RenderLogger, get_logger
from chartdeck_core.types import EvaluationMode
from chartdeck_core.unsafe import UnsafeExpressionEvaluator

from .expression import ExpressionEvaluator
from .formatters import stringify_value
from .functions import FUNCTION_NAMES, evaluate_allowlisted, parse_call
from .parser import extract_all_references, has_templates, scan_template, validate_syntax
from .paths import tokenize_path
from .types import RenderResult, TemplateContext, TemplateSpec

if TYPE_CHECKING:
    from chartdeck_core.config import ChartdeckConfig

SPEC_KEYS = frozenset({"template", "expr", "unsafeJs", "unsafe_js"})


class TemplateEngine:
    """Render ``{{ }}`` placeholders in report text.

    Supports:
    - Data access: {{ props.title }}, {{ datasets.sales.data[0][1] }}
    - Helpers: {{ formatCurrency(sum('sales', 'amount')) }}
    - Whole-value expressions: {"expr": "count('sales') > 0"}

    Rendering never raises. A placeholder that fails is logged and replaced
    with an empty string; the rest of the template still renders.

    Evaluation modes:
    - allowlist: ``path`` or ``fnName(arg, ...)`` only
    - expression (default): bounded expression interpreter
    - unsafe: host ``eval``, requires ``allow_unsafe=True``
    """

    def __init__(
        self,
        mode: EvaluationMode | str = EvaluationMode.EXPRESSION,
        allow_unsafe: bool = False,
        logger: ChartdeckLogger | None = None,
    ) -> None:
        """Initialize template engine.

        Args:
            mode: How placeholder code is evaluated
            allow_unsafe: Enable host evaluation of trusted code
                (``unsafe_js`` values and the unsafe mode)
            logger: Optional logger (defaults to the process logger)

        Raises:
            ChartdeckError(UNSAFE_DISABLED) if mode is unsafe without allow_unsafe
        """
        self.mode = EvaluationMode(mode)
        if self.mode is EvaluationMode.UNSAFE and not allow_unsafe:
            raise create_error(
                "UNSAFE_DISABLED",
                detail="Evaluation mode 'unsafe' requires allow_unsafe=True",
            )
        self.allow_unsafe = allow_unsafe
        self._expressions = ExpressionEvaluator()
        self._unsafe = UnsafeExpressionEvaluator() if allow_unsafe else None
        self._logger = logger

    @classmethod
    def from_config(
        cls,
        config: "ChartdeckConfig",
        logger: ChartdeckLogger | None = None,
    ) -> "TemplateEngine":
        """Create an engine from loaded configuration.

        Args:
            config: Loaded configuration
            logger: Optional logger; built from ``config.logging`` if omitted

        Returns:
            Configured TemplateEngine
        """
        if logger is None:
            logger = ChartdeckLogger(config.logging.to_log_config())
        return cls(
            mode=config.template.mode,
            allow_unsafe=config.template.allow_unsafe,
            logger=logger,
        )

    @property
    def logger(self) -> ChartdeckLogger:
        return self._logger or get_logger()

    def render(
        self,
        value: Any,
        context: TemplateContext | Mapping[str, Any] | None = None,
        template_id: str | None = None,
    ) -> str:
        """Render a template value to text.

        Args:
            value: String with placeholders, TemplateSpec, or a mapping with
                ``template`` / ``expr`` / ``unsafeJs`` keys
            context: Template context or ``{datasets, props}`` mapping
            template_id: Optional identifier used in log output

        Returns:
            Rendered text (never raises)
        """
        return self.render_detailed(value, context, template_id).value

    def render_detailed(
        self,
        value: Any,
        context: TemplateContext | Mapping[str, Any] | None = None,
        template_id: str | None = None,
    ) -> RenderResult:
        """Render a template value and report what happened.

        Returns:
            RenderResult with text, placeholders found and isolated errors
        """
        log = self.logger.render(template_id)
        try:
            return self._render(value, TemplateContext.coerce(context), log, template_id)
        except Exception as e:  # noqa: BLE001 - rendering is total
            error = get_error_factory().from_exception(e, template_id=template_id)
            log.expression_failed("", error)
            return RenderResult(value="", had_templates=False, errors=[error])

    def render_tree(
        self,
        value: Any,
        context: TemplateContext | Mapping[str, Any] | None = None,
    ) -> Any:
        """Render every template inside a nested report definition.

        Strings containing placeholders and template mappings are rendered;
        everything else is returned as-is.

        Args:
            value: Report definition fragment (dict, list, str or primitive)
            context: Template context

        Returns:
            Copy of the value with templates rendered
        """
        ctx = TemplateContext.coerce(context)

        def render_value(item: Any) -> Any:
            if isinstance(item, str):
                return self.render(item, ctx) if has_templates(item) else item
            if isinstance(item, TemplateSpec) or _is_spec_mapping(item):
                return self.render(item, ctx)
            if isinstance(item, dict):
                return {k: render_value(v) for k, v in item.items()}
            if isinstance(item, list):
                return [render_value(v) for v in item]
            return item

        return render_value(value)

    def evaluate(self, code: str, context: TemplateContext | Mapping[str, Any] | None) -> Any:
        """Evaluate one placeholder expression with the engine's mode.

        Unlike render(), this raises on failure.

        Args:
            code: Placeholder code (without braces)
            context: Template context

        Returns:
            Evaluated value
        """
        ctx = TemplateContext.coerce(context)
        if self.mode is EvaluationMode.ALLOWLIST:
            return evaluate_allowlisted(code, ctx)
        if self.mode is EvaluationMode.UNSAFE:
            return self._evaluate_unsafe(code, ctx)
        return self._expressions.evaluate(code, ctx)

    def validate(self, value: Any) -> list[str]:
        """Validate template syntax without rendering.

        Does NOT check that referenced data exists.

        Args:
            value: Template value or nested report definition

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        def validate_value(item: Any) -> None:
            if isinstance(item, str):
                errors.extend(validate_syntax(item, self._validate_code))
            elif isinstance(item, TemplateSpec) or _is_spec_mapping(item):
                spec = _as_spec(item)
                if spec.unsafe_js:
                    if self._unsafe is None:
                        errors.append("Unsafe expression evaluation is disabled")
                    else:
                        errors.extend(self._unsafe.validate_code(spec.unsafe_js))
                elif spec.expr:
                    errors.extend(self._validate_code(spec.expr))
                elif spec.template:
                    errors.extend(validate_syntax(spec.template, self._validate_code))
            elif isinstance(item, dict):
                for v in item.values():
                    validate_value(v)
            elif isinstance(item, list):
                for v in item:
                    validate_value(v)

        validate_value(value)
        return errors

    def extract_references(self, value: Any) -> list[str]:
        """Extract data references used by templates.

        E.g. "{{ sum('sales', 'amount') }} for {{ props.region }}"
        → ["datasets.sales", "props.region"]. Useful for dependency analysis.
        """
        return extract_all_references(value)

    def _render(
        self,
        value: Any,
        context: TemplateContext,
        log: RenderLogger,
        template_id: str | None,
    ) -> RenderResult:
        if value is None:
            return RenderResult(value="", had_templates=False)

        if isinstance(value, str):
            template = value
        elif isinstance(value, TemplateSpec) or isinstance(value, Mapping):
            spec = _as_spec(value)
            if spec.unsafe_js or spec.expr:
                return self._render_expression(spec, context, log, template_id)
            template = spec.template or spec.expr or ""
        else:
            return RenderResult(value="", had_templates=False)

        parts: list[str] = []
        templates: list[str] = []
        errors: list[ChartdeckError] = []

        for segment in scan_template(template):
            if not segment.is_placeholder:
                parts.append(segment.text)
                continue

            code = segment.code
            templates.append(code)
            if not code:
                continue
            try:
                parts.append(stringify_value(self.evaluate(code, context)))
            except Exception as e:  # noqa: BLE001 - isolate the placeholder
                error = get_error_factory().from_exception(
                    e, expression=code, template_id=template_id
                )
                log.placeholder_failed(code, error)
                errors.append(error)

        log.completed(len(templates), len(errors))
        return RenderResult(
            value="".join(parts),
            had_templates=bool(templates),
            templates_rendered=templates,
            errors=errors,
        )

    def _render_expression(
        self,
        spec: TemplateSpec,
        context: TemplateContext,
        log: RenderLogger,
        template_id: str | None,
    ) -> RenderResult:
        """Whole-value evaluation of ``unsafe_js`` (preferred) or ``expr``."""
        unsafe = bool(spec.unsafe_js)
        code = (spec.unsafe_js if unsafe else spec.expr or "").strip()
        if not code:
            return RenderResult(value="", had_templates=False)

        if unsafe and self._unsafe is None:
            log.unsafe_rejected(code)
            error = create_error("UNSAFE_DISABLED", expression=code, template_id=template_id)
            return RenderResult(
                value="", had_templates=True, templates_rendered=[code], errors=[error]
            )

        try:
            if unsafe:
                result = self._evaluate_unsafe(code, context)
            else:
                result = self.evaluate(code, context)
            text = stringify_value(result)
        except Exception as e:  # noqa: BLE001 - rendering is total
            error = get_error_factory().from_exception(
                e, expression=code, template_id=template_id
            )
            log.expression_failed(code, error)
            return RenderResult(
                value="", had_templates=True, templates_rendered=[code], errors=[error]
            )

        return RenderResult(value=text, had_templates=True, templates_rendered=[code])

    def _evaluate_unsafe(self, code: str, context: TemplateContext) -> Any:
        if self._unsafe is None:
            raise create_error("UNSAFE_DISABLED", expression=code)
        self.logger.render().unsafe_evaluating(code)
        return self._unsafe.evaluate(code, context)

    def _validate_code(self, code: str) -> list[str]:
        if self.mode is EvaluationMode.ALLOWLIST:
            return _validate_allowlisted(code)
        if self.mode is EvaluationMode.UNSAFE and self._unsafe is not None:
            return self._unsafe.validate_code(code)
        return self._expressions.validate(code)


def _is_spec_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value) and set(value) <= SPEC_KEYS


def _as_spec(value: TemplateSpec | Mapping[str, Any]) -> TemplateSpec:
    if isinstance(value, TemplateSpec):
        return value
    return TemplateSpec.from_mapping(value)


def _validate_allowlisted(code: str) -> list[str]:
    call = parse_call(code)
    if call is not None:
        name, _ = call
        if name not in FUNCTION_NAMES:
            return [f"Function '{name}' is not allowed: {code}"]
        return []
    if tokenize_path(code) is None:
        return [f"Invalid path: {code}"]
    return []


# Convenience singleton
_default_engine: TemplateEngine | None = None


def get_default_engine() -> TemplateEngine:
    """Get default engine singleton (expression mode, unsafe disabled)."""
    global _default_engine  # noqa: PLW0603
    if _default_engine is None:
        _default_engine = TemplateEngine()
    return _default_engine


def render_template(
    value: Any,
    context: TemplateContext | Mapping[str, Any] | None = None,
) -> str:
    """Render a template value with the default engine.

    Args:
        value: Template string, TemplateSpec or template mapping
        context: Template context or ``{datasets, props}`` mapping

    Returns:
        Rendered text (never raises)
    """
    return get_default_engine().render(value, context)
