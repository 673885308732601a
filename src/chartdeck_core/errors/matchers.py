"""Matchers that classify evaluator exceptions into chartdeck error codes."""

from .errors import ErrorMatcher, MatchResult


def _type_name(error: Exception) -> str:
    return type(error).__name__


class SyntaxErrorMatcher(ErrorMatcher):
    """Placeholder code that does not parse."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, SyntaxError)

    def extract(self, error: Exception) -> MatchResult:
        detail = str(error)
        if isinstance(error, SyntaxError) and error.msg:
            detail = f"{error.msg} (offset {error.offset})"
        return MatchResult(code="TEMPLATE_SYNTAX", context={"detail": detail})


class NameErrorMatcher(ErrorMatcher):
    """Names the evaluator does not bind."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, NameError)

    def extract(self, error: Exception) -> MatchResult:
        name = getattr(error, "name", None) or "unknown"
        return MatchResult(code="NAME_UNDEFINED", context={"name": name})


class EvaluationErrorMatcher(ErrorMatcher):
    """Ordinary runtime failures: bad operands, missing keys, division by zero."""

    RUNTIME_ERRORS = (ArithmeticError, AttributeError, LookupError, TypeError, ValueError)

    def matches(self, error: Exception) -> bool:
        return isinstance(error, self.RUNTIME_ERRORS)

    def extract(self, error: Exception) -> MatchResult:
        kind = _type_name(error)
        return MatchResult(
            code="EVALUATION_ERROR",
            context={"detail": f"{kind}: {error}", "error_type": kind},
        )


class GenericErrorMatcher(ErrorMatcher):
    """Catch-all; always the last matcher in a chain."""

    def matches(self, error: Exception) -> bool:
        return True

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": str(error), "error_type": _type_name(error)},
        )


class ErrorMatcherChain:
    """Matchers tried in order; the first that matches decides the code."""

    def __init__(self, matchers: list[ErrorMatcher] | None = None) -> None:
        self.matchers: list[ErrorMatcher] = matchers or [
            SyntaxErrorMatcher(),
            NameErrorMatcher(),
            EvaluationErrorMatcher(),
            GenericErrorMatcher(),
        ]

    def match(self, error: Exception) -> MatchResult:
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)
        return GenericErrorMatcher().extract(error)
