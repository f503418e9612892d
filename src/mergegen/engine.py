"""Template engine — Jinja2 environment with strict undefined handling.

Every string mergegen renders (file bodies, path segments, injection
templates, iteration conditions) goes through one ``TemplateEngine`` so the
same filters, globals and error mapping apply everywhere.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping

import jinja2

from mergegen.errors import GenerationIOError, InvalidExpressionError, UndefinedKeyError
from mergegen.filters import FILTERS, uuid_generate


class TemplateEngine:
    """Thin wrapper around ``jinja2.Environment``."""

    def __init__(
        self,
        globals: Mapping[str, Any] | None = None,
        filters: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.env = jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters.update(FILTERS)
        if filters:
            self.env.filters.update(filters)
        self.env.globals["uuid_generate"] = uuid_generate
        if globals:
            self.env.globals.update(globals)

    def add_global(self, name: str, value: Any) -> None:
        self.env.globals[name] = value

    def render_string(
        self,
        source: str,
        context: Mapping[str, Any],
        name: Path | str | None = None,
    ) -> str:
        """Render *source* against *context*.

        Raises:
            UndefinedKeyError: The template references a name missing from *context*.
            InvalidExpressionError: Syntax error or any other evaluation failure.
        """
        try:
            template = self.env.from_string(source)
            return template.render(**context)
        except jinja2.UndefinedError as e:
            raise UndefinedKeyError(str(e), name) from e
        except jinja2.TemplateSyntaxError as e:
            raise InvalidExpressionError(_describe_syntax_error(e, source), name) from e
        except jinja2.TemplateError as e:
            raise InvalidExpressionError(str(e), name) from e
        except (TypeError, ValueError, ArithmeticError, LookupError, AttributeError) as e:
            raise InvalidExpressionError(f"{type(e).__name__}: {e}", name) from e

    def render_file(self, path: Path, context: Mapping[str, Any]) -> str:
        """Read *path* and render it."""
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise GenerationIOError(f"cannot read template: {e}", path) from e
        return self.render_string(source, context, name=path)

    def test(self, expression: str, context: Mapping[str, Any]) -> bool:
        """Evaluate a bare Jinja2 expression (no ``{{ }}``) for truthiness."""
        try:
            compiled = self.env.compile_expression(expression, undefined_to_none=False)
            return bool(compiled(**context))
        except jinja2.UndefinedError as e:
            raise UndefinedKeyError(f"{e} (in expression '{expression}')") from e
        except jinja2.TemplateError as e:
            raise InvalidExpressionError(f"{e} (in expression '{expression}')") from e
        except (TypeError, ValueError, ArithmeticError, LookupError, AttributeError) as e:
            raise InvalidExpressionError(
                f"{type(e).__name__}: {e} (in expression '{expression}')"
            ) from e


def _describe_syntax_error(error: jinja2.TemplateSyntaxError, source: str) -> str:
    lines = source.splitlines()
    if error.lineno and 0 < error.lineno <= len(lines):
        return f"{error.message} (line {error.lineno}: {lines[error.lineno - 1].strip()})"
    return str(error.message)
