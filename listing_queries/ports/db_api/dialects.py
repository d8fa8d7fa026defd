"""Concrete SQL dialect implementations for DB-API adapters."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Tuple

from ...core.statements import PLACEHOLDER_RE, BoundCall, ParamType, StatementTemplate
from ...core.types import DriverParams

ANY_ARRAY_RE = re.compile(r"=\s*ANY\s*\(\s*:([A-Za-z_][A-Za-z0-9_]*)\s*\)", re.IGNORECASE)

ValidationStep = Tuple[str, Optional[DriverParams]]


@dataclass(frozen=True)
class CompiledStatement:
    """Template SQL rewritten for one dialect.

    Attributes:
        template: Source template.
        sql: Driver-ready SQL text.
        param_order: Parameter names in the order positional drivers expect.
    """

    template: StatementTemplate
    sql: str
    param_order: Tuple[str, ...]


class Dialect:
    """Base dialect that defines placeholder, array, and validation behavior."""

    name: str = "generic"
    paramstyle: str = "named"

    def placeholder(self, key: str) -> str:
        """Return parameter placeholder for current param style."""

        if self.paramstyle == "named":
            return f":{key}"
        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def any_clause(self, placeholder: str) -> str:
        """Return the array-membership predicate for a bound array."""

        return f"= ANY({placeholder})"

    def adapt_value(self, kind: ParamType, value: Any) -> Any:
        """Convert a normalized value into what the driver accepts."""

        return value

    def compile(self, template: StatementTemplate) -> CompiledStatement:
        """Rewrite template SQL into this dialect's placeholder convention."""

        return self._compile(template, self.placeholder)

    def _compile(self, template: StatementTemplate, render) -> CompiledStatement:
        array_names = {key for key, kind in template.params.items() if kind.is_array}

        def _rewrite_any(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in array_names:
                return match.group(0)
            return self.any_clause(f":{key}")

        sql = ANY_ARRAY_RE.sub(_rewrite_any, template.sql)
        order: List[str] = []

        def _rewrite_placeholder(match: re.Match[str]) -> str:
            key = match.group(1)
            order.append(key)
            return render(key)

        sql = PLACEHOLDER_RE.sub(_rewrite_placeholder, sql)
        return CompiledStatement(template, sql, tuple(order))

    def driver_params(
        self, compiled: CompiledStatement, bound: BoundCall
    ) -> Optional[DriverParams]:
        """Lay out bound values in the shape the driver expects."""

        adapted = {
            key: self.adapt_value(kind, value)
            for (key, kind), value in zip(bound.template.params.items(), bound.values)
        }
        if self.paramstyle == "named":
            return adapted
        if not compiled.param_order:
            return None
        return [adapted[key] for key in compiled.param_order]

    def validation_steps(self, template: StatementTemplate) -> List[ValidationStep]:
        """Statements that make the engine parse and plan `template` without running it."""

        compiled = self.compile(template)
        nulls = {key: None for key in template.params}
        if self.paramstyle == "named":
            params: Optional[DriverParams] = nulls
        else:
            params = [None for _ in compiled.param_order] or None
        return [(f"EXPLAIN {compiled.sql}", params)]


class SQLiteDialect(Dialect):
    """SQLite dialect (`:name` parameters, arrays bound as JSON text)."""

    name = "sqlite"
    paramstyle = "named"

    def any_clause(self, placeholder: str) -> str:
        return f"IN (SELECT value FROM json_each({placeholder}))"

    def adapt_value(self, kind: ParamType, value: Any) -> Any:
        if value is None:
            return None
        if kind is ParamType.VARCHAR_ARRAY:
            return json.dumps(list(value))
        if kind is ParamType.TIMESTAMP and isinstance(value, datetime):
            return value.isoformat(sep=" ")
        return value


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`%s` positional parameters, server-side `PREPARE` checks)."""

    name = "postgres"
    paramstyle = "format"

    def prepared_name(self, template: StatementTemplate) -> str:
        return f"listing_{template.name}"

    def validation_steps(self, template: StatementTemplate) -> List[ValidationStep]:
        numbers = {key: index for index, key in enumerate(template.params, start=1)}
        compiled = self._compile(template, lambda key: f"${numbers[key]}")
        name = self.prepared_name(template)

        prepare = f"PREPARE {name}"
        if template.params:
            types = ", ".join(kind.value for kind in template.params.values())
            prepare += f" ({types})"
        prepare += f" AS {compiled.sql}"
        return [(prepare, None), (f"DEALLOCATE {name}", None)]
