"""Statement templates, declared parameter types, and per-call binding.

A `StatementTemplate` is written once with `:name` placeholders and an ordered
declaration of its parameters. Binding a mapping of call values produces a
`BoundCall` holding normalized values in declaration order; dialects turn the
pair into driver SQL and parameters.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from types import MappingProxyType
from typing import Any, Tuple

from ..errors import BindingError, StatementPreparationFailure
from .types import BindValues, BoundValues, NamedParams

# `::` casts and clock literals such as '12:30' are not placeholders.
PLACEHOLDER_RE = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


class ParamType(str, Enum):
    """Value types a template parameter may declare."""

    VARCHAR = "varchar"
    INTEGER = "integer"
    TIMESTAMP = "timestamp"
    VARCHAR_ARRAY = "varchar[]"

    @property
    def is_array(self) -> bool:
        return self is ParamType.VARCHAR_ARRAY

    def normalize(self, name: str, value: Any) -> Any:
        """Validate one call value and return its normalized form.

        Raises:
            BindingError: If the value cannot represent this type.
        """

        if value is None:
            return None
        if self is ParamType.VARCHAR:
            if isinstance(value, str):
                return value
        elif self is ParamType.INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().isdecimal():
                try:
                    return int(value)
                except ValueError as exc:
                    raise BindingError(
                        f"Parameter '{name}' expects integer digits, got {value!r}."
                    ) from exc
        elif self is ParamType.TIMESTAMP:
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime.combine(value, time.min)
            if isinstance(value, str):
                try:
                    return datetime.fromisoformat(value.strip())
                except ValueError as exc:
                    raise BindingError(
                        f"Parameter '{name}' expects an ISO-8601 timestamp, got {value!r}."
                    ) from exc
        elif self is ParamType.VARCHAR_ARRAY:
            if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
                items = list(value)
                if all(isinstance(item, str) for item in items):
                    return items

        raise BindingError(
            f"Parameter '{name}' expects {self.value}, got {type(value).__name__}."
        )


@dataclass(frozen=True)
class StatementTemplate:
    """Immutable SQL text plus its ordered parameter declaration.

    Attributes:
        name: Identifier used for server-side preparation and logging.
        sql: SQL text using `:name` placeholders.
        params: Ordered mapping of parameter name to declared type.
    """

    name: str
    sql: str
    params: Mapping[str, ParamType] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            raise StatementPreparationFailure(
                f"Statement name must be a SQL identifier, got {self.name!r}."
            )
        declared = MappingProxyType(
            {key: ParamType(value) for key, value in self.params.items()}
        )
        object.__setattr__(self, "params", declared)

        used = set(self.placeholders)
        missing = used - set(declared)
        unused = set(declared) - used
        if missing or unused:
            raise StatementPreparationFailure(
                f"Statement '{self.name}' placeholders do not match its declaration "
                f"(undeclared: {sorted(missing)}, unused: {sorted(unused)})."
            )

    @property
    def placeholders(self) -> Tuple[str, ...]:
        """Placeholder names in order of appearance, repeats included."""

        return tuple(PLACEHOLDER_RE.findall(self.sql))

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(self.params)

    def bind(self, values: BindValues | None = None) -> BoundCall:
        """Bind call values to this template.

        Every declared parameter must be present and no other name may be.

        Raises:
            BindingError: On missing or unknown names, or on type mismatch.
        """

        values = dict(values or {})
        missing = [key for key in self.params if key not in values]
        if missing:
            raise BindingError(
                f"Statement '{self.name}' is missing values for {missing}."
            )
        unknown = sorted(key for key in values if key not in self.params)
        if unknown:
            raise BindingError(
                f"Statement '{self.name}' does not declare parameters {unknown}."
            )

        normalized = tuple(
            kind.normalize(key, values[key]) for key, kind in self.params.items()
        )
        return BoundCall(self, normalized)


@dataclass(frozen=True)
class BoundCall:
    """One template invocation with values in declaration order."""

    template: StatementTemplate
    values: BoundValues

    def as_named(self) -> NamedParams:
        return dict(zip(self.template.param_names, self.values))
