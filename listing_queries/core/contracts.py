"""Core port contracts used by adapters and the statement registry."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Callable, Iterator, List, Optional, Protocol

from .statements import BoundCall, ParamType, StatementTemplate
from .types import BindValues, DriverParams, RowMapping


class DialectPort(Protocol):
    """Dialect behavior required to compile and validate templates."""

    name: str
    paramstyle: str

    def placeholder(self, key: str) -> str: ...

    def adapt_value(self, kind: ParamType, value: Any) -> Any: ...

    def compile(self, template: StatementTemplate) -> Any: ...

    def driver_params(self, compiled: Any, bound: BoundCall) -> Optional[DriverParams]: ...

    def validation_steps(
        self, template: StatementTemplate
    ) -> List[tuple[str, Optional[DriverParams]]]: ...


class PreparedStatementPort(Protocol):
    """A template accepted by the engine."""

    template: StatementTemplate

    @property
    def name(self) -> str: ...


class DatabasePort(Protocol):
    """Database adapter behavior required by the statement registry and accessors."""

    dialect: DialectPort

    def transaction(self) -> AbstractContextManager[None]: ...

    def prepare(self, template: StatementTemplate) -> PreparedStatementPort: ...

    def query(
        self,
        prepared: PreparedStatementPort,
        values: BindValues | None = None,
        *,
        transform: Optional[Callable[[RowMapping], Any]] = None,
    ) -> Iterator[Any]: ...

    def run(self, prepared: PreparedStatementPort, values: BindValues | None = None) -> int: ...

    def close(self) -> None: ...
