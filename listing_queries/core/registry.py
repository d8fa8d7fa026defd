"""Registry of templates prepared once against an open database."""

from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

from .catalog import ALL_TEMPLATES
from .contracts import DatabasePort, PreparedStatementPort
from .statements import StatementTemplate

logger = logging.getLogger(__name__)


class StatementRegistry:
    """Holds a fixed set of named templates and their prepared forms.

    `prepare_all()` asks the database to validate every template up front,
    so a malformed statement aborts startup instead of failing at first use.
    """

    def __init__(self, templates: Sequence[StatementTemplate] = ALL_TEMPLATES):
        names = [template.name for template in templates]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate statement names: {duplicates}")
        self._templates: Tuple[StatementTemplate, ...] = tuple(templates)
        self._prepared: Dict[str, PreparedStatementPort] = {}

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(template.name for template in self._templates)

    @property
    def is_prepared(self) -> bool:
        return len(self._prepared) == len(self._templates)

    def prepare_all(self, db: DatabasePort) -> None:
        """Prepare every template in declaration order.

        Raises:
            StatementPreparationFailure: On the first template the engine rejects.
        """

        prepared: Dict[str, PreparedStatementPort] = {}
        for template in self._templates:
            prepared[template.name] = db.prepare(template)
        self._prepared = prepared
        logger.info("Prepared %d statements", len(prepared))

    def clear(self) -> None:
        self._prepared = {}

    def __getitem__(self, name: str) -> PreparedStatementPort:
        try:
            return self._prepared[name]
        except KeyError:
            if name in self.names:
                raise RuntimeError(f"Statement '{name}' has not been prepared") from None
            raise
