"""Public core API for statement templates and the statement registry."""

from .catalog import (
    ALL_STATES,
    ALL_TEMPLATES,
    BUSINESSES_IN_ZIP,
    BUSINESSES_IN_ZIP_WITH_CATEGORIES,
    CITIES_IN_STATE,
    INSERT_TIP,
    ZIPS_IN_CITY,
)
from .registry import StatementRegistry
from .statements import BoundCall, ParamType, StatementTemplate

__all__ = [
    "ParamType",
    "StatementTemplate",
    "BoundCall",
    "StatementRegistry",
    "ALL_TEMPLATES",
    "ALL_STATES",
    "CITIES_IN_STATE",
    "ZIPS_IN_CITY",
    "BUSINESSES_IN_ZIP",
    "BUSINESSES_IN_ZIP_WITH_CATEGORIES",
    "INSERT_TIP",
]
