"""Shared core type aliases used across contracts, statements, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple, Union

NamedParams = Dict[str, Any]
PositionalParams = List[Any]
DriverParams = Union[NamedParams, PositionalParams]

BindValues = Mapping[str, Any]
BoundValues = Tuple[Any, ...]

RowMapping = Dict[str, Any]
