"""Grouping pipelines over tours and the secret-tour guard applied to them."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import ColumnElement, Select, asc, desc, literal_column, select

from ..models.tour import Tour

SECRET_EXCLUSION = "exclude-secret-tours"


@dataclass(frozen=True, eq=False)
class Match:
    """Filter stage. Before a Group it filters rows, after it filters groups."""

    criteria: Tuple[ColumnElement, ...]
    name: Optional[str] = None


@dataclass(frozen=True, eq=False)
class Group:
    """Group rows by ``key`` (or all rows when None) computing labelled aggregates."""

    key: Optional[ColumnElement]
    aggregates: Dict[str, ColumnElement] = field(default_factory=dict)
    key_label: str = "key"


@dataclass(frozen=True, eq=False)
class Sort:
    """Order by (name, direction) pairs; direction 1 ascending, -1 descending."""

    keys: Tuple[Tuple[str, int], ...]


@dataclass(frozen=True, eq=False)
class Limit:
    count: int


Stage = Union[Match, Group, Sort, Limit]


def exclude_secret_stage() -> Match:
    """The stage that drops secret tours from a pipeline."""
    return Match(criteria=(Tour.secret_tour.is_not(True),), name=SECRET_EXCLUSION)


def is_guarded(stages: Sequence[Stage]) -> bool:
    return bool(stages) and isinstance(stages[0], Match) and stages[0].name == SECRET_EXCLUSION


def guard_pipeline(stages: Sequence[Stage]) -> List[Stage]:
    """
    Prepend the secret-tour exclusion to a pipeline.

    Every later stage therefore only sees non-secret tours. A pipeline
    that already starts with the exclusion is returned as is.
    """
    stages = list(stages)
    if is_guarded(stages):
        return stages
    return [exclude_secret_stage(), *stages]


def _order_clause(name: str, direction: int, grouped: bool):
    column = literal_column(name) if grouped else Tour.__table__.c[name]
    return asc(column) if direction >= 0 else desc(column)


def compile_pipeline(stages: Sequence[Stage]) -> Select:
    """
    Compile pipeline stages into one SELECT over the tours table.

    Raises:
        ValueError: If the pipeline has more than one Group stage
    """
    where: List[ColumnElement] = []
    having: List[ColumnElement] = []
    order: List[Tuple[str, int]] = []
    group: Optional[Group] = None
    limit: Optional[int] = None

    for stage in stages:
        if isinstance(stage, Match):
            (having if group is not None else where).extend(stage.criteria)
        elif isinstance(stage, Group):
            if group is not None:
                raise ValueError("Only one group stage is supported per pipeline")
            group = stage
        elif isinstance(stage, Sort):
            order.extend(stage.keys)
        elif isinstance(stage, Limit):
            limit = stage.count
        else:
            raise TypeError(f"Unknown pipeline stage: {stage!r}")

    if group is None:
        stmt = select(Tour)
    else:
        columns = [expr.label(label) for label, expr in group.aggregates.items()]
        if group.key is not None:
            columns.insert(0, group.key.label(group.key_label))
        stmt = select(*columns).select_from(Tour)
        if group.key is not None:
            stmt = stmt.group_by(group.key)

    if where:
        stmt = stmt.where(*where)
    if having:
        stmt = stmt.having(*having)
    for name, direction in order:
        stmt = stmt.order_by(_order_clause(name, direction, group is not None))
    if limit is not None:
        stmt = stmt.limit(limit)

    return stmt
