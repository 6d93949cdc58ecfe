"""Read-time exclusion of secret tours."""

from sqlalchemy import Select

from ..models.tour import Tour

VISIBILITY_OPTION = "tour_visibility_applied"


def is_visibility_applied(stmt: Select) -> bool:
    """Return True if the statement already excludes secret tours."""
    return bool(stmt.get_execution_options().get(VISIBILITY_OPTION))


def apply_visibility(stmt: Select, include_secret: bool = False) -> Select:
    """
    Constrain a tour query to records that are not secret.

    The statement is tagged once filtered, so applying the filter again
    returns it unchanged. ``include_secret`` is the explicit override and
    leaves the statement untouched.
    """
    if include_secret or is_visibility_applied(stmt):
        return stmt
    return stmt.where(Tour.secret_tour.is_not(True)).execution_options(
        **{VISIBILITY_OPTION: True}
    )
