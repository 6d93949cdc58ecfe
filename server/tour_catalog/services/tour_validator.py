"""Field rules, cross-field rules and normalization for tour records."""

import logging
import math
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional
from uuid import UUID

from ..core.exceptions import DuplicateKeyError, TourValidationError
from ..core.observability import metrics_collector
from ..models.tour import DIFFICULTIES
from ..schemas.common import Violation, ViolationCode

if TYPE_CHECKING:
    from .tour_store import TourStore

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 10
NAME_MAX_LENGTH = 40
RATING_MIN = 1
RATING_MAX = 5

REQUIRED_FIELDS = {
    "name": "A tour must have a name",
    "duration": "A tour must have a duration",
    "max_group_size": "A tour must have a group size",
    "difficulty": "A tour must have a difficulty",
    "price": "A tour must have a price",
    "summary": "A tour must have a summary",
    "image_cover": "A tour must have a cover image",
}

TRIMMED_FIELDS = ("name", "summary", "description")
TEXT_FIELDS = ("name", "difficulty", "summary", "description", "image_cover")
NUMBER_FIELDS = ("duration", "max_group_size", "ratings_average", "ratings_quantity", "price", "price_discount")

DEFAULTS = {
    "ratings_average": 4.5,
    "ratings_quantity": 0,
    "description": None,
    "price_discount": None,
    "images": [],
    "start_dates": [],
    "secret_tour": False,
    "guides": [],
}


def round_rating(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value) or value == []


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _parse_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            return None
    return None


def _type_violation(field: str, expected: str, value: Any) -> Violation:
    return Violation(
        path=field,
        code=ViolationCode.INVALID_TYPE,
        message=f"'{field}' must be {expected}",
        params={"expected": expected, "value": repr(value)},
    )


class TourValidator:
    """
    Validates candidate tour records.

    ``check`` applies every rule and returns all violations without
    touching the store. ``validate`` additionally normalizes the record
    and checks ``name`` uniqueness against the injected store.
    """

    def __init__(self, store: Optional["TourStore"] = None):
        self.store = store

    @staticmethod
    def trim(candidate: Mapping[str, Any]) -> Dict[str, Any]:
        """Copy the candidate with surrounding whitespace removed from text fields."""
        record = dict(candidate)
        for field in TRIMMED_FIELDS:
            if isinstance(record.get(field), str):
                record[field] = record[field].strip()
        return record

    def check(self, candidate: Mapping[str, Any], partial: bool = False) -> List[Violation]:
        """
        Apply every field rule and the discount rule to a candidate.

        Args:
            candidate: Field values keyed by name
            partial: Only check presence of fields the candidate carries

        Returns:
            Violations in field order, empty when the record is acceptable
        """
        record = self.trim(candidate)
        violations: List[Violation] = []
        failed = set()

        for field, message in REQUIRED_FIELDS.items():
            if partial and field not in record:
                continue
            if _is_blank(record.get(field)):
                violations.append(Violation(path=field, code=ViolationCode.MISSING_FIELD, message=message))
                failed.add(field)

        for field, value in record.items():
            if field in failed or value is None:
                continue
            violation = self._check_type(field, value)
            if violation:
                violations.append(violation)
                failed.add(field)

        name = record.get("name")
        if "name" not in failed and isinstance(name, str):
            if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
                bound = NAME_MIN_LENGTH if len(name) < NAME_MIN_LENGTH else NAME_MAX_LENGTH
                violations.append(Violation(
                    path="name",
                    code=ViolationCode.OUT_OF_RANGE,
                    message=f"A tour name must have between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
                    params={"bound": bound, "value": name, "length": len(name)},
                ))

        rating = record.get("ratings_average")
        if "ratings_average" not in failed and rating is not None:
            if not RATING_MIN <= rating <= RATING_MAX:
                violations.append(Violation(
                    path="ratings_average",
                    code=ViolationCode.OUT_OF_RANGE,
                    message=f"Rating must be between {RATING_MIN:.1f} and {RATING_MAX:.1f}",
                    params={"bound": RATING_MIN if rating < RATING_MIN else RATING_MAX, "value": rating},
                ))

        difficulty = record.get("difficulty")
        if "difficulty" not in failed and difficulty is not None and difficulty not in DIFFICULTIES:
            violations.append(Violation(
                path="difficulty",
                code=ViolationCode.INVALID_ENUM,
                message="Difficulty is either easy, medium or difficult",
                params={"allowed": list(DIFFICULTIES), "value": difficulty},
            ))

        discount = record.get("price_discount")
        price = record.get("price")
        if (
            discount is not None
            and price is not None
            and not {"price", "price_discount"} & failed
            and not discount < price
        ):
            violations.append(Violation(
                path="price_discount",
                code=ViolationCode.INVALID_DISCOUNT,
                message=f"Discount ({discount}) must be below the tour price ({price})",
                params={"discount": discount, "price": price},
            ))

        return violations

    @staticmethod
    def _check_type(field: str, value: Any) -> Optional[Violation]:
        if field in TEXT_FIELDS and not isinstance(value, str):
            return _type_violation(field, "text", value)
        if field in NUMBER_FIELDS and not _is_number(value):
            return _type_violation(field, "a number", value)
        if field == "secret_tour" and not isinstance(value, bool):
            return _type_violation(field, "a boolean", value)
        if field == "images" and not (isinstance(value, list) and all(isinstance(v, str) for v in value)):
            return _type_violation(field, "a list of text", value)
        if field == "start_dates" and not (
            isinstance(value, list) and all(_parse_datetime(v) is not None for v in value)
        ):
            return _type_violation(field, "a list of timestamps", value)
        if field == "guides" and not (
            isinstance(value, list) and all(_parse_uuid(v) is not None for v in value)
        ):
            return _type_violation(field, "a list of user IDs", value)
        return None

    def normalize(self, candidate: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
        """
        Normalize an accepted candidate for storage.

        Fills defaults for a full record, rounds ``ratings_average`` to
        one decimal and canonicalizes timestamps and guide IDs. Keys that
        are not tour fields are dropped, including ``slug``.
        """
        record = {
            field: value
            for field, value in self.trim(candidate).items()
            if field in REQUIRED_FIELDS or field in DEFAULTS
        }

        # Explicit nulls on defaulted fields mean "use the default"
        for field, default in DEFAULTS.items():
            if record.get(field) is None and (field in record or not partial):
                if default is None:
                    record[field] = None
                else:
                    record[field] = list(default) if isinstance(default, list) else default

        if record.get("ratings_average") is not None:
            record["ratings_average"] = round_rating(record["ratings_average"])
        if record.get("start_dates") is not None:
            record["start_dates"] = [_parse_datetime(v) for v in record["start_dates"]]
        if record.get("guides") is not None:
            record["guides"] = [str(_parse_uuid(v)) for v in record["guides"]]

        return record

    async def validate(
        self,
        candidate: Mapping[str, Any],
        partial: bool = False,
        exclude_id: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        """
        Accept or reject a candidate record.

        Args:
            candidate: Field values keyed by name
            partial: Validate only the fields the candidate carries
            exclude_id: Record being updated, ignored by the uniqueness check

        Returns:
            The normalized record

        Raises:
            TourValidationError: With every violated rule
            DuplicateKeyError: If another tour already has this name
        """
        violations = self.check(candidate, partial=partial)
        if violations:
            for violation in violations:
                metrics_collector.record_validation_failure(violation.code.value)
            logger.info(
                "Tour candidate rejected",
                extra={
                    "violations": [f"{v.path}:{v.code.value}" for v in violations],
                    "tour_name": candidate.get("name"),
                },
            )
            raise TourValidationError(violations)

        record = self.normalize(candidate, partial=partial)

        name = record.get("name")
        if name is not None and self.store is not None:
            existing_id = await self.store.name_taken(name, exclude_id=exclude_id)
            if existing_id is not None:
                logger.warning(
                    "Tour name already taken",
                    extra={"tour_name": name, "existing_tour_id": str(existing_id)},
                )
                raise DuplicateKeyError("name", name, existing_id=str(existing_id))

        return record
