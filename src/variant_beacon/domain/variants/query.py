"""Beacon variant query: input validation and predicate rendering."""

from dataclasses import dataclass
from enum import StrEnum

from variant_beacon.domain.variants.predicate import Column, Condition, Op, Predicate
from variant_beacon.platform.errors import (
    InvalidCoordinateSpecError,
    MissingFieldError,
)


class CoordinateMode(StrEnum):
    """How the query constrains variant positions."""

    SINGLE = "single"
    PRECISE = "precise"
    IMPRECISE = "imprecise"
    ABSENT = "absent"


@dataclass(frozen=True)
class VariantQuery:
    """A single existence check against a Beacon.

    Positions follow the table's convention: ``start`` is inclusive and ``end``
    is exclusive.
    """

    # Chromosome reference name, e.g. "chr17".
    reference_name: str = ""
    # Reference bases to match.
    allele: str = ""
    # A point that must intersect the stored variant.
    coordinate: int | None = None
    # Exact variant bounds.
    start: int | None = None
    end: int | None = None
    # Bounds on the variant's start and end.
    start_min: int | None = None
    start_max: int | None = None
    end_min: int | None = None
    end_max: int | None = None

    @property
    def _range_bounds(self) -> tuple[int | None, ...]:
        return (self.start_min, self.start_max, self.end_min, self.end_max)

    @property
    def mode(self) -> CoordinateMode:
        """The coordinate mode selected by the populated fields.

        :raises InvalidCoordinateSpecError: If fields of several modes are set.
        """
        populated = []
        if self.coordinate is not None:
            populated.append(CoordinateMode.SINGLE)
        if self.start is not None or self.end is not None:
            populated.append(CoordinateMode.PRECISE)
        if any(b is not None for b in self._range_bounds):
            populated.append(CoordinateMode.IMPRECISE)

        if len(populated) > 1:
            raise InvalidCoordinateSpecError(
                f"cannot combine {' and '.join(populated)} coordinates"
            )
        return populated[0] if populated else CoordinateMode.ABSENT

    def validate(self, *, require_coordinate: bool = True) -> None:
        """Validate the query meets the GA4GH Beacon API requirements.

        :param require_coordinate: Reject queries with no coordinate at all.
        :raises MissingFieldError: If the reference name or allele is empty.
        :raises InvalidCoordinateSpecError: If the coordinate fields are mixed,
            partial or inverted, or absent while required.
        """
        if not self.reference_name:
            raise MissingFieldError("referenceName")
        if not self.allele:
            raise MissingFieldError("allele")

        mode = self.mode
        if mode is CoordinateMode.ABSENT:
            if require_coordinate:
                raise InvalidCoordinateSpecError("missing coordinate")
        elif mode is CoordinateMode.PRECISE:
            if self.start is None:
                raise InvalidCoordinateSpecError("end requires start")
            if self.end is not None and self.start > self.end:
                raise InvalidCoordinateSpecError("start must not exceed end")
        elif mode is CoordinateMode.IMPRECISE:
            if any(b is None for b in self._range_bounds):
                raise InvalidCoordinateSpecError(
                    "startMin, startMax, endMin and endMax must be given together"
                )
            if self.start_min > self.start_max:  # type: ignore[operator]
                raise InvalidCoordinateSpecError("startMin must not exceed startMax")
            if self.end_min > self.end_max:  # type: ignore[operator]
                raise InvalidCoordinateSpecError("endMin must not exceed endMax")

    def render_predicate(self) -> Predicate:
        """Render the query as a parameterized predicate.

        Assumes :meth:`validate` has passed. Clause order is reference name,
        allele, then coordinate.
        """
        conditions: list[Condition] = []

        def simple(column: Column, parameter: str, value: str) -> None:
            if value:
                conditions.append(Condition(column, Op.EQ, parameter, value))

        simple(Column.REFERENCE_NAME, "reference_name", self.reference_name)
        simple(Column.REFERENCE_BASES, "allele", self.allele)

        mode = self.mode
        if mode is CoordinateMode.SINGLE and self.coordinate is not None:
            # Start is inclusive, end is exclusive.
            conditions += [
                Condition(Column.START, Op.LE, "coordinate", self.coordinate),
                Condition(Column.END, Op.GT, "coordinate", self.coordinate),
            ]
        elif mode is CoordinateMode.PRECISE and self.start is not None:
            conditions.append(Condition(Column.START, Op.EQ, "start", self.start))
            if self.end is not None:
                conditions.append(Condition(Column.END, Op.EQ, "end", self.end))
        elif mode is CoordinateMode.IMPRECISE:
            bounds = (
                (Column.START, Op.GE, "start_min", self.start_min),
                (Column.START, Op.LE, "start_max", self.start_max),
                (Column.END, Op.GE, "end_min", self.end_min),
                (Column.END, Op.LE, "end_max", self.end_max),
            )
            conditions += [
                Condition(column, op, name, value)
                for column, op, name, value in bounds
                if value is not None
            ]

        return Predicate(tuple(conditions))
