"""
Book Aggregate Updater

Pure arithmetic for the aggregate rating block stored on every book.

Given a book's current (count, average, histogram) and one rating
delta, compute the new block in O(1):

- apply_add: a new rating arrives
- apply_change: an existing rating moves from one star value to another
- apply_remove: an existing rating is withdrawn

Numeric Tradeoff:
=================
The new average is derived from the previous average and count rather
than by re-scanning every rating of the book. Floating-point drift
therefore accumulates slowly over many updates. This is accepted: a full
re-scan on every write would make rating mutations O(number of ratings).
The histogram and count are exact integers and never drift.
"""

from dataclasses import dataclass, field

from catalog.models.book import STAR_VALUES, Book, star_column


@dataclass(frozen=True)
class RatingAggregate:
    """Snapshot of a book's aggregate rating block."""

    count: int = 0
    average: float = 0.0
    histogram: tuple[int, ...] = (0, 0, 0, 0, 0)

    @classmethod
    def from_book(cls, book: Book) -> "RatingAggregate":
        return cls(
            count=book.rating_count,
            average=book.rating_avg,
            histogram=book.histogram,
        )

    @classmethod
    def from_histogram(cls, histogram: tuple[int, ...]) -> "RatingAggregate":
        """Exact block for a histogram, as a full re-scan would compute it."""
        count = sum(histogram)
        if count == 0:
            return cls(count=0, average=0.0, histogram=tuple(histogram))
        weighted = sum(star * n for star, n in zip(STAR_VALUES, histogram))
        return cls(count=count, average=weighted / count, histogram=tuple(histogram))

    def stars(self, star: int) -> int:
        """Number of ratings with the given star value."""
        return self.histogram[star - 1]


@dataclass(frozen=True)
class AggregateUpdate:
    """
    Result of applying one rating delta.

    Attributes:
        aggregate: The block after the delta
        star_delta: Histogram adjustments keyed by star value, e.g.
            {5: -1, 3: +1} for a change from 5 stars to 3 stars
    """

    aggregate: RatingAggregate
    star_delta: dict[int, int] = field(default_factory=dict)

    @property
    def column_deltas(self) -> dict[str, int]:
        """star_delta keyed by histogram column name."""
        return {star_column(star): delta for star, delta in self.star_delta.items()}


def is_star(value) -> bool:
    """True for an int star value; bools and floats such as 4.0 do not count."""
    return isinstance(value, int) and not isinstance(value, bool) and value in STAR_VALUES


def _check_star(value: int) -> None:
    if not is_star(value):
        raise ValueError(f"Star value must be one of {STAR_VALUES}, got {value!r}")


def _bounded(average: float) -> float:
    # drift must never push the stored average outside the star range
    return min(max(average, 0.0), float(max(STAR_VALUES)))


def _shift(histogram: tuple[int, ...], star_delta: dict[int, int]) -> tuple[int, ...]:
    shifted = list(histogram)
    for star, delta in star_delta.items():
        shifted[star - 1] += delta
        if shifted[star - 1] < 0:
            raise ValueError(f"Histogram bucket {star} would become negative")
    return tuple(shifted)


def apply_add(current: RatingAggregate, new_value: int) -> AggregateUpdate:
    """
    Add one rating of ``new_value`` stars.

    count' = count + 1
    avg'   = (avg * count + new_value) / count'
    """
    _check_star(new_value)

    count = current.count + 1
    average = (current.average * current.count + new_value) / count
    star_delta = {new_value: 1}

    return AggregateUpdate(
        aggregate=RatingAggregate(
            count=count,
            average=_bounded(average),
            histogram=_shift(current.histogram, star_delta),
        ),
        star_delta=star_delta,
    )


def apply_change(
    current: RatingAggregate, old_value: int, new_value: int
) -> AggregateUpdate:
    """
    Move one existing rating from ``old_value`` to ``new_value`` stars.

    count' = count
    avg'   = (avg * count - old_value + new_value) / count

    Raises:
        ValueError: If the book has no ratings to change
    """
    _check_star(old_value)
    _check_star(new_value)
    if current.count <= 0:
        raise ValueError("Cannot change a rating of a book with no ratings")

    average = (current.average * current.count - old_value + new_value) / current.count
    star_delta = {old_value: -1, new_value: 1} if old_value != new_value else {}

    return AggregateUpdate(
        aggregate=RatingAggregate(
            count=current.count,
            average=_bounded(average),
            histogram=_shift(current.histogram, star_delta),
        ),
        star_delta=star_delta,
    )


def apply_remove(current: RatingAggregate, old_value: int) -> AggregateUpdate:
    """
    Withdraw one existing rating of ``old_value`` stars.

    count' = count - 1
    avg'   = 0 if count' == 0 else (avg * count - old_value) / count'

    Raises:
        ValueError: If the book has no ratings to remove
    """
    _check_star(old_value)
    if current.count <= 0:
        raise ValueError("Cannot remove a rating from a book with no ratings")

    count = current.count - 1
    if count == 0:
        average = 0.0
    else:
        average = (current.average * current.count - old_value) / count
    star_delta = {old_value: -1}

    return AggregateUpdate(
        aggregate=RatingAggregate(
            count=count,
            average=_bounded(average),
            histogram=_shift(current.histogram, star_delta),
        ),
        star_delta=star_delta,
    )
