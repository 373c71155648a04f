"""
Seat selection for a booking request.

Pure functions over a snapshot of free seat numbers: nothing here touches the
store, the booking service re-checks the snapshot when it writes.
"""
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from seat_booking.exceptions import InsufficientSeatsError, InvalidRequestError, NoContiguousBlockError
from seat_booking.models.seat import PriceClass


@dataclass(frozen=True)
class SeatAllocation:
    child_seats: frozenset = frozenset()
    adult_seats: frozenset = frozenset()

    @property
    def seats(self) -> Tuple[int, ...]:
        return tuple(sorted(self.child_seats | self.adult_seats))

    @property
    def is_empty(self) -> bool:
        return not self.child_seats and not self.adult_seats

    def assignments(self) -> Iterator[Tuple[int, PriceClass]]:
        """(seat_number, price_class) pairs in seat order."""
        for seat in self.seats:
            yield seat, PriceClass.CHILD if seat in self.child_seats else PriceClass.ADULT

    def __len__(self):
        return len(self.child_seats) + len(self.adult_seats)


def select_seats(free_seats: Sequence[int], child_count: int, adult_count: int, grouped: bool) -> SeatAllocation:
    """
    Choose which free seats satisfy a request.

    Ungrouped requests take the lowest free seats, adults first then children.
    Grouped requests take the first run of consecutive seat numbers long
    enough for the whole party, children at the start of the block.
    A request for zero seats returns an empty allocation.
    """
    if child_count < 0 or adult_count < 0:
        raise InvalidRequestError(
            f"Seat counts must not be negative (child={child_count}, adult={adult_count})")
    free_seats = list(free_seats)
    _check_strictly_ascending(free_seats)

    total = child_count + adult_count
    if total == 0:
        return SeatAllocation()
    if grouped:
        return _select_grouped(free_seats, child_count, adult_count)
    return _select_ungrouped(free_seats, child_count, adult_count)


def find_block_start(free_seats: Sequence[int], size: int) -> Optional[int]:
    """First seat of the leftmost run of `size` consecutive free seats, None if there is none."""
    if size <= 0:
        return None
    run_start = None
    run_length = 0
    previous = None
    for seat in free_seats:
        if previous is not None and seat == previous + 1:
            run_length += 1
        else:
            run_start, run_length = seat, 1
        if run_length == size:
            return run_start
        previous = seat
    return None


def _select_ungrouped(free_seats: List[int], child_count: int, adult_count: int) -> SeatAllocation:
    total = child_count + adult_count
    if len(free_seats) < total:
        raise InsufficientSeatsError(requested=total, available=len(free_seats))
    return SeatAllocation(
        child_seats=frozenset(free_seats[adult_count:total]),
        adult_seats=frozenset(free_seats[:adult_count]),
    )


def _select_grouped(free_seats: List[int], child_count: int, adult_count: int) -> SeatAllocation:
    total = child_count + adult_count
    start = find_block_start(free_seats, total)
    if start is None:
        raise NoContiguousBlockError(requested=total)
    return SeatAllocation(
        child_seats=frozenset(range(start, start + child_count)),
        adult_seats=frozenset(range(start + child_count, start + total)),
    )


def _check_strictly_ascending(free_seats: List[int]) -> None:
    for previous, seat in zip(free_seats, free_seats[1:]):
        if seat <= previous:
            raise InvalidRequestError("Free seats must be strictly ascending and without duplicates")
