import pytest

from seat_booking.exceptions import BookingNotFoundError, InvalidRequestError, OverRefundError
from seat_booking.models.seat import PriceClass
from seat_booking.services.booking import booking_service
from seat_booking.services.cancellation import cancellation_service
from seat_booking.services.pricing import PriceTable, PriceTableProvider
from seat_booking.services.query import query_service


async def test_matching_cancellation_restores_free_seats(provisioned_venue, run, prices):
    before = await run(query_service.available_seats)
    await run(booking_service.book, "alice", 2, 2, True, prices)

    result = await run(cancellation_service.cancel, "alice", 2, 2, prices)

    assert result.seats == ()
    assert result.amount == 0
    assert await run(query_service.available_seats) == before


async def test_partial_cancellation(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 2, 3, False, prices)  # adults 0,1,2 children 3,4

    result = await run(cancellation_service.cancel, "alice", 1, 1, prices)

    assert result.amount == (2 * 25 + 3 * 50) - (25 + 50)
    assert len(result.seats) == 3
    seat_map = {row.seat_number: row.price_class for row in await run(query_service.seat_map)}
    held = [seat_map[n] for n in result.seats]
    assert held.count(PriceClass.CHILD) == 1
    assert held.count(PriceClass.ADULT) == 2
    assert (await run(query_service.booking_info, "alice")).amount == result.amount


async def test_cancel_all_refunds_seats_actually_held(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 2, 1, False, prices)  # amount 100

    result = await run(cancellation_service.cancel, "alice", -1, 0, prices)

    # refund is 2 * 25, not -1 * 25
    assert result.amount == 50
    assert len(result.seats) == 1
    assert len(await run(query_service.available_seats)) == 9


async def test_cancel_everything_keeps_the_order_row(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 1, 2, False, prices)

    result = await run(cancellation_service.cancel, "alice", -1, -1, prices)

    assert result.seats == ()
    info = await run(query_service.booking_info, "alice")
    assert info is not None
    assert info.amount == 0
    assert info.seats == ()


async def test_over_refund_leaves_state_unchanged(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 0, 1, False, prices)  # amount 50
    seats_before = await run(query_service.available_seats)

    with pytest.raises(OverRefundError) as exc_info:
        await run(cancellation_service.cancel, "alice", 0, 2, prices)

    assert exc_info.value.refund == 100
    assert exc_info.value.amount == 50
    assert await run(query_service.available_seats) == seats_before
    info = await run(query_service.booking_info, "alice")
    assert info.amount == 50
    assert info.seats == (0,)


async def test_cancellation_uses_the_same_prices_as_booking(provisioned_venue, run):
    prices = PriceTable(child=30, adult=70)
    await run(booking_service.book, "alice", 1, 1, False, prices)  # amount 100

    result = await run(cancellation_service.cancel, "alice", 0, 1, prices)

    # with fixed 25/50 the refund would have been 50
    assert result.amount == 30


async def test_cancellation_only_touches_own_seats(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 0, 2, False, prices)
    await run(booking_service.book, "bob", 0, 2, False, prices)

    await run(cancellation_service.cancel, "alice", 0, -1, prices)

    assert (await run(query_service.booking_info, "bob")).seats == (2, 3)
    assert await run(query_service.available_seats) == [0, 1] + list(range(4, 10))


async def test_cancel_unknown_customer(provisioned_venue, run, prices):
    with pytest.raises(BookingNotFoundError):
        await run(cancellation_service.cancel, "nobody", -1, -1, prices)


@pytest.mark.parametrize("customer, child_count, adult_count", [
    ("", 1, 0),
    (None, 1, 0),
    ("alice", -2, 0),
    ("alice", 0, -5),
])
async def test_invalid_cancellation_requests(provisioned_venue, run, prices, customer, child_count, adult_count):
    with pytest.raises(InvalidRequestError):
        await run(cancellation_service.cancel, customer, child_count, adult_count, prices)


async def test_cancel_all_after_price_increase(provisioned_venue, run, prices):
    provider = PriceTableProvider(prices)
    await run(provider.load)
    await run(booking_service.book, "alice", 1, 1, False, provider.current)  # amount 75
    await run(booking_service.book, "bob", 0, 2, False, provider.current)  # amount 100

    raised = await run(provider.update, PriceTable(child=25, adult=70))

    assert (await run(query_service.booking_info, "alice")).amount == 95
    assert (await run(query_service.booking_info, "bob")).amount == 140

    result = await run(cancellation_service.cancel, "alice", 0, -1, raised)
    assert result.amount == 25
    assert len(result.seats) == 1

    result = await run(cancellation_service.cancel, "bob", 0, 2, raised)
    assert result.amount == 0
    assert result.seats == ()
