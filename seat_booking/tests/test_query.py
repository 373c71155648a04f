import dataclasses

import pytest
from pydantic import ValidationError

from seat_booking.crud.seat_store import seat_store
from seat_booking.exceptions import StoreUnavailableError
from seat_booking.models.seat import PriceClass
from seat_booking.services.booking import booking_service
from seat_booking.services.cancellation import cancellation_service
from seat_booking.services.pricing import PriceTable, PriceTableProvider
from seat_booking.services.query import query_service


async def test_all_seats_free_after_provisioning(provisioned_venue, run):
    assert await run(query_service.available_seats) == list(range(provisioned_venue["seat_count"]))


async def test_full_venue_reports_an_empty_list(provisioned_venue, run, hold_seats):
    await hold_seats("bob", PriceClass.ADULT, range(provisioned_venue["seat_count"]))

    seats = await run(query_service.available_seats)

    assert seats == []
    assert seats is not None


async def test_booking_info_for_customer(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 1, 1, True, prices)

    info = await run(query_service.booking_info, "alice")

    assert info.customer == "alice"
    assert info.amount == 75
    assert info.seats == (0, 1)
    assert info.date is not None


async def test_booking_info_without_customer_is_the_latest_order(provisioned_venue, run, prices):
    await run(booking_service.book, "alice", 0, 1, False, prices)
    await run(booking_service.book, "bob", 0, 2, False, prices)

    latest = await run(query_service.booking_info)
    assert latest.customer == "bob"
    assert latest.seats == (1, 2)

    await run(cancellation_service.cancel, "alice", 0, -1, prices)

    latest = await run(query_service.booking_info)
    assert latest.customer == "alice"
    assert latest.amount == 0


async def test_booking_info_is_none_without_orders(provisioned_venue, run):
    assert await run(query_service.booking_info) is None
    assert await run(query_service.booking_info, "alice") is None


async def test_booking_info_is_immutable(provisioned_venue, run, prices):
    info = await run(booking_service.book, "alice", 0, 1, False, prices)

    with pytest.raises(ValidationError):
        info.amount = 0


async def test_provisioning_is_idempotent(provisioned_venue, db_session_factory, run, prices):
    async with db_session_factory() as session:
        async with session.begin():
            created = await seat_store.provision(session, seat_count=12, prices=prices.as_dict())

    assert created == 2
    assert await run(query_service.available_seats) == list(range(12))


async def test_price_provider_loads_and_refreshes(provisioned_venue, run):
    provider = PriceTableProvider(PriceTable(child=1, adult=2))
    with pytest.raises(StoreUnavailableError):
        provider.current

    loaded = await run(provider.load)
    assert loaded == PriceTable(child=25, adult=50)

    updated = await run(provider.update, PriceTable(child=20, adult=40))
    assert provider.current is updated
    # the previous value is replaced, never modified
    assert loaded == PriceTable(child=25, adult=50)

    assert await run(provider.refresh) == PriceTable(child=20, adult=40)


async def test_price_provider_falls_back_to_defaults(db_session_factory, run):
    provider = PriceTableProvider(PriceTable(child=5, adult=9))

    assert await run(provider.load) == PriceTable(child=5, adult=9)


def test_price_table_is_frozen():
    table = PriceTable(child=25, adult=50)

    with pytest.raises(dataclasses.FrozenInstanceError):
        table.child = 0
    assert table.unit_price(PriceClass.CHILD) == 25
    assert table.unit_price(PriceClass.ADULT) == 50
    assert table.total(2, 3) == 200
    assert table.amount_for([PriceClass.CHILD, PriceClass.ADULT, PriceClass.ADULT]) == 125
