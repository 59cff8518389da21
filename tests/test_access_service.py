"""Unit tests for the check-in / check-out submitter."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import date, datetime, time
from access_console.errors import (
    AlreadyInsideError, InvalidTimeOrderError, NotInsideError, UnknownPersonReferenceError,
)
from access_console.schemas.access_log import CheckInRequest, CheckOutRequest
from access_console.schemas.person import PersonType, VehicleInfo
from access_console.schemas.presence import PresenceStatus, PresenceView
from access_console.services.access_service import check_in, check_out
from access_console.utils.time_utils import combine_local

DAY = date(2024, 6, 1)


def make_row(status=None, entry=None):
    return PresenceView(
        person_id="S1",
        person_type=PersonType.SUPPLIER,
        name="Ahmed",
        vehicle=VehicleInfo(id="V1", plate="123 TU 456"),
        current_status=status,
        can_check_in=status != PresenceStatus.INSIDE,
        can_check_out=status == PresenceStatus.INSIDE,
        latest_entry_time=entry,
        active_log_id="L1" if status == PresenceStatus.INSIDE else None,
    )


def make_client():
    client = MagicMock()
    client.check_in = AsyncMock(return_value=MagicMock())
    client.check_out = AsyncMock(return_value=MagicMock())
    return client


class TestCheckIn:
    @pytest.mark.asyncio
    async def test_submits_local_entry_time(self):
        client = make_client()
        request = CheckInRequest(person_id="S1", person_type=PersonType.SUPPLIER,
                                 date=DAY, time=time(8, 0), notes="Delivery")

        await check_in(client, make_row(), request)

        body = client.check_in.call_args[0][0]
        assert body["personId"] == "S1"
        assert body["personType"] == "Supplier"
        assert body["vehicleId"] == "V1"
        assert body["notes"] == "Delivery"
        sent = datetime.fromisoformat(body["entryTime"])
        assert sent.tzinfo is not None
        assert (sent.date(), sent.hour, sent.minute) == (DAY, 8, 0)

    @pytest.mark.asyncio
    async def test_already_inside_refused_without_request(self):
        client = make_client()
        row = make_row(PresenceStatus.INSIDE, combine_local(DAY, time(8, 0)))
        request = CheckInRequest(person_id="S1", person_type=PersonType.SUPPLIER, date=DAY, time=time(9, 0))

        with pytest.raises(AlreadyInsideError):
            await check_in(client, row, request)
        client.check_in.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_person_refused(self):
        client = make_client()
        request = CheckInRequest(person_id="S9", person_type=PersonType.SUPPLIER, date=DAY, time=time(9, 0))

        with pytest.raises(UnknownPersonReferenceError):
            await check_in(client, None, request)
        client.check_in.assert_not_called()


class TestCheckOut:
    @pytest.mark.asyncio
    async def test_closes_active_log(self):
        client = make_client()
        row = make_row(PresenceStatus.INSIDE, combine_local(DAY, time(8, 0)))
        request = CheckOutRequest(person_id="S1", person_type=PersonType.SUPPLIER, date=DAY, time=time(17, 0))

        await check_out(client, row, request)

        body = client.check_out.call_args[0][0]
        assert body["logId"] == "L1"
        assert datetime.fromisoformat(body["exitTime"]).hour == 17

    @pytest.mark.asyncio
    async def test_exit_before_entry_refused(self):
        client = make_client()
        row = make_row(PresenceStatus.INSIDE, combine_local(DAY, time(8, 0)))
        request = CheckOutRequest(person_id="S1", person_type=PersonType.SUPPLIER, date=DAY, time=time(7, 30))

        with pytest.raises(InvalidTimeOrderError):
            await check_out(client, row, request)
        client.check_out.assert_not_called()

    @pytest.mark.asyncio
    async def test_exit_equal_to_entry_accepted(self):
        client = make_client()
        row = make_row(PresenceStatus.INSIDE, combine_local(DAY, time(8, 0)))
        request = CheckOutRequest(person_id="S1", person_type=PersonType.SUPPLIER, date=DAY, time=time(8, 0))

        await check_out(client, row, request)
        client.check_out.assert_called_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [None, PresenceStatus.OUTSIDE])
    async def test_not_inside_refused(self, status):
        client = make_client()
        request = CheckOutRequest(person_id="S1", person_type=PersonType.SUPPLIER, date=DAY, time=time(17, 0))

        with pytest.raises(NotInsideError):
            await check_out(client, make_row(status), request)
        client.check_out.assert_not_called()
