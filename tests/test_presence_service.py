"""Unit tests for presence reconciliation."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, time
from access_console.schemas.access_log import AccessLogEntry, LogStatus
from access_console.schemas.person import Person, PersonType, ScheduledVisit
from access_console.schemas.presence import PresenceStatus
from access_console.services.presence_service import most_recent, reconcile
from access_console.utils.time_utils import combine_local

TODAY = date(2024, 6, 15)


def at(day, hh, mm=0):
    return combine_local(day, time(hh, mm))


def supplier(person_id="S1", name="Ahmed"):
    return Person(id=person_id, person_type=PersonType.SUPPLIER, name=name, code="01234567")


def personnel(person_id="P1", name="Fatma K."):
    return Person(id=person_id, person_type=PersonType.LEONI_PERSONNEL, name=name, code="MAT12345")


def make_log(log_id, person_id="S1", person_type=PersonType.SUPPLIER, day=date(2024, 6, 1),
             entry=(8, 0), exit=None):
    return AccessLogEntry(
        id=log_id,
        person_id=person_id,
        person_type=person_type,
        entry_time=at(day, *entry) if entry else None,
        exit_time=at(day, *exit) if exit else None,
        status=LogStatus.EXIT if exit else LogStatus.ENTRY,
        log_date=day,
    )


class TestPresenceStatus:
    def test_active_log_marks_person_inside(self):
        active = make_log("L1")
        rows = reconcile([supplier()], [active], [active], today=TODAY)

        row = rows[0]
        assert row.current_status == PresenceStatus.INSIDE
        assert row.can_check_out is True
        assert row.can_check_in is False
        assert row.latest_entry_time == at(date(2024, 6, 1), 8)
        assert row.latest_exit_time is None
        assert row.active_log_id == "L1"

    def test_person_without_logs_has_no_status(self):
        rows = reconcile([supplier(), personnel()], [], [], today=TODAY)

        for row in rows:
            assert row.current_status is None
            assert row.can_check_in is True
            assert row.can_check_out is False
            assert row.latest_entry_time is None

    def test_completed_visit_marks_person_outside(self):
        done = make_log("L1", exit=(17, 0))
        rows = reconcile([supplier()], [], [done], today=TODAY)

        row = rows[0]
        assert row.current_status == PresenceStatus.OUTSIDE
        assert row.can_check_in is True
        assert row.latest_entry_time == at(date(2024, 6, 1), 8)
        assert row.latest_exit_time == at(date(2024, 6, 1), 17)

    def test_most_recent_log_by_date_wins(self):
        older = make_log("L1", day=date(2024, 6, 1), exit=(17, 0))
        newer = make_log("L2", day=date(2024, 6, 3), entry=(9, 0), exit=(12, 0))
        rows = reconcile([supplier()], [], [newer, older], today=TODAY)

        assert rows[0].latest_exit_time == at(date(2024, 6, 3), 12)

    def test_same_date_tie_broken_by_latest_time(self):
        morning = make_log("L1", entry=(7, 0), exit=(9, 0))
        afternoon = make_log("L2", entry=(13, 0), exit=(16, 30))

        assert most_recent([afternoon, morning]).id == "L2"
        assert most_recent([morning, afternoon]).id == "L2"

    def test_open_entry_missing_from_active_list_has_no_status(self):
        stale = make_log("L1")
        rows = reconcile([supplier()], [], [stale], today=TODAY)

        assert rows[0].current_status is None
        assert rows[0].can_check_in is True
        assert rows[0].latest_entry_time == at(date(2024, 6, 1), 8)

    def test_duplicate_active_logs_keep_most_recent(self):
        first = make_log("L1", entry=(8, 0))
        second = make_log("L2", entry=(10, 0))
        rows = reconcile([supplier()], [first, second], [], today=TODAY)

        assert rows[0].active_log_id == "L2"
        assert rows[0].latest_entry_time == at(date(2024, 6, 1), 10)


class TestUnknownReferences:
    def test_type_mismatch_is_not_merged(self):
        """Personnel log with a supplier's id must not touch the supplier row."""
        foreign = make_log("L1", person_id="S1", person_type=PersonType.LEONI_PERSONNEL)
        rows = reconcile([supplier("S1")], [foreign], [foreign], today=TODAY)

        assert len(rows) == 1
        assert rows[0].current_status is None
        assert rows[0].can_check_in is True

    def test_unknown_person_logs_dropped(self):
        ghost = make_log("L9", person_id="NOPE")
        rows = reconcile([supplier()], [ghost], [ghost], today=TODAY)

        assert [row.person_id for row in rows] == ["S1"]
        assert rows[0].current_status is None

    def test_same_id_under_both_types_gives_two_rows(self):
        roster = [supplier("X1"), personnel("X1")]
        active = make_log("L1", person_id="X1", person_type=PersonType.LEONI_PERSONNEL)
        rows = reconcile(roster, [active], [active], today=TODAY)

        assert len(rows) == 2
        assert rows[0].current_status is None                  # supplier X1
        assert rows[1].current_status == PresenceStatus.INSIDE  # personnel X1


class TestMonthlyVisits:
    def test_server_aggregate_is_authoritative(self):
        history = [make_log("L1", exit=(17, 0))]
        rows = reconcile([supplier()], [], history, monthly_stats={"S1": 7}, today=TODAY)

        assert rows[0].monthly_visit_count == 7

    def test_supplier_missing_from_aggregate_counts_zero(self):
        history = [make_log("L1", exit=(17, 0))]
        rows = reconcile([supplier()], [], history, monthly_stats={}, today=TODAY)

        assert rows[0].monthly_visit_count == 0

    def test_client_scan_counts_current_month_only(self):
        history = [
            make_log("L1", day=date(2024, 6, 1), exit=(17, 0)),
            make_log("L2", day=date(2024, 6, 10), exit=(11, 0)),
            make_log("L3", day=date(2024, 5, 28), exit=(12, 0)),
        ]
        rows = reconcile([supplier()], [], history, today=TODAY)

        assert rows[0].monthly_visit_count == 2

    def test_personnel_always_zero(self):
        history = [make_log("L1", person_id="P1", person_type=PersonType.LEONI_PERSONNEL, exit=(17, 0))]
        rows = reconcile([personnel()], [], history, monthly_stats={"P1": 4}, today=TODAY)

        assert rows[0].monthly_visit_count == 0


class TestReconcileShape:
    def test_schedule_attached_unchanged(self):
        person = supplier()
        person.scheduled_visit = ScheduledVisit(date="2024-06-20", time="09:00", reason="Monthly delivery")
        rows = reconcile([person], [], [], today=TODAY)

        assert rows[0].scheduled_visit.reason == "Monthly delivery"

    def test_idempotent(self):
        roster = [supplier(), personnel()]
        active = [make_log("L2", person_id="P1", person_type=PersonType.LEONI_PERSONNEL)]
        history = [make_log("L1", exit=(17, 0))] + active

        first = reconcile(roster, active, history, today=TODAY)
        second = reconcile(roster, active, history, today=TODAY)

        assert [row.model_dump() for row in first] == [row.model_dump() for row in second]
