from datetime import datetime
from unittest import mock

import pytest

from db.models import Asset, PATTest
from services.sync_service import (
    build_pat_test, is_duplicate, preview, sync_mapped, SyncOutcome,
)
from tests.factories import AssetFactory, PATRecordFactory, PATTestFactory


# ── Duplicate guard ────────────────────────────────────────────────────

def test_same_day_is_duplicate_regardless_of_time():
    asset = Asset(asset_id="0007")
    asset.pat_tests.append(PATTest(date=datetime(2024, 3, 5, 8, 0)))
    assert is_duplicate(asset, datetime(2024, 3, 5, 23, 0))


def test_duplicate_detection_is_symmetric():
    early, late = datetime(2024, 3, 5, 8, 0), datetime(2024, 3, 5, 23, 0)

    a = Asset(asset_id="0007")
    a.pat_tests.append(PATTest(date=early))
    b = Asset(asset_id="0007")
    b.pat_tests.append(PATTest(date=late))

    assert is_duplicate(a, late) and is_duplicate(b, early)


def test_other_day_is_not_duplicate():
    asset = Asset(asset_id="0007")
    asset.pat_tests.append(PATTest(date=datetime(2024, 3, 5, 8, 0)))
    assert not is_duplicate(asset, datetime(2024, 3, 6, 0, 0))


def test_asset_without_tests_is_not_duplicate():
    assert not is_duplicate(Asset(asset_id="1"), datetime(2024, 3, 5))


# ── Field mapping ──────────────────────────────────────────────────────

def test_build_pat_test_maps_fields():
    record = PATRecordFactory.build(
        user="J Appleby", pat_class="I", visual_result="PASS",
        bond_result="0.09", insulation_result=">299", touch_current="0.05",
        load_va="250", substitute_leakage="0.12", note="Routine test",
    )
    test = build_pat_test(record)

    assert test.date == record.test_date
    assert test.result == "PASS"
    assert test.inspector == "J Appleby"
    assert test.pat_class == "I"
    assert test.visual == "PASS"
    assert test.earth_continuity == pytest.approx(0.09)
    assert test.insulation_resistance == pytest.approx(299.0)
    assert test.touch_current == pytest.approx(0.05)
    assert test.load == pytest.approx(0.25)
    assert test.substitute_leakage == pytest.approx(0.12)
    assert test.notes == "Routine test"
    assert test.fuse_rating is None


def test_build_pat_test_prefers_iec_readings():
    record = PATRecordFactory.build(
        pat_class="IEC Lead", bond_result="0.50", insulation_result="100",
        iec_bond="0.12", iec_insu=">299", iec_fuse="FAIL",
    )
    test = build_pat_test(record)
    assert test.earth_continuity == pytest.approx(0.12)
    assert test.insulation_resistance == pytest.approx(299.0)
    assert test.iec_bond == pytest.approx(0.12)
    assert test.iec_insulation == pytest.approx(299.0)
    assert test.fuse_rating is None
    assert test.result == "FAIL"


def test_build_pat_test_falls_back_to_not_applicable():
    record = PATRecordFactory.build(pat_class=None, visual_result="maybe", load_va=None)
    test = build_pat_test(record)
    assert test.pat_class == "N/A"
    assert test.visual == "N/A"
    assert test.load is None


# ── Commit ─────────────────────────────────────────────────────────────

def test_sync_creates_tests_and_updates_asset(inventory_session):
    asset = AssetFactory(asset_id="7")
    record = PATRecordFactory.build(asset_id="0007", test_date=datetime(2024, 3, 5, 10, 0))

    outcome = sync_mapped([(record, asset)], inventory_session)

    assert (outcome.synced, outcome.skipped, outcome.errors) == (1, 0, [])
    stored = inventory_session.query(PATTest).one()
    assert stored.asset.asset_id == "7"
    assert asset.last_pat_test_date == datetime(2024, 3, 5, 10, 0)
    assert asset.test_status == "Good"


def test_failed_record_marks_asset_failed(inventory_session):
    asset = AssetFactory()
    record = PATRecordFactory.build(visual_result="FAIL")
    sync_mapped([(record, asset)], inventory_session)
    assert asset.test_status == "Failed"


def test_older_record_leaves_cached_status_alone(inventory_session):
    asset = AssetFactory(last_pat_test_date=datetime(2024, 6, 1), test_status="Good")
    record = PATRecordFactory.build(visual_result="FAIL", test_date=datetime(2024, 3, 5))

    outcome = sync_mapped([(record, asset)], inventory_session)

    assert outcome.synced == 1
    assert asset.last_pat_test_date == datetime(2024, 6, 1)
    assert asset.test_status == "Good"


def test_existing_same_day_test_is_skipped(inventory_session):
    asset = AssetFactory(asset_id="0007")
    PATTestFactory(asset=asset, date=datetime(2024, 3, 5, 8, 0))
    record = PATRecordFactory.build(asset_id="0007", test_date=datetime(2024, 3, 5, 23, 0))

    outcome = sync_mapped([(record, asset)], inventory_session)

    assert outcome.synced == 0
    assert outcome.skipped == 1
    assert inventory_session.query(PATTest).count() == 1


def test_same_day_pair_within_one_batch_is_skipped(inventory_session):
    asset = AssetFactory()
    first = PATRecordFactory.build(test_date=datetime(2024, 3, 5, 9, 0))
    second = PATRecordFactory.build(test_date=datetime(2024, 3, 5, 15, 0))

    outcome = sync_mapped([(first, asset), (second, asset)], inventory_session)

    assert (outcome.synced, outcome.skipped) == (1, 1)


def test_commit_failure_is_one_error_and_keeps_count():
    session = mock.MagicMock()
    session.commit.side_effect = RuntimeError("disk full")
    asset = Asset(asset_id="1")

    outcome = sync_mapped([(PATRecordFactory.build(), asset)], session)

    assert outcome.synced == 1
    assert outcome.errors == ["Save failed: disk full"]
    session.rollback.assert_called_once()


def test_summary_text():
    assert SyncOutcome(synced=3).summary == "3 synced"
    outcome = SyncOutcome(synced=2, skipped=1, errors=["x"])
    assert outcome.summary == "2 synced, 1 duplicate(s) skipped, 1 error(s)"


# ── Preview ────────────────────────────────────────────────────────────

def test_preview_suggests_and_flags(inventory_session):
    tested = AssetFactory(asset_id="7")
    PATTestFactory(asset=tested, date=datetime(2024, 3, 5, 8, 0))
    fresh = AssetFactory(asset_id="15")

    records = [
        PATRecordFactory.build(asset_id="0007", test_date=datetime(2024, 3, 5, 12, 0)),
        PATRecordFactory.build(asset_id="0015"),
        PATRecordFactory.build(asset_id="0099"),
    ]
    candidates = preview(records, [tested, fresh])

    assert [c.asset for c in candidates] == [tested, fresh, None]
    assert [c.duplicate for c in candidates] == [True, False, False]
    assert [c.ready for c in candidates] == [False, True, False]
