from datetime import datetime

import pytest

from db import get_session, PATRecord
from import_engine import (
    UnreadableFileError, import_records, parse_records, run_import,
)
from import_engine.field_map import FieldMap
from import_engine.record_builder import build_record

CLASS_ONE = ("1,SITE,Appleby Tech,USER,J Appleby,DATE,5/3/2024,APP,0007,AUTO,"
             "VISUAL,P,BOND,HIGH,1,0.09R,INSU,I,1,299MEG,LOAD VA,250,NOTE,Routine test")
IEC_LEAD = ("2,SITE,Appleby Tech,USER,J Appleby,DATE,5/3/2024,APP,L01,AUTO,"
            "VISUAL,P,INSU,II,1,200MEG,IEC BOND,0.12R,IEC INSU,>299MEG,IEC FUSE,F")
BAD_PREFIX = "3,SITE,Appleby Tech,DATE,5/3/2024,APP,0008,AUTO,VISUAL,P"
NO_ASSET = "4,SITE,Appleby Tech,USER,J Appleby,DATE,5/3/2024,APP,---,AUTO,VISUAL,P"
SHORT = "5,SITE,Appleby Tech"
BAD_DATE = "6,SITE,Depot,USER,Sam,DATE,yesterday,APP,9,AUTO,VISUAL,P,INSU,II,1,>299MEG"


def test_class_one_full_test_record():
    [record] = import_records(CLASS_ONE, batch_id=42)
    assert record.asset_id == "0007"
    assert record.site == "Appleby Tech"
    assert record.user == "J Appleby"
    assert record.test_date == datetime(2024, 3, 5)
    assert record.test_type == "AUTO"
    assert record.pat_class == "I"
    assert record.visual_result == "PASS"
    assert record.bond_result == "0.09"
    assert record.insulation_result == "299"
    assert record.load_va == "250"
    assert record.note == "Routine test"
    assert record.overall_result == "PASS"
    assert record.import_batch_id == 42
    assert record.date_inferred is False


def test_iec_lead_with_fuse_failure():
    [record] = import_records(IEC_LEAD)
    assert record.iec_fuse == "FAIL"
    assert record.pat_class == "IEC Lead"
    assert record.overall_result == "FAIL"
    assert record.iec_bond == "0.12"
    assert record.iec_insu == ">299"


def test_rejected_rows_are_left_out_and_counted():
    content = "\n".join([CLASS_ONE, BAD_PREFIX, NO_ASSET, "", SHORT, IEC_LEAD])
    records, report = parse_records(content, batch_id=7)

    assert [r.asset_id for r in records] == ["0007", "L01"]
    assert report.total_lines == 5
    assert report.rejected == 3
    assert [e["line"] for e in report.errors] == [2, 3, 5]
    assert report.batch_id == 7


def test_malformed_prefix_contributes_no_records():
    assert import_records(BAD_PREFIX) == []


def test_all_records_share_one_batch_id():
    records = import_records("\n".join([CLASS_ONE, IEC_LEAD]))
    assert len({r.import_batch_id for r in records}) == 1
    assert records[0].import_batch_id > 0


def test_unparseable_date_is_flagged():
    records, report = parse_records(BAD_DATE)
    assert records[0].date_inferred is True
    assert records[0].pat_class == "II(IT)"
    assert report.dates_inferred == 1


def test_diag_token_option_changes_parsing():
    line = ("1,SITE,S,USER,U,DATE,5/3/2024,APP,12,DIAG,"
            "BOND,HIGH,1,0.10R,INSU,I,1,>299MEG")
    [dropped], _ = parse_records(line)
    [kept], _ = parse_records(line, keep_non_visual_token=True)
    assert dropped.bond_result is None
    assert kept.bond_result == "0.10"


def test_bytes_with_bom_are_accepted():
    assert len(import_records(b"\xef\xbb\xbf" + CLASS_ONE.encode())) == 1


def test_unreadable_file_raises():
    with pytest.raises(UnreadableFileError):
        import_records(b"\xff\xfe" + CLASS_ONE.encode("utf-16-le"))


def test_build_record_turns_blank_measurements_into_none():
    data = FieldMap(asset_id="0001", test_date="1/1/2024", bond_result="",
                    note="  ", insulation_result=">299")
    record = build_record(data, batch_id=3)
    assert record.bond_result is None
    assert record.note is None
    assert record.insulation_result == ">299"
    assert record.pat_class is None


def test_run_import_persists_records(app):
    report = run_import("\n".join([CLASS_ONE, BAD_PREFIX, IEC_LEAD]), batch_id=99)
    assert report.imported == 2
    assert report.rejected == 1

    session = get_session()
    try:
        stored = session.query(PATRecord).order_by(PATRecord.id).all()
        assert [r.asset_id for r in stored] == ["0007", "L01"]
        assert {r.import_batch_id for r in stored} == {99}
    finally:
        session.close()
