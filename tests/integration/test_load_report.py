from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path

import h2odb.cli.__main__ as cli
from tests.helpers import REPORT_HEADER, FakeCursor, make_report, report_row

"""End-to-end runs: xlsx report -> CLI -> (fake) database."""


def _patch_db(monkeypatch, cursor: FakeCursor) -> None:
    @contextmanager
    def connection(cfg):
        yield cursor

    monkeypatch.setattr(cli, "_db_connection", connection)


def test_full_report_is_loaded(write_config, temp_workdir: Path, monkeypatch, fake_execute_values, capsys):
    report = make_report(
        temp_workdir / "data" / "WL-2016.xlsx",
        [
            REPORT_HEADER,
            report_row(param="Strontium", test="Cations", reported_nd="0.9"),
            report_row(param="Strontium", test="Trace Metals ICPMS", reported_nd="0.8"),
            [None] * len(REPORT_HEADER),
            report_row(param="Iron", reported_nd="ND", lower_limit=0.1, dilution=5.0),
            report_row(param="Hardness", spid="SP-002", reported_nd="120", total="Y", method="Calc"),
            report_row(param="Calcium", spid="SP-002", reported_nd="40.5"),
        ],
    )
    cursor = FakeCursor()
    _patch_db(monkeypatch, cursor)

    code = cli.main([str(report)])
    out = capsys.readouterr().out

    assert code == cli.EXIT_SUCCESS_ALL
    assert cursor.statements[-1] == "COMMIT"
    major = cursor.inserted["MajorChemistry"]
    minor = cursor.inserted["MinorandTraceChemistry"]
    assert len(major) == 2 and len(minor) == 2

    # (agency, date, method, analyte, lab id, guid, spid, value, symbol, units)
    iron = next(r for r in minor if r[3] == "Fe")
    assert iron[7] == 0.5
    assert iron[8] == "<"
    strontium = next(r for r in minor if r[3] == "Sr")
    assert strontium[7] == 0.8
    hardness = next(r for r in major if r[3] == "HRD(total)")
    assert hardness[2] == "Calc, As CaCO3"
    assert hardness[5] == "GUID-2"

    assert "Added 4 records with the following sample point IDs to database:" in out
    assert "1 record fails to meet water quality standards:" in out
    assert "SP-001 - Fe (0.5 mg/L)" in out
    assert "HRD(total)" not in out.split("water quality standards:")[1]
    assert "failing_standards=1" in out


def test_rejected_report_lists_every_error(write_config, temp_workdir: Path, monkeypatch, fake_execute_values, capsys):
    report = make_report(
        temp_workdir / "data" / "bad.xlsx",
        [
            REPORT_HEADER,
            report_row(),
            report_row(param="Unobtainium"),
            [None] * len(REPORT_HEADER),
            report_row(reported_nd="high", spid="SP-404"),
        ],
    )
    cursor = FakeCursor()
    _patch_db(monkeypatch, cursor)

    code = cli.main([str(report)])
    out = capsys.readouterr().out

    assert code == cli.EXIT_PARTIAL_FAILURE
    assert cursor.inserted == {}
    assert "BEGIN" not in cursor.statements
    assert "ERROR: in bad.xlsx, row 3: Param value 'Unobtainium' has no known conversion" in out
    assert "ERROR: in bad.xlsx, row 5: Value in 'ReportedND' field has invalid format: 'high'" in out
    assert "ERROR: in bad.xlsx, row 5: Sample point id 'SP-404' is not in database" in out
    assert "errors=3" in out

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    entries = [json.loads(x) for x in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [e["row"] for e in entries] == [3, 5, 5]
    assert {e["file"] for e in entries} == {"bad.xlsx"}


def test_existing_sample_is_rejected(write_config, temp_workdir: Path, monkeypatch, fake_execute_values, capsys):
    report = make_report(temp_workdir / "data" / "again.xlsx", [REPORT_HEADER, report_row()])
    cursor = FakeCursor(existing={"MinorandTraceChemistry": [("SP-001", "Fe")]})
    _patch_db(monkeypatch, cursor)

    assert cli.main([str(report)]) == cli.EXIT_PARTIAL_FAILURE
    assert "Sample for (SP-001, Fe) already exists in database" in capsys.readouterr().out
