"""Spreadsheet export."""

from datetime import datetime

import pytest
from openpyxl import load_workbook

from conftest import NOW
from filters import EXPORT_COLUMNS, Period, export_rows
from reports import (
    EMPTY_MESSAGE,
    LOADING_MESSAGE,
    LOGIN_MESSAGE,
    ExportRefused,
    check_export_allowed,
    generate_excel_report,
    report_filename,
)


@pytest.mark.unit
def test_report_filename_uses_current_date():
    assert report_filename(datetime(2026, 10, 19, 8, 0)) == "Multimedia Request Report Form-2026-10-19.xlsx"


@pytest.mark.unit
def test_workbook_has_single_requests_sheet(sample_requests):
    rows = export_rows(sample_requests, Period.MONTHLY, NOW)
    wb = load_workbook(generate_excel_report(rows))

    assert wb.sheetnames == ["Requests"]
    values = list(wb["Requests"].iter_rows(values_only=True))
    assert values[0] == EXPORT_COLUMNS
    assert len(values) == 1 + len(rows)
    assert {v[0] for v in values[1:]} == {r["Task ID"] for r in rows}


@pytest.mark.unit
@pytest.mark.parametrize("is_loading,is_authenticated,rows,message", [
    (True, True, [{"Task ID": "x"}], LOADING_MESSAGE),
    (False, False, [{"Task ID": "x"}], LOGIN_MESSAGE),
    (False, True, [], EMPTY_MESSAGE),
])
def test_export_refused(is_loading, is_authenticated, rows, message):
    with pytest.raises(ExportRefused, match=message):
        check_export_allowed(is_loading, is_authenticated, rows)


@pytest.mark.unit
def test_export_allowed():
    check_export_allowed(False, True, [{"Task ID": "x"}])
