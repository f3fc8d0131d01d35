from datetime import datetime
from io import BytesIO

import pandas as pd

from filters import EXPORT_COLUMNS

REPORT_SHEET_NAME = 'Requests'
REPORT_FILENAME_PREFIX = 'Multimedia Request Report Form'

LOADING_MESSAGE = 'Loading requests. Please try again in a moment.'
LOGIN_MESSAGE = 'Please log in to download reports.'
EMPTY_MESSAGE = 'No requests available to export.'


class ExportRefused(Exception):
    """The export was declined; the message is shown to the user as a warning."""


def check_export_allowed(is_loading, is_authenticated, rows):
    if is_loading:
        raise ExportRefused(LOADING_MESSAGE)
    if not is_authenticated:
        raise ExportRefused(LOGIN_MESSAGE)
    if not rows:
        raise ExportRefused(EMPTY_MESSAGE)


def report_filename(now=None):
    now = now or datetime.now()
    return f"{REPORT_FILENAME_PREFIX}-{now:%Y-%m-%d}.xlsx"


def generate_excel_report(rows):
    df = pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))

    byte_io = BytesIO()
    with pd.ExcelWriter(byte_io, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=REPORT_SHEET_NAME)
    byte_io.seek(0)
    return byte_io
