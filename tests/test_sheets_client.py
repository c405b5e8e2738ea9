# tests/test_sheets_client.py

"""
Tests for the Google Sheets transport and source switching (no network).
"""

import pytest
import requests

from salesboard.config import SheetsConfig
from salesboard.sheets_client import (
    GoogleSheetsClient,
    extract_spreadsheet_id,
    load_sheet_records,
    values_to_rows,
    with_retry,
)
from salesboard.sources import apply_uploaded_file, connect_google_sheets
from salesboard.sales_dashboard.constants import SOURCE_SAMPLE, SOURCE_SHEETS, SOURCE_UPLOAD, STATUS_ERROR
from salesboard.sales_dashboard.data_loader import DashboardState
from salesboard.sales_dashboard.models import SheetsConnectionError


HEADER = ['order_id', 'account', 'itemId', 'sku', 'amount', 'quantity', 'order_date']


class FakeResponse:

    def __init__(self, payload=None, status_code=200, reason="OK", body_error=False):
        self.payload = payload
        self.status_code = status_code
        self.reason = reason
        self.body_error = body_error

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.body_error:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'timeout': timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(session, **kwargs):
    kwargs.setdefault('api_key', 'KEY')
    kwargs.setdefault('retry_delay', 0)
    return GoogleSheetsClient('sheet123', session=session, **kwargs)


class TestHelpers:

    def test_extract_id_from_url(self):
        url = "https://docs.google.com/spreadsheets/d/1AbC-d_9/edit#gid=0"
        assert extract_spreadsheet_id(url) == '1AbC-d_9'

    def test_plain_id_passes_through(self):
        assert extract_spreadsheet_id(' 1AbC ') == '1AbC'

    def test_values_to_rows_pads_missing_cells(self):
        rows = values_to_rows([['a', 'b', 'c'], ['1'], ['1', '2', '3']])
        assert rows == [{'a': '1', 'b': '', 'c': ''}, {'a': '1', 'b': '2', 'c': '3'}]

    def test_values_to_rows_empty(self):
        assert values_to_rows([]) == []
        assert values_to_rows(None) == []


class TestWithRetry:

    def test_retries_network_errors_then_raises(self):
        calls = []

        @with_retry(max_retries=3, delay=0)
        def flaky():
            calls.append(1)
            raise requests.ConnectionError("down")

        with pytest.raises(SheetsConnectionError, match="Network error"):
            flaky()
        assert len(calls) == 3

    def test_recovers(self):
        calls = []

        @with_retry(max_retries=3, delay=0)
        def flaky():
            calls.append(1)
            if len(calls) < 2:
                raise requests.Timeout("slow")
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 2


class TestGoogleSheetsClient:

    def test_fetch_rows(self):
        session = FakeSession(FakeResponse({'values': [HEADER, ['A1', 'led_sone', 'I1', 'S1', '5', '1', '2024-12-01']]}))
        rows = make_client(session).fetch_rows()

        assert rows[0]['account'] == 'led_sone'
        call = session.calls[0]
        assert call['params'] == {'key': 'KEY'}
        assert call['url'].startswith("https://sheets.googleapis.com/v4/spreadsheets/sheet123/values/Sheet1!A:Z")

    def test_range_override(self):
        session = FakeSession(FakeResponse({'values': []}))
        make_client(session).fetch_values("2023!A:G")
        assert session.calls[0]['url'].endswith("/values/2023!A:G")

    def test_missing_values_is_empty(self):
        assert make_client(FakeSession(FakeResponse({}))).fetch_values() == []

    def test_http_error_carries_status(self):
        session = FakeSession(FakeResponse(status_code=403, reason="Forbidden"))
        with pytest.raises(SheetsConnectionError) as exc_info:
            make_client(session).fetch_values()
        assert exc_info.value.status_code == 403
        assert "Forbidden" in str(exc_info.value)

    def test_unreadable_body(self):
        with pytest.raises(SheetsConnectionError):
            make_client(FakeSession(FakeResponse(body_error=True))).fetch_values()

    def test_unexpected_payload_shape(self):
        with pytest.raises(SheetsConnectionError):
            make_client(FakeSession(FakeResponse(['not', 'a', 'dict']))).fetch_values()

    def test_api_key_required(self):
        session = FakeSession()
        with pytest.raises(SheetsConnectionError):
            make_client(session, api_key=None).fetch_values()
        assert session.calls == []

    def test_network_error_retried(self):
        session = FakeSession(
            requests.ConnectionError("reset"),
            FakeResponse({'values': [HEADER]}),
        )
        assert make_client(session, max_retries=2).fetch_rows() == []
        assert len(session.calls) == 2


class TestLoadSheetRecords:

    def test_current_and_prior_year(self):
        session = FakeSession(
            FakeResponse({'values': [HEADER, ['A1', 'led_sone', 'I1', 'S1', '5', '1', '2024-12-01']]}),
            FakeResponse({'values': [HEADER, ['B1', 're6865', 'I2', 'S2', '7', '2', '2023-12-01']]}),
        )
        sheets_config = SheetsConfig('sheet123', api_key='KEY', prior_year_range='2023!A:G')
        records, prior = load_sheet_records(sheets_config, client=make_client(session))

        assert [r.account_name for r in records] == ['LEDSone(Renuha)']
        assert [r.account_name for r in prior] == ['Redro Led']

    def test_prior_year_range_optional(self):
        session = FakeSession(FakeResponse({'values': [HEADER]}))
        records, prior = load_sheet_records(
            SheetsConfig('sheet123', api_key='KEY'), client=make_client(session)
        )
        assert records == [] and prior == []
        assert len(session.calls) == 1


class TestSources:

    def test_connect_success(self):
        state = DashboardState()
        session = FakeSession(FakeResponse({'values': [HEADER, ['A1', 'led_sone', 'I1', 'S1', '5', '1', '2024-12-01']]}))
        applied, error = connect_google_sheets(
            state, SheetsConfig('sheet123', api_key='KEY'), client=make_client(session)
        )

        assert applied and error is None
        assert state.source_mode == SOURCE_SHEETS
        assert state.record_count == 1

    def test_connect_failure_keeps_sample(self):
        state = DashboardState()
        session = FakeSession(FakeResponse(status_code=404, reason="Not Found"))
        applied, error = connect_google_sheets(
            state, SheetsConfig('sheet123', api_key='KEY'), client=make_client(session)
        )

        assert not applied
        assert "Not Found" in error
        assert state.source_mode == SOURCE_SAMPLE
        assert state.connection_status == STATUS_ERROR

    def test_upload_success(self):
        state = DashboardState()
        content = b"h\n1,A,VI-1,L,10,1,2024-12-01,\n"
        applied, error = apply_uploaded_file(state, content, prefixes={'VI': 'Vintage Interior'})

        assert applied and error is None
        assert state.source_mode == SOURCE_UPLOAD
        assert state.records[0].account_name == 'Vintage Interior'

    def test_upload_failure_message(self):
        state = DashboardState()
        applied, error = apply_uploaded_file(state, b"")

        assert not applied
        assert error.startswith("Error parsing file. Please ensure it's a valid CSV format.")
        assert state.is_using_sample
