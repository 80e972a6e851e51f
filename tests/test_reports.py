import csv
import io
import json

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from artsfest.common.exporter import rows_to_csv, rows_to_xlsx_stream
from artsfest.registration import reports
from artsfest.registration.service import RegistrationWorkflow


@pytest.fixture
def populated(memory_registry):
    workflow = RegistrationWorkflow(memory_registry)
    amina = workflow.issue_code("Amina Rahman", 1).unique_code
    bilal = workflow.issue_code("Bilal, Khan", 2).unique_code
    workflow.register_programs(amina, [1, 10])
    workflow.register_programs(bilal, [6])
    return memory_registry


def test_compute_stats(populated):
    stats = reports.compute_stats(populated.resolve_registrations_with_details())
    assert stats.total_registered == 2
    assert stats.stage_programs == 2
    assert stats.non_stage_programs == 1
    assert stats.total_programs == 3


def test_export_rows(populated):
    rows = reports.export_rows(populated.resolve_registrations_with_details())
    assert rows[0][:6] == ["Amina Rahman", "QUDS Team", "QU001", "Arabic Speech 01", "stage", "group"]
    assert rows[1][4:6] == ["non-stage", "group"]


def test_csv_quotes_commas():
    text = rows_to_csv(["Name", "Team"], [["Bilal, Khan", "BADR Team"]])
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed == [["Name", "Team"], ["Bilal, Khan", "BADR Team"]]


def test_xlsx_stream():
    stream = rows_to_xlsx_stream(["Name", "Code"], [["Amina Rahman", "QU001"]], title="Registrations")
    ws = load_workbook(stream).active
    assert ws.title == "Registrations"
    assert [c.value for c in ws[1]] == ["Name", "Code"]
    assert [c.value for c in ws[2]] == ["Amina Rahman", "QU001"]


def test_export_document(populated):
    document = reports.export_document(populated.resolve_registrations_with_details())
    assert document["total_registrations"] == 3
    first = document["registrations"][0]
    assert first["participant"] == {"name": "Amina Rahman", "team": "QUDS Team", "code": "QU001"}
    assert first["program"]["participation_type"] == "group"


class TestReportRoutes:

    @pytest.fixture
    def client(self, client, populated):
        return client

    def test_participant_report(self, client: TestClient):
        response = client.get("/api/reports/participant/QU001")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Amina Rahman"
        assert body["program_count"] == 2
        assert body["profile_image_url"] is None
        assert [p["name"] for p in body["programs"]] == ["Arabic Speech 01", "Arabic Calligraphy 10"]

    def test_participant_report_resolves_image(self, client: TestClient, populated):
        participant = populated.get_participant_by_code("QU001")
        populated.update_participant_image(participant.id, "artsfest_profiles/amina.png")
        s3_client = MagicMock()
        s3_client.generate_presigned_url.return_value = "https://b2.example/amina"

        with patch("artsfest.common.storage.get_s3_client", return_value=s3_client):
            body = client.get("/api/reports/participant/QU001").json()

        assert body["profile_image"] == "artsfest_profiles/amina.png"
        assert body["profile_image_url"] == "https://b2.example/amina"

    def test_participant_report_unknown_code(self, client: TestClient):
        assert client.get("/api/reports/participant/QU404").status_code == 404

    def test_csv_export(self, client: TestClient):
        response = client.get("/api/reports/export/csv")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert ".csv" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == reports.EXPORT_HEADERS
        assert len(rows) == 4
        assert rows[3][0] == "Bilal, Khan"

    def test_json_export(self, client: TestClient):
        response = client.get("/api/reports/export/json")
        assert response.status_code == 200
        document = json.loads(response.content)
        assert document["total_registrations"] == 3
        assert document["registrations"][2]["participant"]["code"] == "BA001"

    def test_xlsx_export(self, client: TestClient):
        response = client.get("/api/reports/export/xlsx")
        assert response.status_code == 200
        ws = load_workbook(io.BytesIO(response.content)).active
        assert [c.value for c in ws[1]] == reports.EXPORT_HEADERS
        assert ws.max_row == 4
