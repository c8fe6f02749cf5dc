"""
Tests for API Contract
======================

Ensures the API always returns valid JSON with expected structure.
Tests both success and error cases.
"""

import pytest
import json
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi.testclient import TestClient
from conflict_service import api
from conflict_service.api import app
from conflict_service.schemas import AnalysisResponse, HealthResponse, Report


# =============================================================================
# Test Client
# =============================================================================

@pytest.fixture
def client():
    """Create test client with fresh session state"""
    api.reset_state()
    yield TestClient(app)
    api.reset_state()


@pytest.fixture
def attendance_fixture():
    """Load attendance threshold fixture"""
    fixture_path = Path(__file__).parent / "fixtures" / "sample_documents_attendance.json"
    with open(fixture_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def upload(client, *files):
    """Upload (filename, text) pairs"""
    payload = [
        ("files", (name, text.encode("utf-8"), "text/plain"))
        for name, text in files
    ]
    return client.post("/documents", files=payload)


SYLLABUS = ("syllabus.txt", "Students must maintain a minimum of 75% attendance. Office hours vary.")
POLICY = ("policy.txt", "Students must maintain a minimum of 50% attendance.")


# =============================================================================
# Health Check Tests
# =============================================================================

class TestHealthEndpoint:
    """Tests for /health endpoint"""

    def test_health_returns_200(self, client):
        """Health check should return 200"""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_valid_json(self, client):
        """Health check should return valid JSON"""
        data = client.get("/health").json()

        HealthResponse(**data)
        assert data["status"] == "healthy"


# =============================================================================
# Analyze Endpoint Tests
# =============================================================================

class TestAnalyzeEndpoint:
    """Tests for /analyze endpoint"""

    def test_analyze_returns_valid_structure(self, client, attendance_fixture):
        """Response parses as AnalysisResponse"""
        response = client.post("/analyze", json={"documents": attendance_fixture["documents"]})

        assert response.status_code == 200
        AnalysisResponse(**response.json())

    def test_analyze_detects_attendance_conflict(self, client, attendance_fixture):
        """Should detect the attendance threshold conflict"""
        data = client.post("/analyze", json={"documents": attendance_fixture["documents"]}).json()

        assert len(data["matches"]) == 1
        match = data["matches"][0]
        assert match["type"] == "contradiction"
        assert match["severity"] == "high"
        assert match["confidence"] == pytest.approx(0.625)
        assert match["context1"] == "Sentence 1 in Course Syllabus"

        assert len(data["conflicts"]) == 1
        assert data["conflicts"][0]["description"] == "Conflicting percentage requirements found between documents"

    def test_analyze_detects_deadline_conflict(self, client):
        """Different submission times collapse into one high-severity match"""
        fixture_path = Path(__file__).parent / "fixtures" / "sample_documents_deadlines.json"
        with open(fixture_path, 'r', encoding='utf-8') as f:
            documents = json.load(f)["documents"]

        data = client.post("/analyze", json={"documents": documents}).json()

        assert len(data["matches"]) == 1
        assert data["matches"][0]["severity"] == "high"
        assert data["metadata"]["matches_before_dedup"] == 4
        assert data["conflicts"][0]["description"] == "Conflicting time requirements found between documents"

    def test_analyze_metadata(self, client, attendance_fixture):
        """Metadata reports pairs and per-detector counts"""
        meta = client.post("/analyze", json={"documents": attendance_fixture["documents"]}).json()["metadata"]

        assert meta["documents_analyzed"] == 2
        assert meta["pairs_compared"] == 1
        assert meta["detector_counts"] == {"numeric": 1, "time": 0, "policy": 0}

    def test_analyze_single_document_is_empty(self, client):
        """One document is not an error"""
        response = client.post("/analyze", json={"documents": [{"name": "A", "content": "Submit by 10 PM."}]})

        assert response.status_code == 200
        assert response.json()["matches"] == []

    def test_analyze_missing_documents_field(self, client):
        """Malformed body is a validation error"""
        response = client.post("/analyze", json={})
        assert response.status_code == 422

    def test_analyze_too_many_documents(self, client):
        """More than the configured maximum is rejected"""
        limit = api.settings.max_documents_per_request
        documents = [{"name": f"D{i}", "content": ""} for i in range(limit + 1)]

        response = client.post("/analyze", json={"documents": documents})

        assert response.status_code == 400
        assert "detail" in response.json()

    def test_documented_400_has_no_error_model(self, client):
        """OpenAPI does not promise a body shape that HTTPException never sends"""
        openapi = client.get("/openapi.json").json()
        responses = openapi["paths"]["/analyze"]["post"]["responses"]

        assert "400" in responses
        assert "$ref" not in json.dumps(responses["400"])
        assert "ErrorResponse" not in openapi["components"]["schemas"]


# =============================================================================
# Document Session Tests
# =============================================================================

class TestDocuments:
    """Tests for upload and document management"""

    def test_upload_and_list(self, client):
        response = upload(client, SYLLABUS, POLICY)

        assert response.status_code == 200
        stored = response.json()
        assert [d["name"] for d in stored] == ["syllabus.txt", "policy.txt"]
        assert stored[0]["type"] == "txt"
        assert stored[0]["size"] == len(SYLLABUS[1].encode("utf-8"))

        listed = client.get("/documents").json()
        assert [d["id"] for d in listed] == [d["id"] for d in stored]

    def test_upload_unsupported_format(self, client):
        response = client.post("/documents", files=[("files", ("scan.png", b"\x89PNG\r\n", "image/png"))])
        assert response.status_code == 415

    def test_rejected_batch_stores_and_bills_nothing(self, client):
        """A bad file anywhere in the batch rejects the whole upload"""
        response = client.post("/documents", files=[
            ("files", (SYLLABUS[0], SYLLABUS[1].encode("utf-8"), "text/plain")),
            ("files", ("scan.png", b"\x89PNG\r\n", "image/png")),
        ])

        assert response.status_code == 415
        assert client.get("/documents").json() == []
        usage = client.get("/usage").json()
        assert usage["documents_analyzed"] == 0
        assert usage["total_billing"] == 0.0

    def test_remove_document(self, client):
        doc_id = upload(client, SYLLABUS).json()[0]["id"]

        assert client.delete(f"/documents/{doc_id}").status_code == 204
        assert client.get("/documents").json() == []
        assert client.delete(f"/documents/{doc_id}").status_code == 404

    def test_clear_documents(self, client):
        upload(client, SYLLABUS, POLICY)

        assert client.delete("/documents").status_code == 204
        assert client.get("/documents").json() == []

    def test_analyze_needs_two_documents(self, client):
        upload(client, SYLLABUS)
        response = client.post("/documents/analyze")
        assert response.status_code == 400

    def test_analyze_uploaded_documents(self, client):
        upload(client, SYLLABUS, POLICY)

        response = client.post("/documents/analyze")

        assert response.status_code == 200
        data = response.json()
        assert len(data["conflicts"]) == 1
        assert data["conflicts"][0]["documents"] == ["syllabus.txt", "policy.txt"]
        assert client.get("/conflicts").json() == data["conflicts"]


# =============================================================================
# Report Tests
# =============================================================================

class TestReports:
    """Tests for report generation and download"""

    def _analyzed(self, client):
        upload(client, SYLLABUS, POLICY)
        return client.post("/documents/analyze").json()["conflicts"]

    def test_create_report(self, client):
        conflicts = self._analyzed(client)

        response = client.post("/reports")

        assert response.status_code == 200
        report = Report(**response.json())
        assert report.total_conflicts == len(conflicts)
        assert report.high_severity == 1
        assert report.documents == ["syllabus.txt", "policy.txt"]
        assert client.get(f"/reports/{report.id}").json()["id"] == report.id
        assert [r["id"] for r in client.get("/reports").json()] == [report.id]

    def test_create_report_subset(self, client):
        conflicts = self._analyzed(client)

        response = client.post("/reports", json={"conflict_ids": [conflicts[0]["id"]]})

        assert response.status_code == 200
        assert response.json()["total_conflicts"] == 1

    def test_create_report_unknown_conflict(self, client):
        self._analyzed(client)
        response = client.post("/reports", json={"conflict_ids": ["nope"]})
        assert response.status_code == 404

    def test_unknown_report(self, client):
        assert client.get("/reports/missing").status_code == 404
        assert client.get("/reports/missing/download").status_code == 404

    def test_download_markdown(self, client):
        self._analyzed(client)
        report_id = client.post("/reports").json()["id"]

        response = client.get(f"/reports/{report_id}/download")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert f"conflict-report-{report_id}.md" in response.headers["content-disposition"]
        assert response.text.startswith("# Document Conflict Analysis Report")

    def test_download_pdf_and_docx(self, client):
        self._analyzed(client)
        report_id = client.post("/reports").json()["id"]

        pdf = client.get(f"/reports/{report_id}/download", params={"format": "pdf"})
        docx = client.get(f"/reports/{report_id}/download", params={"format": "docx"})

        assert pdf.content[:4] == b"%PDF"
        assert docx.content[:2] == b"PK"

    def test_download_bad_format(self, client):
        self._analyzed(client)
        report_id = client.post("/reports").json()["id"]
        assert client.get(f"/reports/{report_id}/download", params={"format": "rtf"}).status_code == 422


# =============================================================================
# Usage Tests
# =============================================================================

class TestUsage:
    """Tests for /usage"""

    def test_billing_after_upload_and_report(self, client):
        upload(client, SYLLABUS, POLICY)
        client.post("/documents/analyze")
        client.post("/reports")

        data = client.get("/usage").json()

        assert data["documents_analyzed"] == 2
        assert data["reports_generated"] == 1
        assert data["total_billing"] == 10.0
        assert data["last_analysis"] is not None


# =============================================================================
# External Source Tests
# =============================================================================

class TestSources:
    """Tests for mocked external sources"""

    def test_list_defaults(self, client):
        data = client.get("/sources").json()
        assert [s["id"] for s in data] == ["1", "2"]

    def test_add_check_remove(self, client):
        created = client.post("/sources", json={"name": "Library", "url": "https://library.example.org"}).json()

        assert client.post(f"/sources/{created['id']}/check").status_code == 200
        assert len(client.post("/sources/check").json()) == 3
        assert client.delete(f"/sources/{created['id']}").status_code == 204
        assert client.delete(f"/sources/{created['id']}").status_code == 404

    def test_source_conflicts(self, client):
        conflicts = client.get("/sources/1/conflicts").json()
        assert conflicts[0]["type"] == "contradiction"
        assert client.get("/sources/missing/conflicts").status_code == 404
