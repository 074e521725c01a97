"""
API Endpoint Tests
"""
import json

from conftest import make_pdf


class TestHealthEndpoint:

    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestUploadEndpoint:
    """POST /upload"""

    def test_requires_file(self, api):
        response = api.post("/upload")
        assert response.status_code == 400
        assert response.text == "No file uploaded."
        assert response.headers["content-type"].startswith("text/plain")

    def test_wrong_field_name_is_missing_file(self, api, pdf_bytes):
        response = api.post("/upload", files={"document": ("doc.pdf", pdf_bytes, "application/pdf")})
        assert response.status_code == 400
        assert response.text == "No file uploaded."

    def test_text_field_named_file(self, api):
        response = api.post("/upload", data={"file": "hello"})
        assert response.status_code == 400
        assert response.text == "No file uploaded."
        assert response.headers["content-type"].startswith("text/plain")

    def test_empty_text_field_named_file(self, api):
        response = api.post("/upload", data={"file": ""})
        assert response.status_code == 400
        assert response.text == "No file uploaded."

    def test_text_field_next_to_other_file(self, api, pdf_bytes):
        response = api.post(
            "/upload",
            data={"file": "hello"},
            files={"attachment": ("doc.pdf", pdf_bytes, "application/pdf")},
        )
        assert response.status_code == 400
        assert response.text == "No file uploaded."

    def test_extracts_text(self, api, pdf_bytes):
        response = api.post("/upload", files={"file": ("doc.pdf", pdf_bytes, "application/pdf")})
        assert response.status_code == 200

        data = response.json()
        assert list(data) == ["text"]
        assert "Hello World" in data["text"]
        assert "sample document." in data["text"]

    def test_text_is_single_line_and_trimmed(self, api, pdf_bytes):
        response = api.post("/upload", files={"file": ("doc.pdf", pdf_bytes, "application/pdf")})
        text = response.json()["text"]
        assert "\n" not in text
        assert "  " not in text
        assert text == text.strip()

    def test_drops_references_section(self, api):
        pdf = make_pdf(["Intro text", "References", "[1] Someone, 2020"])
        response = api.post("/upload", files={"file": ("paper.pdf", pdf, "application/pdf")})
        assert response.status_code == 200
        assert response.json()["text"] == "Intro text"

    def test_content_type_is_not_checked(self, api, pdf_bytes):
        response = api.post("/upload", files={"file": ("renamed.bin", pdf_bytes, "application/octet-stream")})
        assert response.status_code == 200

    def test_corrupt_pdf(self, api):
        response = api.post("/upload", files={"file": ("broken.pdf", b"this is not a pdf", "application/pdf")})
        assert response.status_code == 500
        assert json.loads(response.content) == {"error": "Failed to extract text from PDF"}

    def test_empty_payload(self, api):
        response = api.post("/upload", files={"file": ("empty.pdf", b"", "application/pdf")})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to extract text from PDF"}

    def test_failure_does_not_affect_next_request(self, api, pdf_bytes):
        api.post("/upload", files={"file": ("broken.pdf", b"%PDF-garbage", "application/pdf")})
        response = api.post("/upload", files={"file": ("doc.pdf", pdf_bytes, "application/pdf")})
        assert response.status_code == 200

    def test_cors_any_origin(self, api):
        response = api.options(
            "/upload",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
