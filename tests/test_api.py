"""
Tests for the HTTP surface.
"""

import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.mdexport import main
from backend.mdexport.main import app


@pytest.fixture
def client():
    return TestClient(app)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestApi:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"ok": True}

    def test_process_then_convert(self, client, tmp_path):
        write(tmp_path / "docs" / "a.md", "# A\n\ntext\n")
        write(tmp_path / "docs" / "b.md", "# B\n")
        r = client.post("/process", json={"input_paths": [str(tmp_path / "docs")]})
        assert r.status_code == 200
        processed = r.json()
        assert [Path(p).name for p in processed["markdown_files"]] == ["a.md", "b.md"]

        r = client.post("/convert", json=processed)
        assert r.status_code == 200
        out = Path(r.json()["output_path"])
        assert out.name == "markdown_export.pdf"
        assert out.exists()

    def test_export_one_shot(self, client, tmp_path):
        doc = write(tmp_path / "a.md", "Hello\n")
        r = client.post("/export", json={"input_paths": [str(doc)]})
        assert r.status_code == 200
        assert Path(r.json()["output_path"]).exists()

    def test_empty_input_is_bad_request(self, client):
        r = client.post("/process", json={"input_paths": []})
        assert r.status_code == 400
        assert r.json()["detail"] == "No input paths provided"

    def test_missing_input_is_not_found(self, client, tmp_path):
        r = client.post("/process", json={"input_paths": [str(tmp_path / "nope.md")]})
        assert r.status_code == 404

    def test_convert_without_markdown_is_bad_request(self, client, tmp_path):
        r = client.post("/convert", json={"markdown_files": [], "image_files": [], "root": str(tmp_path)})
        assert r.status_code == 400

    def test_missing_image_is_not_found(self, client, tmp_path):
        doc = write(tmp_path / "a.md", "![x](nope.png)\n")
        r = client.post("/export", json={"input_paths": [str(doc)]})
        assert r.status_code == 404
        assert "Image not found" in r.json()["detail"]
        assert not (tmp_path / "markdown_export.pdf").exists()

    def test_bad_archive_is_server_error(self, client, tmp_path):
        archive = tmp_path / "broken.zip"
        archive.write_bytes(b"not a zip")
        r = client.post("/process", json={"input_paths": [str(archive)]})
        assert r.status_code == 500

    def test_export_renders_archive_under_conversion_lock(self, client, tmp_path, monkeypatch):
        archive = tmp_path / "bundle.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("docs/a.md", "# A\n")

        seen = {}
        real_convert = main.convert_to_pdf

        def convert(processed, scratch_area, **kwargs):
            seen["locked"] = main._conversion_lock.locked()
            seen["extracted"] = all(Path(p).exists() for p in processed.markdown_files)
            return real_convert(processed, scratch_area, **kwargs)

        monkeypatch.setattr(main, "convert_to_pdf", convert)
        r = client.post("/export", json={"input_paths": [str(archive)]})
        assert r.status_code == 200
        assert seen == {"locked": True, "extracted": True}
        assert not main._conversion_lock.locked()
        assert len(main.scratch) == 0
