import io
import os

import pytest
from werkzeug.datastructures import FileStorage

from storeadmin.storage import NOT_FOUND, LocalStorage


def _file(name="photo.png", content=b"\x89PNG fake", mimetype="image/png"):
    return FileStorage(stream=io.BytesIO(content), filename=name, content_type=mimetype)


@pytest.fixture
def local(tmp_path):
    return LocalStorage(str(tmp_path), "/media", "media")


@pytest.mark.unit
class TestLocalStorage:
    def test_upload(self, local, tmp_path):
        out = local.upload(_file(), folder="products/1")
        assert out["bucket"] == "media"
        assert out["type"] == "image"
        assert out["path"].startswith("products/1/") and out["path"].endswith(".png")
        assert out["url"] == f"/media/media/{out['path']}"
        assert os.path.exists(tmp_path / "media" / out["path"])

    def test_video_detected(self, local):
        assert local.upload(_file("clip.mp4", mimetype="video/mp4"))["type"] == "video"

    def test_unique_keys(self, local):
        assert local.upload(_file())["path"] != local.upload(_file())["path"]

    def test_rejects_unknown_extension(self, local):
        with pytest.raises(ValueError):
            local.upload(_file("script.exe", mimetype="application/octet-stream"))

    def test_rejects_empty(self, local):
        with pytest.raises(ValueError):
            local.upload(FileStorage(stream=io.BytesIO(b""), filename=""))

    def test_delete_reports_each_path(self, local):
        kept = local.upload(_file())["path"]
        results = local.delete("media", [kept, "missing.png"])
        assert results == [
            {"path": kept, "ok": True, "error": None},
            {"path": "missing.png", "ok": False, "error": NOT_FOUND},
        ]

    def test_delete_outside_bucket_fails_without_raising(self, local):
        [result] = local.delete("media", ["../../etc/passwd"])
        assert result["ok"] is False
        assert result["error"] != NOT_FOUND
