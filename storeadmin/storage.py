# storeadmin/storage.py
"""
Filesystem-backed object storage.

Buckets are directories under ``root``; an object's ``path`` is its key
inside the bucket and its ``url`` is ``<base_url>/<bucket>/<path>``.
"""
import logging
import os
import time
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

log = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
VIDEO_EXTENSIONS = {"mp4", "webm", "mov"}
ALLOWED_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS

NOT_FOUND = "not_found"


def _ext(filename: str) -> str:
    return filename.rsplit(".", 1)[1].lower() if "." in filename else ""


def media_type(file_storage) -> str:
    mimetype = getattr(file_storage, "mimetype", None) or ""
    if mimetype.startswith("video/") or _ext(file_storage.filename or "") in VIDEO_EXTENSIONS:
        return "video"
    return "image"


class LocalStorage:
    def __init__(self, root: str, base_url: str = "/media", default_bucket: str = "media"):
        self.root = root
        self.base_url = base_url.rstrip("/")
        self.default_bucket = default_bucket

    def _abs(self, bucket: str, path: str) -> str:
        bucket_dir = os.path.abspath(os.path.join(self.root, secure_filename(bucket)))
        abs_path = os.path.abspath(os.path.join(bucket_dir, path.lstrip("/")))
        if not abs_path.startswith(bucket_dir + os.sep):
            raise ValueError(f"invalid object path: {path}")
        return abs_path

    def url_for(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{path}"

    def upload(self, file_storage, folder: str | None = None, bucket: str | None = None) -> dict:
        """Save a werkzeug ``FileStorage``; returns ``{url, path, bucket, type}``."""
        if not file_storage or not file_storage.filename:
            raise ValueError("No file")
        ext = _ext(secure_filename(file_storage.filename))
        if ext not in ALLOWED_EXTENSIONS:
            raise ValueError("Unsupported file type")

        bucket = bucket or self.default_bucket
        key = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{ext}"
        path = f"{folder.strip('/')}/{key}" if folder else key

        abs_path = self._abs(bucket, path)
        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        file_storage.save(abs_path)
        log.debug("stored %s/%s", bucket, path)

        return {
            "url": self.url_for(bucket, path),
            "path": path,
            "bucket": bucket,
            "type": media_type(file_storage),
        }

    def delete(self, bucket: str, paths) -> list[dict]:
        """
        Remove each path; one ``{path, ok, error}`` per input path.

        ``error`` is ``"not_found"`` for a missing object, otherwise the
        OS error message. Never raises for a single failing path.
        """
        results = []
        for path in paths:
            try:
                os.remove(self._abs(bucket, path))
                results.append({"path": path, "ok": True, "error": None})
            except FileNotFoundError:
                results.append({"path": path, "ok": False, "error": NOT_FOUND})
            except (OSError, ValueError) as e:
                log.warning("delete %s/%s failed: %s", bucket, path, e)
                results.append({"path": path, "ok": False, "error": str(e)})
        return results


def get_storage() -> LocalStorage:
    return current_app.extensions["storage"]
