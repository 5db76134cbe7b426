"""Media reconciliation between the bucket and product_media rows."""
import io
import os

import pytest
from sqlalchemy.exc import OperationalError
from werkzeug.datastructures import FileStorage

from storeadmin.errors import NotFound, OrphanRowAfterStorageDelete, StorageDeleteFailed
from storeadmin.model import ProductMedia
from storeadmin.services import media_service


def _file(name="photo.jpg", mimetype="image/jpeg"):
    return FileStorage(stream=io.BytesIO(b"data"), filename=name, content_type=mimetype)


class FailingStorage:
    """Storage double whose delete answers with a fixed per-path error."""
    default_bucket = "media"

    def __init__(self, error):
        self.error = error
        self.calls = []

    def delete(self, bucket, paths):
        self.calls.append((bucket, list(paths)))
        return [{"path": p, "ok": False, "error": self.error} for p in paths]


class FlakyStorage:
    """Wraps a real store; the Nth upload fails with an OS error."""

    def __init__(self, inner, fail_on=2):
        self.inner = inner
        self.default_bucket = inner.default_bucket
        self.fail_on = fail_on
        self.uploads = 0

    def upload(self, file_storage, folder=None, bucket=None):
        self.uploads += 1
        if self.uploads == self.fail_on:
            raise OSError(28, "No space left on device")
        return self.inner.upload(file_storage, folder=folder, bucket=bucket)

    def delete(self, bucket, paths):
        return self.inner.delete(bucket, paths)


def _media_rows(db, product_id):
    return ProductMedia.query.filter_by(product_id=product_id).order_by(ProductMedia.id).all()


class TestAddAndSetMain:
    def test_add_media_never_main(self, db, make_product):
        p = make_product()
        rows = media_service.add_media(p.id, [
            {"url": "/media/media/a.jpg", "type": "image", "path": "a.jpg"},
            {"url": "/media/media/b.mp4", "type": "video", "public_id": "b.mp4"},
        ])
        assert [r.is_main for r in rows] == [False, False]
        assert [r.public_id for r in rows] == ["a.jpg", "b.mp4"]
        assert [r.file_type for r in rows] == ["image", "video"]

    def test_add_media_unknown_product(self, db):
        with pytest.raises(NotFound):
            media_service.add_media(999, [{"url": "u", "path": "p"}])

    def test_upload_media_stores_files(self, db, make_product, storage):
        p = make_product()
        rows = media_service.upload_media(p.id, [_file(), _file("clip.mp4", "video/mp4")], storage)
        assert len(rows) == 2
        for row in rows:
            assert os.path.exists(os.path.join(storage.root, "media", row.public_id))
        assert rows[1].file_type == "video"

    def test_upload_media_rolls_back_uploads(self, db, make_product, storage):
        p = make_product()
        with pytest.raises(ValueError):
            media_service.upload_media(p.id, [_file(), _file("bad.exe", "application/x-msdownload")], storage)
        assert _media_rows(db, p.id) == []
        folder = os.path.join(storage.root, "media", "products", str(p.id))
        assert not os.path.exists(folder) or os.listdir(folder) == []

    def test_upload_media_cleans_up_after_os_error(self, db, make_product, storage):
        p = make_product()
        flaky = FlakyStorage(storage)
        with pytest.raises(OSError):
            media_service.upload_media(p.id, [_file(), _file("b.jpg")], flaky)
        assert _media_rows(db, p.id) == []
        folder = os.path.join(storage.root, "media", "products", str(p.id))
        assert not os.path.exists(folder) or os.listdir(folder) == []

    def test_set_main_leaves_exactly_one(self, db, make_product):
        p = make_product()
        rows = media_service.add_media(p.id, [
            {"url": f"/m/{i}.jpg", "path": f"{i}.jpg"} for i in range(3)
        ])
        ids = [r.id for r in rows]
        media_service.set_main(p.id, ids[0])
        media_service.set_main(p.id, ids[2])
        mains = [m.id for m in _media_rows(db, p.id) if m.is_main]
        assert mains == [ids[2]]

    def test_set_main_does_not_touch_other_products(self, db, make_product):
        a, b = make_product(), make_product()
        [ma] = media_service.add_media(a.id, [{"url": "/m/a.jpg", "path": "a.jpg"}])
        [mb] = media_service.add_media(b.id, [{"url": "/m/b.jpg", "path": "b.jpg"}])
        media_service.set_main(a.id, ma.id)
        media_service.set_main(b.id, mb.id)
        assert db.session.get(ProductMedia, ma.id).is_main
        assert db.session.get(ProductMedia, mb.id).is_main

    def test_set_main_rejects_foreign_media(self, db, make_product):
        a, b = make_product(), make_product()
        [mb] = media_service.add_media(b.id, [{"url": "/m/b.jpg", "path": "b.jpg"}])
        with pytest.raises(NotFound):
            media_service.set_main(a.id, mb.id)


class TestDeleteMedia:
    def test_deletes_object_then_row(self, db, make_product, storage):
        p = make_product()
        [row] = media_service.upload_media(p.id, [_file()], storage)
        row_id, path = row.id, os.path.join(storage.root, "media", row.public_id)
        media_service.delete_media(row_id, storage)
        assert not os.path.exists(path)
        assert db.session.get(ProductMedia, row_id) is None

    def test_storage_failure_keeps_row(self, db, make_product):
        p = make_product()
        [row] = media_service.add_media(p.id, [{"url": "/m/a.jpg", "path": "a.jpg"}])
        failing = FailingStorage("permission denied")
        with pytest.raises(StorageDeleteFailed):
            media_service.delete_media(row.id, failing)
        assert failing.calls == [("media", ["a.jpg"])]
        assert db.session.get(ProductMedia, row.id) is not None

    def test_missing_object_still_deletes_row(self, db, make_product):
        p = make_product()
        [row] = media_service.add_media(p.id, [{"url": "/m/a.jpg", "path": "a.jpg"}])
        row_id = row.id
        media_service.delete_media(row_id, FailingStorage("not_found"))
        assert db.session.get(ProductMedia, row_id) is None

    def test_row_failure_after_storage_delete_is_reported(self, db, make_product, storage, monkeypatch):
        p = make_product()
        [row] = media_service.upload_media(p.id, [_file()], storage)
        row_id, path = row.id, os.path.join(storage.root, "media", row.public_id)

        def broken_commit():
            raise OperationalError("DELETE FROM product_media", {}, Exception("database is locked"))

        monkeypatch.setattr(db.session(), "commit", broken_commit)
        with pytest.raises(OrphanRowAfterStorageDelete):
            media_service.delete_media(row_id, storage)
        monkeypatch.undo()

        assert not os.path.exists(path)
        assert db.session.get(ProductMedia, row_id) is not None

    def test_unknown_media(self, db, storage):
        with pytest.raises(NotFound):
            media_service.delete_media(12345, storage)


class TestDeleteObject:
    def test_missing_object_is_not_an_error(self, app):
        storage = FailingStorage("not_found")
        media_service.delete_object(storage, "gone.jpg")
        assert storage.calls == [("media", ["gone.jpg"])]

    def test_refusal_carries_context(self, app):
        with pytest.raises(StorageDeleteFailed) as exc:
            media_service.delete_object(FailingStorage("permission denied"), "a.jpg", category_id=4)
        assert exc.value.data == {"category_id": 4, "detail": "permission denied"}
