# storeadmin/services/media_service.py
"""
Keeps the storage bucket and ``product_media`` rows in agreement.

Storage and database share no transaction, so each operation orders its
writes to leave the least harmful state behind and reports, rather than
hides, a state it could not reconcile.
"""
import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFound, OrphanRowAfterStorageDelete, StorageDeleteFailed
from ..extensions import db
from ..model import Product, ProductMedia
from ..storage import NOT_FOUND

log = logging.getLogger(__name__)


def _get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    return product


def delete_object(storage, path: str, bucket: str | None = None, **context):
    """
    Delete one stored object. A missing object counts as deleted; any other
    refusal raises ``StorageDeleteFailed`` carrying ``context``.
    """
    bucket = bucket or storage.default_bucket
    results = storage.delete(bucket, [path])
    result = next((r for r in results if r["path"] == path), None)
    if result is None or (not result["ok"] and result["error"] != NOT_FOUND):
        reason = result["error"] if result else "no result returned for path"
        log.error("storage delete of %s/%s failed: %s", bucket, path, reason)
        raise StorageDeleteFailed(f"Failed to delete {path} from storage", {**context, "detail": reason})
    if not result["ok"]:
        log.warning("%s/%s was already absent from storage", bucket, path)


def discard_uploads(storage, paths, bucket: str | None = None):
    """Best-effort removal of objects that no row points to."""
    if not paths:
        return
    results = storage.delete(bucket or storage.default_bucket, list(paths))
    leftovers = [r["path"] for r in results if not r["ok"] and r["error"] != NOT_FOUND]
    if leftovers:
        log.error("could not clean up uploads %s", leftovers)


def add_media(product_id: int, uploaded) -> list[ProductMedia]:
    """
    Insert one row per uploaded object; ``is_main`` always starts False.

    ``uploaded`` items are storage descriptors: ``{url, type, path}``
    (``public_id`` is accepted in place of ``path``).
    """
    _get_product(product_id)
    rows = [
        ProductMedia(
            product_id=product_id,
            file_url=f["url"],
            file_type=f.get("type") or "image",
            public_id=f.get("path") or f.get("public_id"),
            is_main=False,
        )
        for f in uploaded
    ]
    db.session.add_all(rows)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return rows


def upload_media(product_id: int, files, storage) -> list[ProductMedia]:
    """Upload then insert; uploaded objects are removed again if the insert fails."""
    _get_product(product_id)
    uploaded = []
    try:
        for fs in files:
            uploaded.append(storage.upload(fs, folder=f"products/{product_id}"))
        return add_media(product_id, uploaded)
    except Exception:
        discard_uploads(storage, [u["path"] for u in uploaded])
        raise


def set_main(product_id: int, media_id: int) -> ProductMedia:
    """Make ``media_id`` the only main media of the product, in one transaction."""
    media = db.session.get(ProductMedia, media_id)
    if media is None or media.product_id != product_id:
        raise NotFound(f"Media {media_id} not found for product {product_id}")
    try:
        db.session.execute(
            update(ProductMedia)
            .where(ProductMedia.product_id == product_id)
            .values(is_main=False)
            .execution_options(synchronize_session=False)
        )
        db.session.execute(
            update(ProductMedia)
            .where(ProductMedia.id == media_id)
            .values(is_main=True)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return db.session.get(ProductMedia, media_id)


def delete_media(media_id: int, storage, bucket: str | None = None) -> int:
    """
    Delete the stored object, then the row.

    - storage refuses (anything but not-found): ``StorageDeleteFailed``, row kept
    - object already absent: the row is deleted anyway
    - row delete fails after the object is gone: ``OrphanRowAfterStorageDelete``
    """
    media = db.session.get(ProductMedia, media_id)
    if media is None:
        raise NotFound(f"Media {media_id} not found")
    bucket = bucket or storage.default_bucket
    path = media.public_id
    delete_object(storage, path, bucket, media_id=media_id)

    try:
        db.session.delete(media)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error("media %s: row kept after its object %s/%s was deleted: %s", media_id, bucket, path, e)
        raise OrphanRowAfterStorageDelete(
            f"Media {media_id} was removed from storage but its record could not be deleted",
            {"media_id": media_id, "public_id": path},
        ) from e
    return media_id


def delete_product_media(product: Product, storage, bucket: str | None = None):
    """Remove every media object of ``product`` ahead of deleting the product row."""
    for media_id in [m.id for m in product.media]:
        delete_media(media_id, storage, bucket)
