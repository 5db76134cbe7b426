# storeadmin/errors.py
"""Service-level failures, rendered into the API envelope by the app."""
import logging

from .utils.api import err

log = logging.getLogger(__name__)


class StoreAdminError(Exception):
    code = "ERROR"
    status_code = 400

    def __init__(self, message, data=None):
        super().__init__(message)
        self.message = message
        self.data = data


class NotFound(StoreAdminError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(StoreAdminError):
    code = "CONFLICT"
    status_code = 409


class UsageLimitReached(Conflict):
    """The conditional usage increment matched no row."""
    code = "LIMIT_REACHED"


class StorageDeleteFailed(StoreAdminError):
    """Storage refused the delete; the database row was left untouched."""
    code = "STORAGE_DELETE_FAILED"
    status_code = 502


class OrphanRowAfterStorageDelete(StoreAdminError):
    """The object is gone from storage but its row could not be removed."""
    code = "ORPHAN_ROW_AFTER_STORAGE_DELETE"
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(StoreAdminError)
    def handle_store_error(e):
        if e.status_code >= 500:
            log.error("%s: %s", e.code, e.message)
        return err(e.message, e.status_code, {"code": e.code, **(e.data or {})})

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return err(str(e), 422)

    @app.errorhandler(404)
    def handle_not_found(e):
        return err("resource not found", 404)

    @app.errorhandler(413)
    def handle_too_large(e):
        return err("upload too large", 413)
