import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import AppException, ConflictError, ErrorKind

logger = logging.getLogger(__name__)


def db_exception(func):
    """Roll back and translate database failures raised inside a service method."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"{func.__name__}: integrity error: {e.orig}")
            raise ConflictError("Duplicate entry: already exists")
        except StaleDataError:
            self.db.rollback()
            logger.warning(f"{func.__name__}: concurrent modification detected")
            raise ConflictError("Resource was modified concurrently, retry the request")
        except AppException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{func.__name__}: database error: {e}")
            raise AppException("Database error occurred", ErrorKind.INTERNAL)

    return wrapper
