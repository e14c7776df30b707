"""
Thin repository over the SQLAlchemy session.

Services talk to the store only through ``Repository`` and
``run_with_optimistic_retry`` so that driver failures surface as
``StoreError`` and version conflicts are retried in one place.
"""
import logging
from typing import Any, Callable, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from travelmgr.core.config import settings
from travelmgr.core.exceptions import StoreError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")
ResultT = TypeVar("ResultT")


class Repository(Generic[ModelT]):
    """Lookup and persistence for one aggregate root."""

    def __init__(self, db: Session, model: Type[ModelT], load_options: Iterable[Any] = ()):
        self.db = db
        self.model = model
        self.load_options = list(load_options)

    def _query(self):
        return self.db.query(self.model).options(*self.load_options)

    def find_by_id(self, record_id: int, refresh: bool = False) -> Optional[ModelT]:
        """Load one record with its expanded references, or None."""
        try:
            query = self._query().filter(self.model.id == record_id)
            if refresh:
                query = query.populate_existing()
            return query.first()
        except SQLAlchemyError as e:
            raise _store_error(f"Failed to load {self.model.__name__} {record_id}", e)

    def find_many(self, *criteria: Any, order_by: Iterable[Any] = ()) -> List[ModelT]:
        """Load all records matching the given filter criteria."""
        try:
            return self._query().filter(*criteria).order_by(*order_by).all()
        except SQLAlchemyError as e:
            raise _store_error(f"Failed to query {self.model.__name__}", e)

    def save(self, record: ModelT) -> ModelT:
        """Add (if new) and commit. Version conflicts propagate as StaleDataError."""
        self.db.add(record)
        commit(self.db)
        return record

    def delete_one(self, record: ModelT) -> None:
        """Delete a loaded record and commit."""
        self.db.delete(record)
        commit(self.db)


def commit(db: Session) -> None:
    """Commit the session, translating driver failures into StoreError."""
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise _store_error("Failed to write to the store", e)


def run_with_optimistic_retry(
    db: Session,
    operation: Callable[[], ResultT],
    attempts: Optional[int] = None,
) -> ResultT:
    """
    Run a read-modify-write ``operation`` and retry it from scratch when a
    concurrent writer bumped the row version in between.

    ``operation`` must reload everything it modifies on each call.
    """
    attempts = attempts or settings.STORE_RETRY_ATTEMPTS
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except StaleDataError:
            db.rollback()
            # Drop cached state so the next attempt reads the winner's version
            db.expire_all()
            logger.warning(f"Concurrent modification detected (attempt {attempt}/{attempts}), retrying")
        except Exception:
            # Discard half-applied changes of a rejected operation
            db.rollback()
            raise
    raise StoreError("The record was modified concurrently, please retry")


def _store_error(message: str, error: SQLAlchemyError) -> StoreError:
    logger.error(f"{message}: {error}", exc_info=True)
    return StoreError("A storage error occurred")
