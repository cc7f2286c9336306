"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func
from pydantic.alias_generators import to_camel
from classifieds_api.database import Base
from classifieds_api.models.listing import CHECK_CONSTRAINT_FIELDS, UNIQUE_COLUMN_FIELDS
from classifieds_api.utils.exceptions import DuplicateKeyError, ValidationFailedError
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Tuple
import logging
import re

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

# Driver messages differ between SQLite and PostgreSQL; both are handled
_UNIQUE_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),
    re.compile(r"Key \((\w+)\)=\("),
)
_CHECK_PATTERNS = (
    re.compile(r"CHECK constraint failed: (\w+)"),
    re.compile(r'violates check constraint "(\w+)"'),
)
_NOT_NULL_PATTERNS = (
    re.compile(r"NOT NULL constraint failed: \w+\.(\w+)"),
    re.compile(r'null value in column "(\w+)"'),
)


def _first_match(patterns, message: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def column_to_field(column: str) -> str:
    """Map a column name to the field path clients send."""
    return UNIQUE_COLUMN_FIELDS.get(column, to_camel(column))


def translate_integrity_error(exc: IntegrityError) -> Exception:
    """
    Translate a database constraint failure into an API exception.

    Args:
        exc: IntegrityError raised by the driver

    Returns:
        DuplicateKeyError for unique violations, ValidationFailedError for
        check and not-null violations, or the original exception when the
        constraint cannot be identified
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)

    column = _first_match(_UNIQUE_PATTERNS, message)
    if column:
        return DuplicateKeyError(column_to_field(column))

    constraint = _first_match(_CHECK_PATTERNS, message)
    if constraint:
        field, reason = CHECK_CONSTRAINT_FIELDS.get(
            constraint, ("body", f"Constraint {constraint} violated")
        )
        return ValidationFailedError([{"field": field, "message": reason}])

    column = _first_match(_NOT_NULL_PATTERNS, message)
    if column:
        return ValidationFailedError([{"field": column_to_field(column), "message": "Field required"}])

    return exc


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Constraint failures are translated before they leave the repository.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance

        Raises:
            DuplicateKeyError: If a unique constraint is violated
            ValidationFailedError: If a check or not-null constraint is violated
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Constraint violation creating {self.model.__name__}: {e.orig}")
            raise translate_integrity_error(e) from e
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: Identifier of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == id))
            obj = result.scalar_one_or_none()

            if obj:
                logger.debug(f"Retrieved {self.model.__name__} with id: {id}")
            else:
                logger.debug(f"{self.model.__name__} with id {id} not found")

            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def get_page(self, page: int = 1, limit: int = 10) -> Tuple[List[ModelType], int]:
        """
        Get one page of records, newest first, with the total count.

        Ordering is created_at descending with id descending as tie-break,
        so windows never overlap or skip records.

        Args:
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (records on the page, total number of records)
        """
        try:
            query = (
                select(self.model)
                .order_by(self.model.created_at.desc(), self.model.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await self.db.execute(query)
            objects = list(result.scalars().all())
            total = await self.count()

            logger.debug(f"Retrieved {len(objects)} of {total} {self.model.__name__} records (page {page})")
            return objects, total
        except Exception as e:
            logger.error(f"Failed to page {self.model.__name__} records: {e}")
            raise

    async def update(self, id: str, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update a record by its ID.

        Args:
            id: Identifier of the record to update
            obj_in: Dictionary of column values to update

        Returns:
            Updated model instance if found, None otherwise

        Raises:
            DuplicateKeyError: If a unique constraint is violated
            ValidationFailedError: If a check or not-null constraint is violated
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found for update")
            return None

        try:
            for field, value in obj_in.items():
                setattr(db_obj, field, value)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Updated {self.model.__name__} with id: {id}")
            return db_obj
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Constraint violation updating {self.model.__name__} {id}: {e.orig}")
            raise translate_integrity_error(e) from e
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {id}: {e}")
            raise

    async def delete(self, id: str) -> Optional[ModelType]:
        """
        Delete a record by its ID.

        Args:
            id: Identifier of the record to delete

        Returns:
            The deleted instance, or None if not found
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found for deletion")
            return None

        try:
            await self.db.delete(db_obj)
            await self.db.commit()
            logger.debug(f"Deleted {self.model.__name__} with id: {id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise

    async def count(self) -> int:
        """
        Count records.

        Returns:
            Number of records
        """
        result = await self.db.execute(select(func.count(self.model.id)))
        return result.scalar() or 0
