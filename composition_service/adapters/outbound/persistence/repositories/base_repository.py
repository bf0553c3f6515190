# composition_service/adapters/outbound/persistence/repositories/base_repository.py

"""
Async base repository shared by users, intervals and compositions.

Erros do banco viram DatabaseOperationException; violação de unicidade
vira ResourceAlreadyExistsException. `create` e `update` fazem commit.
"""

from typing import Any, Dict, Generic, NoReturn, Optional, Type, TypeVar, Union
import logging

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models.base_model import Base
from composition_service.domain.exceptions import (
    DatabaseOperationException,
    ResourceAlreadyExistsException,
)

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")

logger = logging.getLogger(__name__)


def is_unique_violation(error: IntegrityError) -> bool:
    """PostgreSQL reports 'duplicate key', SQLite 'UNIQUE constraint failed'."""
    error_msg = str(error).lower()
    return "unique" in error_msg or "duplicate" in error_msg


class AsyncCRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):

    def __init__(self, model: Type[ModelType]):
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def name(self) -> str:
        return self.model.__name__

    def _database_error(self, action: str, error: SQLAlchemyError) -> NoReturn:
        self.logger.error(f"{action} {self.name} failed: {error}")
        raise DatabaseOperationException(message=f"Could not {action.lower()} {self.name}", original_error=error)

    async def _commit_refresh(self, db: AsyncSession, db_obj: ModelType, action: str) -> ModelType:
        """Commit + refresh; on failure roll back and translate the error."""
        try:
            await db.commit()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            await db.rollback()
            if is_unique_violation(e):
                self.logger.warning(f"{action} {self.name}: unique constraint violated")
                raise ResourceAlreadyExistsException(detail=f"{self.name} already exists")
            self._database_error(action, e)
        except SQLAlchemyError as e:
            await db.rollback()
            self._database_error(action, e)

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        try:
            result = await db.execute(select(self.model).where(self.model.id == id))
            return result.unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            self._database_error("Fetch", e)

    async def exists(self, db: AsyncSession, **filters) -> bool:
        """True when at least one row matches every `column=value` filter."""
        query = select(self.model.id)
        for field, value in filters.items():
            query = query.where(getattr(self.model, field) == value)
        try:
            result = await db.execute(query.limit(1))
            return result.first() is not None
        except SQLAlchemyError as e:
            self._database_error("Check", e)

    async def create(self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else jsonable_encoder(obj_in)
        db_obj = self.model(**data)
        db.add(db_obj)

        db_obj = await self._commit_refresh(db, db_obj, "Create")
        self.logger.info(f"{self.name} {db_obj.id} created")
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: ModelType,
                     obj_in: Union[UpdateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        Apply `obj_in` to `db_obj` and commit.

        Schemas contribute only the fields explicitly set; unknown keys are ignored.
        """
        changes = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        db.add(db_obj)

        db_obj = await self._commit_refresh(db, db_obj, "Update")
        self.logger.info(f"{self.name} {db_obj.id} updated")
        return db_obj
