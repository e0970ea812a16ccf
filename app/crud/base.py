from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, func, and_
from sqlalchemy.orm import selectinload
from app.models.base import Base, utcnow
from app.core.exceptions import NotFoundError, handle_database_errors

ModelType = TypeVar("ModelType", bound=Base)

class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _live(self, query: Select) -> Select:
        """Exclude soft deleted rows when the model supports it"""
        if self.soft_deletes:
            return query.where(self.model.deleted_at.is_(None))
        return query

    async def _save(self, db: AsyncSession, db_obj: ModelType, commit: bool) -> ModelType:
        db.add(db_obj)
        if commit:
            await db.commit()
            await db.refresh(db_obj)
        else:
            await db.flush()
        return db_obj

    @handle_database_errors
    async def get(self, db: AsyncSession, id: Any, *, raise_if_not_found: bool = True) -> Optional[ModelType]:
        """Get a single record by ID (not soft deleted)"""
        result = await db.execute(self._live(select(self.model).where(self.model.id == id)))
        obj = result.scalar_one_or_none()

        if raise_if_not_found and obj is None:
            raise NotFoundError(f"{self.model.__name__}")

        return obj

    @handle_database_errors
    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = True,
        include_deleted: bool = False
    ) -> Tuple[List[ModelType], int]:
        """Get multiple records with pagination and filtering"""
        query = select(self.model)
        if not include_deleted:
            query = self._live(query)

        # Apply filters
        if filters:
            filter_conditions = []
            for field, value in filters.items():
                if not hasattr(self.model, field):
                    raise ValueError(f"Field '{field}' does not exist on model {self.model.__name__}")
                column = getattr(self.model, field)
                if isinstance(value, (list, tuple)):
                    filter_conditions.append(column.in_(value))
                else:
                    filter_conditions.append(column == value)

            if filter_conditions:
                query = query.where(and_(*filter_conditions))

        # Get total count for pagination
        count_query = select(func.count()).select_from(query.subquery())
        total_result = await db.execute(count_query)
        total = total_result.scalar()

        # Apply ordering
        if order_by and hasattr(self.model, order_by):
            order_field = getattr(self.model, order_by)
            query = query.order_by(order_field.desc() if order_desc else order_field.asc())
        else:
            # Default ordering by created_at desc
            query = query.order_by(self.model.created_at.desc())

        # Apply pagination
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        items = list(result.scalars().all())

        return items, total

    async def create(self, db: AsyncSession, *, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """Create a new record; with commit=False the row is only flushed"""
        db_obj = self.model(**obj_in)
        return await self._save(db, db_obj, commit)

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Dict[str, Any],
        commit: bool = True
    ) -> ModelType:
        """Update a record"""
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        return await self._save(db, db_obj, commit)

    async def soft_delete(self, db: AsyncSession, *, db_obj: ModelType, commit: bool = True) -> ModelType:
        """Mark a record deleted, keeping the row"""
        if not self.soft_deletes:
            raise ValueError(f"{self.model.__name__} does not support soft delete")
        values: Dict[str, Any] = {"deleted_at": utcnow()}
        if hasattr(db_obj, "is_active"):
            values["is_active"] = False
        return await self.update(db, db_obj=db_obj, obj_in=values, commit=commit)

    @handle_database_errors
    async def get_with_relations(
        self,
        db: AsyncSession,
        *,
        id: Any,
        relations: List[str],
        include_deleted: bool = False
    ) -> Optional[ModelType]:
        """Get a record with loaded relations"""
        query = select(self.model).where(self.model.id == id)
        if not include_deleted:
            query = self._live(query)

        for relation in relations:
            if hasattr(self.model, relation):
                query = query.options(selectinload(getattr(self.model, relation)))

        result = await db.execute(query)
        return result.scalar_one_or_none()
