"""
Base CRUD operations.

Generic insert operations inherited by the model-specific CRUD classes.
"""

from typing import Any, Dict, Generic, Sequence, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from horizon_api.database import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType]):
    """
    Base CRUD operations class.

    Provides generic operations that can be used by specific model CRUD classes.
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize CRUD operations for a specific model.

        Args:
            model: The SQLAlchemy model class
        """
        self.model = model

    async def create(
        self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        Create a new record.

        Args:
            db: Database session
            obj_in: Input data (schema or dict)

        Returns:
            Created model instance
        """
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def create_many(
        self, db: AsyncSession, *, objs_in: Sequence[Union[CreateSchemaType, Dict[str, Any]]]
    ) -> int:
        """
        Insert a batch of records in one transaction.

        Args:
            db: Database session
            objs_in: Input data (schemas or dicts)

        Returns:
            Number of records inserted
        """
        db_objs = [
            self.model(**(obj if isinstance(obj, dict) else obj.model_dump()))
            for obj in objs_in
        ]
        db.add_all(db_objs)
        await db.commit()
        return len(db_objs)
