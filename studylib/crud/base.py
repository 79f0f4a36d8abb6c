from datetime import datetime
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from bson import ObjectId
from bson.errors import InvalidId
from beanie import Document
from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=Document)
CreateSchemaT = TypeVar("CreateSchemaT", bound=BaseModel)
UpdateSchemaT = TypeVar("UpdateSchemaT", bound=BaseModel)


def to_object_id(id: str) -> Optional[ObjectId]:
    """Parse an id coming from a request; malformed ids simply match nothing"""
    try:
        return ObjectId(id)
    except (InvalidId, TypeError):
        return None


class BaseCRUD(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    def __init__(self, model: Type[ModelT]):
        self.model = model

    async def get_by_id(self, id: str) -> Optional[ModelT]:
        oid = to_object_id(id)
        if oid is None:
            return None
        return await self.model.find_one({"_id": oid})

    async def create(self, obj_in: CreateSchemaT) -> ModelT:
        db_obj = self.model(**obj_in.model_dump())
        await db_obj.insert()
        return db_obj

    async def update(
        self,
        db_obj: ModelT,
        obj_in: Union[UpdateSchemaT, Dict[str, Any]],
    ) -> ModelT:
        # Explicit None is a real value here (e.g. moving to root)
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = dict(obj_in)

        if "updated_at" in self.model.model_fields:
            update_data["updated_at"] = datetime.utcnow()

        await db_obj.set(update_data)
        return db_obj

    async def delete(self, db_obj: ModelT) -> None:
        await db_obj.delete()
