from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Generic, Optional, TypeVar

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts snake_case on input"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PageMetadata(BaseModel):
    total: int
    page: int
    limit: int


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool
    data: Optional[DataT] = None
    error: Optional[str] = None
    metadata: Optional[PageMetadata] = None
