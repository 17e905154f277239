from pydantic import BaseModel, Field

from housy.schemas.common import ActionResponse


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    icon: str | None = Field(default=None, max_length=40)
    color: str | None = Field(default=None, max_length=16)


class CategoryUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=80)
    icon: str | None = Field(default=None, max_length=40)
    color: str | None = Field(default=None, max_length=16)


class CategoryResponse(BaseModel):
    id: str
    name: str
    icon: str
    color: str
    created_at: str


class CategoryListResponse(BaseModel):
    items: list[CategoryResponse]


class CategoryActionResponse(ActionResponse):
    category: CategoryResponse
