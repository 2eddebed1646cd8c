"""
分类相关的 Pydantic 模型
用于请求/响应的数据验证
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.blog._slug import normalize_slug, ensure_sluggable


class CategoryCreate(BaseModel):
    """分类创建模型"""
    title: str = Field(..., min_length=1, max_length=255, description="分类标题")
    slug: Optional[str] = Field(None, max_length=255, description="URL友好的别名，留空自动生成")
    description: Optional[str] = Field(None, max_length=500, description="分类描述 (可选)")
    parent_id: Optional[int] = Field(None, ge=0, description="父分类ID，0 表示无父分类")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v):
        if not v.strip():
            raise ValueError("分类标题不能为空")
        return v.strip()

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        return normalize_slug(v)

    @model_validator(mode="after")
    def validate_sluggable_title(self):
        ensure_sluggable(self.title, self.slug)
        return self


class CategoryUpdate(BaseModel):
    """分类更新模型（仅更新显式提供的字段）"""
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="分类标题")
    slug: Optional[str] = Field(None, max_length=255, description="URL友好的别名")
    description: Optional[str] = Field(None, max_length=500, description="分类描述 (可选)")
    parent_id: Optional[int] = Field(None, ge=0, description="父分类ID，0 表示无父分类")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError("分类标题不能为空")
        return v.strip() if v else v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        return normalize_slug(v)

    @model_validator(mode="after")
    def validate_sluggable_title(self):
        ensure_sluggable(self.title, self.slug)
        return self


class CategoryResponse(BaseModel):
    """分类响应模型"""
    id: int
    parent_id: Optional[int] = None
    parent_title: str
    title: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryInfo(BaseModel):
    """分类信息模型（用于嵌套响应）"""
    id: int
    title: str
    slug: str

    class Config:
        from_attributes = True


class CategoryList(BaseModel):
    """分类列表响应模型"""
    total: int
    categories: List[CategoryResponse]
    page: int
    size: int
    total_pages: int
