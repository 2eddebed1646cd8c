"""
文章相关的 Pydantic 模型
用于请求/响应的数据验证
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.blog._slug import normalize_slug, ensure_sluggable
from app.schemas.blog.category import CategoryInfo


class PostCreate(BaseModel):
    """文章创建模型"""
    title: str = Field(..., min_length=1, max_length=255, description="文章标题")
    slug: Optional[str] = Field(None, max_length=255, description="URL友好的别名，留空自动生成")
    excerpt: Optional[str] = Field(None, max_length=500, description="文章摘要 (可选)")
    content_raw: str = Field(..., min_length=1, description="原始正文 (Markdown)")
    content_html: str = Field(..., min_length=1, description="渲染后的HTML正文")
    category_id: int = Field(..., description="分类ID")
    is_published: bool = Field(False, description="是否发布")
    published_at: Optional[datetime] = Field(None, description="发布时间，发布且留空时取当前时间")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v):
        if not v.strip():
            raise ValueError("标题不能为空")
        return v.strip()

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        return normalize_slug(v)

    @model_validator(mode="after")
    def validate_sluggable_title(self):
        ensure_sluggable(self.title, self.slug)
        return self


class PostUpdate(BaseModel):
    """文章更新模型（仅更新显式提供的字段）"""
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="文章标题")
    slug: Optional[str] = Field(None, max_length=255, description="URL友好的别名")
    excerpt: Optional[str] = Field(None, max_length=500, description="文章摘要 (可选)")
    content_raw: Optional[str] = Field(None, min_length=1, description="原始正文 (Markdown)")
    content_html: Optional[str] = Field(None, min_length=1, description="渲染后的HTML正文")
    category_id: Optional[int] = Field(None, description="分类ID")
    is_published: Optional[bool] = Field(None, description="是否发布")
    published_at: Optional[datetime] = Field(None, description="发布时间")

    @field_validator("title")
    @classmethod
    def validate_title_not_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError("标题不能为空")
        return v.strip() if v else v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        return normalize_slug(v)

    @model_validator(mode="after")
    def validate_sluggable_title(self):
        ensure_sluggable(self.title, self.slug)
        return self


class AuthorInfo(BaseModel):
    """作者信息模型（用于嵌套响应）"""
    id: int
    name: str

    class Config:
        from_attributes = True


class PostResponse(BaseModel):
    """文章响应模型"""
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content_raw: str
    content_html: str
    category_id: int
    author_id: int
    is_published: bool
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    author: Optional[AuthorInfo] = None
    category: Optional[CategoryInfo] = None

    class Config:
        from_attributes = True


class PostList(BaseModel):
    """文章列表响应模型"""
    total: int
    posts: List[PostResponse]
    page: int
    size: int
    total_pages: int
