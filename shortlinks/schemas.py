from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    # JSON keys are camelCase; Python code uses field names
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ShortenIn(CamelModel):
    # checked by validators.validate_long_url so errors carry the service's messages
    long_url: Any = Field(default=None, alias="longUrl")


class AliasOut(CamelModel):
    id: int
    short_code: str = Field(alias="shortUrl")
    long_url: str = Field(alias="longUrl")
    click_count: int = Field(alias="clickCount")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class ShortenedOut(CamelModel):
    id: int
    long_url: str = Field(alias="longUrl")
    short_code: str = Field(alias="shortUrl")
    full_short_url: str = Field(alias="fullShortUrl")
    click_count: int = Field(alias="clickCount")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class ShortenResponse(CamelModel):
    success: bool = True
    data: ShortenedOut


class AliasResponse(CamelModel):
    success: bool = True
    data: AliasOut


class Pagination(CamelModel):
    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total_count: int = Field(alias="totalCount")
    limit: int
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")


class PaginatedAliases(CamelModel):
    success: bool = True
    data: list[AliasOut]
    pagination: Pagination
