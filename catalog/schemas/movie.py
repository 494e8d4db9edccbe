"""
Movie schemas - write payloads, read models and listing options
"""
from pydantic import BaseModel, Field, ConfigDict, computed_field
from typing import Optional, List
from uuid import UUID
from enum import Enum


# ============================================
# Enums for type-safe listing options
# ============================================

class SortOrder(str, Enum):
    """Direction of the listing sort"""
    UNSORTED = "unsorted"
    ASCENDING = "ascending"
    DESCENDING = "descending"


class SortField(str, Enum):
    """Fields a listing may be sorted by"""
    TITLE = "title"
    YEAR_OF_RELEASE = "yearofrelease"


# ============================================
# Write payloads
# ============================================

class MovieCreate(BaseModel):
    """Schema for creating a movie"""
    title: str = Field(..., description="Movie title")
    year_of_release: int = Field(..., description="Release year")
    genres: List[str] = Field(default_factory=list, description="Genre names")


class MovieUpdate(MovieCreate):
    """Schema for replacing a movie's title, year and genres"""


# ============================================
# Read models
# ============================================

class MovieRead(BaseModel):
    """Movie enriched with the aggregate and personal rating"""
    id: UUID
    slug: str
    title: str
    year_of_release: int
    genres: List[str] = []
    rating: Optional[float] = Field(None, description="Mean of all ratings, one decimal")
    user_rating: Optional[int] = Field(None, description="Acting user's own rating")

    model_config = ConfigDict(from_attributes=True)


class MoviePage(BaseModel):
    """One page of a movie listing plus the unpaged total"""
    items: List[MovieRead] = []
    page: int
    page_size: int
    total: int

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.total > self.page * self.page_size


# ============================================
# Listing options
# ============================================

class MovieQueryOptions(BaseModel):
    """
    Normalized listing request.
    Values are unchecked here; run validate_query_options before querying.
    """
    title: Optional[str] = None
    year_of_release: Optional[int] = None
    sort_field: Optional[str] = None
    sort_order: SortOrder = SortOrder.UNSORTED
    page: int = 1
    page_size: int = 10
    user_id: Optional[UUID] = None

    @classmethod
    def from_request(
        cls,
        title: Optional[str] = None,
        year: Optional[int] = None,
        sort_by: Optional[str] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> "MovieQueryOptions":
        """
        Build options from raw query values.
        sort_by is "field", "+field" (ascending) or "-field" (descending).
        """
        if sort_by is None:
            sort_field, sort_order = None, SortOrder.UNSORTED
        else:
            sort_field = sort_by.strip("+-")
            sort_order = SortOrder.DESCENDING if sort_by.startswith("-") else SortOrder.ASCENDING

        return cls(
            title=title,
            year_of_release=year,
            sort_field=sort_field,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        )

    def with_user(self, user_id: Optional[UUID]) -> "MovieQueryOptions":
        """Copy of these options acting on behalf of user_id"""
        return self.model_copy(update={"user_id": user_id})

    @property
    def sort_key(self) -> Optional[SortField]:
        """Allow-listed sort field; raises ValueError for anything else"""
        if self.sort_field is None:
            return None
        return SortField(self.sort_field.lower())

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size
