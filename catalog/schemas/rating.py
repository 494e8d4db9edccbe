"""
Rating Schemas - Pydantic models for rating request/response payloads
"""

from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID


class RateMovieRequest(BaseModel):
    """Schema for setting the current user's rating"""
    rating: int = Field(..., description="Rating value (1-5)")


class MovieRating(BaseModel):
    """A single rating of the current user, with the movie's slug"""
    movie_id: UUID
    slug: str
    rating: int

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "movie_id": "1b9d6bcd-bbfd-4b2d-9b5d-ab8dfbbd4bed",
                "slug": "inception-2010",
                "rating": 4
            }
        }
    )
