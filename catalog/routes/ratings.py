"""
Rating Routes - the current user's ratings across the catalog
"""

from fastapi import APIRouter, Depends
from typing import List
from uuid import UUID

from catalog.database import Database, get_database
from catalog.schemas.rating import MovieRating
from catalog.services.catalog_service import CatalogService
from catalog.utils.dependencies import get_current_user_id

router = APIRouter(prefix="/api/ratings", tags=["Ratings"])


@router.get("/me", response_model=List[MovieRating])
def get_my_ratings(
    user_id: UUID = Depends(get_current_user_id),
    db: Database = Depends(get_database)
):
    """
    Get all ratings by current user

    Each entry carries the movie id, its slug and the rating value.
    """
    return CatalogService.get_user_ratings(db, user_id)
