"""
Movie Routes - catalog CRUD, listing and per-user ratings of a movie
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from typing import Optional
from uuid import UUID

from catalog.database import Database, get_database
from catalog.schemas.movie import MovieCreate, MovieUpdate, MovieRead, MoviePage, MovieQueryOptions
from catalog.schemas.rating import RateMovieRequest
from catalog.schemas.validation import ValidationResult
from catalog.services.catalog_service import CatalogService
from catalog.utils.dependencies import get_current_user_id, get_optional_user_id

router = APIRouter(prefix="/api/movies", tags=["Movies"])


def _movie_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")


# ============================================
# Listing
# ============================================

@router.get("", response_model=MoviePage)
def get_movies(
    title: Optional[str] = Query(None, max_length=200, description="Case-insensitive title substring"),
    year: Optional[int] = Query(None, description="Exact release year"),
    sort_by: Optional[str] = Query(None, description="'title' or 'yearofrelease', prefix '-' for descending"),
    page: int = Query(1, description="Page number (1-10000)"),
    page_size: int = Query(10, description="Movies per page (1-25)"),
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: Database = Depends(get_database)
):
    """
    Filtered, sorted, paginated movie listing

    Every movie carries its average rating; authenticated callers also get
    their own rating.
    """
    options = MovieQueryOptions.from_request(
        title=title,
        year=year,
        sort_by=sort_by,
        page=page,
        page_size=page_size
    ).with_user(user_id)

    result = CatalogService.get_movies(db, options)
    if isinstance(result, ValidationResult):
        raise result.to_http_exception()
    return result


# ============================================
# Movie CRUD
# ============================================

@router.post("", response_model=MovieRead, status_code=status.HTTP_201_CREATED)
def create_movie(
    payload: MovieCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: Database = Depends(get_database)
):
    """Create a movie; its slug is derived from title and year"""
    result = CatalogService.create_movie(db, payload)
    if isinstance(result, ValidationResult):
        raise result.to_http_exception()
    return result


@router.get("/{id_or_slug}", response_model=MovieRead)
def get_movie(
    id_or_slug: str = Path(..., description="Movie id (UUID) or slug"),
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: Database = Depends(get_database)
):
    """Get one movie by id or slug"""
    movie = CatalogService.get_movie(db, id_or_slug, user_id)
    if movie is None:
        raise _movie_not_found()
    return movie


@router.put("/{movie_id}", response_model=MovieRead)
def update_movie(
    payload: MovieUpdate,
    movie_id: UUID = Path(..., description="Movie id"),
    user_id: UUID = Depends(get_current_user_id),
    db: Database = Depends(get_database)
):
    """Replace title, year and genres of a movie"""
    result = CatalogService.update_movie(db, movie_id, payload, user_id)
    if isinstance(result, ValidationResult):
        raise result.to_http_exception()
    if result is None:
        raise _movie_not_found()
    return result


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movie(
    movie_id: UUID = Path(..., description="Movie id"),
    user_id: UUID = Depends(get_current_user_id),
    db: Database = Depends(get_database)
):
    """Delete a movie together with its genres and ratings"""
    if not CatalogService.delete_movie(db, movie_id):
        raise _movie_not_found()
    return None


# ============================================
# Ratings of a movie
# ============================================

@router.put("/{movie_id}/ratings", status_code=status.HTTP_204_NO_CONTENT)
def rate_movie(
    payload: RateMovieRequest,
    movie_id: UUID = Path(..., description="Movie id"),
    user_id: UUID = Depends(get_current_user_id),
    db: Database = Depends(get_database)
):
    """
    Set the current user's rating (1-5) for a movie

    Rating again overwrites the previous value.
    """
    result = CatalogService.rate_movie(db, movie_id, payload.rating, user_id)
    if isinstance(result, ValidationResult):
        raise result.to_http_exception()
    if not result:
        raise _movie_not_found()
    return None


@router.delete("/{movie_id}/ratings", status_code=status.HTTP_204_NO_CONTENT)
def delete_rating(
    movie_id: UUID = Path(..., description="Movie id"),
    user_id: UUID = Depends(get_current_user_id),
    db: Database = Depends(get_database)
):
    """Remove the current user's rating for a movie"""
    if not CatalogService.delete_rating(db, movie_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")
    return None
