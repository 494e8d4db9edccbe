"""
Catalog Service - business rules on top of the movie and rating stores

Validation always runs before any storage access. Validation problems are
returned as a ValidationResult, missing entities as None/False; storage
errors propagate unchanged.
"""

from typing import List, Optional, Union
from uuid import UUID
import logging

from catalog.database import Database
from catalog.schemas.movie import MovieCreate, MovieUpdate, MovieRead, MoviePage, MovieQueryOptions
from catalog.schemas.rating import MovieRating
from catalog.schemas.validation import (
    ValidationResult,
    validate_query_options,
    validate_movie,
    validate_rating
)
from catalog.stores.movie_store import MovieStore
from catalog.stores.rating_store import RatingStore
from catalog.utils.slug import generate_slug

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for movie catalog and rating operations"""

    @staticmethod
    def _validate_movie(
        db: Database,
        movie: MovieCreate,
        movie_id: Optional[UUID] = None
    ) -> ValidationResult:
        """Field rules first, then slug uniqueness against other movies"""
        result = validate_movie(movie)
        if not result.is_valid:
            return result

        slug = generate_slug(movie.title, movie.year_of_release)
        owner = MovieStore.get_id_by_slug(db, slug)
        if owner is not None and owner != movie_id:
            result.add("slug", "This movie already exists in the system")
        return result

    # ==================== MOVIES ====================

    @staticmethod
    def create_movie(db: Database, movie: MovieCreate) -> Union[ValidationResult, MovieRead]:
        validation = CatalogService._validate_movie(db, movie)
        if not validation.is_valid:
            logger.warning(f"Rejected movie '{movie.title}': {len(validation.failures)} validation failure(s)")
            return validation

        created = MovieStore.create(db, movie)
        logger.info(f"Created movie {created.id} ({created.slug})")
        return created

    @staticmethod
    def get_movie_by_id(db: Database, movie_id: UUID, user_id: Optional[UUID] = None) -> Optional[MovieRead]:
        return MovieStore.get_by_id(db, movie_id, user_id)

    @staticmethod
    def get_movie_by_slug(db: Database, slug: str, user_id: Optional[UUID] = None) -> Optional[MovieRead]:
        return MovieStore.get_by_slug(db, slug, user_id)

    @staticmethod
    def get_movie(db: Database, id_or_slug: str, user_id: Optional[UUID] = None) -> Optional[MovieRead]:
        """Look a movie up by id when the value parses as a UUID, otherwise by slug"""
        try:
            movie_id = UUID(id_or_slug)
        except ValueError:
            return MovieStore.get_by_slug(db, id_or_slug, user_id)
        return MovieStore.get_by_id(db, movie_id, user_id)

    @staticmethod
    def get_movies(db: Database, options: MovieQueryOptions) -> Union[ValidationResult, MoviePage]:
        """
        One page of the movie listing plus the total for the same filters

        Args:
            db: Database capability
            options: Listing options, validated here before any query runs

        Returns:
            ValidationResult if the options are invalid, otherwise MoviePage
        """
        validation = validate_query_options(options)
        if not validation.is_valid:
            return validation

        items = MovieStore.get_all(db, options)
        total = MovieStore.get_count(db, options.title, options.year_of_release)

        return MoviePage(
            items=items,
            page=options.page,
            page_size=options.page_size,
            total=total
        )

    @staticmethod
    def get_movie_count(db: Database, title: Optional[str] = None, year_of_release: Optional[int] = None) -> int:
        return MovieStore.get_count(db, title, year_of_release)

    @staticmethod
    def update_movie(
        db: Database,
        movie_id: UUID,
        movie: MovieUpdate,
        user_id: Optional[UUID] = None
    ) -> Union[ValidationResult, MovieRead, None]:
        """
        Replace a movie's title, year and genres

        Returns:
            ValidationResult on invalid input, None if the movie does not
            exist, otherwise the updated movie with its ratings
        """
        validation = CatalogService._validate_movie(db, movie, movie_id)
        if not validation.is_valid:
            return validation

        if not MovieStore.update(db, movie_id, movie):
            return None

        logger.info(f"Updated movie {movie_id}")
        return MovieStore.get_by_id(db, movie_id, user_id)

    @staticmethod
    def delete_movie(db: Database, movie_id: UUID) -> bool:
        deleted = MovieStore.delete_by_id(db, movie_id)
        if deleted:
            logger.info(f"Deleted movie {movie_id}")
        return deleted

    # ==================== RATINGS ====================

    @staticmethod
    def rate_movie(db: Database, movie_id: UUID, rating: int, user_id: UUID) -> Union[ValidationResult, bool]:
        """
        Set the user's rating for a movie

        Order matters: the value is validated before the movie's existence
        is checked, and nothing is written for a missing movie.

        Returns:
            ValidationResult for an out-of-range rating, False if the movie
            does not exist, True once the rating is stored
        """
        validation = validate_rating(rating)
        if not validation.is_valid:
            logger.warning(f"Rejected rating {rating} for movie {movie_id}")
            return validation

        if not MovieStore.exists_by_id(db, movie_id):
            return False

        rated = RatingStore.rate(db, movie_id, rating, user_id)
        logger.info(f"User {user_id} rated movie {movie_id}: {rating}")
        return rated

    @staticmethod
    def delete_rating(db: Database, movie_id: UUID, user_id: UUID) -> bool:
        return RatingStore.delete_rating(db, movie_id, user_id)

    @staticmethod
    def get_user_ratings(db: Database, user_id: UUID) -> List[MovieRating]:
        return RatingStore.get_ratings_for_user(db, user_id)
