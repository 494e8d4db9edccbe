"""
Rating Store - persistence for per-user movie ratings

A rating is always written through a single upsert keyed by
(movie_id, user_id), never through a read-then-write.
"""

from sqlalchemy import select, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import aliased
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from catalog.database import Database
from catalog.models.movie import Movie
from catalog.models.rating import Rating
from catalog.schemas.rating import MovieRating

logger = logging.getLogger(__name__)

# Dialects whose INSERT supports ON CONFLICT ... DO UPDATE
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_statement(dialect_name: str, movie_id: UUID, rating: int, user_id: UUID):
    try:
        insert = UPSERT_INSERTS[dialect_name]
    except KeyError:
        raise NotImplementedError(f"Rating upsert is not supported on '{dialect_name}'") from None

    stmt = insert(Rating).values(movie_id=movie_id, user_id=user_id, rating=rating)
    return stmt.on_conflict_do_update(
        index_elements=["movie_id", "user_id"],
        set_={"rating": stmt.excluded.rating}
    )


def _mean_rating(movie_id: UUID):
    return select(func.round(func.avg(Rating.rating), 1)).where(Rating.movie_id == movie_id)


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class RatingStore:
    """Upsert, aggregate and removal of ratings"""

    @staticmethod
    def rate(db: Database, movie_id: UUID, rating: int, user_id: UUID) -> bool:
        """
        Set the user's current rating for a movie (insert or overwrite)

        Args:
            db: Database capability
            movie_id: Movie being rated (existence is checked by the caller)
            rating: Value in 1-5 (validated by the caller)
            user_id: Acting user

        Returns:
            True once the rating is stored
        """
        with db.transaction() as session:
            dialect_name = session.get_bind().dialect.name
            session.execute(_upsert_statement(dialect_name, movie_id, rating, user_id))

        logger.debug(f"Upserted rating {rating} for movie {movie_id} by user {user_id}")
        return True

    @staticmethod
    def get_rating(db: Database, movie_id: UUID) -> Optional[float]:
        """Mean rating rounded to one decimal, None when the movie has no ratings"""
        with db.session() as session:
            return _as_float(session.scalar(_mean_rating(movie_id)))

    @staticmethod
    def get_rating_for_user(
        db: Database,
        movie_id: UUID,
        user_id: UUID
    ) -> Tuple[Optional[float], Optional[int]]:
        """
        Global mean rating and this user's own rating for a movie

        Returns:
            (mean or None, user's rating or None)
        """
        own_rating = aliased(Rating)
        user_rating = (
            select(own_rating.rating)
            .where(own_rating.movie_id == movie_id, own_rating.user_id == user_id)
            .scalar_subquery()
        )
        stmt = select(
            func.round(func.avg(Rating.rating), 1),
            user_rating
        ).where(Rating.movie_id == movie_id)

        with db.session() as session:
            mean, own = session.execute(stmt).one()

        return _as_float(mean), own

    @staticmethod
    def delete_rating(db: Database, movie_id: UUID, user_id: UUID) -> bool:
        """
        Remove a user's rating for a movie

        Returns:
            True if a rating was removed
        """
        with db.transaction() as session:
            result = session.execute(
                delete(Rating).where(
                    Rating.movie_id == movie_id,
                    Rating.user_id == user_id
                )
            )
            deleted = result.rowcount > 0

        logger.debug(f"Delete rating of movie {movie_id} by user {user_id}: removed={deleted}")
        return deleted

    @staticmethod
    def get_ratings_for_user(db: Database, user_id: UUID) -> List[MovieRating]:
        """All ratings of a user with the rated movie's slug, ordered by movie id"""
        stmt = (
            select(Rating.movie_id, Movie.slug, Rating.rating)
            .join(Movie, Movie.id == Rating.movie_id)
            .where(Rating.user_id == user_id)
            .order_by(Rating.movie_id)
        )
        with db.session() as session:
            return [
                MovieRating(movie_id=row.movie_id, slug=row.slug, rating=row.rating)
                for row in session.execute(stmt)
            ]
