"""
Movie Store - persistence for movies and their genre tags

Listing, point lookups and writes. Every read joins the aggregate rating
and, when an acting user is given, that user's own rating.
"""

from collections import defaultdict
from sqlalchemy import select, delete, exists, func, and_, or_, bindparam, String, Integer, Uuid
from sqlalchemy.orm import Session, aliased
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4
import logging

from catalog.database import Database
from catalog.models.movie import Movie, Genre
from catalog.models.rating import Rating
from catalog.schemas.movie import (
    MovieCreate,
    MovieUpdate,
    MovieRead,
    MovieQueryOptions,
    SortField,
    SortOrder
)
from catalog.utils.slug import generate_slug

logger = logging.getLogger(__name__)

# Allow-listed sort keys resolved to concrete columns
SORT_COLUMNS = {
    SortField.TITLE: Movie.title,
    SortField.YEAR_OF_RELEASE: Movie.year_of_release,
}

LIKE_ESCAPE = "\\"


def _like_fragment(value: Optional[str]) -> Optional[str]:
    """Escape LIKE wildcards so the title filter is a plain substring match"""
    if value is None:
        return None
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _filter_clause(title: Optional[str], year_of_release: Optional[int]):
    """
    Optional filters as "parameter IS NULL OR condition", so absent and
    present filters share one statement shape.
    """
    title_param = bindparam("title", _like_fragment(title), type_=String)
    year_param = bindparam("year_of_release", year_of_release, type_=Integer)

    return and_(
        or_(
            title_param.is_(None),
            func.lower(Movie.title, type_=String).contains(
                func.lower(title_param, type_=String), escape=LIKE_ESCAPE
            )
        ),
        or_(year_param.is_(None), Movie.year_of_release == year_param)
    )


def _enriched_select(user_id: Optional[UUID]):
    """Movie columns plus the global mean rating and the acting user's rating"""
    all_ratings = aliased(Rating, name="all_ratings")
    user_ratings = aliased(Rating, name="user_ratings")
    user_param = bindparam("user_id", user_id, type_=Uuid)

    return (
        select(
            Movie.id,
            Movie.slug,
            Movie.title,
            Movie.year_of_release,
            func.round(func.avg(all_ratings.rating), 1).label("rating"),
            user_ratings.rating.label("user_rating"),
        )
        .outerjoin(all_ratings, all_ratings.movie_id == Movie.id)
        # User id sits in the join predicate: no user means no match, never 0
        .outerjoin(
            user_ratings,
            and_(user_ratings.movie_id == Movie.id, user_ratings.user_id == user_param)
        )
        .group_by(
            Movie.id,
            Movie.slug,
            Movie.title,
            Movie.year_of_release,
            user_ratings.rating,
        )
    )


def _load_genres(session: Session, movie_ids: Iterable[UUID]) -> Dict[UUID, List[str]]:
    """Genre names per movie, deduplicated"""
    movie_ids = list(movie_ids)
    if not movie_ids:
        return {}

    grouped = defaultdict(set)
    rows = session.execute(
        select(Genre.movie_id, Genre.name).where(Genre.movie_id.in_(movie_ids))
    )
    for movie_id, name in rows:
        grouped[movie_id].add(name)

    return {movie_id: sorted(names) for movie_id, names in grouped.items()}


def _to_movies(session: Session, rows) -> List[MovieRead]:
    rows = list(rows)
    genres = _load_genres(session, (row.id for row in rows))

    return [
        MovieRead(
            id=row.id,
            slug=row.slug,
            title=row.title,
            year_of_release=row.year_of_release,
            genres=genres.get(row.id, []),
            rating=float(row.rating) if row.rating is not None else None,
            user_rating=row.user_rating,
        )
        for row in rows
    ]


def _genre_rows(movie_id: UUID, genres: Iterable[str]) -> List[Genre]:
    return [Genre(movie_id=movie_id, name=name) for name in genres]


class MovieStore:
    """Queries and transactional writes for movies"""

    # ==================== LISTING ====================

    @staticmethod
    def get_all(db: Database, options: MovieQueryOptions) -> List[MovieRead]:
        """
        One page of movies matching the options' filters

        Args:
            db: Database capability
            options: Validated listing options (page >= 1, page_size 1-25)

        Returns:
            Movies in the requested order, empty list when nothing matches
        """
        stmt = _enriched_select(options.user_id).where(
            _filter_clause(options.title, options.year_of_release)
        )

        sort_key = options.sort_key
        if sort_key is not None:
            column = SORT_COLUMNS[sort_key]
            stmt = stmt.order_by(
                column.desc() if options.sort_order == SortOrder.DESCENDING else column.asc()
            )
        # Identity tiebreaker keeps pages stable across calls
        stmt = stmt.order_by(Movie.id).offset(options.offset).limit(options.page_size)

        with db.session() as session:
            movies = _to_movies(session, session.execute(stmt))

        logger.debug(
            f"Listed {len(movies)} movies (page={options.page}, page_size={options.page_size})"
        )
        return movies

    @staticmethod
    def get_count(db: Database, title: Optional[str] = None, year_of_release: Optional[int] = None) -> int:
        """Number of movies matching the filters, independent of paging"""
        stmt = select(func.count()).select_from(Movie).where(
            _filter_clause(title, year_of_release)
        )
        with db.session() as session:
            return session.scalar(stmt) or 0

    # ==================== POINT LOOKUPS ====================

    @staticmethod
    def get_by_id(db: Database, movie_id: UUID, user_id: Optional[UUID] = None) -> Optional[MovieRead]:
        stmt = _enriched_select(user_id).where(Movie.id == movie_id)
        with db.session() as session:
            movies = _to_movies(session, session.execute(stmt))
        return movies[0] if movies else None

    @staticmethod
    def get_by_slug(db: Database, slug: str, user_id: Optional[UUID] = None) -> Optional[MovieRead]:
        stmt = _enriched_select(user_id).where(Movie.slug == slug)
        with db.session() as session:
            movies = _to_movies(session, session.execute(stmt))
        return movies[0] if movies else None

    @staticmethod
    def exists_by_id(db: Database, movie_id: UUID) -> bool:
        with db.session() as session:
            return bool(session.scalar(select(exists().where(Movie.id == movie_id))))

    @staticmethod
    def get_id_by_slug(db: Database, slug: str) -> Optional[UUID]:
        """Id of the movie owning slug, if any"""
        with db.session() as session:
            return session.scalar(select(Movie.id).where(Movie.slug == slug))

    # ==================== WRITES ====================

    @staticmethod
    def create(db: Database, movie: MovieCreate) -> MovieRead:
        """
        Insert a movie and its genre tags atomically

        Returns:
            The stored movie (no ratings yet)
        """
        movie_id = uuid4()
        slug = generate_slug(movie.title, movie.year_of_release)

        with db.transaction() as session:
            session.add(Movie(
                id=movie_id,
                slug=slug,
                title=movie.title,
                year_of_release=movie.year_of_release
            ))
            session.flush()
            session.add_all(_genre_rows(movie_id, movie.genres))

        logger.debug(f"Inserted movie {movie_id} ({slug})")
        return MovieRead(
            id=movie_id,
            slug=slug,
            title=movie.title,
            year_of_release=movie.year_of_release,
            genres=sorted(set(movie.genres)),
        )

    @staticmethod
    def update(db: Database, movie_id: UUID, movie: MovieUpdate) -> bool:
        """
        Replace title, year and genres of an existing movie atomically

        Returns:
            False if no movie has this id (nothing is written)
        """
        with db.transaction() as session:
            existing = session.get(Movie, movie_id)
            if existing is None:
                return False

            session.execute(delete(Genre).where(Genre.movie_id == movie_id))
            session.add_all(_genre_rows(movie_id, movie.genres))

            existing.title = movie.title
            existing.year_of_release = movie.year_of_release
            existing.slug = generate_slug(movie.title, movie.year_of_release)

        logger.debug(f"Updated movie {movie_id}")
        return True

    @staticmethod
    def delete_by_id(db: Database, movie_id: UUID) -> bool:
        """
        Remove a movie with its genre tags and ratings atomically

        Returns:
            True if a movie row was removed
        """
        with db.transaction() as session:
            session.execute(delete(Genre).where(Genre.movie_id == movie_id))
            session.execute(delete(Rating).where(Rating.movie_id == movie_id))
            result = session.execute(delete(Movie).where(Movie.id == movie_id))
            deleted = result.rowcount > 0

        logger.debug(f"Delete movie {movie_id}: removed={deleted}")
        return deleted
