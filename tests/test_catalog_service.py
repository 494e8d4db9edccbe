"""
Catalog Service tests - business rules and the order they are applied in
"""
import pytest
from datetime import datetime, timezone
from uuid import uuid4

from catalog.models.rating import Rating
from catalog.schemas.movie import MovieCreate, MovieUpdate, MoviePage, MovieQueryOptions
from catalog.schemas.validation import ValidationResult
from catalog.services.catalog_service import CatalogService
from catalog.stores.movie_store import MovieStore
from catalog.stores.rating_store import RatingStore


def inception():
    return MovieCreate(title="Inception", year_of_release=2010, genres=["Sci-Fi", "Action"])


@pytest.fixture
def movie(db):
    return CatalogService.create_movie(db, inception())


@pytest.fixture
def forbid_storage(monkeypatch):
    """Fail the test if the service touches the movie or rating store"""
    calls = []

    def record(name):
        def fake(*args, **kwargs):
            calls.append(name)
            raise AssertionError(f"{name} must not be called")
        return staticmethod(fake)

    monkeypatch.setattr(MovieStore, "exists_by_id", record("exists_by_id"))
    monkeypatch.setattr(RatingStore, "rate", record("rate"))
    return calls


# ============================================
# rate_movie
# ============================================

@pytest.mark.parametrize("rating", [0, 6, -3, 100])
def test_rate_movie_rejects_out_of_range_before_storage(db, forbid_storage, user_id, rating):
    result = CatalogService.rate_movie(db, uuid4(), rating, user_id)

    assert isinstance(result, ValidationResult)
    assert [failure.field for failure in result.failures] == ["rating"]
    assert forbid_storage == []


def test_rate_movie_missing_movie_is_not_found_and_writes_nothing(db, db_session, user_id):
    result = CatalogService.rate_movie(db, uuid4(), 3, user_id)

    assert result is False
    assert db_session.query(Rating).count() == 0


def test_rate_movie_checks_existence_before_writing(db, monkeypatch, user_id):
    calls = []
    monkeypatch.setattr(
        MovieStore, "exists_by_id",
        staticmethod(lambda db, movie_id: calls.append("exists") or False)
    )
    monkeypatch.setattr(
        RatingStore, "rate",
        staticmethod(lambda *args: calls.append("rate") or True)
    )

    assert CatalogService.rate_movie(db, uuid4(), 4, user_id) is False
    assert calls == ["exists"]


def test_rate_movie_stores_rating(db, movie, user_id):
    assert CatalogService.rate_movie(db, movie.id, 4, user_id) is True
    assert CatalogService.rate_movie(db, movie.id, 2, user_id) is True

    fetched = CatalogService.get_movie_by_id(db, movie.id, user_id)
    assert fetched.rating == 2.0
    assert fetched.user_rating == 2


def test_delete_rating_and_list_user_ratings(db, movie, user_id):
    CatalogService.rate_movie(db, movie.id, 5, user_id)

    ratings = CatalogService.get_user_ratings(db, user_id)
    assert [(r.slug, r.rating) for r in ratings] == [("inception-2010", 5)]

    assert CatalogService.delete_rating(db, movie.id, user_id) is True
    assert CatalogService.delete_rating(db, movie.id, user_id) is False
    assert CatalogService.get_user_ratings(db, user_id) == []


# ============================================
# Movies
# ============================================

def test_create_movie_derives_slug(db, movie):
    assert movie.slug == "inception-2010"
    fetched = CatalogService.get_movie_by_slug(db, "inception-2010")
    assert set(fetched.genres) == {"Sci-Fi", "Action"}
    assert fetched.rating is None


def test_create_movie_rejects_duplicate_slug(db, movie):
    result = CatalogService.create_movie(db, inception())

    assert isinstance(result, ValidationResult)
    assert [failure.field for failure in result.failures] == ["slug"]


def test_create_movie_rejects_invalid_payload_without_writing(db):
    future = datetime.now(timezone.utc).year + 1
    result = CatalogService.create_movie(
        db, MovieCreate(title="", year_of_release=future, genres=[])
    )

    assert isinstance(result, ValidationResult)
    assert len(result.failures) == 3
    assert CatalogService.get_movie_count(db) == 0


def test_get_movie_by_id_or_slug(db, movie):
    assert CatalogService.get_movie(db, str(movie.id)).id == movie.id
    assert CatalogService.get_movie(db, "inception-2010").id == movie.id
    assert CatalogService.get_movie(db, "unknown-2000") is None
    assert CatalogService.get_movie(db, str(uuid4())) is None


def test_update_movie_returns_refreshed_movie(db, movie, user_id):
    CatalogService.rate_movie(db, movie.id, 3, user_id)

    updated = CatalogService.update_movie(
        db, movie.id, MovieUpdate(title="Inception", year_of_release=2010, genres=["Thriller"]), user_id
    )

    assert updated.genres == ["Thriller"]
    assert updated.slug == "inception-2010"
    assert updated.rating == 3.0
    assert updated.user_rating == 3


def test_update_movie_not_found(db):
    result = CatalogService.update_movie(
        db, uuid4(), MovieUpdate(title="Heat", year_of_release=1995, genres=["Crime"])
    )
    assert result is None


def test_update_movie_rejects_slug_of_another_movie(db, movie):
    other = CatalogService.create_movie(
        db, MovieCreate(title="Memento", year_of_release=2000, genres=["Thriller"])
    )

    result = CatalogService.update_movie(db, other.id, inception())

    assert isinstance(result, ValidationResult)
    assert result.failures[0].field == "slug"


def test_delete_movie(db, movie):
    assert CatalogService.delete_movie(db, movie.id) is True
    assert CatalogService.delete_movie(db, movie.id) is False
    assert CatalogService.get_movie_by_id(db, movie.id) is None


# ============================================
# Listing
# ============================================

def test_get_movies_returns_page_with_total(db):
    for year in range(2001, 2008):
        CatalogService.create_movie(
            db, MovieCreate(title=f"Saga Part {year}", year_of_release=year, genres=["Drama"])
        )

    options = MovieQueryOptions.from_request(sort_by="-yearofrelease", page=2, page_size=3)
    result = CatalogService.get_movies(db, options)

    assert isinstance(result, MoviePage)
    assert result.total == 7
    assert result.page == 2
    assert result.page_size == 3
    assert [movie.year_of_release for movie in result.items] == [2004, 2003, 2002]
    assert result.has_next_page is True


def test_get_movies_title_and_year_filters(db, movie):
    found = CatalogService.get_movies(db, MovieQueryOptions.from_request(title="incep"))
    excluded = CatalogService.get_movies(db, MovieQueryOptions.from_request(title="incep", year=1999))

    assert [m.title for m in found.items] == ["Inception"]
    assert found.total == 1
    assert found.has_next_page is False
    assert excluded.items == []
    assert excluded.total == 0


def test_get_movies_validates_before_querying(db, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("store must not be queried")

    monkeypatch.setattr(MovieStore, "get_all", staticmethod(fail))
    monkeypatch.setattr(MovieStore, "get_count", staticmethod(fail))

    result = CatalogService.get_movies(db, MovieQueryOptions.from_request(sort_by="director"))

    assert isinstance(result, ValidationResult)
    assert "'title' or 'yearofrelease'" in result.failures[0].message


@pytest.mark.parametrize("options, field", [
    (MovieQueryOptions(page=10**18, page_size=25), "page"),
    (MovieQueryOptions(year_of_release=-10**20), "year_of_release"),
])
def test_get_movies_rejects_out_of_range_values(db, options, field):
    result = CatalogService.get_movies(db, options)

    assert isinstance(result, ValidationResult)
    assert [failure.field for failure in result.failures] == [field]


def test_get_movies_last_allowed_page_is_empty(db, movie):
    result = CatalogService.get_movies(db, MovieQueryOptions(page=10000, page_size=25))

    assert result.items == []
    assert result.total == 1
    assert result.has_next_page is False
