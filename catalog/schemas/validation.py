"""Input validation for listing options, movie payloads and rating values

Validators never raise: they return a ValidationResult listing every rule
that failed, so callers can report all problems at once.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import HTTPException, status

from catalog.schemas.movie import MovieCreate, MovieQueryOptions, SortField

ALLOWED_SORT_FIELDS = [field.value for field in SortField]
MIN_YEAR = 1
MAX_PAGE = 10000
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 25
MIN_RATING = 1
MAX_RATING = 5


class ValidationFailure(BaseModel):
    """A single failed rule, scoped to the offending field"""
    field: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of a validation pass; empty failures means valid"""
    failures: List[ValidationFailure] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.failures

    def add(self, field: str, message: str) -> None:
        self.failures.append(ValidationFailure(field=field, message=message))

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"errors": [failure.model_dump() for failure in self.failures]}
        )


def _current_year() -> int:
    return datetime.now(timezone.utc).year


def _validate_year(result: ValidationResult, field: str, year: Optional[int]) -> None:
    if year is None:
        return
    current_year = _current_year()
    if year > current_year:
        result.add(field, f"Year of release must be less than or equal to {current_year}")
    elif year < MIN_YEAR:
        result.add(field, f"Year of release must be greater than or equal to {MIN_YEAR}")


# Utility validation functions
def validate_sort_field(field: Optional[str]) -> bool:
    """Check a sort field against the whitelist (case-insensitive)"""
    return field is None or field.lower() in ALLOWED_SORT_FIELDS


def validate_query_options(options: MovieQueryOptions) -> ValidationResult:
    """Validate listing options before they reach the movie store"""
    result = ValidationResult()

    _validate_year(result, "year_of_release", options.year_of_release)

    if not validate_sort_field(options.sort_field):
        allowed = " or ".join(f"'{field}'" for field in ALLOWED_SORT_FIELDS)
        result.add("sort_field", f"You can only sort by {allowed}")

    # Bounded so the offset stays within the database's integer range
    if not 1 <= options.page <= MAX_PAGE:
        result.add("page", f"Page must be between 1 and {MAX_PAGE}")

    # Both page size rules are reported independently
    if options.page_size < MIN_PAGE_SIZE:
        result.add("page_size", f"Page size must be greater than or equal to {MIN_PAGE_SIZE}")
    if not MIN_PAGE_SIZE <= options.page_size <= MAX_PAGE_SIZE:
        result.add(
            "page_size",
            f"You can get between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE} movies per page"
        )

    return result


def validate_movie(movie: MovieCreate) -> ValidationResult:
    """Validate a create/update payload (slug uniqueness is checked by the service)"""
    result = ValidationResult()

    if not movie.title or not movie.title.strip():
        result.add("title", "Title must not be empty")

    _validate_year(result, "year_of_release", movie.year_of_release)

    if not movie.genres:
        result.add("genres", "At least one genre is required")
    elif any(not genre or not genre.strip() for genre in movie.genres):
        result.add("genres", "Genre names must not be empty")

    return result


def validate_rating(rating: int) -> ValidationResult:
    """Ensure rating is within valid range"""
    result = ValidationResult()
    if rating < MIN_RATING or rating > MAX_RATING:
        result.add("rating", f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return result
