import re

_DISALLOWED = re.compile(r"[^0-9A-Za-z _-]")


def generate_slug(title: str, year_of_release: int) -> str:
    """
    URL-safe movie identifier, e.g. ("The Matrix!", 1999) -> "the-matrix-1999".
    The year disambiguates remakes that share a title.
    """
    cleaned = _DISALLOWED.sub("", title).strip().lower()
    return f"{cleaned.replace(' ', '-')}-{year_of_release}"
