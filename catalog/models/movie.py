from sqlalchemy import Column, Integer, String, ForeignKey, Uuid
from catalog.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True)
    slug = Column(String(450), unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    year_of_release = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Movie(id={self.id}, slug={self.slug})>"


class Genre(Base):
    """
    Genre tag - one row per tag per movie.
    Rows are removed by the movie store, not by a database cascade.
    """
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, index=True)
    movie_id = Column(Uuid, ForeignKey("movies.id"), nullable=False, index=True)
    name = Column(String, nullable=False)

    def __repr__(self):
        return f"<Genre(movie_id={self.movie_id}, name={self.name})>"
