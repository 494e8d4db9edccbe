from sqlalchemy import Column, Integer, ForeignKey, Uuid, CheckConstraint
from catalog.database import Base


class Rating(Base):
    __tablename__ = "ratings"

    # One rating per user per movie; the key the upsert conflicts on
    movie_id = Column(Uuid, ForeignKey("movies.id"), primary_key=True)
    user_id = Column(Uuid, primary_key=True, index=True)
    rating = Column(Integer, nullable=False)  # 1-5

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating_range"),
    )

    def __repr__(self):
        return f"<Rating(movie_id={self.movie_id}, user_id={self.user_id}, rating={self.rating})>"
