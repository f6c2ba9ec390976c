"""
Rating Database Model
"""

from sqlalchemy import Column, Integer, ForeignKey, Uuid, CheckConstraint

from .base import Base


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ratings_rating_range"),
    )

    # One row per (user, movie); re-rating updates this row
    user_id = Column(Uuid, primary_key=True)
    movie_id = Column(Uuid, ForeignKey("movies.id"), primary_key=True, index=True)
    rating = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Rating(user_id='{self.user_id}', movie_id='{self.movie_id}', rating={self.rating})>"
