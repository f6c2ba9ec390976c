"""
Movie and Genre Database Models
"""

from sqlalchemy import Column, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from .base import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True)
    slug = Column(Text, unique=True, nullable=False, index=True)

    title = Column(Text, nullable=False)
    year_of_release = Column(Integer, nullable=False, index=True)

    # Relationships
    genres = relationship("Genre", back_populates="movie", order_by="Genre.id")

    def __repr__(self):
        return f"<Movie(id='{self.id}', slug='{self.slug}')>"


class Genre(Base):
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, autoincrement=True)
    movie_id = Column(Uuid, ForeignKey("movies.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)

    movie = relationship("Movie", back_populates="genres")

    def __repr__(self):
        return f"<Genre(movie_id='{self.movie_id}', name='{self.name}')>"
