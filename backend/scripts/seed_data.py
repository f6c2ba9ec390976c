"""
Seed database with sample movies and ratings for development
"""
import asyncio
import uuid

from movies.core.database import init_database, close_database, get_session_factory
from movies.core.exceptions import Conflict
from movies.models import Movie, MovieCreate
from movies.repositories import sqlalchemy_uow_factory
from movies.services import MovieService, RatingService

SAMPLE_MOVIES = [
    MovieCreate(title="The Shawshank Redemption", year_of_release=1994, genres=["Drama"]),
    MovieCreate(title="The Godfather", year_of_release=1972, genres=["Crime", "Drama"]),
    MovieCreate(title="The Matrix", year_of_release=1999, genres=["Action", "Sci-Fi"]),
    MovieCreate(title="Spirited Away", year_of_release=2001, genres=["Animation", "Fantasy"]),
]

# Fixed so repeated runs rate as the same users
SAMPLE_USERS = [
    uuid.UUID("d8566de3-b1a6-4a9b-b842-8e3887a82950"),
    uuid.UUID("0f8fad5b-d9cb-469f-a165-70867728950e"),
]


async def seed_data():
    """Add sample data to the database"""
    await init_database(create_tables=True)
    try:
        uow_factory = sqlalchemy_uow_factory(get_session_factory())
        movie_service = MovieService(uow_factory)
        rating_service = RatingService(uow_factory)

        for index, data in enumerate(SAMPLE_MOVIES):
            try:
                movie = await movie_service.create(Movie.new(data))
            except Conflict:
                print(f"Skipping {data.title}, already present")
                continue

            for offset, user_id in enumerate(SAMPLE_USERS):
                await rating_service.rate_movie(movie.id, 5 - (index + offset) % 3, user_id)

        print("Sample data added successfully!")
    finally:
        await close_database()


if __name__ == "__main__":
    asyncio.run(seed_data())
