"""Shared test fixtures and configuration for pytest."""
import pytest
from datetime import datetime, timedelta
from typing import Dict, List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mediafriend_recommendation_service.domain import LibraryEntry
from mediafriend_recommendation_service.models.base import Base
from mediafriend_recommendation_service.services import (
    CommentService,
    LibraryService,
    RecommendationLifecycleService,
    RecommendationSummaryService,
)
from mediafriend_recommendation_service.storage import PreferenceStore


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine shared by every session of a test."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_db_engine):
    """Session factory bound to the test engine (passed to services)."""
    return sessionmaker(bind=test_db_engine)


@pytest.fixture(scope="function")
def test_db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    yield session
    session.close()


# ===== Service Fixtures =====

@pytest.fixture
def lifecycle_service(session_factory) -> RecommendationLifecycleService:
    return RecommendationLifecycleService(session_factory)


@pytest.fixture
def comment_service(session_factory) -> CommentService:
    return CommentService(session_factory)


@pytest.fixture
def summary_service(lifecycle_service) -> RecommendationSummaryService:
    return RecommendationSummaryService(lifecycle_service)


@pytest.fixture
def library_service(session_factory) -> LibraryService:
    return LibraryService(session_factory)


@pytest.fixture
def preference_store(session_factory) -> PreferenceStore:
    return PreferenceStore(session_factory)


# ===== Sample Data Fixtures =====

@pytest.fixture
def sample_movie() -> Dict:
    """Catalog search result for a movie."""
    return {
        'external_id': 'tmdb-603',
        'title': 'The Matrix',
        'media_type': 'movie',
        'director': 'Lana Wachowski',
        'year': 1999,
        'genres': ['Action', 'Science Fiction'],
        'poster_url': 'https://image.example.org/matrix.jpg',
        'overview': 'A hacker learns the truth about his reality.',
    }


@pytest.fixture
def sample_book() -> Dict:
    """Catalog search result for a book."""
    return {
        'external_id': 'ol-27448W',
        'title': 'The Left Hand of Darkness',
        'media_type': 'book',
        'author': 'Ursula K. Le Guin',
        'year': 1969,
        'genres': 'Science Fiction, Classics',
    }


@pytest.fixture
def sent_movie(lifecycle_service, sample_movie):
    """A pending movie recommendation from alice to bob."""
    result = lifecycle_service.send('alice', ['bob'], 'movies_tv', sample_movie, message='You will love this')
    return result.sent[0]


def make_entry(
        entry_id: str,
        title: str,
        genres: List[str] = (),
        custom_order=None,
        year=None,
        rating=None,
        creator=None,
        days_ago: int = 0,
        domain: str = 'books'
) -> LibraryEntry:
    """Build a detached library entry for list engine tests."""
    return LibraryEntry(
        id=entry_id,
        user_id='u1',
        domain=domain,
        title=title,
        added_at=datetime(2024, 1, 31) - timedelta(days=days_ago),
        creator=creator,
        year=year,
        genres=list(genres),
        rating=rating,
        custom_order=custom_order,
    )


@pytest.fixture
def entry_factory():
    """Factory for detached library entries."""
    return make_entry


@pytest.fixture
def book_entries() -> List[LibraryEntry]:
    """Twelve books with genres, years and custom order 1..12."""
    genres = ['fantasy', 'mystery', 'science fiction']
    return [
        make_entry(
            f'b{i}',
            f'Book {i:02d}',
            genres=[genres[i % 3]],
            custom_order=i,
            year=1990 + i,
            rating=float(i % 5),
            creator=f'Author {chr(65 + i % 4)}',
            days_ago=i,
        )
        for i in range(1, 13)
    ]
