"""Shared test fixtures and configuration for pytest."""
import pytest
from unittest.mock import Mock, patch
from typing import Dict, List
import json
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from asian_drama_board.models.base import Base
from asian_drama_board.models.rating import Rating
from asian_drama_board.models.user import User
from asian_drama_board.services.tmdb_client import TmdbClient


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine shared by all sessions of a test."""
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
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)


@pytest.fixture(scope="function")
def test_db_session(test_session_factory):
    """Create a database session for testing."""
    session = test_session_factory()
    yield session
    session.close()


@pytest.fixture
def patched_session_local(test_session_factory):
    """Point the interaction service at the test database."""
    with patch(
        'asian_drama_board.services.interaction_service.SessionLocal',
        test_session_factory
    ):
        yield test_session_factory


# ===== Sample Data Fixtures =====

@pytest.fixture
def guest_user(test_db_session) -> User:
    """The guest user row."""
    user = User(username='guest_user')
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture
def other_user(test_db_session) -> User:
    """A second user, for community statistics."""
    user = User(username='another_fan')
    test_db_session.add(user)
    test_db_session.commit()
    test_db_session.refresh(user)
    return user


@pytest.fixture
def sample_rating_records(test_db_session, guest_user, other_user) -> List[Rating]:
    """Ratings from two users across three dramas."""
    records = [
        Rating(user_id=guest_user.id, tmdb_id=94796, score=9, has_seen=True, is_favorite=True),
        Rating(user_id=guest_user.id, tmdb_id=67915, score=6, has_seen=True, is_favorite=False),
        Rating(user_id=guest_user.id, tmdb_id=82505, score=0, has_seen=False, is_favorite=True),
        Rating(user_id=other_user.id, tmdb_id=94796, score=7, has_seen=True, is_favorite=False),
        Rating(user_id=other_user.id, tmdb_id=67915, score=0, has_seen=True, is_favorite=False),
    ]

    for record in records:
        test_db_session.add(record)
    test_db_session.commit()

    return records


@pytest.fixture
def sample_drama() -> Dict:
    """A formatted drama dict as produced by TmdbClient.discover."""
    return {
        'id': 94796,
        'name': 'Crash Landing on You',
        'poster_path': 'https://image.tmdb.org/t/p/w500/poster.jpg',
        'backdrop_path': None,
        'overview': 'A paragliding mishap drops a South Korean heiress in North Korea.',
        'first_air_date': '2019-12-14',
        'vote_average': 8.8,
        'popularity': 250.5,
        'origin_country': ['KR'],
        'characters': [
            {'id': 1, 'name': 'Yoon Se-ri', 'actor_name': 'Son Ye-jin', 'profile_path': None},
            {'id': 2, 'name': 'Ri Jeong-hyeok', 'actor_name': 'Hyun Bin', 'profile_path': None},
        ],
        'watch_providers': ['Netflix'],
    }


@pytest.fixture
def sample_dramas(sample_drama) -> List[Dict]:
    """Three dramas with different dates, popularity and cast."""
    return [
        sample_drama,
        {
            'id': 67915,
            'name': 'Goblin',
            'poster_path': 'https://image.tmdb.org/t/p/w500/goblin.jpg',
            'first_air_date': '2016-12-02',
            'popularity': 180.2,
            'characters': [
                {'id': 3, 'name': 'Kim Shin', 'actor_name': 'Gong Yoo', 'profile_path': None},
            ],
            'watch_providers': ['Viki'],
        },
        {
            'id': 110309,
            'name': 'Alice in Borderland',
            'poster_path': 'https://image.tmdb.org/t/p/w500/alice.jpg',
            'first_air_date': '2020-12-10',
            'popularity': 450.8,
            'characters': [
                {'id': 101, 'name': 'Ryohei Arisu', 'actor_name': 'Kento Yamazaki', 'profile_path': None},
            ],
            'watch_providers': [],
        },
    ]


@pytest.fixture
def sample_discover_response() -> Dict:
    """Raw /discover/tv payload."""
    return {
        'page': 1,
        'results': [
            {
                'id': 94796,
                'name': 'Crash Landing on You',
                'poster_path': '/poster.jpg',
                'backdrop_path': '/backdrop.jpg',
                'overview': 'A paragliding mishap.',
                'first_air_date': '2019-12-14',
                'vote_average': 8.8,
                'popularity': 250.5,
                'origin_country': ['KR'],
            },
            {
                'id': 67915,
                'name': 'Goblin',
                'poster_path': None,
                'overview': 'A guardian of souls.',
                'first_air_date': '2016-12-02',
                'vote_average': 8.7,
                'popularity': 180.2,
                'origin_country': ['KR'],
            },
        ],
        'total_pages': 1,
        'total_results': 2,
    }


@pytest.fixture
def sample_credits_response() -> Dict:
    """Raw /tv/{id}/credits payload."""
    return {
        'id': 94796,
        'cast': [
            {'id': 1, 'name': 'Son Ye-jin', 'character': 'Yoon Se-ri', 'profile_path': '/son.jpg'},
            {'id': 2, 'name': 'Hyun Bin', 'character': 'Ri Jeong-hyeok', 'profile_path': None},
            {'id': 3, 'name': 'Seo Ji-hye', 'character': 'Seo Dan', 'profile_path': None},
        ],
    }


@pytest.fixture
def sample_providers_response() -> Dict:
    """Raw /tv/{id}/watch/providers payload."""
    return {
        'id': 94796,
        'results': {
            'AR': {'flatrate': [{'provider_name': 'Netflix'}, {'provider_name': 'Viki'}]},
            'US': {'flatrate': [{'provider_name': 'Hulu'}]},
        },
    }


# ===== Mock Fixtures =====

@pytest.fixture
def mock_tmdb_client(sample_dramas):
    """TmdbClient double returning the sample dramas."""
    mock = Mock(spec=TmdbClient)
    mock.use_mock = False
    mock.discover.return_value = sample_dramas
    mock.get_dramas.side_effect = lambda ids: [d for i in ids for d in sample_dramas if d['id'] == i]
    mock.get_drama.side_effect = lambda i: next((d for d in sample_dramas if d['id'] == i), None)
    return mock


@pytest.fixture
def offline_tmdb_client():
    """TmdbClient with no API key, serving the built-in catalogue."""
    return TmdbClient(api_key="", base_url="https://tmdb.test/3", watch_region="AR")


@pytest.fixture
def tmdb_client():
    """TmdbClient pointed at a fake base URL."""
    return TmdbClient(
        api_key="test-key",
        base_url="https://tmdb.test/3",
        image_base_url="https://img.tmdb.test/t/p",
        watch_region="AR"
    )


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_config(monkeypatch):
    """Mock configuration values."""
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
    monkeypatch.setenv('TMDB_API_KEY', 'test-key')
    monkeypatch.setenv('TMDB_BASE_URL', 'https://tmdb.test/3')
    monkeypatch.setenv('WATCH_REGION', 'AR')
    monkeypatch.setenv('GUEST_USERNAME', 'guest_user')


@pytest.fixture
def mock_local_settings(tmp_path):
    """Write a local.settings.json into tmp_path."""
    settings = {
        "Values": {
            "DATABASE_URL": "sqlite:///from_settings.db",
            "TMDB_API_KEY": "settings-key",
        }
    }

    settings_file = tmp_path / "local.settings.json"
    with open(settings_file, 'w') as f:
        json.dump(settings, f)

    yield settings_file


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    return mock_req


# ===== Repository Fixtures =====

@pytest.fixture
def rating_repository(test_db_session):
    """Create RatingRepository with test database session."""
    from asian_drama_board.repos import RatingRepository
    return RatingRepository(test_db_session)


@pytest.fixture
def user_repository(test_db_session):
    """Create UserRepository with test database session."""
    from asian_drama_board.repos import UserRepository
    return UserRepository(test_db_session)
