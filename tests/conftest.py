"""Pytest configuration and fixtures for the meter application tests."""
import base64
import os
import tempfile
import pytest
from backend.app import create_app
from backend.models import db
from backend.repositories.application_repository import ApplicationRepository
from backend.services.image_store import ImageStore


PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'meter-test-image'


def encode_image(data=PNG_BYTES, media_type='image/png'):
    """Base64-encode image bytes, with a data-URL header unless media_type is None."""
    encoded = base64.b64encode(data).decode('ascii')
    if media_type is None:
        return encoded
    return f'data:{media_type};base64,{encoded}'


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / 'uploads'


@pytest.fixture
def app(uploads_dir):
    """Create and configure a test app instance."""
    # Create temporary database for testing
    db_fd, db_path = tempfile.mkstemp()

    test_config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'UPLOADS_DIR': str(uploads_dir),
        'LOG_DIR': None,
    }

    app = create_app(test_config)

    with app.app_context():
        db.create_all()

    yield app

    # Cleanup
    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def app_ctx(app):
    """Push an application context for service-level tests."""
    with app.app_context():
        yield app


@pytest.fixture
def repository(app_ctx):
    return ApplicationRepository(db.session)


@pytest.fixture
def image_store(app_ctx):
    return app_ctx.extensions['image_store']


@pytest.fixture
def standalone_store(uploads_dir):
    """An image store not tied to a Flask app."""
    return ImageStore(str(uploads_dir))


@pytest.fixture
def image_b64():
    """Factory for base64 image payloads."""
    return encode_image
