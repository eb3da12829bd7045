import os
import sys
import pytest

# Ensure the backend root (containing the `tictactoe` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tictactoe import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    HISTORY_PAGE_SIZE = 10
    HISTORY_MAX_PAGE_SIZE = 100
    STATS_IN_DATABASE = True
    STRICT_DATA_INTEGRITY = False
    CORS_ORIGINS = []
    LOG_LEVEL = 'DEBUG'


PASSWORD = 'Secret1!pw'


def register(client, username='alice', email=None, password=PASSWORD):
    return client.post('/api/auth/register', json={
        'username': username,
        'email': email or f'{username}@example.com',
        'password': password,
    })


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import tictactoe.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def auth_client(client):
    res = register(client)
    assert res.status_code == 201
    return client


@pytest.fixture()
def user(flask_app):
    from tictactoe.models import User
    u = User(username='bob', email='bob@example.com')
    u.set_password(PASSWORD)
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture()
def sio_client(flask_app, auth_client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=auth_client,
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def anon_sio_client(flask_app, client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=client,
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
