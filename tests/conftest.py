import os
import tempfile
from typing import Optional
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix='gso-library-tests-')) / 'test.db'
TEST_DB_URL = os.getenv('TEST_DB_URL', f'sqlite:///{TEST_DB_PATH}')
os.environ['DATABASE_URL'] = TEST_DB_URL
os.environ['JWT_SECRET_KEY'] = 'test-signing-key-0123456789abcdefghijklmnop'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ.pop('SEED_USERS_FILE', None)

from fastapi.testclient import TestClient
from sqlmodel import Session

from gso_library.core.config import settings
from gso_library.db.init_db import init_db
from gso_library.db.session import engine
from gso_library.main import app
from gso_library.services.user_service import create_user, get_user_by_username

settings.DATABASE_URL = TEST_DB_URL
settings.SEED_USERS_FILE = None

SEED_ACCOUNTS = {
    'testadmin': ('Admin123!', ['Admin']),
    'testeditor': ('Editor123!', ['Editor']),
    'testuser': ('User1234!', ['User']),
}


@pytest.fixture(autouse=True)
def _reset_database():
    init_db(drop_all=True)
    with Session(engine) as session:
        for username, (password, roles) in SEED_ACCOUNTS.items():
            create_user(session, username, f'{username}@gso-library.org', password, roles=roles)
    yield


@pytest.fixture
def session():
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, username: str, password: Optional[str] = None) -> dict:
    if password is None:
        password = SEED_ACCOUNTS[username][0]
    response = client.post('/api/v1/auth/login', json={'username': username, 'password': password})
    assert response.status_code == 200, response.text
    return response.json()


def bearer(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(client) -> dict:
    return bearer(login(client, 'testadmin')['token'])


@pytest.fixture
def user_headers(client) -> dict:
    return bearer(login(client, 'testuser')['token'])


def user_id(session: Session, username: str) -> str:
    return get_user_by_username(session, username).id
