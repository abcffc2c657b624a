from __future__ import annotations

from datetime import datetime

import pytest

from spacebook import create_app
from spacebook.config import Config
from spacebook.extensions import db
from spacebook.models import Booking, BookingStatus, Space, SpaceStatus, UserRole
from spacebook.services import users


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-jwt-secret-0123456789abcdef0123456789"
    SECRET_KEY = "test-secret"
    RATELIMIT_ENABLED = False
    EXPIRY_SWEEPER_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username: str, password: str = "pw123456", role: UserRole = UserRole.student):
        return users.create_user(username, password, role=role)

    return _make_user


@pytest.fixture
def login(client):
    def _login(username: str, password: str = "pw123456") -> dict[str, str]:
        response = client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['token']}"}

    return _login


@pytest.fixture
def admin_headers(make_user, login):
    make_user("admin", role=UserRole.admin)
    return login("admin")


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def student_headers(student, login):
    return login("student")


@pytest.fixture
def make_space(app):
    def _make_space(name: str = "Study Room A", **fields) -> Space:
        space = Space(name=name, status=fields.pop("status", SpaceStatus.available), **fields)
        db.session.add(space)
        db.session.commit()
        return space

    return _make_space


@pytest.fixture
def make_booking(app):
    def _make_booking(
        user_id: int,
        space_id: int,
        start: datetime,
        end: datetime,
        status: BookingStatus = BookingStatus.booked,
    ) -> Booking:
        booking = Booking(user_id=user_id, space_id=space_id, start_time=start, end_time=end, status=status)
        db.session.add(booking)
        db.session.commit()
        return booking

    return _make_booking


@pytest.fixture
def refetch(app):
    def _refetch(model, pk):
        db.session.expire_all()
        return db.session.get(model, pk)

    return _refetch
