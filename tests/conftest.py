from datetime import date

import pytest

from rent_ledger import create_app
from rent_ledger.extensions import db
from rent_ledger.models import User
from config import TestConfig

TODAY = date(2025, 3, 15)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    app.config["LEDGER_TODAY"] = TODAY
    with app.app_context():
        db.create_all()
        user = User(email="tester@example.com")
        user.set_password("password123")
        db.session.add(user)
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(app, client):
    response = client.post(
        "/auth/login",
        data={"email": "tester@example.com", "password": "password123"},
    )
    assert response.status_code == 200
    return client
