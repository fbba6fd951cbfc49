import itertools
import os
import tempfile

# Settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RESEND_API_KEY"] = ""
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="marketplace-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import Product, ProductStatus, User
from app.services.notifications import product_events

PASSWORD = "Secret123!"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # auth cookie is marked secure
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(verified=True, password=PASSWORD, **fields):
        n = next(counter)
        user = User(
            name=fields.pop("name", f"User {n}"),
            username=fields.pop("username", f"user{n}"),
            email=fields.pop("email", f"user{n}@example.com"),
            phone=fields.pop("phone", "07501234567"),
            password=get_password_hash(password),
            is_verified=verified,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(owner, **fields):
        values = {
            "en_name": "Desk lamp",
            "ar_name": "مصباح مكتب",
            "ckb_name": "چرای مێز",
            "en_desc": "Barely used",
            "ar_desc": "مستعمل قليلا",
            "ckb_desc": "کەم بەکارهاتووە",
            "price": "25.00",
            "status": ProductStatus.AVAILABLE,
        }
        values.update(fields)
        product = Product(user_id=owner.id, **values)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={"userId": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def upload_path():
    """Filesystem path of a /uploads/... URL."""
    def _path(url):
        return os.path.join(settings.UPLOAD_DIR, url.replace("/uploads/", "", 1))

    return _path


@pytest.fixture(autouse=True)
def product_broadcasts(monkeypatch):
    """Socket.io events emitted during the test, as (event, payload) pairs."""
    sent = []

    async def fake_emit(event, data, namespace=None, **kwargs):
        sent.append((event, data))

    monkeypatch.setattr(product_events.sio, "emit", fake_emit)
    return sent
