import os
import tempfile
import time

# Configure the service before anything from storefront is imported
_TMP = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'storefront.db')}"
os.environ["ASSETS_DIR"] = os.path.join(_TMP, "assets")
os.environ["UPLOADS_DIR"] = os.path.join(_TMP, "uploads")
os.environ["CLERK_JWT_KEY"] = "storefront-test-signing-secret-0123456789abcdef"
os.environ["CLERK_JWT_ALG"] = "HS256"
os.environ["CLERK_AUTHORIZED_PARTIES"] = ""
os.environ["STRIPE_SECRET_KEY"] = "sk_test_storefront"
os.environ["STRIPE_PUBLISHABLE_KEY"] = "pk_test_storefront"
os.environ["RUN_MIGRATIONS"] = "false"
os.makedirs(os.environ["ASSETS_DIR"], exist_ok=True)

import jwt
import pytest
from fastapi.testclient import TestClient

from storefront.main import app
from storefront.core_settings import get_settings
from storefront.domain.models import Base, User, Article, Order, OrderItem
from storefront.infrastructure.db import engine, SessionLocal

@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield

@pytest.fixture
def settings():
    return get_settings()

@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()

def make_token(sub: str, expires_in: int = 300, **claims) -> str:
    now = int(time.time())
    payload = {"sub": sub, "iat": now, "exp": now + expires_in, **claims}
    return jwt.encode(payload, os.environ["CLERK_JWT_KEY"], algorithm="HS256")

@pytest.fixture
def token_for():
    return make_token

@pytest.fixture
def user(db):
    obj = User(clerk_user_id="user_2abc", email="buyer@example.com")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {make_token(user.clerk_user_id)}"}

@pytest.fixture
def make_article(db):
    def _make(title="Lamp", price=1999, image_url=None, glb_url=None, description=None):
        obj = Article(title=title, price=price, image_url=image_url, glb_url=glb_url, description=description)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj
    return _make

@pytest.fixture
def make_order(db):
    def _make(user_id, items=()):
        order = Order(user_id=user_id)
        db.add(order)
        db.flush()
        for article_id, quantity in items:
            db.add(OrderItem(order_id=order.id, article_id=article_id, quantity=quantity))
        db.commit()
        db.refresh(order)
        return order
    return _make
