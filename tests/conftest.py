import os
import tempfile

# must be set before storefront is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="storefront-uploads-")
os.environ.pop("SMTP_HOST", None)
os.environ.pop("GOOGLE_CLIENT_ID", None)
os.environ.pop("GOOGLE_CLIENT_SECRET", None)
os.environ.pop("CLOUDINARY_CLOUD_NAME", None)

import pytest
from fastapi.testclient import TestClient

from storefront.auth import create_token, hash_password
from storefront.db import Base, SessionLocal, engine
from storefront.main import app
from storefront.models import ROLE_ADMIN, ROLE_CUSTOMER, Product, User


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(email="jane@example.com", password="Secret123", role=ROLE_CUSTOMER, name="Jane Doe"):
        user = User(name=name, email=email, password_hash=hash_password(password), role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", password="Admin@123", role=ROLE_ADMIN, name="Admin User")


@pytest.fixture
def customer_headers(customer):
    return {"Authorization": f"Bearer {create_token(customer)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_token(admin)}"}


@pytest.fixture
def make_product(db):
    def _make(**kw):
        data = {
            "title": "Classic Cotton T-Shirt",
            "description": "Soft everyday tee",
            "price": 29.99,
            "stock": 10,
            "category": "T-Shirts",
            "size_options": ["S", "M", "L"],
            "color_options": ["White", "Black"],
            "feature": [],
            "images": ["https://img.example.com/tee.jpg"],
        }
        data.update(kw)
        product = Product(**data)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make
