from storefront.auth import verify_password
from storefront.models import Product, User
from tools import seed


def test_seed_creates_admin_and_products(db, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "Boss@Example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "Boss@1234")

    seed.seed()
    seed.seed()  # second run is a no-op

    admin = db.query(User).one()
    assert admin.email == "boss@example.com"
    assert admin.is_admin
    assert verify_password("Boss@1234", admin.password_hash)
    assert db.query(Product).count() == len(seed.SAMPLE_PRODUCTS)
    assert all(p.images for p in db.query(Product).all())
