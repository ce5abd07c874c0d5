import io
import json
from pathlib import Path

from storefront.config import settings
from storefront.models import Product


def test_list_products_paginates_active_only(client, make_product):
    for i in range(3):
        make_product(title=f"Tee number {i}")
    make_product(title="Hidden item", is_active=False)

    res = client.get("/api/products?limit=2")
    assert res.status_code == 200
    body = res.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
    assert all(p["title"] != "Hidden item" for p in body["data"])


def test_list_products_search_is_case_insensitive(client, make_product):
    make_product(title="Slim Fit Denim Jeans", description="stretch denim")
    make_product(title="Hoodie", description="cozy cotton")

    titles = [p["title"] for p in client.get("/api/products?search=DENIM").json()["data"]]
    assert titles == ["Slim Fit Denim Jeans"]

    titles = [p["title"] for p in client.get("/api/products?search=cozy").json()["data"]]
    assert titles == ["Hoodie"]


def test_list_products_filters(client, make_product):
    make_product(title="Cheap tee", price=10, category="T-Shirts", feature=["Sales"])
    make_product(title="Mid jeans", price=50, category="Jeans", feature=["Trending", "Sales"])
    make_product(title="Fancy coat", price=300, category="Coats")

    def titles(qs):
        return sorted(p["title"] for p in client.get(f"/api/products?{qs}").json()["data"])

    assert titles("category=Jeans") == ["Mid jeans"]
    assert titles("feature=Sales") == ["Cheap tee", "Mid jeans"]
    assert titles("minPrice=20&maxPrice=100") == ["Mid jeans"]


def test_list_products_sorting(client, make_product):
    make_product(title="Bbb", price=20)
    make_product(title="Aaa", price=30)
    make_product(title="Ccc", price=10)

    res = client.get("/api/products?sortBy=price&sortOrder=ASC")
    assert [p["price"] for p in res.json()["data"]] == [10, 20, 30]

    res = client.get("/api/products?sortBy=title&sortOrder=DESC")
    assert [p["title"] for p in res.json()["data"]] == ["Ccc", "Bbb", "Aaa"]

    # unknown sort columns fall back to creation time
    assert client.get("/api/products?sortBy=password").status_code == 200


def test_get_product(client, make_product):
    product = make_product()
    res = client.get(f"/api/products/{product.id}")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["title"] == product.title
    assert data["sizeOptions"] == ["S", "M", "L"]


def test_get_inactive_product_is_404(client, make_product):
    product = make_product(is_active=False)
    res = client.get(f"/api/products/{product.id}")
    assert res.status_code == 404
    assert res.json()["message"] == "Product not found"


def test_categories(client, make_product):
    make_product(category="Jeans")
    make_product(category="T-Shirts")
    make_product(category="T-Shirts")
    make_product(category="Retired", is_active=False)
    assert client.get("/api/products/categories").json()["data"] == ["Jeans", "T-Shirts"]


def test_products_by_feature(client, make_product):
    make_product(title="Trend A", feature=["Trending"])
    make_product(title="Top B", feature=["Top Rated"])

    res = client.get("/api/products/feature/Trending")
    assert res.status_code == 200
    assert [p["title"] for p in res.json()["data"]] == ["Trend A"]

    res = client.get("/api/products/feature/New Collection")
    assert res.json()["data"] == []


def test_products_by_unknown_feature(client):
    res = client.get("/api/products/feature/Clearance")
    assert res.status_code == 400
    assert "Valid features are" in res.json()["message"]


def test_create_product_requires_admin(client, customer_headers):
    res = client.post("/api/products", data={"title": "Tee"}, headers=customer_headers)
    assert res.status_code == 403
    assert res.json()["message"] == "Admin access required"


def test_create_product(client, admin_headers, db):
    res = client.post(
        "/api/products",
        data={
            "title": "Linen Shirt",
            "description": "Breathable",
            "price": "59.99",
            "stock": "30",
            "sizeOptions": '["S", "M"]',
            "colorOptions": "White, Beige",
            "feature": '["Sales"]',
        },
        files=[("images", ("front.png", io.BytesIO(b"\x89PNG fake"), "image/png"))],
        headers=admin_headers,
    )
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["category"] == "General"
    assert data["sizeOptions"] == ["S", "M"]
    assert data["colorOptions"] == ["White", "Beige"]
    assert data["feature"] == ["Sales"]
    assert len(data["images"]) == 1 and data["images"][0].startswith("/uploads/")

    stored = Path(settings.uploads_dir) / data["images"][0].rsplit("/", 1)[1]
    assert stored.read_bytes() == b"\x89PNG fake"


def test_create_product_validation(client, admin_headers):
    res = client.post(
        "/api/products",
        data={"title": "ab", "description": "x", "price": "-1", "stock": "2", "feature": '["Clearance"]'},
        headers=admin_headers,
    )
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert fields == {"title", "price", "feature"}


def test_create_product_rejects_non_images(client, admin_headers):
    res = client.post(
        "/api/products",
        data={"title": "Linen Shirt", "description": "Breathable", "price": "5", "stock": "1"},
        files=[("images", ("notes.txt", io.BytesIO(b"hello"), "text/plain"))],
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"].startswith("File upload error")


def test_update_product_partial(client, admin_headers, make_product, db):
    product = make_product(price=20, stock=5)
    res = client.put(f"/api/products/{product.id}", data={"price": "25.5"}, headers=admin_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["price"] == 25.5
    assert data["stock"] == 5
    assert data["images"] == ["https://img.example.com/tee.jpg"]


def test_update_product_replaces_images(client, admin_headers, make_product):
    upload = client.post(
        "/api/products",
        data={"title": "Linen Shirt", "description": "Breathable", "price": "5", "stock": "1"},
        files=[("images", ("a.png", io.BytesIO(b"a"), "image/png"))],
        headers=admin_headers,
    ).json()["data"]
    old_url = upload["images"][0]
    old_path = Path(settings.uploads_dir) / old_url.rsplit("/", 1)[1]
    assert old_path.exists()

    res = client.put(
        f"/api/products/{upload['id']}",
        data={"existingImages": json.dumps([])},
        files=[("images", ("b.png", io.BytesIO(b"b"), "image/png"))],
        headers=admin_headers,
    )
    images = res.json()["data"]["images"]
    assert len(images) == 1 and images[0] != old_url
    assert not old_path.exists()


def test_update_missing_product(client, admin_headers):
    res = client.put("/api/products/nope", data={"price": "1"}, headers=admin_headers)
    assert res.status_code == 404


def test_delete_product_soft_deletes(client, admin_headers, make_product, db):
    product = make_product()
    res = client.delete(f"/api/products/{product.id}", headers=admin_headers)
    assert res.status_code == 200

    db.expire_all()
    assert db.get(Product, product.id).is_active is False
    assert client.get(f"/api/products/{product.id}").status_code == 404


def test_create_product_rejects_too_many_images(client, admin_headers, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_images", 2)
    files = [("images", (f"{i}.png", io.BytesIO(b"x"), "image/png")) for i in range(3)]
    res = client.post(
        "/api/products",
        data={"title": "Linen Shirt", "description": "Breathable", "price": "5", "stock": "1"},
        files=files,
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "File upload error: at most 2 images are allowed"


def test_update_keeps_only_known_existing_images(client, admin_headers, make_product):
    product = make_product(images=["https://img.example.com/a.jpg", "https://img.example.com/b.jpg"])
    res = client.put(
        f"/api/products/{product.id}",
        data={"existingImages": json.dumps(["https://img.example.com/b.jpg", "https://evil.example.com/x.jpg"])},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["images"] == ["https://img.example.com/b.jpg"]


def test_update_counts_kept_images_against_limit(client, admin_headers, make_product, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_images", 2)
    product = make_product(images=["https://img.example.com/a.jpg", "https://img.example.com/b.jpg"])
    res = client.put(
        f"/api/products/{product.id}",
        files=[("images", ("c.png", io.BytesIO(b"c"), "image/png"))],
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"].startswith("File upload error")
