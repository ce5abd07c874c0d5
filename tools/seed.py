from __future__ import annotations

import argparse
import logging
import os

from storefront.auth import hash_password
from storefront.db import Base, SessionLocal, engine
from storefront.models import PROVIDER_LOCAL, ROLE_ADMIN, Product, User

log = logging.getLogger("seed")

SAMPLE_PRODUCTS = [
    {
        "title": "Classic Cotton T-Shirt",
        "description": "Premium quality 100% cotton t-shirt with comfortable fit. Perfect for everyday wear.",
        "price": 29.99,
        "stock": 50,
        "category": "T-Shirts",
        "size_options": ["S", "M", "L", "XL", "XXL"],
        "color_options": ["White", "Black", "Navy", "Gray"],
        "feature": ["Trending"],
        "images": [
            "https://images.unsplash.com/photo-1521572163474-6864f9cf17ab?w=800",
            "https://images.unsplash.com/photo-1583743814966-8936f5b7be1a?w=800",
        ],
    },
    {
        "title": "Slim Fit Denim Jeans",
        "description": "Modern slim fit jeans crafted from premium stretch denim with a comfortable waistband.",
        "price": 79.99,
        "stock": 35,
        "category": "Jeans",
        "size_options": ["28", "30", "32", "34", "36", "38"],
        "color_options": ["Blue", "Black", "Light Blue", "Dark Blue"],
        "feature": ["Top Rated"],
        "images": [
            "https://images.unsplash.com/photo-1542272604-787c3835535d?w=800",
            "https://images.unsplash.com/photo-1475178626620-a4d074967452?w=800",
        ],
    },
    {
        "title": "Hooded Sweatshirt",
        "description": "Cozy pullover hoodie with adjustable drawstring hood, kangaroo pocket and ribbed cuffs.",
        "price": 49.99,
        "stock": 40,
        "category": "Hoodies",
        "size_options": ["S", "M", "L", "XL", "XXL"],
        "color_options": ["Black", "Gray", "Navy", "Burgundy", "Olive"],
        "feature": ["New Collection", "Trending"],
        "images": [
            "https://images.unsplash.com/photo-1556821840-3a63f95609a7?w=800",
            "https://images.unsplash.com/photo-1620799140408-edc6dcb6d633?w=800",
        ],
    },
    {
        "title": "Casual Linen Shirt",
        "description": "Lightweight linen shirt with button-down collar and chest pocket for warm weather.",
        "price": 59.99,
        "stock": 30,
        "category": "Shirts",
        "size_options": ["S", "M", "L", "XL"],
        "color_options": ["White", "Beige", "Light Blue", "Sage Green"],
        "feature": ["Sales"],
        "images": [
            "https://images.unsplash.com/photo-1596755094514-f87e34085b2c?w=800",
            "https://images.unsplash.com/photo-1602810318383-e386cc2a3ccf?w=800",
        ],
    },
    {
        "title": "Athletic Joggers",
        "description": "Jogger pants with elastic drawstring waistband, zippered pockets and tapered fit.",
        "price": 44.99,
        "stock": 45,
        "category": "Pants",
        "size_options": ["S", "M", "L", "XL", "XXL"],
        "color_options": ["Black", "Gray", "Navy", "Charcoal"],
        "feature": ["New Collection"],
        "images": [
            "https://images.unsplash.com/photo-1624378439575-d8705ad7ae80?w=800",
            "https://images.unsplash.com/photo-1612681621975-76d2a2e8d6a8?w=800",
        ],
    },
]


def seed(reset: bool = False) -> None:
    if reset:
        log.warning("dropping all tables")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    admin_email = os.getenv("ADMIN_EMAIL", "admin@navrasi.com").strip().lower()
    admin_password = os.getenv("ADMIN_PASSWORD", "Admin@123")
    admin_name = os.getenv("ADMIN_NAME", "Admin User")

    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == admin_email).first():
            log.info("admin %s already exists, skipping", admin_email)
        else:
            db.add(
                User(
                    name=admin_name,
                    email=admin_email,
                    password_hash=hash_password(admin_password),
                    role=ROLE_ADMIN,
                    auth_provider=PROVIDER_LOCAL,
                )
            )
            db.commit()
            log.info("admin user created: %s", admin_email)

        if db.query(Product).count() > 0:
            log.info("products already exist, skipping samples")
        else:
            for data in SAMPLE_PRODUCTS:
                db.add(Product(**data))
            db.commit()
            log.info("%d sample products created", len(SAMPLE_PRODUCTS))
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the storefront database with an admin and sample products.")
    parser.add_argument("--reset", action="store_true", help="drop and recreate every table first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    seed(reset=args.reset)


if __name__ == "__main__":
    main()
