# backend/populate_db.py
"""Seed the catalog with sample products and make sure an admin account exists.

Run from the backend folder: ``python populate_db.py``.
"""
import os

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from models.product import Product
from models.users import User
from services.catalog import create_product
from utils.hashing import get_password_hash

SAMPLE_PRODUCTS = [
    {"name": "Latest Smartphone", "price": 799.99, "list_price": 899.99, "category": "Electronics", "stock": 25,
     "description": "The latest smartphone with advanced features and high-performance specs."},
    {"name": "Wireless Headphones", "price": 149.99, "category": "Electronics", "stock": 60,
     "description": "Premium wireless headphones with noise cancellation and long battery life."},
    {"name": "Smart Watch", "price": 299.99, "category": "Electronics", "stock": 40,
     "description": "Feature-packed smartwatch with health monitoring and app connectivity."},
    {"name": "Laptop Pro", "price": 1299.99, "list_price": 1499.99, "category": "Electronics", "stock": 10,
     "description": "High-performance laptop for professionals and gamers."},
    {"name": "Designer T-Shirt", "price": 49.99, "category": "Fashion", "stock": 120,
     "description": "Premium cotton t-shirt with a modern design."},
    {"name": "Running Shoes", "price": 89.99, "category": "Fashion", "stock": 75.6,
     "description": "Lightweight running shoes with responsive cushioning."},
    {"name": "Ceramic Vase", "price": 34.5, "category": "Home", "stock": 30,
     "description": "Hand-glazed ceramic vase for fresh or dried flowers."},
]


def seed(db: Session, admin_email: str = None, admin_password: str = None) -> dict:
    """Insert sample data that is missing. Safe to run repeatedly."""
    created = {"products": 0, "admin": False}

    if admin_email and admin_password:
        email = admin_email.strip().lower()
        if not db.query(User).filter(User.email == email).first():
            db.add(User(email=email, password_hash=get_password_hash(admin_password), role="admin",
                        first_name="Store", last_name="Admin"))
            db.commit()
            created["admin"] = True

    existing = {name for (name,) in db.query(Product.name).all()}
    for data in SAMPLE_PRODUCTS:
        if data["name"] in existing:
            continue
        create_product(db, data)
        created["products"] += 1

    return created


if __name__ == "__main__":
    load_dotenv()
    init_db()
    session = SessionLocal()
    try:
        result = seed(session, os.getenv("ADMIN_EMAIL"), os.getenv("ADMIN_PASSWORD"))
    finally:
        session.close()
    print(f"Seeded {result['products']} products" + (", created admin account" if result["admin"] else ""))
