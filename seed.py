"""
Schema creation and sample data for the lab database.
"""

import logging

from sqlalchemy.orm import sessionmaker

from auth import ADMIN_ROLE, ADMIN_USERNAME, hash_password
from database import Base
from models import Product, User

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Wireless Headphones",
        "description": "Premium quality wireless headphones with noise cancellation",
        "price": 199.99,
    },
    {
        "name": "Smart Watch",
        "description": "Track your fitness and stay connected with this smart watch",
        "price": 299.99,
    },
    {
        "name": "Bluetooth Speaker",
        "description": "Portable speaker with crystal clear sound and long battery life",
        "price": 89.99,
    },
    {
        "name": "USB-C Cable",
        "description": "High-speed charging and data transfer cable for all your devices",
        "price": 19.99,
    },
]

SAMPLE_USERS = [
    {"username": ADMIN_USERNAME, "password": "admin123", "email": "admin@techstore.com"},
    {"username": "user1", "password": "password123", "email": "user1@techstore.com"},
    {"username": "demo", "password": "demo123", "email": "demo@techstore.com"},
]


def init_db(
    session_factory: sessionmaker, reset: bool = False, seed: bool = True
) -> bool:
    """
    Create the tables and load the sample products and users.

    Seeding only happens into an empty database unless ``reset`` is set,
    in which case every table is dropped first. Returns True if sample
    data was written.
    """
    engine = session_factory.kw["bind"]
    if reset:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    if not seed:
        return False

    db = session_factory()
    try:
        if db.query(User).first() is not None:
            return False
        for item in SAMPLE_PRODUCTS:
            db.add(Product(**item))
        for item in SAMPLE_USERS:
            db.add(
                User(
                    username=item["username"],
                    password=hash_password(item["password"]),
                    email=item["email"],
                    role=ADMIN_ROLE if item["username"] == ADMIN_USERNAME else "user",
                )
            )
        db.commit()
    finally:
        db.close()

    logger.info(
        "Database initialized with %d sample products and %d users",
        len(SAMPLE_PRODUCTS),
        len(SAMPLE_USERS),
    )
    return True
