#!/usr/bin/env python3
"""
Initialize database with tables and default expense categories
"""
import logging

from app.core.database import Base, SessionLocal, engine
from app.models import Category, CategoryTypeEnum

logger = logging.getLogger("init_db")

DEFAULT_EXPENSE_CATEGORIES = [
    "Food",
    "Transport",
    "Housing",
    "Health",
    "Entertainment",
    "Other",
]


def init_database():
    """Create all tables and seed shared expense categories (idempotent)"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        existing = {
            name for (name,) in session.query(Category.name).filter(Category.is_default == True).all()
        }
        added = 0
        for name in DEFAULT_EXPENSE_CATEGORIES:
            if name in existing:
                continue
            session.add(Category(name=name, type=CategoryTypeEnum.EXPENSE, is_default=True, is_active=True))
            added += 1
        session.commit()
        logger.info(f"Default categories seeded: +{added}")
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_database()
