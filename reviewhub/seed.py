import logging
import os

import bcrypt

from reviewhub.db.crud import CategoryCRUD, UserCRUD
from reviewhub.db.models import UserRole
from reviewhub.db.session import SessionLocal
from reviewhub.services import categories, profiles

logger = logging.getLogger(__name__)

STARTER_CATEGORIES = ["Electronics", "Home & Kitchen", "Books", "Gaming", "Fitness"]


def seed():
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("SEED_ADMIN_PASSWORD", "change-me-admin")
    with SessionLocal() as db:
        if UserCRUD.get_by_email(db, email) is None:
            profiles.register_user(
                db,
                name="Admin",
                email=email,
                password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode(),
                role=UserRole.ADMIN,
            )
            logger.info(f"Seeded admin account {email}")
        for name in STARTER_CATEGORIES:
            if CategoryCRUD.get_by_name_ci(db, name) is None:
                categories.create_category(db, name)
        db.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
