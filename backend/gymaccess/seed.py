"""Seed the badge catalog and, optionally, a first admin account.

Usage:
    python -m gymaccess.seed
    python -m gymaccess.seed --admin-email admin@gym.local --admin-password secret123
"""

import argparse
import logging

from gymaccess.db.base import Base
from gymaccess.db.session import SessionLocal, engine
from gymaccess.models.staff import Staff, StaffRole
from gymaccess.services.badge_catalog import seed_badges
from gymaccess.services.staff_service import create_staff

logger = logging.getLogger("gymaccess.seed")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed badges and an initial admin")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    parser.add_argument("--admin-first-name", default="Gym")
    parser.add_argument("--admin-last-name", default="Admin")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        created = seed_badges(db)
        logger.info(f"{created} badges created")

        if args.admin_email and args.admin_password:
            if db.query(Staff.id).filter(Staff.email == args.admin_email.lower()).first():
                logger.info(f"Admin {args.admin_email} already exists")
            else:
                admin = create_staff(
                    db,
                    first_name=args.admin_first_name,
                    last_name=args.admin_last_name,
                    email=args.admin_email,
                    password=args.admin_password,
                    role=StaffRole.ADMIN,
                )
                logger.info(f"Admin created: {admin.email} (ID: {admin.id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
