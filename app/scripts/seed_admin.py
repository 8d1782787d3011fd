"""
Create the first administrator directly in storage (registration only creates
'user' accounts). Run from project root:
  python -m app.scripts.seed_admin --password your-secure-password
  python -m app.scripts.seed_admin --email ops@example.com --name "Ops" --password ...
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import create_db_engine, create_session_factory
from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from app.services.users import EmailAlreadyRegisteredError, create_user

logger = logging.getLogger(__name__)


def seed_admin(db: Session, email: str, name: str, password: str, rounds: int = 10) -> int:
    """Insert an admin user; return a process exit code (0 created, 1 rejected)."""
    email = email.strip()
    name = name.strip()
    if not email or len(email) > EMAIL_MAX_LEN:
        logger.error("Invalid email length.")
        return 1
    if not name or len(name) > NAME_MAX_LEN:
        logger.error("Invalid name length.")
        return 1
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        logger.error("Password must be %s-%s characters.", PASSWORD_MIN_LEN, PASSWORD_MAX_LEN)
        return 1

    try:
        create_user(
            db,
            email=email,
            name=name,
            password_hash=hash_password(password, rounds=rounds),
            role="admin",
        )
    except EmailAlreadyRegisteredError:
        logger.error("User '%s' already exists.", email)
        return 1
    logger.info("Created admin '%s'.", email)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed an admin user for the complaint desk.")
    parser.add_argument("--email", default="admin@example.com", help="Admin email")
    parser.add_argument("--name", default="System Administrator", help="Display name")
    parser.add_argument(
        "--password",
        required=True,
        help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    settings = get_settings()
    db = create_session_factory(create_db_engine(settings.DATABASE_URL))()
    try:
        return seed_admin(db, args.email, args.name, args.password, rounds=settings.BCRYPT_ROUNDS)
    except Exception as e:
        logger.exception("Seeding admin failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
