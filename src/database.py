"""Database configuration, session management and startup seeding."""

import os
import logging
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv

from src.models import Base, User, UserRole

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

# Get database configuration from environment
PATH_DATABASE = os.getenv("PATH_DATABASE")
NAME_DB = os.getenv("NAME_DB")

if not PATH_DATABASE or not NAME_DB:
    raise ValueError("PATH_DATABASE and NAME_DB must be set in .env file")

# Ensure database directory exists
db_dir = Path(PATH_DATABASE)
db_dir.mkdir(parents=True, exist_ok=True)

# Create database URL
database_path = db_dir / NAME_DB
DATABASE_URL = f"sqlite:///{database_path}"

logger.info(f"Database URL: {DATABASE_URL}")

# Create engine
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False}  # Needed for SQLite
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Demo accounts created when SEED_DEMO_USERS is enabled
DEMO_USERS = [
    {
        "username": "drjohn",
        "full_name": "Dr. John Smith",
        "email": "drjohn@medblog.org",
        "role": UserRole.DOCTOR,
    },
    {
        "username": "patient1",
        "full_name": "Jane Doe",
        "email": "jane@medblog.org",
        "role": UserRole.PATIENT,
    },
]


def init_db():
    """Initialize the database by creating all tables."""
    logger.info("Initializing database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def seed_categories():
    """Insert the fixed blog categories that are not present yet."""
    # Import here to avoid circular import
    from src.repository import CategoryRepository

    db = SessionLocal()
    try:
        created = CategoryRepository(db).seed_defaults()
        logger.info(f"Category seed completed: {created} created")
    finally:
        db.close()


def seed_demo_users():
    """
    Create the demo doctor and patient accounts on startup.

    Only runs when SEED_DEMO_USERS is "true" and DEMO_USER_PASSWORD is set.
    Accounts that already exist are left untouched.
    """
    # Import here to avoid circular import
    from src.auth import hash_password

    if os.getenv("SEED_DEMO_USERS", "false").lower() != "true":
        logger.debug("SEED_DEMO_USERS disabled, skipping demo user seed")
        return

    demo_password = os.getenv("DEMO_USER_PASSWORD", "")
    if not demo_password:
        logger.warning("DEMO_USER_PASSWORD not configured, skipping demo user seed")
        return

    db = SessionLocal()
    try:
        for demo in DEMO_USERS:
            existing_user = db.query(User).filter(User.username == demo["username"]).first()
            if existing_user:
                logger.info(f"Demo user already exists: {demo['username']}")
                continue

            db.add(User(password_hash=hash_password(demo_password), **demo))
            logger.info(f"Demo user created: {demo['username']}")

        db.commit()

    except Exception as e:
        logger.error(f"Failed to seed demo users: {e}")
        db.rollback()
    finally:
        db.close()


def get_db():
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
