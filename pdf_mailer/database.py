from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

# Set up logging
logger = logging.getLogger(__name__)

Base = declarative_base()


def normalize_database_url(database_url: str) -> str:
    url = database_url.strip()
    # For Neon.tech, ensure SSL is configured
    if "neon.tech" in url and "sslmode" not in url:
        url += "&sslmode=require" if "?" in url else "?sslmode=require"
        logger.info("Added sslmode=require to Neon database URL")
    return url


def build_engine(database_url: str) -> Engine:
    url = normalize_database_url(database_url)

    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_pre_ping=True,  # Auto-reconnect on broken connections
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,     # Connection timeout in seconds
        pool_recycle=1800,   # Recycle connections after 30 minutes
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine: Engine) -> None:
    # Models must be imported so they are registered on Base
    from pdf_mailer import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
