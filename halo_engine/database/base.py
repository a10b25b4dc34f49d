"""Database base."""

from sqlalchemy.orm import declarative_base

from halo_engine.utils.timezone import utc_now

Base = declarative_base()


def get_current_timestamp():
    """Get current UTC timestamp for database defaults."""
    return utc_now()
