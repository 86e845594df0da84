"""Base repository class with common functionality."""

from sqlalchemy.orm import Session


class BaseRepository:
    """Base repository class bound to the caller's unit of work."""

    def __init__(self, session: Session):
        self.session = session
