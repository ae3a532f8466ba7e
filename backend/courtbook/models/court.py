"""
Court model. Courts are read-only to the booking flow.
"""

from sqlalchemy import Column, Integer, String, Boolean

from courtbook.db.base import Base, TimestampMixin


class Court(Base, TimestampMixin):
    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Court(id={self.id}, name={self.name}, active={self.is_active})>"
