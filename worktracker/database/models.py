"""SQLAlchemy ORM models for WorkTracker."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Float, Text, ForeignKey
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Project(Base):
    """A project that work can be timed and logged against."""

    __tablename__ = "projects"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    customer_id = Column(String(32), nullable=True)
    status = Column(String(20), nullable=False, default="Active")  # Active | On Hold | Completed
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r} status={self.status}>"


class Point(Base):
    """One logged work entry (usually a saved timer session)."""

    __tablename__ = "points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(
        String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    task_id = Column(String(32), nullable=True)
    points = Column(Float, nullable=False)
    hours = Column(Float, nullable=False, default=0.0)
    activity_type = Column(String(64), nullable=False)
    comment = Column(Text, nullable=False, default="")
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return (
            f"<Point id={self.id} project={self.project_id} "
            f"points={self.points} hours={self.hours}>"
        )


class StorageItem(Base):
    """Key/value row backing :class:`~worktracker.storage.SqlStorageArea`."""

    __tablename__ = "storage_items"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<StorageItem key={self.key!r}>"
