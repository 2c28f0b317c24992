import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    String,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ProfileRole(str, Enum):
    """Enum for dashboard roles."""

    ADMIN = "admin"
    STAFF = "staff"
    CLIENT = "client"


class ORMProfile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=ProfileRole.CLIENT.value)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<ORMProfile(id={self.id}, role={self.role})>"


class ORMUserFile(Base):
    """One upload event. Re-uploads under the same s3_key add a new row."""

    __tablename__ = "user_files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    s3_key = Column(String(1024), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=True)
    file_type = Column(String(255), nullable=True)
    # Written by the upload handler; legacy rows may lack it
    uploaded_at = Column(DateTime, nullable=True, index=True)

    def __repr__(self):
        return f"<ORMUserFile(s3_key={self.s3_key}, user_id={self.user_id})>"


class ORMS3Update(Base):
    """Externally produced result file. bucket_name holds a key prefix."""

    __tablename__ = "s3_updates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    file_name = Column(String(1024), nullable=False)
    bucket_name = Column(String(1024), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ORMTaskAssignment(Base):
    __tablename__ = "task_assignments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=True)
    assigned_to = Column(String(36), nullable=True, index=True)
    assigned_by = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class ORMTaskSubtask(Base):
    __tablename__ = "task_subtasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(
        String(36),
        ForeignKey("task_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_to = Column(String(36), nullable=True, index=True)


class ORMTaskFileAttachment(Base):
    __tablename__ = "task_file_attachments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(
        String(36),
        ForeignKey("task_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    s3_key = Column(String(1024), nullable=False, index=True)
    file_name = Column(String(255), nullable=True)
