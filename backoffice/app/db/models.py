import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.app.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SerializableMixin:
    """Column-only dict conversion for JSON envelopes."""

    def to_dict(self) -> dict[str, Any]:
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[column.key] = value
        return data


class Faculty(SerializableMixin, Base):
    __tablename__ = "faculties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Department(SerializableMixin, Base):
    __tablename__ = "departments"
    __table_args__ = (Index("idx_departments_faculty", "faculty_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200))
    faculty_id: Mapped[str] = mapped_column(ForeignKey("faculties.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Semester(SerializableMixin, Base):
    __tablename__ = "semesters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Module(SerializableMixin, Base):
    __tablename__ = "modules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    code: Mapped[str] = mapped_column(String(20), unique=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class ModuleAssignment(SerializableMixin, Base):
    """Places a module in a faculty / department / semester slot."""

    __tablename__ = "module_assignments"
    __table_args__ = (
        UniqueConstraint(
            "module_id", "faculty_id", "department_id", "semester_id",
            name="uq_module_assignment_slot",
        ),
        Index("idx_module_assignments_module", "module_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    module_id: Mapped[str] = mapped_column(ForeignKey("modules.id"))
    faculty_id: Mapped[str] = mapped_column(ForeignKey("faculties.id"))
    department_id: Mapped[str] = mapped_column(ForeignKey("departments.id"))
    semester_id: Mapped[str] = mapped_column(ForeignKey("semesters.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Student(SerializableMixin, Base):
    """A tutor who records kuppis."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class User(SerializableMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_email", "email"),
        Index("idx_users_created", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    firebase_uid: Mapped[str] = mapped_column(String(128), unique=True)
    email: Mapped[str] = mapped_column(String(320))
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="user")
    auth_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_approved_for_kuppies: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class Video(SerializableMixin, Base):
    """A tutorial video; kuppis are videos with ``is_kuppi`` set."""

    __tablename__ = "videos"
    __table_args__ = (
        Index("idx_videos_module", "module_id"),
        Index("idx_videos_created", "created_at"),
        Index("idx_videos_approved", "is_approved"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    module_id: Mapped[str] = mapped_column(ForeignKey("modules.id"))
    student_id: Mapped[str | None] = mapped_column(ForeignKey("students.id"), nullable=True)
    added_by_user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    title: Mapped[str] = mapped_column(String(300))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    youtube_links: Mapped[list] = mapped_column(JSON, default=list)
    telegram_links: Mapped[list | None] = mapped_column(JSON, nullable=True)
    material_urls: Mapped[list | None] = mapped_column(JSON, nullable=True)
    language_code: Mapped[str] = mapped_column(String(10), default="si")
    is_kuppi: Mapped[bool] = mapped_column(Boolean, default=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    module: Mapped[Module] = relationship(lazy="raise")
    student: Mapped[Student | None] = relationship(lazy="raise")


class FacultyHierarchy(Base):
    """Versioned faculty hierarchy document; the highest id is current."""

    __tablename__ = "faculty_hierarchy"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    data: Mapped[dict] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )
