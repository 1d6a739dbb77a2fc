from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, DateTime, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime

Base = declarative_base()

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(Integer, primary_key=True)
    # Stable subject id issued by the identity provider
    user_id = Column(String, unique=True, nullable=False)
    email = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)

    roles = relationship("UserRole", back_populates="profile", cascade="all, delete-orphan")
    assignments = relationship(
        "ProjectAssignment",
        back_populates="user",
        foreign_keys="ProjectAssignment.user_id",
    )
    time_entries = relationship("TimeEntry", back_populates="user")

    @property
    def display_name(self) -> str:
        """'First Last', or the email when both name fields are empty."""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_role"),)
    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False)
    role = Column(String, nullable=False, default=ROLE_MEMBER)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    profile = relationship("Profile", back_populates="roles")


class Project(Base):
    __tablename__ = "projects"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_by = Column(String, ForeignKey("profiles.user_id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)

    assignments = relationship("ProjectAssignment", back_populates="project", cascade="all, delete-orphan")
    time_entries = relationship("TimeEntry", back_populates="project")


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_assignment"),)
    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False)
    assigned_by = Column(String, ForeignKey("profiles.user_id"), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    project = relationship("Project", back_populates="assignments")
    user = relationship("Profile", back_populates="assignments", foreign_keys=[user_id])


class TimeEntry(Base):
    __tablename__ = "time_entries"
    # At most one running entry per user, enforced by the storage engine
    __table_args__ = (
        Index(
            "uq_time_entries_one_running_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("is_running = 1"),
            postgresql_where=text("is_running"),
        ),
    )
    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    description = Column(String, default="")
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    # Derived from start_time/end_time by the service; null while running
    duration_minutes = Column(Integer, nullable=True)
    is_running = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)

    user = relationship("Profile", back_populates="time_entries")
    project = relationship("Project", back_populates="time_entries")
