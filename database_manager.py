"""
Database manager for the team time tracker: profiles, roles, projects, assignments and time entries.
Supports local SQLite (default) or remote PostgreSQL via DATABASE_URL.
Multi-user: one manager per authenticated actor (current_user_id); every operation fetches the
actor's role grants fresh and asks the authorization policy before touching data.
"""
import logging
import math
import os
from pathlib import Path
from datetime import datetime, date, timedelta
from contextlib import contextmanager
from typing import Callable, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, Session

from authorization import Operation, Resource, ResourceKind, Role, authorize, require
from errors import (
    AuthorizationDenied,
    ConflictError,
    CurrentUserNotSet,
    DuplicateAssignmentError,
    InvalidRangeError,
    NotFoundError,
    NotRunningError,
    ValidationError,
)
from models import Base, Profile, Project, ProjectAssignment, TimeEntry, UserRole
from reporting import TimeSummary, summarize

logger = logging.getLogger(__name__)


def compute_duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between start and end, rounded half up (1 second -> 0, 30 seconds -> 1)."""
    seconds = (end_time - start_time).total_seconds()
    return int(math.floor(seconds / 60 + 0.5))


def _as_naive_local(value: datetime | None) -> datetime | None:
    """Timestamps are stored naive in local time; convert aware values to match."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class DatabaseManager:
    """Database as an object: owns engine and sessions, exposes operations as methods."""

    def __init__(
        self,
        db_path: Path | str | None = None,
        database_url: str | None = None,
        current_user_id: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._current_user_id = current_user_id
        self._clock = clock or datetime.now
        url = database_url or os.environ.get("DATABASE_URL")
        if url:
            self._engine = create_engine(url, echo=False)
        else:
            if db_path is None:
                db_path = Path(__file__).resolve().parent / "timetracker.db"
            path_str = str(db_path)
            self._engine = create_engine(f"sqlite:///{path_str}", echo=False)
        self._session_factory = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False
        )
        self._setup_sqlite_foreign_keys()

    @property
    def current_user_id(self) -> str | None:
        """Current user id for this manager (read-only)."""
        return self._current_user_id

    def _setup_sqlite_foreign_keys(self) -> None:
        """SQLite ignores FOREIGN KEY clauses unless enabled per connection."""
        if self._engine.dialect.name != "sqlite":
            return

        @event.listens_for(self._engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
            finally:
                cursor.close()

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        """Yield a new session (context manager)."""
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def _now(self) -> datetime:
        return _as_naive_local(self._clock())

    def _require_user(self) -> str:
        """Return current_user_id; raise if it is not set."""
        if self._current_user_id is None:
            raise CurrentUserNotSet()
        return self._current_user_id

    # --- Authorization facts (fetched fresh on every call) ---

    def _roles(self, session: Session, user_id: str) -> list[str]:
        rows = session.query(UserRole.role).filter(UserRole.user_id == user_id).all()
        return [r[0] for r in rows]

    def _assigned_project_ids(self, session: Session, user_id: str) -> set[int]:
        rows = (
            session.query(ProjectAssignment.project_id)
            .filter(ProjectAssignment.user_id == user_id)
            .all()
        )
        return {r[0] for r in rows}

    def _is_admin(self, session: Session) -> bool:
        """Return True if the current user holds an admin grant."""
        if self._current_user_id is None:
            return False
        return Role.ADMIN.value in self._roles(session, self._current_user_id)

    def _can(self, session: Session, operation: Operation, resource: Resource) -> bool:
        actor = self._require_user()
        return authorize(
            actor,
            self._roles(session, actor),
            operation,
            resource,
            self._assigned_project_ids(session, actor),
        )

    def _require(self, session: Session, operation: Operation, resource: Resource) -> None:
        """Raise AuthorizationDenied unless the current user may perform operation on resource."""
        actor = self._require_user()
        try:
            require(
                actor,
                self._roles(session, actor),
                operation,
                resource,
                self._assigned_project_ids(session, actor),
            )
        except AuthorizationDenied:
            logger.warning(
                "Denied %s on %s for user %s", operation.value, resource.kind.value, actor
            )
            raise

    def current_user_is_admin(self) -> bool:
        """Return True if the current user is an admin."""
        if self._current_user_id is None:
            return False
        with self._session() as session:
            return self._is_admin(session)

    def init_db(self) -> None:
        """Create tables and indexes if they do not exist."""
        Base.metadata.create_all(self._engine)
        logger.info("Database initialised (%s)", self._engine.dialect.name)

    # --- Users, profiles and roles ---

    def has_any_user(self) -> bool:
        """Return True if at least one profile exists. Works without current_user_id."""
        with self._session() as session:
            return session.query(Profile).count() > 0

    def _add_profile(
        self,
        session: Session,
        user_id: str,
        email: str,
        first_name: str | None,
        last_name: str | None,
        roles: list[str],
    ) -> Profile:
        if not user_id or not (email or "").strip():
            raise ValidationError("user_id and email are required.")
        if session.query(Profile).filter(Profile.user_id == user_id).first():
            raise ConflictError("User already provisioned.")
        now = self._now()
        profile = Profile(
            user_id=user_id,
            email=email.strip(),
            first_name=first_name,
            last_name=last_name,
            created_at=now,
            updated_at=now,
        )
        session.add(profile)
        for role in roles:
            session.add(UserRole(user_id=user_id, role=role, created_at=now))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ConflictError("User already provisioned.")
        session.refresh(profile)
        logger.info("Provisioned user %s with roles %s", user_id, ", ".join(roles))
        return profile

    def provision_user(
        self,
        user_id: str,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Profile:
        """
        Create the profile and default member grant for a newly signed-up account.
        Called by the identity collaborator; works without current_user_id.
        """
        with self._session() as session:
            return self._add_profile(
                session, user_id, email, first_name, last_name, [Role.MEMBER.value]
            )

    def create_first_admin(
        self,
        user_id: str,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Profile | None:
        """
        Provision the first account as admin, only if no profiles exist. Returns None otherwise.
        Works without current_user_id (first-install path).
        """
        with self._session() as session:
            if session.query(Profile).count() > 0:
                return None
            return self._add_profile(
                session,
                user_id,
                email,
                first_name,
                last_name,
                [Role.MEMBER.value, Role.ADMIN.value],
            )

    def get_profile(self, user_id: str) -> Profile:
        """Return the profile (self, or anyone for admin)."""
        self._require_user()
        with self._session() as session:
            profile = session.query(Profile).filter(Profile.user_id == user_id).first()
            if profile is None or not self._can(
                session, Operation.READ, Resource(ResourceKind.PROFILE, owner_id=user_id)
            ):
                raise NotFoundError("User not found.")
            return profile

    def update_profile(
        self,
        user_id: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Profile:
        """Update name fields (own profile for members; any profile for admin). Identity is immutable."""
        self._require_user()
        with self._session() as session:
            profile = session.query(Profile).filter(Profile.user_id == user_id).first()
            resource = Resource(ResourceKind.PROFILE, owner_id=user_id)
            if profile is None or not self._can(session, Operation.READ, resource):
                raise NotFoundError("User not found.")
            self._require(session, Operation.UPDATE, resource)
            if first_name is not None:
                profile.first_name = first_name or None
            if last_name is not None:
                profile.last_name = last_name or None
            profile.updated_at = self._now()
            session.commit()
            session.refresh(profile)
            return profile

    def list_users(self) -> list[Profile]:
        """All profiles for admin; only the caller's own profile otherwise."""
        actor = self._require_user()
        with self._session() as session:
            roles = self._roles(session, actor)
            profiles = session.query(Profile).order_by(Profile.email).all()
            return [
                p
                for p in profiles
                if authorize(
                    actor,
                    roles,
                    Operation.READ,
                    Resource(ResourceKind.PROFILE, owner_id=p.user_id),
                )
            ]

    def get_roles(self, user_id: str) -> list[str]:
        """Role grants of user_id (own grants for members; anyone's for admin)."""
        self._require_user()
        with self._session() as session:
            self._require(
                session, Operation.READ, Resource(ResourceKind.ROLE, owner_id=user_id)
            )
            return sorted(self._roles(session, user_id))

    def grant_role(self, user_id: str, role: str) -> None:
        """Add a role grant (admin only)."""
        self._require_user()
        try:
            role = Role(role).value
        except ValueError:
            raise ValidationError(f"Unknown role: {role}.")
        with self._session() as session:
            self._require(
                session, Operation.CREATE, Resource(ResourceKind.ROLE, owner_id=user_id)
            )
            if session.query(Profile).filter(Profile.user_id == user_id).first() is None:
                raise NotFoundError("User not found.")
            if role in self._roles(session, user_id):
                raise ConflictError(f"User already has role {role}.")
            session.add(UserRole(user_id=user_id, role=role, created_at=self._now()))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise ConflictError(f"User already has role {role}.")
            logger.info("Granted %s to %s", role, user_id)

    def revoke_role(self, user_id: str, role: str) -> None:
        """Remove a role grant (admin only)."""
        self._require_user()
        with self._session() as session:
            self._require(
                session, Operation.DELETE, Resource(ResourceKind.ROLE, owner_id=user_id)
            )
            grant = (
                session.query(UserRole)
                .filter(UserRole.user_id == user_id, UserRole.role == role)
                .first()
            )
            if grant is None:
                raise NotFoundError("Role grant not found.")
            session.delete(grant)
            session.commit()
            logger.info("Revoked %s from %s", role, user_id)

    # --- Projects ---

    def _visible_project(self, session: Session, project_id: int) -> Project:
        """Return the project if the current user may read it; NotFoundError otherwise."""
        project = session.get(Project, project_id)
        if project is None or not self._can(
            session,
            Operation.READ,
            Resource(ResourceKind.PROJECT, project_id=project.id),
        ):
            raise NotFoundError("Project not found.")
        return project

    def create_project(self, name: str, description: str | None = None) -> Project:
        """Create a project (admin only). created_by is the current user."""
        actor = self._require_user()
        with self._session() as session:
            self._require(
                session, Operation.CREATE, Resource(ResourceKind.PROJECT, owner_id=actor)
            )
            name = (name or "").strip()
            if not name:
                raise ValidationError("Project name is required.")
            now = self._now()
            project = Project(
                name=name,
                description=description or None,
                created_by=actor,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            session.add(project)
            session.commit()
            session.refresh(project)
            logger.info("Project %s (%s) created by %s", project.id, project.name, actor)
            return project

    def get_project(self, project_id: int) -> Project:
        """Return a project the current user may read."""
        self._require_user()
        with self._session() as session:
            return self._visible_project(session, project_id)

    def update_project(
        self,
        project_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Project:
        """Rename or re-describe a project (admin only)."""
        self._require_user()
        with self._session() as session:
            self._require(
                session,
                Operation.UPDATE,
                Resource(ResourceKind.PROJECT, project_id=project_id),
            )
            project = session.get(Project, project_id)
            if project is None:
                raise NotFoundError("Project not found.")
            if name is not None:
                name = name.strip()
                if not name:
                    raise ValidationError("Project name is required.")
                project.name = name
            if description is not None:
                project.description = description or None
            project.updated_at = self._now()
            session.commit()
            session.refresh(project)
            return project

    def toggle_project_active(self, project_id: int) -> Project:
        """Flip is_active (admin only). Assignments and time entries are left untouched."""
        self._require_user()
        with self._session() as session:
            self._require(
                session,
                Operation.UPDATE,
                Resource(ResourceKind.PROJECT, project_id=project_id),
            )
            project = session.get(Project, project_id)
            if project is None:
                raise NotFoundError("Project not found.")
            project.is_active = not project.is_active
            project.updated_at = self._now()
            session.commit()
            session.refresh(project)
            logger.info(
                "Project %s %s",
                project.id,
                "activated" if project.is_active else "deactivated",
            )
            return project

    def list_projects(self, active_only: bool = False) -> list[Project]:
        """All projects for admin; assigned projects for members. Ordered by name."""
        actor = self._require_user()
        with self._session() as session:
            roles = self._roles(session, actor)
            assigned = self._assigned_project_ids(session, actor)
            q = session.query(Project)
            if active_only:
                q = q.filter(Project.is_active.is_(True))
            projects = q.order_by(Project.name, Project.id).all()
            return [
                p
                for p in projects
                if authorize(
                    actor,
                    roles,
                    Operation.READ,
                    Resource(ResourceKind.PROJECT, project_id=p.id),
                    assigned,
                )
            ]

    # --- Assignments ---

    def assign_user_to_project(self, project_id: int, user_id: str) -> ProjectAssignment:
        """Give user_id access to project_id (admin only). A second assignment of the same pair is rejected."""
        actor = self._require_user()
        with self._session() as session:
            self._require(
                session,
                Operation.CREATE,
                Resource(ResourceKind.ASSIGNMENT, owner_id=actor, project_id=project_id),
            )
            if session.get(Project, project_id) is None:
                raise NotFoundError("Project not found.")
            if session.query(Profile).filter(Profile.user_id == user_id).first() is None:
                raise NotFoundError("User not found.")
            existing = (
                session.query(ProjectAssignment)
                .filter(
                    ProjectAssignment.project_id == project_id,
                    ProjectAssignment.user_id == user_id,
                )
                .first()
            )
            if existing is not None:
                logger.warning("User %s already assigned to project %s", user_id, project_id)
                raise DuplicateAssignmentError("User is already assigned to this project.")
            assignment = ProjectAssignment(
                project_id=project_id,
                user_id=user_id,
                assigned_by=actor,
                created_at=self._now(),
            )
            session.add(assignment)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.warning("User %s already assigned to project %s", user_id, project_id)
                raise DuplicateAssignmentError("User is already assigned to this project.")
            session.refresh(assignment)
            logger.info("User %s assigned to project %s by %s", user_id, project_id, actor)
            return assignment

    def unassign_user_from_project(self, project_id: int, user_id: str) -> None:
        """Revoke access (admin only). Time already logged stays with the user."""
        self._require_user()
        with self._session() as session:
            self._require(
                session,
                Operation.DELETE,
                Resource(ResourceKind.ASSIGNMENT, project_id=project_id),
            )
            assignment = (
                session.query(ProjectAssignment)
                .filter(
                    ProjectAssignment.project_id == project_id,
                    ProjectAssignment.user_id == user_id,
                )
                .first()
            )
            if assignment is None:
                raise NotFoundError("Assignment not found.")
            session.delete(assignment)
            session.commit()
            logger.info("User %s unassigned from project %s", user_id, project_id)

    def list_assignments(self, project_id: int | None = None) -> list[ProjectAssignment]:
        """Assignments the current user may read, optionally for one project."""
        actor = self._require_user()
        with self._session() as session:
            roles = self._roles(session, actor)
            assigned = self._assigned_project_ids(session, actor)
            q = session.query(ProjectAssignment)
            if project_id is not None:
                q = q.filter(ProjectAssignment.project_id == project_id)
            rows = q.order_by(ProjectAssignment.project_id, ProjectAssignment.user_id).all()
            return [
                a
                for a in rows
                if authorize(
                    actor,
                    roles,
                    Operation.READ,
                    Resource(
                        ResourceKind.ASSIGNMENT,
                        owner_id=a.assigned_by,
                        project_id=a.project_id,
                    ),
                    assigned,
                )
            ]

    # --- Time entries ---

    def _running_entry(self, session: Session, user_id: str) -> TimeEntry | None:
        return (
            session.query(TimeEntry)
            .filter(TimeEntry.user_id == user_id, TimeEntry.is_running.is_(True))
            .first()
        )

    def _timer_conflict(self, session: Session, running: TimeEntry | None) -> ConflictError:
        """Build the ConflictError naming the project of the timer that is already running."""
        if running is None:
            return ConflictError("Timer already running. Stop it first.")
        project = session.get(Project, running.project_id)
        project_name = project.name if project else None
        logger.warning(
            "Timer already running for %s (entry %s)", running.user_id, running.id
        )
        return ConflictError(
            f"Timer already running on project '{project_name}'. Stop it first.",
            entry_id=running.id,
            project_id=running.project_id,
            project_name=project_name,
        )

    def _project_for_new_entry(self, session: Session, project_id: int) -> Project:
        project = self._visible_project(session, project_id)
        if not project.is_active:
            raise ValidationError("Project is not active.")
        return project

    def _writable_entry(
        self, session: Session, entry_id: int, operation: Operation
    ) -> TimeEntry:
        """Entry the current user may update/delete, else NotFoundError.
        Entries an admin can only view look missing, as in stop_timer."""
        entry = session.get(TimeEntry, entry_id)
        if entry is None or not self._can(
            session,
            operation,
            Resource(
                ResourceKind.TIME_ENTRY,
                owner_id=entry.user_id,
                project_id=entry.project_id,
            ),
        ):
            raise NotFoundError("Time entry not found.")
        return entry

    def start_timer(self, project_id: int, description: str | None = None) -> TimeEntry:
        """Start a running entry for the current user.
        Raises ConflictError if the user already has a running timer."""
        actor = self._require_user()
        with self._session() as session:
            self._require(
                session,
                Operation.CREATE,
                Resource(ResourceKind.TIME_ENTRY, owner_id=actor, project_id=project_id),
            )
            self._project_for_new_entry(session, project_id)
            running = self._running_entry(session, actor)
            if running is not None:
                raise self._timer_conflict(session, running)
            now = self._now()
            entry = TimeEntry(
                user_id=actor,
                project_id=project_id,
                description=description or "",
                start_time=now,
                end_time=None,
                duration_minutes=None,
                is_running=True,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            try:
                session.commit()
            except IntegrityError:
                # Lost a race with a concurrent start for the same user
                session.rollback()
                raise self._timer_conflict(session, self._running_entry(session, actor))
            session.refresh(entry)
            logger.info("Timer %s started by %s on project %s", entry.id, actor, project_id)
            return entry

    def stop_timer(self, entry_id: int) -> TimeEntry:
        """Stop the current user's running entry and compute its duration."""
        actor = self._require_user()
        with self._session() as session:
            entry = session.get(TimeEntry, entry_id)
            if entry is None or entry.user_id != actor:
                raise NotFoundError("Time entry not found.")
            self._require(
                session,
                Operation.UPDATE,
                Resource(
                    ResourceKind.TIME_ENTRY,
                    owner_id=entry.user_id,
                    project_id=entry.project_id,
                ),
            )
            if not entry.is_running:
                raise NotRunningError()
            now = self._now()
            entry.end_time = now
            entry.is_running = False
            entry.duration_minutes = compute_duration_minutes(entry.start_time, now)
            entry.updated_at = now
            session.commit()
            session.refresh(entry)
            logger.info(
                "Timer %s stopped by %s after %s min", entry.id, actor, entry.duration_minutes
            )
            return entry

    def get_running_entry(self) -> TimeEntry | None:
        """Return the current user's running time entry, if any."""
        actor = self._require_user()
        with self._session() as session:
            return self._running_entry(session, actor)

    def create_manual_entry(
        self,
        project_id: int,
        description: str | None,
        start_time: datetime,
        end_time: datetime,
    ) -> TimeEntry:
        """Add a completed time entry for the current user."""
        actor = self._require_user()
        start_time = _as_naive_local(start_time)
        end_time = _as_naive_local(end_time)
        if start_time is None or end_time is None or end_time <= start_time:
            raise InvalidRangeError()
        with self._session() as session:
            self._require(
                session,
                Operation.CREATE,
                Resource(ResourceKind.TIME_ENTRY, owner_id=actor, project_id=project_id),
            )
            self._project_for_new_entry(session, project_id)
            now = self._now()
            entry = TimeEntry(
                user_id=actor,
                project_id=project_id,
                description=description or "",
                start_time=start_time,
                end_time=end_time,
                duration_minutes=compute_duration_minutes(start_time, end_time),
                is_running=False,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.commit()
            session.refresh(entry)
            logger.info("Manual entry %s created by %s", entry.id, actor)
            return entry

    def update_time_entry(
        self,
        entry_id: int,
        *,
        description: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> TimeEntry:
        """Edit an entry. Stopped entries get their duration recomputed; a running entry cannot be given an end time."""
        self._require_user()
        start_time = _as_naive_local(start_time)
        end_time = _as_naive_local(end_time)
        with self._session() as session:
            entry = self._writable_entry(session, entry_id, Operation.UPDATE)
            if entry.is_running:
                if end_time is not None:
                    raise ValidationError("Stop the timer before setting an end time.")
                if start_time is not None:
                    if start_time > self._now():
                        raise InvalidRangeError("Start time cannot be in the future.")
                    entry.start_time = start_time
            elif start_time is not None or end_time is not None:
                new_start = start_time or entry.start_time
                new_end = end_time or entry.end_time
                if new_end <= new_start:
                    raise InvalidRangeError()
                entry.start_time = new_start
                entry.end_time = new_end
                entry.duration_minutes = compute_duration_minutes(new_start, new_end)
            if description is not None:
                entry.description = description
            entry.updated_at = self._now()
            session.commit()
            session.refresh(entry)
            return entry

    def delete_time_entry(self, entry_id: int) -> None:
        """Delete one of the current user's entries."""
        self._require_user()
        with self._session() as session:
            entry = self._writable_entry(session, entry_id, Operation.DELETE)
            session.delete(entry)
            session.commit()
            logger.info("Time entry %s deleted by %s", entry_id, self._current_user_id)

    def list_time_entries(
        self,
        project_id: int | None = None,
        user_id: str | None = None,
        day: date | None = None,
    ) -> list[TimeEntry]:
        """
        Entries the current user may read, newest first.
        Admins may filter across users; members always get only their own entries,
        whatever user_id they ask for.
        """
        actor = self._require_user()
        with self._session() as session:
            roles = self._roles(session, actor)
            q = session.query(TimeEntry)
            if Role.ADMIN.value not in roles:
                q = q.filter(TimeEntry.user_id == actor)
            elif user_id is not None:
                q = q.filter(TimeEntry.user_id == user_id)
            if project_id is not None:
                q = q.filter(TimeEntry.project_id == project_id)
            if day is not None:
                start_dt = datetime.combine(day, datetime.min.time())
                end_dt = start_dt + timedelta(days=1)
                q = q.filter(TimeEntry.start_time >= start_dt, TimeEntry.start_time < end_dt)
            entries = q.order_by(TimeEntry.start_time.desc(), TimeEntry.id.desc()).all()
            return [
                e
                for e in entries
                if authorize(
                    actor,
                    roles,
                    Operation.READ,
                    Resource(
                        ResourceKind.TIME_ENTRY,
                        owner_id=e.user_id,
                        project_id=e.project_id,
                    ),
                )
            ]

    # --- Reporting ---

    def get_time_summary(
        self,
        project_id: int | None = None,
        user_id: str | None = None,
        day: date | None = None,
    ) -> list[TimeSummary]:
        """Hours per (user, project) over the entries list_time_entries returns for the same filters."""
        actor = self._require_user()
        entries = self.list_time_entries(project_id=project_id, user_id=user_id, day=day)
        with self._session() as session:
            roles = self._roles(session, actor)
            assigned = self._assigned_project_ids(session, actor)
            user_ids = {e.user_id for e in entries}
            project_ids = {e.project_id for e in entries}
            profiles = {
                p.user_id: p
                for p in session.query(Profile).filter(Profile.user_id.in_(user_ids)).all()
                if authorize(
                    actor,
                    roles,
                    Operation.READ,
                    Resource(ResourceKind.PROFILE, owner_id=p.user_id),
                )
            }
            projects = {
                p.id: p
                for p in session.query(Project).filter(Project.id.in_(project_ids)).all()
                if authorize(
                    actor,
                    roles,
                    Operation.READ,
                    Resource(ResourceKind.PROJECT, project_id=p.id),
                    assigned,
                )
            }
        return summarize(entries, profiles, projects)
