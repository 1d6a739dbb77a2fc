"""
Authorization policy: decides whether an actor may perform an operation on a resource.
Pure functions; callers supply the actor's role grants and assignment facts on every call.
"""
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from enum import Enum

from errors import AuthorizationDenied


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ResourceKind(str, Enum):
    PROFILE = "profile"
    ROLE = "role"
    PROJECT = "project"
    ASSIGNMENT = "assignment"
    TIME_ENTRY = "time_entry"


# Records whose owner field is stamped with the creating actor's identity
SELF_STAMPED_KINDS = frozenset(
    {ResourceKind.TIME_ENTRY, ResourceKind.PROJECT, ResourceKind.ASSIGNMENT}
)


@dataclass(frozen=True)
class Resource:
    """What is being accessed.

    owner_id is the user the record belongs to (or is written as: created_by for a
    project, assigned_by for a new assignment). project_id is the project the record
    hangs off, when there is one.
    """

    kind: ResourceKind
    owner_id: str | None = None
    project_id: int | None = None


def is_admin(roles: Iterable[str]) -> bool:
    return any(r == Role.ADMIN for r in roles)


def authorize(
    actor_id: str,
    roles: Iterable[str],
    operation: Operation,
    resource: Resource,
    assigned_project_ids: Collection[int] = (),
) -> bool:
    """Return True if actor_id may perform operation on resource. First matching rule wins."""
    roles = list(roles)
    # Nobody, admin included, creates records under another user's identity
    if (
        operation is Operation.CREATE
        and resource.kind in SELF_STAMPED_KINDS
        and resource.owner_id != actor_id
    ):
        return False
    # Time data is written only by its owner; admins may only view others' entries
    if (
        resource.kind is ResourceKind.TIME_ENTRY
        and operation is not Operation.READ
        and resource.owner_id != actor_id
    ):
        return False
    if is_admin(roles):
        return True
    is_owner = resource.owner_id is not None and resource.owner_id == actor_id
    if resource.kind is ResourceKind.PROFILE:
        return is_owner and operation in (Operation.READ, Operation.UPDATE)
    if resource.kind is ResourceKind.ROLE:
        return is_owner and operation is Operation.READ
    if resource.kind is ResourceKind.TIME_ENTRY:
        return is_owner
    if resource.kind in (ResourceKind.PROJECT, ResourceKind.ASSIGNMENT):
        return (
            operation is Operation.READ
            and resource.project_id is not None
            and resource.project_id in assigned_project_ids
        )
    return False


def require(
    actor_id: str,
    roles: Iterable[str],
    operation: Operation,
    resource: Resource,
    assigned_project_ids: Collection[int] = (),
) -> None:
    """Like authorize() but raise AuthorizationDenied on deny."""
    if not authorize(actor_id, roles, operation, resource, assigned_project_ids):
        raise AuthorizationDenied(
            f"Not allowed to {operation.value} {resource.kind.value.replace('_', ' ')}."
        )
