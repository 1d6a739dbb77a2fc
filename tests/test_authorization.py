"""
Pytest suite for authorization.py: the decision table, without a database.
"""
import pytest

from authorization import Operation, Resource, ResourceKind, Role, authorize, is_admin, require
from errors import AuthorizationDenied

ADMIN = ["member", "admin"]
MEMBER = ["member"]


class TestAdmin:
    """Admins bypass assignment checks but never create records as someone else."""

    @pytest.mark.parametrize("operation", list(Operation))
    def test_admin_any_operation_on_project(self, operation):
        res = Resource(ResourceKind.PROJECT, owner_id="admin", project_id=7)
        assert authorize("admin", ADMIN, operation, res)

    def test_admin_reads_other_users_time_entry(self):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob", project_id=1)
        assert authorize("admin", ADMIN, Operation.READ, res)

    def test_admin_cannot_create_time_entry_as_other_user(self):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob", project_id=1)
        assert not authorize("admin", ADMIN, Operation.CREATE, res)

    @pytest.mark.parametrize("operation", [Operation.UPDATE, Operation.DELETE])
    def test_admin_cannot_modify_other_users_time_entry(self, operation):
        """Stopping, editing and deleting are all writes reserved to the owner."""
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob", project_id=1)
        assert not authorize("admin", ADMIN, operation, res, assigned_project_ids={1})

    @pytest.mark.parametrize("operation", list(Operation))
    def test_admin_full_access_to_own_time_entry(self, operation):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="admin", project_id=1)
        assert authorize("admin", ADMIN, operation, res)

    def test_admin_cannot_create_project_stamped_with_other_user(self):
        res = Resource(ResourceKind.PROJECT, owner_id="bob")
        assert not authorize("admin", ADMIN, Operation.CREATE, res)

    def test_admin_can_grant_roles_to_others(self):
        res = Resource(ResourceKind.ROLE, owner_id="bob")
        assert authorize("admin", ADMIN, Operation.CREATE, res)

    def test_is_admin_accepts_enum_and_string(self):
        assert is_admin(["admin"])
        assert is_admin([Role.ADMIN])
        assert not is_admin(["member"])
        assert not is_admin([])


class TestMember:
    """Members: own profile and entries; projects only through assignments."""

    def test_own_profile_read_and_update(self):
        res = Resource(ResourceKind.PROFILE, owner_id="bob")
        assert authorize("bob", MEMBER, Operation.READ, res)
        assert authorize("bob", MEMBER, Operation.UPDATE, res)
        assert not authorize("bob", MEMBER, Operation.DELETE, res)

    def test_other_profile_denied(self):
        res = Resource(ResourceKind.PROFILE, owner_id="alice")
        assert not authorize("bob", MEMBER, Operation.READ, res)

    def test_own_roles_readable_not_writable(self):
        res = Resource(ResourceKind.ROLE, owner_id="bob")
        assert authorize("bob", MEMBER, Operation.READ, res)
        assert not authorize("bob", MEMBER, Operation.CREATE, res)

    @pytest.mark.parametrize("operation", list(Operation))
    def test_own_time_entry_all_operations(self, operation):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob", project_id=3)
        assert authorize("bob", MEMBER, operation, res)

    def test_own_time_entry_without_assignment(self):
        """Ownership does not depend on assignment state."""
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob", project_id=3)
        assert authorize("bob", MEMBER, Operation.READ, res, assigned_project_ids=())

    def test_other_users_time_entry_denied_even_when_assigned(self):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="alice", project_id=3)
        assert not authorize("bob", MEMBER, Operation.READ, res, assigned_project_ids={3})

    def test_assigned_project_readable(self):
        res = Resource(ResourceKind.PROJECT, project_id=3)
        assert authorize("bob", MEMBER, Operation.READ, res, assigned_project_ids={3})
        assert not authorize("bob", MEMBER, Operation.UPDATE, res, assigned_project_ids={3})

    def test_unassigned_project_denied(self):
        res = Resource(ResourceKind.PROJECT, project_id=4)
        assert not authorize("bob", MEMBER, Operation.READ, res, assigned_project_ids={3})

    def test_assignment_read_follows_project_assignment(self):
        res = Resource(ResourceKind.ASSIGNMENT, owner_id="admin", project_id=3)
        assert authorize("bob", MEMBER, Operation.READ, res, assigned_project_ids={3})
        assert not authorize("bob", MEMBER, Operation.READ, res, assigned_project_ids=())

    def test_member_cannot_create_project(self):
        res = Resource(ResourceKind.PROJECT, owner_id="bob")
        assert not authorize("bob", MEMBER, Operation.CREATE, res)

    def test_no_roles_behaves_like_member(self):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob")
        assert authorize("bob", [], Operation.CREATE, res)


class TestRequire:
    def test_require_raises_on_deny(self):
        res = Resource(ResourceKind.PROJECT, owner_id="bob")
        with pytest.raises(AuthorizationDenied, match="create project"):
            require("bob", MEMBER, Operation.CREATE, res)

    def test_require_passes_on_allow(self):
        res = Resource(ResourceKind.TIME_ENTRY, owner_id="bob")
        require("bob", MEMBER, Operation.CREATE, res)

    def test_denied_is_a_value_error(self):
        """Callers catching ValueError around store calls still see denials."""
        with pytest.raises(ValueError):
            require("bob", MEMBER, Operation.DELETE, Resource(ResourceKind.ASSIGNMENT, project_id=1))
