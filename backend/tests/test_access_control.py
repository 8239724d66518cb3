"""
Swagger Manager Backend - Access Control Unit Tests
=====================================================

What we test:
    ✅ Owner and collaborators can access; others cannot
    ✅ Only the owner can mutate
    ✅ require_* raise AccessDeniedError with the project id
"""

import uuid
from types import SimpleNamespace

import pytest

from swagger_manager.exceptions import AccessDeniedError
from swagger_manager.services.access_control import (
    can_access,
    can_mutate,
    require_access,
    require_owner,
)


@pytest.fixture
def project():
    return SimpleNamespace(id=uuid.uuid4(), owner_id="U1", collaborators=["U1", "U2"])


class TestAccessControl:

    def test_owner_can_access_and_mutate(self, project):
        assert can_access("U1", project)
        assert can_mutate("U1", project)

    def test_collaborator_can_access_but_not_mutate(self, project):
        assert can_access("U2", project)
        assert not can_mutate("U2", project)

    def test_stranger_has_no_access(self, project):
        assert not can_access("U3", project)
        assert not can_mutate("U3", project)

    def test_empty_principal_has_no_access(self, project):
        assert not can_access("", project)

    def test_require_access_raises_for_stranger(self, project):
        with pytest.raises(AccessDeniedError) as exc_info:
            require_access("U3", project)
        assert exc_info.value.context["project_id"] == str(project.id)

    def test_require_owner_names_the_action(self, project):
        with pytest.raises(AccessDeniedError) as exc_info:
            require_owner("U2", project, action="delete")
        assert "delete" in exc_info.value.message

    def test_membership_change_is_seen_immediately(self, project):
        require_access("U2", project)
        project.collaborators = ["U1"]
        with pytest.raises(AccessDeniedError):
            require_access("U2", project)
