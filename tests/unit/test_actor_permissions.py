"""Tests for the human actor and repository permission checks."""

from __future__ import annotations

import pytest

from junie_action.errors import GitHubAPIError
from junie_action.validation.actor import check_human_actor
from junie_action.validation.permissions import verify_repository_access


class TestHumanActor:
    """Tests for the human actor check."""

    def test_user_passes(self, config, mocker) -> None:
        """A regular user passes."""
        mocker.patch("junie_action.validation.actor.api.get_user", return_value={"login": "alice", "type": "User"})
        assert check_human_actor(config, "alice")

    def test_bot_is_rejected(self, config, mocker) -> None:
        """A bot account is rejected."""
        mocker.patch(
            "junie_action.validation.actor.api.get_user",
            return_value={"login": "dependabot[bot]", "type": "Bot"},
        )
        assert not check_human_actor(config, "dependabot[bot]")

    def test_lookup_failure_is_rejected(self, config, mocker) -> None:
        """A failed lookup counts as not human."""
        mocker.patch(
            "junie_action.validation.actor.api.get_user",
            side_effect=GitHubAPIError("GitHub API error 500", status_code=500),
        )
        assert not check_human_actor(config, "alice")


class TestRepositoryAccess:
    """Tests for the write permission check."""

    def test_app_bypasses_check(self, config, mocker) -> None:
        """GitHub Apps are trusted without a lookup."""
        lookup = mocker.patch("junie_action.validation.permissions.api.get_collaborator_permission")
        assert verify_repository_access(config, "octo-org/widgets", "junie-app[bot]")
        lookup.assert_not_called()

    @pytest.mark.parametrize("level", ["admin", "write"])
    def test_write_access_passes(self, config, mocker, level: str) -> None:
        """Write and admin access pass."""
        mocker.patch("junie_action.validation.permissions.api.get_collaborator_permission", return_value=level)
        assert verify_repository_access(config, "octo-org/widgets", "alice")

    @pytest.mark.parametrize("level", ["read", "none"])
    def test_read_access_fails(self, config, mocker, level: str) -> None:
        """Read-only access fails."""
        mocker.patch("junie_action.validation.permissions.api.get_collaborator_permission", return_value=level)
        assert not verify_repository_access(config, "octo-org/widgets", "alice")

    def test_not_a_collaborator(self, config, mocker) -> None:
        """A 404 means the actor is not a collaborator."""
        mocker.patch(
            "junie_action.validation.permissions.api.get_collaborator_permission",
            side_effect=GitHubAPIError("GitHub API error 404: Not Found", status_code=404),
        )
        with pytest.raises(RuntimeError, match='User "mallory" is not a collaborator on octo-org/widgets'):
            verify_repository_access(config, "octo-org/widgets", "mallory")

    def test_other_errors_carry_diagnostics(self, config, mocker) -> None:
        """Other API errors list likely causes."""
        mocker.patch(
            "junie_action.validation.permissions.api.get_collaborator_permission",
            side_effect=GitHubAPIError("GitHub API error 502: Bad Gateway", status_code=502),
        )
        with pytest.raises(RuntimeError) as excinfo:
            verify_repository_access(config, "octo-org/widgets", "alice")
        assert "needs 'repo' scope" in str(excinfo.value)
        assert "502: Bad Gateway" in str(excinfo.value)
