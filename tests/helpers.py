"""Shared test helpers."""

from models import RepositoryInstallResult
from plugins.reconcilers.base import ReconcilerPlugin, ReconcileResult


def make_repository(repository_id="f2db41e1fa331b3e", **overrides):
    """Galaxy-style repository JSON as returned by /api/tool_shed_repositories."""
    data = {
        "id": repository_id,
        "model_class": "ToolShedRepository",
        "name": "fastqc",
        "owner": "devteam",
        "tool_shed": "toolshed.example.org",
        "status": "Installed",
        "deleted": False,
        "uninstalled": False,
        "dist_to_shed": False,
        "include_datatypes": False,
        "ctx_rev": "21",
        "error_message": None,
        "changeset_revision": "e7b2202befea",
        "installed_changeset_revision": "e7b2202befea",
        "url": f"/api/tool_shed_repositories/{repository_id}",
        "tool_shed_status": {
            "latest_installable_revision": "True",
            "revision_update": "False",
            "revision_upgrade": "False",
            "repository_deprecated": "False",
        },
    }
    data.update(overrides)
    return data


def make_result(repository_id="f2db41e1fa331b3e", **overrides):
    return RepositoryInstallResult.model_validate(
        make_repository(repository_id, **overrides)
    )


class DummyReconciler(ReconcilerPlugin):
    """Concrete reconciler for testing."""

    @property
    def name(self) -> str:
        return "dummy"

    @property
    def resource_types(self) -> list[str]:
        return ["DummyResource"]

    async def create(self, resource, ctx):
        return ReconcileResult(success=True, message="created")

    async def read(self, resource, ctx):
        return ReconcileResult(success=True)

    async def delete(self, resource, ctx):
        return ReconcileResult(success=True)
