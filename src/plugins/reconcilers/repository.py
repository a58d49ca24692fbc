"""
Tool Shed Repository Reconciler - Installs, refreshes and uninstalls
tool shed repositories on a registry.
"""

import logging
from typing import List

from diagnostics import Diagnostic
from errors import (
    AlreadyInstalledError,
    AmbiguousResultWarning,
    RegistryError,
    ValidationError,
)
from models import (
    ExactlyOne,
    Many,
    NothingInstalled,
    RepositoryResource,
    RepositoryState,
    classify_install_results,
)
from plugins.reconcilers.base import (
    ReconcilerContext,
    ReconcilerPlugin,
    ReconcileResult,
)

logger = logging.getLogger(__name__)


class RepositoryReconciler(ReconcilerPlugin):
    """
    Reconciler for ToolShedRepository resources.

    Create issues exactly one install call and resolves the returned
    repositories to a single tracked one. Read overwrites the computed
    state and never reinstalls. Delete uninstalls with the declared
    remove_from_disk flag.
    """

    @property
    def name(self) -> str:
        return "toolshed_repository"

    @property
    def resource_types(self) -> List[str]:
        return ["ToolShedRepository"]

    async def create(
        self, resource: RepositoryResource, ctx: ReconcilerContext
    ) -> ReconcileResult:
        spec = resource.spec

        results = await ctx.client.install(
            spec.tool_shed,
            spec.owner,
            spec.name,
            spec.changeset_revision,
            spec.install_tool_dependencies,
            spec.install_repository_dependencies,
            spec.install_resolver_dependencies,
            spec.placement.tool_panel_section_id,
            spec.placement.new_tool_panel_section_label,
        )

        outcome = classify_install_results(results)
        diagnostics: List[Diagnostic] = []

        if isinstance(outcome, NothingInstalled):
            raise AlreadyInstalledError(
                spec.tool_shed, spec.owner, spec.name, spec.changeset_revision
            )
        if isinstance(outcome, ExactlyOne):
            installed = outcome.result
        elif isinstance(outcome, Many):
            warning = AmbiguousResultWarning(outcome.ids)
            logger.warning(
                f"Install of {spec.identity} returned {len(outcome.ids)} "
                f"repositories, tracking {outcome.primary.id}: {outcome.ids}"
            )
            diagnostics.append(Diagnostic.from_warning(warning))
            installed = outcome.primary
        else:
            raise TypeError(f"Unknown install outcome: {outcome!r}")

        resource.state = RepositoryState.from_result(installed)
        logger.info(f"Installed repository {spec.identity} as {installed.id}")

        return ReconcileResult(
            success=True,
            message=f"Installed repository {installed.id}",
            diagnostics=diagnostics,
        )

    async def read(
        self, resource: RepositoryResource, ctx: ReconcilerContext
    ) -> ReconcileResult:
        repository_id = self._require_id(resource)

        result = await ctx.client.get(repository_id)
        if result.id != repository_id:
            raise RegistryError(
                f"Registry returned repository {result.id} "
                f"when asked for {repository_id}"
            )

        state = RepositoryState.from_result(result)
        resource.state = state

        if state.drifted:
            logger.warning(
                f"Repository {repository_id} drifted: "
                f"deleted={state.deleted}, uninstalled={state.uninstalled}"
            )
        else:
            logger.info(f"Refreshed repository {repository_id}: {state.status}")

        return ReconcileResult(
            success=True,
            message=f"Repository {repository_id} is {state.status or 'unknown'}",
            drift_detected=state.drifted,
        )

    async def delete(
        self, resource: RepositoryResource, ctx: ReconcilerContext
    ) -> ReconcileResult:
        repository_id = self._require_id(resource)
        remove_from_disk = resource.spec.remove_from_disk

        await ctx.client.uninstall(repository_id, remove_from_disk)
        logger.info(
            f"Uninstalled repository {repository_id} "
            f"(remove_from_disk={remove_from_disk})"
        )

        return ReconcileResult(
            success=True, message=f"Uninstalled repository {repository_id}"
        )

    @staticmethod
    def _require_id(resource: RepositoryResource) -> str:
        if resource.id is None:
            raise ValidationError(
                f"Repository {resource.spec.identity} has not been installed"
            )
        return resource.id
