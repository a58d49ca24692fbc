"""
Repository Models - Desired state, registry results and computed state.

RepositorySpec holds what the operator declared, RepositoryInstallResult is
what the registry returns over the wire, and RepositoryState is the
projection of a result that is persisted as the resource's known state.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from errors import ValidationError
from validation import apply_defaults, validate_attributes

# Fields Galaxy nests under "tool_shed_status"
TOOL_SHED_STATUS_FIELDS = (
    "latest_installable_revision",
    "revision_update",
    "revision_upgrade",
    "repository_deprecated",
)


# ==================== Panel placement ====================


@dataclass(frozen=True)
class DefaultSection:
    """Let the registry choose where the tools appear."""

    tool_panel_section_id: str = field(default="", init=False)
    new_tool_panel_section_label: str = field(default="", init=False)


@dataclass(frozen=True)
class ExistingSection:
    """Place the tools in an existing tool panel section."""

    section_id: str

    @property
    def tool_panel_section_id(self) -> str:
        return self.section_id

    @property
    def new_tool_panel_section_label(self) -> str:
        return ""


@dataclass(frozen=True)
class NewSection:
    """Create a new tool panel section with the given label."""

    label: str

    @property
    def tool_panel_section_id(self) -> str:
        return ""

    @property
    def new_tool_panel_section_label(self) -> str:
        return self.label


PanelPlacement = Union[DefaultSection, ExistingSection, NewSection]


def resolve_placement(
    tool_panel_section_id: Optional[str], new_tool_panel_section_label: Optional[str]
) -> PanelPlacement:
    """
    Build a panel placement from the two declared placement fields.

    Args:
        tool_panel_section_id: Identifier of an existing section, or empty
        new_tool_panel_section_label: Label of a section to create, or empty

    Returns:
        The placement variant matching whichever field is set.

    Raises:
        ValidationError: If both fields are set
    """
    section_id = tool_panel_section_id or ""
    label = new_tool_panel_section_label or ""

    if section_id and label:
        raise ValidationError(
            '"tool_panel_section_id": conflicts with new_tool_panel_section_label; '
            "only one of tool_panel_section_id or new_tool_panel_section_label "
            "may be set"
        )
    if section_id:
        return ExistingSection(section_id)
    if label:
        return NewSection(label)
    return DefaultSection()


# ==================== Desired state ====================


@dataclass(frozen=True)
class RepositorySpec:
    """Declared desired state of a tool shed repository installation."""

    tool_shed: str
    owner: str
    name: str
    changeset_revision: str = ""
    install_tool_dependencies: bool = False
    install_repository_dependencies: bool = False
    install_resolver_dependencies: bool = False
    placement: PanelPlacement = field(default_factory=DefaultSection)
    remove_from_disk: bool = True

    @classmethod
    def from_attributes(cls, attributes: Dict[str, Any]) -> "RepositorySpec":
        """
        Build a spec from a declared attribute mapping.

        Args:
            attributes: String-keyed attributes, e.g. a parsed YAML document

        Returns:
            A validated RepositorySpec.

        Raises:
            ValidationError: If attributes fail schema validation or both
                placement fields are set
        """
        is_valid, error = validate_attributes(attributes)
        if not is_valid:
            raise ValidationError(f"Invalid repository attributes: {error}")

        attrs = apply_defaults(attributes)
        return cls(
            tool_shed=attrs["tool_shed"],
            owner=attrs["owner"],
            name=attrs["name"],
            changeset_revision=attrs["changeset_revision"],
            install_tool_dependencies=attrs["install_tool_dependencies"],
            install_repository_dependencies=attrs["install_repository_dependencies"],
            install_resolver_dependencies=attrs["install_resolver_dependencies"],
            placement=resolve_placement(
                attrs["tool_panel_section_id"], attrs["new_tool_panel_section_label"]
            ),
            remove_from_disk=attrs["remove_from_disk"],
        )

    def to_attributes(self) -> Dict[str, Any]:
        """Flatten the spec back into declared attributes."""
        return {
            "tool_shed": self.tool_shed,
            "owner": self.owner,
            "name": self.name,
            "changeset_revision": self.changeset_revision,
            "install_tool_dependencies": self.install_tool_dependencies,
            "install_repository_dependencies": self.install_repository_dependencies,
            "install_resolver_dependencies": self.install_resolver_dependencies,
            "tool_panel_section_id": self.placement.tool_panel_section_id,
            "new_tool_panel_section_label": (
                self.placement.new_tool_panel_section_label
            ),
            "remove_from_disk": self.remove_from_disk,
        }

    @property
    def identity(self) -> str:
        return f"{self.tool_shed}/{self.owner}/{self.name}/{self.changeset_revision}"


# ==================== Registry results ====================


class RepositoryInstallResult(BaseModel):
    """A repository object as reported by the registry."""

    model_config = ConfigDict(extra="ignore")

    id: str
    status: str = ""
    deleted: bool = False
    ctx_rev: str = ""
    error_message: str = ""
    installed_changeset_revision: str = ""
    url: str = ""
    dist_to_shed: bool = False
    uninstalled: bool = False
    include_datatypes: bool = False
    latest_installable_revision: str = ""
    revision_update: str = ""
    revision_upgrade: str = ""
    repository_deprecated: str = ""

    @model_validator(mode="before")
    @classmethod
    def lift_tool_shed_status(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        status = data.get("tool_shed_status")
        if not isinstance(status, dict):
            return data
        merged = dict(data)
        for key in TOOL_SHED_STATUS_FIELDS:
            if merged.get(key) is None and key in status:
                merged[key] = status[key]
        return merged

    @field_validator(
        "status",
        "ctx_rev",
        "error_message",
        "installed_changeset_revision",
        "url",
        *TOOL_SHED_STATUS_FIELDS,
        mode="before",
    )
    @classmethod
    def coerce_string(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator(
        "deleted", "dist_to_shed", "uninstalled", "include_datatypes", mode="before"
    )
    @classmethod
    def coerce_bool(cls, v: Any) -> Any:
        return False if v is None else v


@dataclass(frozen=True)
class NothingInstalled:
    """The install call returned no repositories."""


@dataclass(frozen=True)
class ExactlyOne:
    """The install call returned a single repository."""

    result: RepositoryInstallResult


@dataclass(frozen=True)
class Many:
    """The install call returned more than one repository."""

    results: List[RepositoryInstallResult]

    @property
    def primary(self) -> RepositoryInstallResult:
        return self.results[0]

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.results]


InstallOutcome = Union[NothingInstalled, ExactlyOne, Many]


def classify_install_results(
    results: Optional[List[RepositoryInstallResult]],
) -> InstallOutcome:
    """Classify the repositories returned by an install call."""
    if not results:
        return NothingInstalled()
    if len(results) == 1:
        return ExactlyOne(results[0])
    return Many(list(results))


# ==================== Computed state ====================


@dataclass(frozen=True)
class RepositoryState:
    """Registry-owned attributes persisted as the resource's known state."""

    id: str
    status: str = ""
    deleted: bool = False
    ctx_rev: str = ""
    error_message: str = ""
    installed_changeset_revision: str = ""
    url: str = ""
    dist_to_shed: bool = False
    uninstalled: bool = False
    include_datatypes: bool = False
    latest_installable_revision: str = ""
    revision_update: str = ""
    revision_upgrade: str = ""
    repository_deprecated: str = ""

    @classmethod
    def from_result(cls, result: RepositoryInstallResult) -> "RepositoryState":
        """Project a registry result onto the computed attributes."""
        return cls(
            id=result.id,
            status=result.status,
            deleted=result.deleted,
            ctx_rev=result.ctx_rev,
            error_message=result.error_message,
            installed_changeset_revision=result.installed_changeset_revision,
            url=result.url,
            dist_to_shed=result.dist_to_shed,
            uninstalled=result.uninstalled,
            include_datatypes=result.include_datatypes,
            latest_installable_revision=result.latest_installable_revision,
            revision_update=result.revision_update,
            revision_upgrade=result.revision_upgrade,
            repository_deprecated=result.repository_deprecated,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryState":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def drifted(self) -> bool:
        """True when the registry reports the repository as removed."""
        return self.deleted or self.uninstalled


@dataclass
class RepositoryResource:
    """A declared repository together with its last known state."""

    spec: RepositorySpec
    state: Optional[RepositoryState] = None

    @classmethod
    def from_attributes(cls, attributes: Dict[str, Any]) -> "RepositoryResource":
        return cls(spec=RepositorySpec.from_attributes(attributes))

    @property
    def id(self) -> Optional[str]:
        return self.state.id if self.state else None
