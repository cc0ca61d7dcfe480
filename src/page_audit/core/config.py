"""Configuration loading, merging and resolution.

A configuration is resolved in a fixed order: packaged defaults, the user
document (and whatever it extends), runtime flags, and finally overrides
forced by the gather mode. Cross-reference validation runs once on the
fully merged result, before any gather work starts.
"""

import importlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .artifacts import BASELINE_ARTIFACTS
from .errors import ConfigurationError
from .types import AuditRef, ConfigSettings, GatherMode

if TYPE_CHECKING:
    from ..audits.base import Audit
    from ..gather.base import Gatherer

logger = logging.getLogger(__name__)

CONFIGS_DIR = Path(__file__).parent.parent / "configs"

PRESETS: dict[str, Path] = {
    "default": CONFIGS_DIR / "default.yaml",
    "desktop": CONFIGS_DIR / "desktop.yaml",
}

MAX_EXTENDS_DEPTH = 8


def load_yaml(file_path: Path) -> dict[str, Any]:
    """Load a YAML (or JSON) configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML as dictionary

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path, encoding="utf-8") as f:
        result: dict[str, Any] = yaml.safe_load(f) or {}
        return result


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries.

    Args:
        base: Base configuration
        override: Override configuration (takes precedence)

    Returns:
        Merged configuration
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _entry_key(entry: Any, *keys: str) -> Any:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        for key in keys:
            if entry.get(key) is not None:
                return entry[key]
    return None


def merge_by_key(base: list[Any], override: list[Any], *keys: str) -> list[Any]:
    """Merge two lists of entries, replacing base entries that share a key.

    Args:
        base: Entries from the extended document
        override: Entries from the extending document
        *keys: Dict keys tried in order to identify an entry

    Returns:
        Base order preserved, replaced in place, new entries appended
    """
    result = list(base)
    positions = {_entry_key(entry, *keys): i for i, entry in enumerate(result)}
    for entry in override:
        key = _entry_key(entry, *keys)
        if key is not None and key in positions:
            result[positions[key]] = entry
        else:
            positions[key] = len(result)
            result.append(entry)
    return result


def merge_documents(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge an extending config document onto the document it extends."""
    result = merge_configs(
        {k: v for k, v in base.items() if k not in ("artifacts", "audits", "categories")},
        {k: v for k, v in override.items() if k not in ("artifacts", "audits", "categories")},
    )
    result.pop("extends", None)

    result["artifacts"] = merge_by_key(
        base.get("artifacts") or [], override.get("artifacts") or [], "id"
    )
    result["audits"] = merge_by_key(base.get("audits") or [], override.get("audits") or [], "id", "path")

    categories = dict(base.get("categories") or {})
    for category_id, category in (override.get("categories") or {}).items():
        if category_id in categories:
            merged = merge_configs(categories[category_id], category)
            merged["audit_refs"] = merge_by_key(
                categories[category_id].get("audit_refs") or [],
                category.get("audit_refs") or [],
                "id",
            )
            categories[category_id] = merged
        else:
            categories[category_id] = category
    result["categories"] = categories
    return result


# Configuration document models


class ArtifactEntry(BaseModel):
    """An artifact to gather and the gatherer that produces it."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(description="Artifact name")
    gatherer: str = Field(description="Registered gatherer name or 'module:Class' path")
    dependencies: dict[str, str] = Field(
        default_factory=dict, description="Gatherer dependency key -> artifact id"
    )


class AuditEntry(BaseModel):
    """An audit to run, with optional options."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, description="Registered audit id")
    path: str | None = Field(default=None, description="'module:Class' import path")
    options: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _id_or_path(self) -> "AuditEntry":
        if not self.id and not self.path:
            raise ValueError("Audit entries need an 'id' or a 'path'")
        return self


class CategoryEntry(BaseModel):
    """A weighted group of audits."""

    model_config = ConfigDict(extra="forbid")

    title: str
    description: str = ""
    audit_refs: list[AuditRef] = Field(default_factory=list)


class ConfigDocument(BaseModel):
    """A user-supplied configuration document."""

    model_config = ConfigDict(extra="forbid")

    extends: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    artifacts: list[ArtifactEntry] = Field(default_factory=list)
    audits: list[str | AuditEntry] = Field(default_factory=list)
    categories: dict[str, CategoryEntry] = Field(default_factory=dict)
    groups: dict[str, dict[str, str]] = Field(default_factory=dict)


# Resolved configuration


@dataclass(frozen=True)
class ArtifactDefn:
    """A resolved artifact definition."""

    id: str
    gatherer: type["Gatherer"]
    dependencies: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditDefn:
    """A resolved audit definition."""

    audit: type["Audit"]
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.audit.meta.id


@dataclass(frozen=True)
class CategoryDefn:
    """A resolved category definition."""

    id: str
    title: str
    description: str
    audit_refs: tuple[AuditRef, ...]


@dataclass(frozen=True)
class EffectiveConfig:
    """Immutable configuration produced by ``resolve_config``."""

    settings: ConfigSettings
    artifacts: tuple[ArtifactDefn, ...]
    audits: tuple[AuditDefn, ...]
    categories: Mapping[str, CategoryDefn]
    groups: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    @property
    def gather_mode(self) -> GatherMode:
        return self.settings.gather_mode

    def audit_ids(self) -> list[str]:
        return [defn.id for defn in self.audits]

    def artifact_ids(self) -> list[str]:
        return [defn.id for defn in self.artifacts]


def _import_object(path: str) -> Any:
    module_name, _, attr = path.partition(":")
    if not attr:
        raise ConfigurationError(f"Import path must look like 'module:Name': {path}")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Could not load {path}: {e}") from e


def _load_raw_document(config: Mapping[str, Any] | str | Path | None) -> dict[str, Any]:
    if config is None:
        return load_yaml(PRESETS["default"])
    if isinstance(config, Mapping):
        return dict(config)

    path = PRESETS.get(str(config), Path(config))
    try:
        return load_yaml(path)
    except FileNotFoundError as e:
        raise ConfigurationError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e


def _resolve_extends(raw: dict[str, Any], depth: int = 0) -> dict[str, Any]:
    extends = raw.get("extends")
    if not extends:
        return raw
    if depth >= MAX_EXTENDS_DEPTH:
        raise ConfigurationError("Config 'extends' chain is too deep")

    base = _resolve_extends(_load_raw_document(extends), depth + 1)
    return merge_documents(base, raw)


def _resolve_settings(
    document_settings: dict[str, Any],
    flags: Mapping[str, Any] | None,
    gather_mode: GatherMode,
) -> ConfigSettings:
    merged = merge_configs(document_settings, dict(flags or {}))
    try:
        settings = ConfigSettings(**merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e

    overrides: dict[str, Any] = {"gather_mode": gather_mode}
    if gather_mode != GatherMode.NAVIGATION and settings.throttling_method == "simulate":
        overrides["throttling_method"] = "devtools"
    return settings.model_copy(update=overrides)


def _resolve_gatherer(name: str) -> type["Gatherer"]:
    from ..gather.gatherers import GATHERERS

    if name in GATHERERS:
        return GATHERERS[name]
    if ":" in name:
        return _import_object(name)  # type: ignore[no-any-return]
    raise ConfigurationError(f"Unknown gatherer: {name}")


def _resolve_audit(entry: str | AuditEntry) -> AuditDefn:
    from ..audits import AUDITS

    if isinstance(entry, str):
        entry = AuditEntry(path=entry) if ":" in entry else AuditEntry(id=entry)

    if entry.path:
        audit_cls = _import_object(entry.path)
    elif entry.id in AUDITS:
        audit_cls = AUDITS[entry.id]
    else:
        raise ConfigurationError(f"Unknown audit: {entry.id}")

    options = merge_configs(dict(audit_cls.meta.default_options), entry.options)
    return AuditDefn(audit=audit_cls, options=MappingProxyType(options))


def _find_duplicates(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    duplicates = []
    for item in ids:
        if item in seen:
            duplicates.append(item)
        seen.add(item)
    return duplicates


def _prune_categories(
    categories: dict[str, CategoryDefn], removed_audits: set[str]
) -> dict[str, CategoryDefn]:
    """Drop refs to removed audits, and categories emptied by that."""
    if not removed_audits:
        return categories

    result = {}
    for category_id, category in categories.items():
        refs = tuple(ref for ref in category.audit_refs if ref.id not in removed_audits)
        if category.audit_refs and not refs:
            logger.debug(f"Dropping category {category_id}: no audits left")
            continue
        result[category_id] = CategoryDefn(
            id=category.id,
            title=category.title,
            description=category.description,
            audit_refs=refs,
        )
    return result


def _filter_by_gather_mode(
    artifacts: list[ArtifactDefn],
    audits: list[AuditDefn],
    categories: dict[str, CategoryDefn],
    mode: GatherMode,
) -> tuple[list[ArtifactDefn], list[AuditDefn], dict[str, CategoryDefn]]:
    removed_artifacts: set[str] = set()
    kept_artifacts = []
    for defn in artifacts:
        unsupported = mode not in defn.gatherer.meta.supported_modes
        if unsupported or any(dep in removed_artifacts for dep in defn.dependencies.values()):
            logger.debug(f"Artifact {defn.id} is not available in {mode.value} mode")
            removed_artifacts.add(defn.id)
        else:
            kept_artifacts.append(defn)

    kept_audits = []
    removed_audits: set[str] = set()
    for defn in audits:
        meta = defn.audit.meta
        mode_supported = meta.supported_modes is None or mode in meta.supported_modes
        if mode_supported and not removed_artifacts.intersection(meta.required_artifacts):
            kept_audits.append(defn)
        else:
            removed_audits.add(defn.id)

    return kept_artifacts, kept_audits, _prune_categories(categories, removed_audits)


def _required_artifacts(artifacts: list[ArtifactDefn], audits: list[AuditDefn]) -> set[str]:
    by_id = {defn.id: defn for defn in artifacts}
    required: set[str] = set()
    pending = [name for defn in audits for name in defn.audit.meta.required_artifacts]
    while pending:
        name = pending.pop()
        if name in required:
            continue
        required.add(name)
        if name in by_id:
            pending.extend(by_id[name].dependencies.values())
    return required


def _filter_explicitly(
    settings: ConfigSettings,
    artifacts: list[ArtifactDefn],
    audits: list[AuditDefn],
    categories: dict[str, CategoryDefn],
) -> tuple[list[ArtifactDefn], list[AuditDefn], dict[str, CategoryDefn]]:
    only_audits = set(settings.only_audits or ())
    skip_audits = set(settings.skip_audits or ())
    only_categories = set(settings.only_categories or ())
    if not (only_audits or skip_audits or only_categories):
        return artifacts, audits, categories

    audit_ids = {defn.id for defn in audits}
    for audit_id in (only_audits | skip_audits) - audit_ids:
        logger.warning(f"Unrecognized audit in settings: '{audit_id}'")
    for category_id in only_categories - set(categories):
        logger.warning(f"Unrecognized category in 'only_categories': '{category_id}'")

    if only_categories:
        categories = {k: v for k, v in categories.items() if k in only_categories}

    if only_audits or only_categories:
        included = set(only_audits)
        if only_categories:
            for category in categories.values():
                included.update(ref.id for ref in category.audit_refs)
    else:
        included = set(audit_ids)
    included -= skip_audits

    kept_audits = [defn for defn in audits if defn.id in included]
    removed = audit_ids - included
    categories = _prune_categories(categories, removed)
    if only_audits and not only_categories:
        categories = {
            k: v
            for k, v in categories.items()
            if any(ref.id in only_audits for ref in v.audit_refs)
        }

    required = _required_artifacts(artifacts, kept_audits)
    kept_artifacts = [defn for defn in artifacts if defn.id in required]
    return kept_artifacts, kept_audits, categories


def _validate(
    artifacts: list[ArtifactDefn],
    audits: list[AuditDefn],
    categories: dict[str, CategoryDefn],
) -> None:
    from ..computed import COMPUTED_ARTIFACTS

    duplicates = _find_duplicates(defn.id for defn in artifacts)
    if duplicates:
        raise ConfigurationError(f"Duplicate artifact ids: {', '.join(duplicates)}")

    duplicates = _find_duplicates(defn.id for defn in audits)
    if duplicates:
        raise ConfigurationError(f"Duplicate audit ids: {', '.join(duplicates)}")

    declared: set[str] = set()
    for defn in artifacts:
        for key in defn.gatherer.meta.dependencies:
            if key not in defn.dependencies:
                raise ConfigurationError(
                    f"Artifact {defn.id} is missing a mapping for dependency '{key}'"
                )
        for dep in defn.dependencies.values():
            if dep not in declared:
                raise ConfigurationError(
                    f"Artifact {defn.id} depends on {dep}, which is not gathered before it"
                )
        declared.add(defn.id)

    available = declared | BASELINE_ARTIFACTS
    for audit_defn in audits:
        meta = audit_defn.audit.meta
        for name in meta.required_artifacts:
            if name not in available:
                raise ConfigurationError(
                    f"Audit {meta.id} requires artifact {name}, which no gatherer produces"
                )
        for name in meta.required_computed:
            if name not in COMPUTED_ARTIFACTS:
                raise ConfigurationError(
                    f"Audit {meta.id} requires unknown computed artifact {name}"
                )

    audit_ids = {defn.id for defn in audits}
    for category in categories.values():
        for ref in category.audit_refs:
            if ref.id not in audit_ids:
                raise ConfigurationError(
                    f"Category {category.id} references unknown audit {ref.id}"
                )


def resolve_config(
    config: Mapping[str, Any] | str | Path | None = None,
    flags: Mapping[str, Any] | None = None,
    gather_mode: GatherMode | str = GatherMode.NAVIGATION,
) -> EffectiveConfig:
    """Resolve a configuration document into an EffectiveConfig.

    Args:
        config: Config document, a path to one, a preset name, or None for defaults
        flags: Runtime settings overrides
        gather_mode: Gather mode the config will be used for

    Returns:
        Validated, immutable EffectiveConfig

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    mode = GatherMode(gather_mode)
    raw = _resolve_extends(_load_raw_document(config))

    try:
        document = ConfigDocument.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    settings = _resolve_settings(document.settings, flags, mode)

    artifacts = []
    for entry in document.artifacts:
        gatherer = _resolve_gatherer(entry.gatherer)
        dependencies = {key: key for key in gatherer.meta.dependencies}
        dependencies.update(entry.dependencies)
        artifacts.append(ArtifactDefn(entry.id, gatherer, MappingProxyType(dependencies)))

    audits = [_resolve_audit(entry) for entry in document.audits]
    categories = {
        category_id: CategoryDefn(
            id=category_id,
            title=entry.title,
            description=entry.description,
            audit_refs=tuple(entry.audit_refs),
        )
        for category_id, entry in document.categories.items()
    }

    artifacts, audits, categories = _filter_by_gather_mode(artifacts, audits, categories, mode)
    artifacts, audits, categories = _filter_explicitly(settings, artifacts, audits, categories)
    _validate(artifacts, audits, categories)

    logger.debug(
        f"Resolved {mode.value} config: {len(artifacts)} artifacts, "
        f"{len(audits)} audits, {len(categories)} categories"
    )
    return EffectiveConfig(
        settings=settings,
        artifacts=tuple(artifacts),
        audits=tuple(audits),
        categories=MappingProxyType(categories),
        groups=MappingProxyType({k: MappingProxyType(v) for k, v in document.groups.items()}),
    )
