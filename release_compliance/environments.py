"""Environment alias resolution.

Grouping keeps the raw environment labels reported by each deployment.
Canonical stages are resolved here, at read time, by checking a fixed list of
aliases per stage; the first alias present wins.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from .models import AliasConflict, DeploymentRecord, StageVersions
from .versions import compare_versions


class Stage(str, Enum):
    DEV = "dev"
    UAT = "uat"
    OAT = "oat"
    PROD = "prod"


# Alias precedence per stage (first present label wins)
STAGE_ALIASES: Dict[Stage, Tuple[str, ...]] = {
    Stage.DEV: ("dev", "development"),
    Stage.UAT: ("uat", "staging"),
    Stage.OAT: ("oat",),
    Stage.PROD: ("prod", "production"),
}


@dataclass(frozen=True)
class ResolvedStages:
    """The record chosen for each canonical stage, or None."""

    dev: Optional[DeploymentRecord] = None
    uat: Optional[DeploymentRecord] = None
    oat: Optional[DeploymentRecord] = None
    prod: Optional[DeploymentRecord] = None

    def record(self, stage: Stage) -> Optional[DeploymentRecord]:
        return getattr(self, stage.value)

    def version(self, stage: Stage) -> Optional[str]:
        """Version for `stage`; None when the stage is absent or unversioned."""
        rec = self.record(stage)
        if rec is None or not rec.has_version:
            return None
        return rec.version

    def present(self, stage: Stage) -> bool:
        return self.version(stage) is not None

    def present_count(self) -> int:
        return sum(1 for s in Stage if self.present(s))

    def snapshot(self) -> StageVersions:
        return StageVersions(
            dev=self.version(Stage.DEV),
            uat=self.version(Stage.UAT),
            oat=self.version(Stage.OAT),
            prod=self.version(Stage.PROD),
        )


def _pick(env_map: Mapping[str, DeploymentRecord], stage: Stage) -> Tuple[Optional[str], Optional[DeploymentRecord]]:
    for label in STAGE_ALIASES[stage]:
        if label in env_map:
            return label, env_map[label]
    return None, None


def resolve_stages(env_map: Mapping[str, DeploymentRecord]) -> ResolvedStages:
    """Resolve the four canonical stages from one service's raw environment map."""
    return ResolvedStages(**{stage.value: _pick(env_map, stage)[1] for stage in Stage})


def stage_for_label(label: Optional[str]) -> Optional[Stage]:
    """Canonical stage a raw label aliases to, or None (labels are matched exactly)."""
    for stage, aliases in STAGE_ALIASES.items():
        if label in aliases:
            return stage
    return None


def _versions_differ(a: Optional[str], b: Optional[str]) -> bool:
    # `1.0` and `1.0.0` are the same release; versioned vs unversioned is not
    if not a or not b:
        return bool(a) != bool(b)
    return compare_versions(a, b) != 0


def find_alias_conflicts(service_name: str, env_map: Mapping[str, DeploymentRecord]) -> List[AliasConflict]:
    """Report stages where a shadowed alias carries a different version.

    e.g. `uat` at 1.2.0 and `staging` at 1.3.0: only `uat` is evaluated, and
    the disagreement is returned so it can be surfaced instead of dropped.
    """
    conflicts: List[AliasConflict] = []
    for stage in Stage:
        chosen_label, chosen = _pick(env_map, stage)
        if chosen is None:
            continue
        for label in STAGE_ALIASES[stage]:
            if label == chosen_label or label not in env_map:
                continue
            other = env_map[label]
            if _versions_differ(chosen.version, other.version):
                conflicts.append(AliasConflict(
                    service_name=service_name,
                    stage=stage.value,
                    chosen_label=chosen_label,
                    chosen_version=chosen.version,
                    ignored_label=label,
                    ignored_version=other.version,
                ))
    return conflicts
