"""Compliance aggregation.

`evaluate_compliance` is the entry point for callers: it groups a snapshot of
deployment records, evaluates every service and rolls the violations up into
a fleet-wide score. It keeps no state between calls; refresh timers belong to
whoever calls it.
"""
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .config import ComplianceConfig
from .environments import ResolvedStages, Stage, find_alias_conflicts, resolve_stages
from .errors import EvaluationError
from .grouping import RecordLike, group_records
from .logging_utils import logger
from .models import (
    UNKNOWN_PROJECT,
    AliasConflict,
    ComplianceResult,
    ServiceEnvironmentMap,
    Violation,
)
from .rules import Evaluator, RuleSet, evaluate

# projectId -> name, or the raw project list ({"id": ..., "name": ...})
Projects = Union[Mapping[Any, str], Iterable[Mapping[str, Any]]]

# Stage records consulted (in order) to find a service's project
_PROJECT_STAGE_ORDER = (Stage.PROD, Stage.OAT, Stage.UAT, Stage.DEV)


def project_lookup(projects: Optional[Projects]) -> Dict[str, str]:
    """Normalize a project source to {str(project_id): name}."""
    if not projects:
        return {}
    if isinstance(projects, Mapping):
        return {str(k): str(v) for k, v in projects.items() if v}
    out: Dict[str, str] = {}
    for p in projects:
        pid = p.get("id")
        name = p.get("name")
        if pid is not None and name:
            out[str(pid)] = str(name)
    return out


def project_name_for(stages: ResolvedStages, env_map: ServiceEnvironmentMap, lookup: Mapping[str, str]) -> str:
    """First known project among prod, oat, uat, dev, then any raw record."""
    candidates = [stages.record(s) for s in _PROJECT_STAGE_ORDER]
    candidates.extend(env_map.values())
    for rec in candidates:
        if rec is None or rec.project_id is None:
            continue
        name = lookup.get(str(rec.project_id))
        if name:
            return name
    return UNKNOWN_PROJECT


def round_half_up(value: float) -> int:
    """Round like the dashboard's Math.round: .5 always goes up."""
    return int(math.floor(value + 0.5))


def compliance_score(total: int, compliant: int) -> int:
    """Percentage of compliant services, rounded half up; 100 for an empty fleet."""
    if total <= 0:
        return 100
    return round_half_up(100.0 * compliant / total)


def aggregate(
    grouped: Mapping[str, ServiceEnvironmentMap],
    evaluator: Evaluator = evaluate,
    *,
    projects: Optional[Projects] = None,
    rule_set: Optional[RuleSet] = None,
    computed_at: Optional[datetime] = None,
) -> ComplianceResult:
    """Evaluate every grouped service and roll the violations up.

    Raises EvaluationError if any service fails; nothing is returned for a
    partially evaluated snapshot.
    """
    lookup = project_lookup(projects)
    violations: List[Violation] = []
    conflicts: List[AliasConflict] = []
    services_with_violations = 0

    service_name = ""
    try:
        for service_name, env_map in grouped.items():
            stages = resolve_stages(env_map)
            project_name = project_name_for(stages, env_map, lookup)

            found = list(evaluator(service_name, project_name, stages, rule_set))
            violations.extend(found)
            if found:
                services_with_violations += 1

            for c in find_alias_conflicts(service_name, env_map):
                logger.warn(
                    "alias_conflict",
                    service=c.service_name,
                    stage=c.stage,
                    chosen=f"{c.chosen_label}={c.chosen_version}",
                    ignored=f"{c.ignored_label}={c.ignored_version}",
                )
                conflicts.append(c)
    except Exception as e:
        logger.error("compliance_evaluation_failed", service=service_name, error=str(e), error_type=e.__class__.__name__)
        raise EvaluationError(f"Compliance evaluation failed for service {service_name!r}: {e}", service=service_name) from e

    total = len(grouped)
    compliant = total - services_with_violations
    if compliant < 0:
        raise EvaluationError(f"More services with violations ({services_with_violations}) than services ({total})")

    result = ComplianceResult(
        grouped_services={name: dict(envs) for name, envs in grouped.items()},
        violations=tuple(violations),
        total_services=total,
        services_with_violations=services_with_violations,
        compliant_services=compliant,
        compliance_score_percent=compliance_score(total, compliant),
        computed_at=computed_at or datetime.now(timezone.utc),
        alias_conflicts=tuple(conflicts),
    )
    logger.info(
        "compliance_evaluated",
        total_services=total,
        services_with_violations=services_with_violations,
        violations=len(violations),
        score=result.compliance_score_percent,
    )
    return result


def evaluate_compliance(
    records: Iterable[RecordLike],
    projects: Optional[Projects] = None,
    *,
    config: Optional[ComplianceConfig] = None,
    computed_at: Optional[datetime] = None,
) -> ComplianceResult:
    """Group a snapshot of deployment records and evaluate it."""
    config = config or ComplianceConfig()
    try:
        grouped = group_records(records)
    except Exception as e:
        logger.error("compliance_grouping_failed", error=str(e), error_type=e.__class__.__name__)
        raise EvaluationError(f"Could not group deployment records: {e}") from e
    return aggregate(grouped, projects=projects, rule_set=config.rule_set(), computed_at=computed_at)
