"""Fleet-level views built on the same snapshot: filters, health metrics and
the per-service version matrix."""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .config import ComplianceConfig
from .engine import Projects, evaluate_compliance, project_lookup, round_half_up
from .environments import resolve_stages
from .grouping import RecordLike, as_record
from .models import UNKNOWN, UNKNOWN_PROJECT, ComplianceResult, DeploymentRecord, StageVersions, Status

ALL = "all"


def _is_unset(value: Any) -> bool:
    return value is None or value == "" or value == ALL


def filter_records(
    records: Iterable[RecordLike],
    *,
    project_id: Any = None,
    environment: Optional[str] = None,
    region: Optional[str] = None,
) -> List[DeploymentRecord]:
    """Keep records matching every given filter; None or "all" disables a filter.

    Environment and region match raw labels exactly.
    """
    out: List[DeploymentRecord] = []
    for item in records:
        rec = as_record(item)
        if not _is_unset(project_id) and str(rec.project_id) != str(project_id):
            continue
        if not _is_unset(environment) and rec.environment != environment:
            continue
        if not _is_unset(region) and (rec.region or UNKNOWN) != region:
            continue
        out.append(rec)
    return out


@dataclass(frozen=True)
class FleetMetrics:
    total: int
    online: int
    offline: int
    average_response_time_ms: int
    uptime_percent: int
    compliance_percent: int
    environment_distribution: Dict[str, int] = field(default_factory=dict)
    region_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "online": self.online,
            "offline": self.offline,
            "avgResponseTime": self.average_response_time_ms,
            "uptimePercent": self.uptime_percent,
            "compliancePercent": self.compliance_percent,
            "environmentDistribution": dict(self.environment_distribution),
            "regionDistribution": dict(self.region_distribution),
        }


def fleet_metrics(records: Iterable[RecordLike], *, config: Optional[ComplianceConfig] = None) -> FleetMetrics:
    """Health and compliance figures for an already filtered set of records.

    `compliance_percent` runs the same rule set as `evaluate_compliance` over
    just these records, so it follows the project/environment/region filter.
    """
    recs = [as_record(r) for r in records]
    online = [r for r in recs if r.status is Status.ONLINE]
    offline = [r for r in recs if r.status is Status.OFFLINE]

    # Online records without a measured time count as 0 ms
    avg = sum(r.response_time_ms or 0.0 for r in online) / len(online) if online else 0.0
    uptime = round_half_up(100.0 * len(online) / len(recs)) if recs else 100

    env_dist: Dict[str, int] = {}
    region_dist: Dict[str, int] = {}
    for r in recs:
        env_key = r.environment or UNKNOWN
        region_key = r.region or UNKNOWN
        env_dist[env_key] = env_dist.get(env_key, 0) + 1
        region_dist[region_key] = region_dist.get(region_key, 0) + 1

    compliance = evaluate_compliance(recs, config=config)

    return FleetMetrics(
        total=len(recs),
        online=len(online),
        offline=len(offline),
        average_response_time_ms=round_half_up(avg),
        uptime_percent=uptime,
        compliance_percent=compliance.compliance_score_percent,
        environment_distribution=env_dist,
        region_distribution=region_dist,
    )


@dataclass(frozen=True)
class MatrixRow:
    service_name: str
    project_name: str
    stage_versions: StageVersions
    status: Status
    response_time_ms: float
    has_violation: bool
    environments: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "projectName": self.project_name,
            "versions": self.stage_versions.to_dict(),
            "status": self.status.value,
            "responseTime": self.response_time_ms,
            "hasViolation": self.has_violation,
            "environments": list(self.environments),
        }


def version_matrix(result: ComplianceResult, projects: Optional[Projects] = None) -> List[MatrixRow]:
    """One row per service, in grouping order.

    Project, status and response time describe the first record seen for the
    service; the stage columns use the resolved (aliased) versions.
    """
    lookup = project_lookup(projects)
    in_violation = set(result.services_in_violation())
    rows: List[MatrixRow] = []
    for name, env_map in result.grouped_services.items():
        first = next(iter(env_map.values()), None)
        project_name = UNKNOWN_PROJECT
        if first is not None and first.project_id is not None:
            project_name = lookup.get(str(first.project_id), UNKNOWN_PROJECT)
        rows.append(MatrixRow(
            service_name=name,
            project_name=project_name,
            stage_versions=resolve_stages(env_map).snapshot(),
            status=first.status if first else Status.UNKNOWN,
            response_time_ms=(first.response_time_ms or 0.0) if first else 0.0,
            has_violation=name in in_violation,
            environments=list(env_map),
        ))
    return rows
