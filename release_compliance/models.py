"""Core data model for compliance evaluation.

Everything here is a frozen dataclass: the engine reads a snapshot of
deployment records and emits immutable results.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

UNKNOWN = "unknown"
UNKNOWN_PROJECT = "Unknown"

ProjectId = Union[int, str]


class Status(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Status":
        s = str(value or "").strip().lower()
        for member in cls:
            if member.value == s:
                return member
        return cls.UNKNOWN


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class DeploymentRecord:
    """One observed deployment of a service in one environment."""

    service_name: str = UNKNOWN
    version: Optional[str] = None
    environment: str = UNKNOWN
    status: Status = Status.UNKNOWN
    response_time_ms: Optional[float] = None
    project_id: Optional[ProjectId] = None
    region: Optional[str] = None
    url: Optional[str] = None

    @property
    def has_version(self) -> bool:
        return bool(self.version)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DeploymentRecord":
        """Build a record from a loose mapping as supplied by the data source.

        Accepts camelCase (`responseTime`, `projectId`) and snake_case keys.
        Missing or malformed fields fall back to defaults instead of raising.
        """
        name = raw.get("name") or raw.get("service") or raw.get("service_name")
        project_id = raw.get("projectId", raw.get("project_id"))
        response_time = raw.get("responseTime", raw.get("response_time_ms"))
        return cls(
            service_name=_str_or_none(name) or UNKNOWN,
            version=_str_or_none(raw.get("version")),
            environment=_str_or_none(raw.get("environment")) or UNKNOWN,
            status=Status.parse(raw.get("status")),
            response_time_ms=_float_or_none(response_time),
            project_id=project_id if isinstance(project_id, (int, str)) and not isinstance(project_id, bool) else None,
            region=_str_or_none(raw.get("region")),
            url=_str_or_none(raw.get("url")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "version": self.version,
            "environment": self.environment,
            "status": self.status.value,
            "responseTime": self.response_time_ms,
            "projectId": self.project_id,
            "region": self.region,
            "url": self.url,
        }


# Raw environment label -> most recent record under that exact label
ServiceEnvironmentMap = Dict[str, DeploymentRecord]


@dataclass(frozen=True)
class StageVersions:
    dev: Optional[str] = None
    uat: Optional[str] = None
    oat: Optional[str] = None
    prod: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        # Absent stages are omitted, like optional fields in the UI payload
        out = {"dev": self.dev, "uat": self.uat, "oat": self.oat, "prod": self.prod}
        return {k: v for k, v in out.items() if v is not None}


@dataclass(frozen=True)
class Violation:
    service_name: str
    project_name: str
    rule: str
    severity: Severity
    message: str
    stage_versions: StageVersions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "projectName": self.project_name,
            "rule": self.rule,
            "severity": self.severity.value,
            "violation": self.message,
            "environments": self.stage_versions.to_dict(),
        }


@dataclass(frozen=True)
class AliasConflict:
    """Two aliases of one stage are populated with different versions.

    Only `chosen_label` takes part in rule evaluation.
    """

    service_name: str
    stage: str
    chosen_label: str
    chosen_version: Optional[str]
    ignored_label: str
    ignored_version: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "stage": self.stage,
            "chosenLabel": self.chosen_label,
            "chosenVersion": self.chosen_version,
            "ignoredLabel": self.ignored_label,
            "ignoredVersion": self.ignored_version,
        }


@dataclass(frozen=True)
class ComplianceResult:
    grouped_services: Dict[str, ServiceEnvironmentMap]
    violations: Tuple[Violation, ...]
    total_services: int
    services_with_violations: int
    compliant_services: int
    compliance_score_percent: int
    computed_at: datetime
    alias_conflicts: Tuple[AliasConflict, ...] = field(default_factory=tuple)

    @property
    def total_violations(self) -> int:
        return len(self.violations)

    @property
    def critical_violations(self) -> int:
        return sum(1 for v in self.violations if v.severity is Severity.CRITICAL)

    @property
    def warning_violations(self) -> int:
        return sum(1 for v in self.violations if v.severity is Severity.WARNING)

    def services_in_violation(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for v in self.violations:
            seen.setdefault(v.service_name, None)
        return tuple(seen)

    def to_dict(self) -> Dict[str, Any]:
        """Payload consumed by presentation code (metric cards, violation list, matrix)."""
        return {
            "services": {
                name: {label: rec.to_dict() for label, rec in envs.items()}
                for name, envs in self.grouped_services.items()
            },
            "violations": [v.to_dict() for v in self.violations],
            "aliasConflicts": [c.to_dict() for c in self.alias_conflicts],
            "totalViolations": self.total_violations,
            "criticalViolations": self.critical_violations,
            "warningViolations": self.warning_violations,
            "totalServices": self.total_services,
            "servicesWithViolations": self.services_with_violations,
            "compliantServices": self.compliant_services,
            "complianceScore": self.compliance_score_percent,
            "timestamp": self.computed_at.isoformat(),
        }
