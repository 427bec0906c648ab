"""Version-promotion compliance for a fleet of deployed services."""
from .config import ComplianceConfig, load_config
from .engine import aggregate, evaluate_compliance
from .environments import ResolvedStages, Stage, find_alias_conflicts, resolve_stages
from .errors import ComplianceError, ConfigError, EvaluationError
from .grouping import group_records
from .models import (
    AliasConflict,
    ComplianceResult,
    DeploymentRecord,
    Severity,
    StageVersions,
    Status,
    Violation,
)
from .rules import RuleSet, evaluate
from .versions import compare_versions, parse_version

__all__ = [
    "AliasConflict",
    "ComplianceConfig",
    "ComplianceError",
    "ComplianceResult",
    "ConfigError",
    "DeploymentRecord",
    "EvaluationError",
    "ResolvedStages",
    "RuleSet",
    "Severity",
    "Stage",
    "StageVersions",
    "Status",
    "Violation",
    "aggregate",
    "compare_versions",
    "evaluate",
    "evaluate_compliance",
    "find_alias_conflicts",
    "group_records",
    "load_config",
    "parse_version",
    "resolve_stages",
]
