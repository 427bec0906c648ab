"""Promotion-order rules.

A version must never sit further along the pipeline than it does in an
earlier stage (dev -> uat/staging -> oat -> prod). Rules run in a fixed
order and do not short-circuit: one service can break several at once.

R1  prod > uat                 critical
R2  prod > oat                 critical
R3  oat > uat                  warning
R4  prod present, uat missing  warning (optional, see RuleSet)
"""
from dataclasses import dataclass
from typing import Callable, List, Optional

from .environments import ResolvedStages, Stage
from .models import Severity, StageVersions, Violation
from .versions import compare_versions


@dataclass(frozen=True)
class RuleSet:
    # The compliance tab reported R4, the dashboard score did not.
    include_missing_uat_warning: bool = True


DEFAULT_RULE_SET = RuleSet()


@dataclass(frozen=True)
class _OrderRule:
    rule: str
    later: Stage
    earlier: Stage
    severity: Severity


ORDER_RULES = (
    _OrderRule("R1", Stage.PROD, Stage.UAT, Severity.CRITICAL),
    _OrderRule("R2", Stage.PROD, Stage.OAT, Severity.CRITICAL),
    _OrderRule("R3", Stage.OAT, Stage.UAT, Severity.WARNING),
)

MISSING_UAT_RULE = "R4"


def _stage_name(stage: Stage) -> str:
    return stage.value.upper()


def evaluate(
    service_name: str,
    project_name: str,
    stages: ResolvedStages,
    rule_set: Optional[RuleSet] = None,
) -> List[Violation]:
    """Return the violations for one service, in rule order."""
    rule_set = rule_set or DEFAULT_RULE_SET
    versions: StageVersions = stages.snapshot()
    violations: List[Violation] = []

    for r in ORDER_RULES:
        later = stages.version(r.later)
        earlier = stages.version(r.earlier)
        if later is None or earlier is None:
            continue
        if compare_versions(later, earlier) > 0:
            violations.append(Violation(
                service_name=service_name,
                project_name=project_name,
                rule=r.rule,
                severity=r.severity,
                message=(
                    f"{_stage_name(r.later)} version ({later}) is higher than "
                    f"{_stage_name(r.earlier)} version ({earlier})"
                ),
                stage_versions=versions,
            ))

    if rule_set.include_missing_uat_warning and stages.present(Stage.PROD) and not stages.present(Stage.UAT):
        violations.append(Violation(
            service_name=service_name,
            project_name=project_name,
            rule=MISSING_UAT_RULE,
            severity=Severity.WARNING,
            message=f"PROD exists ({stages.version(Stage.PROD)}) but UAT environment is missing",
            stage_versions=versions,
        ))

    return violations


Evaluator = Callable[[str, str, ResolvedStages, Optional[RuleSet]], List[Violation]]
