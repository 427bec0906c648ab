from release_compliance.environments import resolve_stages
from release_compliance.grouping import group_records
from release_compliance.models import Severity
from release_compliance.rules import RuleSet, evaluate


def _evaluate(make_service, rule_set=None, **versions):
    env_map = group_records(make_service("svc", **versions))["svc"]
    return evaluate("svc", "Payments", resolve_stages(env_map), rule_set)


def test_prod_ahead_of_uat_is_critical(make_service):
    found = _evaluate(make_service, prod="2.1.0", uat="2.0.0")
    assert [(v.rule, v.severity) for v in found] == [("R1", Severity.CRITICAL)]
    assert found[0].message == "PROD version (2.1.0) is higher than UAT version (2.0.0)"
    assert found[0].project_name == "Payments"


def test_prod_ahead_of_oat_is_critical(make_service):
    found = _evaluate(make_service, prod="2.1.0", uat="3.0.0", oat="2.0.0")
    assert [v.rule for v in found] == ["R2"]
    assert found[0].message == "PROD version (2.1.0) is higher than OAT version (2.0.0)"


def test_oat_ahead_of_uat_is_warning(make_service):
    found = _evaluate(make_service, oat="1.5.0", uat="1.4.0")
    assert [(v.rule, v.severity) for v in found] == [("R3", Severity.WARNING)]
    assert found[0].message == "OAT version (1.5.0) is higher than UAT version (1.4.0)"


def test_rules_accumulate_in_order(make_service):
    found = _evaluate(make_service, dev="0.1", uat="1.0", oat="2.0", prod="3.0")
    assert [v.rule for v in found] == ["R1", "R2", "R3"]
    assert all(v.stage_versions.prod == "3.0" for v in found)
    assert found[0].stage_versions.dev == "0.1"


def test_correct_promotion_order_has_no_violations(make_service):
    assert _evaluate(make_service, dev="1.0.0", uat="1.1.0", oat="1.1.0", prod="1.0.5") == []


def test_missing_uat_warning_toggle(make_service):
    found = _evaluate(make_service, prod="3.0.0")
    assert [(v.rule, v.severity) for v in found] == [("R4", Severity.WARNING)]
    assert found[0].message == "PROD exists (3.0.0) but UAT environment is missing"

    assert _evaluate(make_service, RuleSet(include_missing_uat_warning=False), prod="3.0.0") == []


def test_staging_satisfies_uat_requirement(make_service):
    assert _evaluate(make_service, staging="3.0.0", production="3.0.0") == []


def test_unversioned_uat_triggers_missing_uat(make_service):
    found = _evaluate(make_service, uat=None, prod="1.0")
    assert [v.rule for v in found] == ["R4"]


def test_no_stages_no_violations(make_service):
    assert _evaluate(make_service, qa="1.0", green="2.0") == []


def test_single_non_prod_stage_has_no_violations(make_service):
    assert _evaluate(make_service, uat="9.9.9") == []
    assert _evaluate(make_service, oat="9.9.9") == []
    assert _evaluate(make_service, dev="9.9.9") == []
    assert _evaluate(make_service, development="1.0", staging="0.1") == []
