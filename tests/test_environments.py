from release_compliance.environments import (
    Stage,
    find_alias_conflicts,
    resolve_stages,
    stage_for_label,
)
from release_compliance.grouping import group_records


def _env_map(make_service, **versions):
    return group_records(make_service("svc", **versions))["svc"]


def test_primary_alias_wins_over_secondary(make_service):
    env_map = _env_map(make_service, uat="1.0.0", staging="2.0.0", prod="1.0.0", production="9.9.9")
    stages = resolve_stages(env_map)
    assert stages.version(Stage.UAT) == "1.0.0"
    assert stages.version(Stage.PROD) == "1.0.0"
    # raw map still holds both labels
    assert set(env_map) == {"uat", "staging", "prod", "production"}


def test_secondary_alias_used_when_primary_missing(make_service):
    stages = resolve_stages(_env_map(make_service, development="0.1", staging="0.2", production="0.3"))
    assert stages.snapshot().dev == "0.1"
    assert stages.snapshot().uat == "0.2"
    assert stages.snapshot().prod == "0.3"
    assert stages.oat is None


def test_unversioned_record_counts_as_absent(make_service):
    stages = resolve_stages(_env_map(make_service, uat=None, staging="1.0.0", prod="1.0.0"))
    # uat key exists so it wins, but carries no version
    assert stages.uat is not None
    assert not stages.present(Stage.UAT)
    assert stages.present_count() == 1


def test_labels_are_not_normalized(make_service):
    stages = resolve_stages(_env_map(make_service, PROD="1.0.0", Uat="1.0.0"))
    assert stages.present_count() == 0
    assert stage_for_label("PROD") is None
    assert stage_for_label("staging") is Stage.UAT


def test_alias_conflict_reported_when_versions_differ(make_service):
    env_map = _env_map(make_service, uat="1.2.0", staging="1.3.0", prod="1.0.0", production="1.0.0")
    conflicts = find_alias_conflicts("svc", env_map)
    assert len(conflicts) == 1
    c = conflicts[0]
    assert (c.stage, c.chosen_label, c.chosen_version) == ("uat", "uat", "1.2.0")
    assert (c.ignored_label, c.ignored_version) == ("staging", "1.3.0")


def test_resolution_does_not_mutate_map(make_service):
    env_map = _env_map(make_service, dev="1", development="2")
    before = dict(env_map)
    resolve_stages(env_map)
    find_alias_conflicts("svc", env_map)
    assert env_map == before


def test_equivalent_alias_versions_are_not_conflicts(make_service):
    env_map = _env_map(make_service, uat="1.0", staging="1.0.0", prod="v2", production="2.0.0")
    assert find_alias_conflicts("svc", env_map) == []


def test_versioned_vs_unversioned_alias_is_a_conflict(make_service):
    env_map = _env_map(make_service, uat=None, staging="1.0.0")
    conflicts = find_alias_conflicts("svc", env_map)
    assert [(c.chosen_version, c.ignored_version) for c in conflicts] == [(None, "1.0.0")]
