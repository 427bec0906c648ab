from datetime import datetime, timezone

import pytest

from release_compliance.models import DeploymentRecord, Status

FIXED_TS = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("COMPLIANCE_CONFIG", "COMPLIANCE_INCLUDE_MISSING_UAT_WARNING", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fixed_ts():
    return FIXED_TS


@pytest.fixture
def make_service():
    """Build one record per (environment, version) pair for a service."""

    def _make(name, project_id=None, status=Status.ONLINE, **versions):
        return [
            DeploymentRecord(
                service_name=name,
                version=version,
                environment=env,
                status=status,
                project_id=project_id,
            )
            for env, version in versions.items()
        ]

    return _make
