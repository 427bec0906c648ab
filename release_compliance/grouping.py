from typing import Any, Dict, Iterable, Mapping, Union

from .models import UNKNOWN, DeploymentRecord, ServiceEnvironmentMap

RecordLike = Union[DeploymentRecord, Mapping[str, Any]]


def as_record(item: RecordLike) -> DeploymentRecord:
    if isinstance(item, DeploymentRecord):
        return item
    return DeploymentRecord.from_dict(item)


def group_records(records: Iterable[RecordLike]) -> Dict[str, ServiceEnvironmentMap]:
    """Group deployments by service name, then by raw environment label.

    Single pass. Services keep first-seen order; a later record under the
    same raw label replaces the earlier one. Aliases (`uat` / `staging`) are
    kept as separate keys.
    """
    grouped: Dict[str, ServiceEnvironmentMap] = {}
    for item in records:
        rec = as_record(item)
        service = rec.service_name or UNKNOWN
        envs = grouped.setdefault(service, {})
        envs[rec.environment or UNKNOWN] = rec
    return grouped
