from dataclasses import replace
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import ComplianceConfig, load_config
from .engine import evaluate_compliance
from .errors import ComplianceError, EvaluationError
from .fleet import filter_records, fleet_metrics, version_matrix
from .logging_utils import logger

APP_NAME = "release-compliance"

RETRY_DETAIL = "Failed to check compliance. Please try again."


class ProjectIn(BaseModel):
    id: Union[int, str]
    name: str


# Records stay loose mappings: DeploymentRecord.from_dict applies the defaults
# (numeric versions, `service`/`name` keys, unknown statuses) instead of a 422.
class EvaluateRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    projects: List[ProjectIn] = Field(default_factory=list)
    includeMissingUatWarning: Optional[bool] = None


class MetricsRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    projectId: Optional[Union[int, str]] = None
    environment: Optional[str] = None
    region: Optional[str] = None
    includeMissingUatWarning: Optional[bool] = None


@lru_cache(maxsize=1)
def get_cfg() -> ComplianceConfig:
    """Configuration is read once per process (.env, $COMPLIANCE_CONFIG)."""
    return load_config()


def _request_cfg(include_missing_uat_warning: Optional[bool]) -> ComplianceConfig:
    try:
        cfg = get_cfg()
    except ComplianceError as e:
        logger.error("compliance_config_failed", error=str(e))
        raise HTTPException(status_code=500, detail=RETRY_DETAIL) from e
    if include_missing_uat_warning is not None:
        cfg = replace(cfg, include_missing_uat_warning=include_missing_uat_warning)
    return cfg


def _projects(projects: List[ProjectIn]) -> List[Dict[str, Any]]:
    return [p.model_dump() for p in projects]


def _run(req: EvaluateRequest):
    cfg = _request_cfg(req.includeMissingUatWarning)
    try:
        return evaluate_compliance(req.records, _projects(req.projects), config=cfg)
    except EvaluationError as e:
        logger.error("compliance_request_failed", error=str(e), service=e.service)
        raise HTTPException(status_code=500, detail=RETRY_DETAIL) from e


app = FastAPI(title=APP_NAME)

# CORS for the local dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8000",
        "http://127.0.0.1:8000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "service": APP_NAME}


@app.post("/api/compliance/evaluate")
def compliance_evaluate(req: EvaluateRequest) -> Dict[str, Any]:
    return _run(req).to_dict()


@app.post("/api/compliance/matrix")
def compliance_matrix(req: EvaluateRequest) -> Dict[str, Any]:
    result = _run(req)
    return {
        "rows": [row.to_dict() for row in version_matrix(result, _projects(req.projects))],
        "timestamp": result.computed_at.isoformat(),
    }


@app.post("/api/fleet/metrics")
def fleet_metrics_endpoint(req: MetricsRequest) -> Dict[str, Any]:
    cfg = _request_cfg(req.includeMissingUatWarning)
    filtered = filter_records(
        req.records,
        project_id=req.projectId,
        environment=req.environment,
        region=req.region,
    )
    try:
        return fleet_metrics(filtered, config=cfg).to_dict()
    except EvaluationError as e:
        logger.error("fleet_metrics_failed", error=str(e), service=e.service)
        raise HTTPException(status_code=500, detail=RETRY_DETAIL) from e
