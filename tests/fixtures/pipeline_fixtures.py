"""Fixtures for pipeline list payloads and models."""

from typing import Any
from typing import Dict
from typing import Optional

import pytest


@pytest.fixture
def make_lock():
    """Factory for a lock payload as reported by the orchestrator."""

    def _create_lock(
        status: str = "running",
        locked_by: str = "runner@example.com",
        locked_at: Optional[str] = "2025-06-01T11:55:00+00:00",
        flow_run_id: Optional[str] = "flow-run-1",
    ) -> Dict[str, Any]:
        return {
            "lockedBy": locked_by,
            "lockedAt": locked_at,
            "status": status,
            "flowRunId": flow_run_id,
        }

    return _create_lock


@pytest.fixture
def make_last_run():
    """Factory for a lastRun payload."""

    def _create_last_run(
        run_id: str = "run-1",
        status: str = "COMPLETED",
        state_name: Optional[str] = "Completed",
        start_time: Optional[str] = "2025-06-01T10:00:00+00:00",
        orguser: Optional[str] = "owner@example.com",
    ) -> Dict[str, Any]:
        return {
            "id": run_id,
            "name": "Daily Sync Run",
            "status": status,
            "state_name": state_name,
            "startTime": start_time,
            "expectedStartTime": start_time,
            "orguser": orguser,
        }

    return _create_last_run


@pytest.fixture
def make_pipeline_payload():
    """Factory for one entry of the orchestrator's pipeline list (camelCase keys)."""

    def _create_payload(
        deployment_id: str = "dep-1",
        name: str = "Daily Sync",
        cron: Optional[str] = "0 9 * * *",
        lock: Optional[Dict[str, Any]] = None,
        last_run: Optional[Dict[str, Any]] = None,
        active: bool = True,
    ) -> Dict[str, Any]:
        return {
            "name": name,
            "deploymentName": f"{name.lower().replace(' ', '-')}-deployment",
            "deploymentId": deployment_id,
            "cron": cron,
            "lock": lock,
            "lastRun": last_run,
            "status": active,
            "queuedFlowRunWaitTime": None,
        }

    return _create_payload


@pytest.fixture
def make_pipeline(make_pipeline_payload):
    """Factory for validated Pipeline models."""
    from pipeline_console.models.pipeline import Pipeline

    def _create_pipeline(**kwargs) -> Pipeline:
        return Pipeline.model_validate(make_pipeline_payload(**kwargs))

    return _create_pipeline


@pytest.fixture
def running_pipeline(make_pipeline, make_lock, make_last_run):
    """Pipeline whose own flow run is running."""
    return make_pipeline(deployment_id="dep-running", lock=make_lock(status="running"), last_run=make_last_run())


@pytest.fixture
def idle_pipeline(make_pipeline, make_last_run):
    """Pipeline with a completed last run and no lock."""
    return make_pipeline(deployment_id="dep-idle", last_run=make_last_run())
