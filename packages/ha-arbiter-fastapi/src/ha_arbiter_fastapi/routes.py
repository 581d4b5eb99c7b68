"""FastAPI routes for HA arbiter integration."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ha_arbiter.domain.exceptions import (
    HAConfigError,
    NodeNotFoundError,
    NodeRemovalError,
    StoreUnavailableError,
)
from ha_arbiter.domain.lease import lease_summary
from ha_arbiter.domain.node import node_summary
from ha_arbiter.usecases.failover_coordinator import FailoverCoordinator
from ha_arbiter.usecases.health_checker import HealthChecker
from ha_arbiter.usecases.lease_manager import LeaseManager
from ha_arbiter.usecases.node_registry import NodeRegistry
from ha_arbiter.usecases.readiness_checker import ReadinessChecker
from ha_arbiter.usecases.split_brain_detector import SplitBrainDetector


class FailoverDelayRequest(BaseModel):
    """Body of PUT /ha/failover-delay."""

    seconds: float


def create_health_router(
    health_checker: HealthChecker, split_brain_detector: SplitBrainDetector
) -> APIRouter:
    """Create FastAPI router with health endpoint.

    The health endpoint returns the current health status of the node
    along with split-brain detection information, so monitoring systems
    can detect two active nodes and page an operator.

    Args:
        health_checker: HealthChecker use case instance for node health status
        split_brain_detector: SplitBrainDetector use case for split-brain detection

    Returns:
        APIRouter configured with the /health endpoint
    """
    router = APIRouter()

    @router.get("/health")
    def get_health() -> dict[str, Any]:
        """Get health status of the HA node.

        Returns:
            dict with keys: health_state, is_split_brain, active_nodes
        """
        health_status = health_checker.check_health()
        try:
            split_brain_status = split_brain_detector.detect_split_brain()
        except StoreUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e

        return {
            "health_state": health_status.state,
            "is_split_brain": split_brain_status.is_split_brain,
            "active_nodes": [
                {"node_name": node.node_name, "term": node.term}
                for node in split_brain_status.active_nodes
            ],
        }

    return router


def create_ha_router(
    registry: NodeRegistry,
    lease_manager: LeaseManager,
    coordinator: FailoverCoordinator,
    readiness_checker: ReadinessChecker | None = None,
) -> APIRouter:
    """Create FastAPI router with the HA status and administration endpoints.

    Store failures map to 503, unknown nodes to 404, removing the active
    node to 409 and an out-of-range failover delay to 422.

    Args:
        registry: NodeRegistry of this node
        lease_manager: LeaseManager of this node
        coordinator: FailoverCoordinator holding the local role
        readiness_checker: Optional ReadinessChecker; enables GET /ha/ready

    Returns:
        APIRouter with routes under /ha
    """
    router = APIRouter(prefix="/ha")

    @router.get("/status")
    def get_status() -> dict[str, Any]:
        """Role this node reports about itself. Peers probe this endpoint."""
        lease = coordinator.lease
        return {
            "node_name": coordinator.node_name,
            "role": coordinator.role.value,
            "term": lease.term if lease is not None else None,
            "healthy": coordinator.is_healthy(),
        }

    @router.get("/lease")
    def get_lease() -> dict[str, Any]:
        """Current lease as stored, plus the cluster failover delay."""
        try:
            lease = lease_manager.current_lease()
            now = registry.now()
            failover_delay = lease_manager.failover_delay()
        except StoreUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e

        return {
            "lease": lease_summary(lease, now) if lease is not None else None,
            "failover_delay": failover_delay,
        }

    @router.get("/nodes")
    def get_nodes() -> list[dict[str, Any]]:
        try:
            now = registry.now()
            records = registry.list_nodes()
        except StoreUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e

        return [node_summary(record, now) for record in records]

    @router.delete("/nodes/{name}", status_code=204)
    def delete_node(name: str) -> Response:
        try:
            registry.remove_node(name)
        except NodeNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except NodeRemovalError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        except StoreUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e
        return Response(status_code=204)

    @router.put("/failover-delay")
    def put_failover_delay(body: FailoverDelayRequest) -> dict[str, float]:
        try:
            lease_manager.set_failover_delay(body.seconds)
        except HAConfigError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        except StoreUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e)) from e
        return {"failover_delay": body.seconds}

    if readiness_checker is not None:

        @router.get("/ready")
        def get_ready() -> JSONResponse:
            """Readiness probe: 200 when ready, 503 otherwise."""
            try:
                result = readiness_checker.check_readiness()
            except StoreUnavailableError as e:
                return JSONResponse(
                    status_code=503, content={"is_ready": False, "error": str(e)}
                )
            return JSONResponse(
                status_code=200 if result.is_ready else 503,
                content={
                    "is_ready": result.is_ready,
                    "can_accept_writes": result.can_accept_writes,
                    "health_state": result.health_status.state,
                    "split_brain_detected": result.split_brain_detected,
                    "active_node_names": list(result.active_node_names),
                    "error": result.error,
                },
            )

    return router
