"""ha-arbiter command line interface.

Subcommands:
    run                 Run this node until SIGINT/SIGTERM.
    status              Show the node table and the lease.
    remove-node         Remove a node from the registry.
    set-failover-delay  Change the cluster-wide failover delay.

The administration subcommands work on the shared store directly, or on a
running node's HTTP API when --url is given. A raft store can only be
administered through --url because the Raft group has no room for an extra
member.
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from ha_arbiter import __version__
from ha_arbiter.domain.exceptions import (
    HAArbiterError,
    HAConfigError,
    NodeNotFoundError,
    NodeRemovalError,
    StoreUnavailableError,
)
from ha_arbiter.domain.lease import lease_summary, validate_failover_delay
from ha_arbiter.domain.node import node_summary
from ha_arbiter.domain.settings import ArbiterSettings
from ha_arbiter.factories import create_lease_store
from ha_arbiter.runtime import ArbiterRuntime, build_runtime
from ha_arbiter.usecases.config_parser import ConfigParser
from ha_arbiter.usecases.lease_manager import LeaseManager
from ha_arbiter.usecases.node_registry import NodeRegistry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HTTPServerNotInstalledError(ImportError):
    """Raised when the status API is enabled but its server is not installed.

    Install with: pip install ha-arbiter[fastapi]
    """

    def __init__(self) -> None:
        super().__init__(
            "ha-arbiter-fastapi or uvicorn is not installed. "
            "Install with: pip install ha-arbiter[fastapi]"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ha-arbiter",
        description="Lease-based active/standby arbitration for HA server clusters",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_config(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--config", required=True, help="Path to the YAML config file")

    def add_url(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--url",
            help="Base URL of a running node's API (e.g. http://10.0.0.11:8080)",
        )

    run = subparsers.add_parser("run", help="Run this HA node")
    add_config(run)

    status = subparsers.add_parser("status", help="Show nodes and the active lease")
    add_config(status)
    add_url(status)
    status.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format: text (default) or json",
    )

    remove = subparsers.add_parser("remove-node", help="Remove a node from the registry")
    remove.add_argument("name", help="Name of the node to remove")
    add_config(remove)
    add_url(remove)

    delay = subparsers.add_parser(
        "set-failover-delay", help="Change the cluster-wide failover delay"
    )
    delay.add_argument("seconds", type=float, help="New failover delay in seconds")
    add_config(delay)
    add_url(delay)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ha-arbiter console script.

    Returns:
        0 on success, 1 on an HA arbiter error.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        settings = ConfigParser().parse_file(args.config)
        if args.command == "run":
            return run(settings)
        admin = _create_admin(settings, args.url)
        if args.command == "status":
            print(format_status(admin.status(), args.format))
        elif args.command == "remove-node":
            admin.remove_node(args.name)
            print(f"Removed node {args.name!r}")
        elif args.command == "set-failover-delay":
            validate_failover_delay(args.seconds)
            admin.set_failover_delay(args.seconds)
            print(f"Failover delay set to {args.seconds:g}s")
    except (HAArbiterError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def run(settings: ArbiterSettings) -> int:
    """Run one node until a termination signal arrives.

    Returns:
        0 after a graceful stop, 1 if the heartbeat loop stopped on its own.
    """
    runtime = build_runtime(settings)
    stop = threading.Event()

    def _request_stop(signum: int, frame: Any) -> None:
        logger.info("Received signal %s, handing off", signal.Signals(signum).name)
        stop.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    if settings.metrics.enabled:
        from prometheus_client import start_http_server

        start_http_server(settings.metrics.port)
        logger.info("Serving Prometheus metrics on port %d", settings.metrics.port)

    server = _start_api_server(runtime) if settings.http.enabled else None

    exit_code = 0
    runtime.loop.start()
    try:
        while not stop.wait(1.0):
            if not runtime.loop.is_running():
                logger.error("Heartbeat loop of %s stopped", settings.node_name)
                exit_code = 1
                break
    finally:
        runtime.loop.stop(graceful=True)
        if server is not None:
            server.should_exit = True
        close = getattr(runtime.store, "close", None)
        if close is not None:
            close()
    return exit_code


def _start_api_server(runtime: ArbiterRuntime) -> Any:
    try:
        import uvicorn

        from ha_arbiter_fastapi import create_app
    except ImportError as exc:
        raise HTTPServerNotInstalledError() from exc

    http = runtime.settings.http
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(runtime), host=http.host, port=http.port, log_level="info"
        )
    )
    threading.Thread(target=server.run, name="ha-arbiter-api", daemon=True).start()
    logger.info("Serving HA API on %s:%d", http.host, http.port)
    return server


class StoreAdmin:
    """Administration through a direct store connection."""

    def __init__(self, registry: NodeRegistry, lease_manager: LeaseManager) -> None:
        self._registry = registry
        self._lease_manager = lease_manager

    def status(self) -> dict[str, Any]:
        now = self._registry.now()
        lease = self._lease_manager.current_lease()
        return {
            "nodes": [
                node_summary(record, now) for record in self._registry.list_nodes()
            ],
            "lease": lease_summary(lease, now) if lease is not None else None,
            "failover_delay": self._lease_manager.failover_delay(),
        }

    def remove_node(self, name: str) -> None:
        self._registry.remove_node(name)

    def set_failover_delay(self, seconds: float) -> None:
        self._lease_manager.set_failover_delay(seconds)


class HTTPAdmin:
    """Administration through a running node's HTTP API."""

    def __init__(self, url: str, client: httpx.Client | None = None) -> None:
        self._url = url.rstrip("/")
        self._client = client or httpx.Client(timeout=5.0)

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, f"{self._url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise StoreUnavailableError(
                f"Cannot reach {self._url}: {e}", original_error=e
            ) from e

    def _check(self, response: httpx.Response) -> None:
        if response.is_error:
            raise StoreUnavailableError(
                f"{response.request.method} {response.request.url} "
                f"failed with HTTP {response.status_code}"
            )

    def status(self) -> dict[str, Any]:
        nodes = self._request("GET", "/ha/nodes")
        self._check(nodes)
        lease = self._request("GET", "/ha/lease")
        self._check(lease)
        return {"nodes": nodes.json(), **lease.json()}

    def remove_node(self, name: str) -> None:
        response = self._request("DELETE", f"/ha/nodes/{quote(name, safe='')}")
        if response.status_code == 404:
            raise NodeNotFoundError(name)
        if response.status_code == 409:
            raise NodeRemovalError(name)
        self._check(response)

    def set_failover_delay(self, seconds: float) -> None:
        response = self._request("PUT", "/ha/failover-delay", json={"seconds": seconds})
        if response.status_code == 422:
            raise HAConfigError(str(response.json().get("detail")))
        self._check(response)


def _create_admin(settings: ArbiterSettings, url: str | None) -> StoreAdmin | HTTPAdmin:
    if url:
        return HTTPAdmin(url)

    if settings.store.type != "sqlite":
        raise HAConfigError(
            f"a {settings.store.type} store can only be administered through a "
            "running node; pass --url"
        )
    store = create_lease_store(settings)
    return StoreAdmin(
        NodeRegistry(store, settings.node_name, settings.node_address),
        LeaseManager(
            store, settings.node_name, heartbeat_interval=settings.heartbeat_interval
        ),
    )


def format_status(status: dict[str, Any], output_format: str = "text") -> str:
    """Render the output of the status subcommand."""
    if output_format == "json":
        return json.dumps(status, indent=2)

    rows = [("NAME", "ADDRESS", "STATUS", "LASTACCESS")]
    rows.extend(
        (
            node["name"],
            node["address"] or "-",
            node["status"],
            f"{node['lastaccess_age']:.0f}s",
        )
        for node in status["nodes"]
    )
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = [
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in rows
    ]

    lines.append("")
    lease = status.get("lease")
    if lease is None:
        lines.append("Lease: none")
    else:
        if lease.get("expired"):
            state = "expired"
        else:
            state = f"expires in {lease['expires_in']:.0f}s"
        lines.append(f"Lease: {lease['holder']} (term {lease['term']}, {state})")
    lines.append(f"Failover delay: {status['failover_delay']:g}s")
    return "\n".join(lines)


if __name__ == "__main__":
    sys.exit(main())
