"""Strato - manage Strato Kubernetes clusters and node pools from Python.

Example:

    import asyncio
    from strato import ClusterResource, ClusterSpec, StratoClient

    async def main():
        async with StratoClient(token="...") as client:
            clusters = ClusterResource(client)
            cluster = await clusters.create(ClusterSpec(
                name="dev",
                os_cluster_id="...",
                os_project_id="...",
                keypair="ops",
                network_id="...",
                flavor_id="...",
                volume_size=50,
                node_count=3,
            ))
            print(cluster.status)  # READY

    asyncio.run(main())
"""

from loguru import logger

from strato.api import StratoClient
from strato.config import Settings, load_settings
from strato.convergence import (
    Cancelled,
    ClusterStatus,
    ConvergenceFailed,
    ConvergenceMode,
    ConvergenceOutcome,
    ConvergenceRequest,
    Converged,
    NodePoolStatus,
    Observation,
    ResourceKind,
    StatusClass,
    TimedOut,
    attempts_for,
    classify,
    converge,
)
from strato.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    ConvergenceTimeoutError,
    OperationCancelledError,
    StratoAPIError,
    StratoError,
    ValidationError,
)
from strato.observability import LogConfig, setup_logging, teardown_logging
from strato.resources import (
    Cluster,
    ClusterDataSource,
    ClusterResource,
    ClusterSpec,
    NodePool,
    NodePoolDataSource,
    NodePoolResource,
    NodePoolSpec,
)

# Silent unless the application calls setup_logging
logger.disable("strato")

__version__ = "0.1.0"

__all__ = [
    # Client & config
    "StratoClient",
    "Settings",
    "load_settings",
    # Resources
    "Cluster",
    "ClusterDataSource",
    "ClusterResource",
    "ClusterSpec",
    "NodePool",
    "NodePoolDataSource",
    "NodePoolResource",
    "NodePoolSpec",
    # Convergence
    "Cancelled",
    "ClusterStatus",
    "ConvergenceFailed",
    "ConvergenceMode",
    "ConvergenceOutcome",
    "ConvergenceRequest",
    "Converged",
    "NodePoolStatus",
    "Observation",
    "ResourceKind",
    "StatusClass",
    "TimedOut",
    "attempts_for",
    "classify",
    "converge",
    # Errors
    "ConfigurationError",
    "ConvergenceError",
    "ConvergenceTimeoutError",
    "OperationCancelledError",
    "StratoAPIError",
    "StratoError",
    "ValidationError",
    # Logging
    "LogConfig",
    "setup_logging",
    "teardown_logging",
]
