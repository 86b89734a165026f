from strato.api.client import DEFAULT_API_URL, StratoClient
from strato.api.types import (
    ClusterCreateParams,
    ClusterResponse,
    ClusterUpdateParams,
    NodePoolCreateParams,
    NodePoolResponse,
    NodePoolUpdateParams,
)

__all__ = [
    "DEFAULT_API_URL",
    "ClusterCreateParams",
    "ClusterResponse",
    "ClusterUpdateParams",
    "NodePoolCreateParams",
    "NodePoolResponse",
    "NodePoolUpdateParams",
    "StratoClient",
]
