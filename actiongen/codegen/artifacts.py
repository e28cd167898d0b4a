"""Bundle the four generators into the set of files one build writes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from ..config import ClientConfig, HandlerConfig, RouterConfig
from .client import generate_client
from .handler import generate_handler
from .router import generate_router
from .stubs import ACTION_TYPES_MODULE, CLIENT_TYPES_MODULE, generate_integration_types

ROUTER_FILENAME = "router.py"
HANDLER_FILENAME = "api.py"
CLIENT_FILENAME = "client.py"
ACTION_TYPES_FILENAME = f"{ACTION_TYPES_MODULE}.pyi"
CLIENT_TYPES_FILENAME = f"{CLIENT_TYPES_MODULE}.pyi"


class ArtifactKind(str, Enum):
    ROUTER = "router"
    HANDLER = "handler"
    CLIENT = "client"
    TYPES = "types"


@dataclass(frozen=True)
class GeneratedArtifact:
    kind: ArtifactKind
    filename: str
    source_text: str


def generate_artifacts(
    router_config: RouterConfig,
    client_config: ClientConfig,
) -> List[GeneratedArtifact]:
    """Generate every artifact in a fixed order; nothing is written to disk."""
    handler_config = HandlerConfig(adapter=router_config.adapter)
    types = generate_integration_types(handler_config)
    return [
        GeneratedArtifact(ArtifactKind.ROUTER, ROUTER_FILENAME, generate_router(router_config)),
        GeneratedArtifact(ArtifactKind.HANDLER, HANDLER_FILENAME, generate_handler(handler_config)),
        GeneratedArtifact(ArtifactKind.CLIENT, CLIENT_FILENAME, generate_client(client_config)),
        GeneratedArtifact(ArtifactKind.TYPES, ACTION_TYPES_FILENAME, types.action_types),
        GeneratedArtifact(ArtifactKind.TYPES, CLIENT_TYPES_FILENAME, types.client_types),
    ]


__all__ = [
    "ROUTER_FILENAME",
    "HANDLER_FILENAME",
    "CLIENT_FILENAME",
    "ACTION_TYPES_FILENAME",
    "CLIENT_TYPES_FILENAME",
    "ArtifactKind",
    "GeneratedArtifact",
    "generate_artifacts",
]
