"""Source generators for the router, handler, client and type stubs."""

from .artifacts import ArtifactKind, GeneratedArtifact, generate_artifacts
from .client import generate_client
from .handler import generate_handler
from .router import generate_router
from .stubs import IntegrationTypes, generate_integration_types

__all__ = [
    "ArtifactKind",
    "GeneratedArtifact",
    "IntegrationTypes",
    "generate_artifacts",
    "generate_client",
    "generate_handler",
    "generate_integration_types",
    "generate_router",
]
