"""Deploy an AnyTrust rollup that pays fees in a custom ERC-20 token."""
from __future__ import annotations

from .chain_sdk import CoreContracts
from .config import DeploymentSettings, load_settings
from .errors import (
    DeploymentFailed,
    InvalidKeyFormat,
    KeysetInstallFailed,
    MissingRequiredConfig,
    OrbitDeploymentError,
)
from .orchestrator import DeploymentContext, OrchestrationReport, PhaseResult, initialize, run
from .parameters import ChainParameters

__all__ = [
    "ChainParameters",
    "CoreContracts",
    "DeploymentContext",
    "DeploymentFailed",
    "DeploymentSettings",
    "InvalidKeyFormat",
    "KeysetInstallFailed",
    "MissingRequiredConfig",
    "OrchestrationReport",
    "OrbitDeploymentError",
    "PhaseResult",
    "initialize",
    "load_settings",
    "run",
]
