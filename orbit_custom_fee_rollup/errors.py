"""Error taxonomy for the rollup deployment flow."""
from __future__ import annotations


class OrbitDeploymentError(RuntimeError):
    """Base class for every error raised by the deployment flow."""


class MissingRequiredConfig(OrbitDeploymentError):
    """A required environment variable is unset."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Please provide the "{name}" environment variable')
        self.name = name


class InvalidKeyFormat(OrbitDeploymentError):
    """A private key secret could not be normalised."""


class _PhaseFailure(OrbitDeploymentError):
    phase = "phase"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"{self.phase} failed with error: {cause}")
        self.cause = cause


class DeploymentFailed(_PhaseFailure):
    """Building, submitting or confirming the rollup creation failed."""

    phase = "Rollup creation"


class KeysetInstallFailed(_PhaseFailure):
    """Building, submitting or confirming the keyset transaction failed."""

    phase = "Keyset installation"


__all__ = [
    "DeploymentFailed",
    "InvalidKeyFormat",
    "KeysetInstallFailed",
    "MissingRequiredConfig",
    "OrbitDeploymentError",
]
