"""Sequence the rollup deployment and keyset installation phases."""
from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

from . import deployment, keyset, parameters
from .config import DeploymentSettings, load_settings
from .errors import DeploymentFailed, KeysetInstallFailed, OrbitDeploymentError
from .identities import Identities, resolve_identities
from .transport import ClientPair, bind_clients

_LOGGER = logging.getLogger(__name__)


class Stage(enum.Enum):
    START = "start"
    DEPLOYED_OR_FAILED_LOGGED = "deployed_or_failed_logged"
    DONE = "done"


@dataclass(frozen=True)
class DeploymentContext:
    """Immutable state shared by both phases of a run."""

    settings: DeploymentSettings
    identities: Identities
    clients: ClientPair


@dataclass(frozen=True)
class PhaseResult:
    phase: str
    ok: bool
    value: Any = None
    error: Optional[OrbitDeploymentError] = None

    def describe(self) -> str:
        if self.ok:
            return f"{self.phase}: ok"
        return f"{self.phase}: failed ({self.error})"


@dataclass(frozen=True)
class OrchestrationReport:
    deployment: PhaseResult
    keyset: PhaseResult

    @property
    def succeeded(self) -> bool:
        return self.deployment.ok and self.keyset.ok

    def summary_lines(self) -> List[str]:
        lines = [self.deployment.describe(), self.keyset.describe()]
        if self.deployment.ok:
            contracts = self.deployment.value
            lines.append(f"Rollup address: {contracts.rollup}")
            lines.append(f"Inbox address: {contracts.inbox}")
        if self.keyset.ok:
            lines.append(f"Keyset hash: {self.keyset.value.keyset_hash}")
        return lines


def initialize(
    settings: Optional[DeploymentSettings] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    bind: Callable[..., ClientPair] = bind_clients,
) -> DeploymentContext:
    """Validate configuration, resolve identities, then bind the clients.

    Configuration and key errors are raised before ``bind`` is called, so a
    misconfigured run never touches the network.
    """

    if settings is None:
        settings = load_settings(env)
    identities = resolve_identities(settings)
    _LOGGER.info("Deployer: %s", identities.deployer.address)
    _LOGGER.info("Batch poster: %s", identities.batch_poster.address)
    _LOGGER.info("Validator: %s", identities.validator.address)

    clients = bind(settings.parent_chain_rpc, settings.parent_chain, identities.deployer)
    return DeploymentContext(settings=settings, identities=identities, clients=clients)


def _deploy(context: DeploymentContext, rng: Optional[random.Random], sdk: Any) -> PhaseResult:
    identities = context.identities
    try:
        try:
            params = parameters.build(
                context.settings.custom_fee_token_address,
                identities.deployer.address,
                rng=rng,
            )
        except ValueError as exc:
            raise DeploymentFailed(exc) from exc
        core_contracts = deployment.execute(
            params,
            [identities.batch_poster.address],
            [identities.validator.address],
            params.native_fee_token,
            identities.deployer.address,
            context.clients,
            sdk=sdk,
            rollup_creator=context.settings.rollup_creator,
        )
    except DeploymentFailed as exc:
        _LOGGER.error("%s", exc)
        return PhaseResult(phase="deployment", ok=False, error=exc)
    return PhaseResult(phase="deployment", ok=True, value=core_contracts)


def _install_keyset(context: DeploymentContext, core_contracts: Any, sdk: Any) -> PhaseResult:
    try:
        installation = keyset.install(
            core_contracts,
            context.settings.keyset,
            context.identities.deployer.address,
            context.clients,
            sdk=sdk,
        )
    except KeysetInstallFailed as exc:
        _LOGGER.error("%s", exc)
        return PhaseResult(phase="keyset", ok=False, error=exc)
    return PhaseResult(phase="keyset", ok=True, value=installation)


def run(
    context: DeploymentContext,
    *,
    rng: Optional[random.Random] = None,
    sdk: Any = None,
) -> OrchestrationReport:
    """Run both phases in order; neither phase failure stops the run."""

    _LOGGER.debug("Stage %s", Stage.START.value)
    deployed = _deploy(context, rng, sdk)

    _LOGGER.debug("Stage %s", Stage.DEPLOYED_OR_FAILED_LOGGED.value)
    installed = _install_keyset(context, deployed.value if deployed.ok else None, sdk)

    _LOGGER.debug("Stage %s", Stage.DONE.value)
    report = OrchestrationReport(deployment=deployed, keyset=installed)
    for line in report.summary_lines():
        _LOGGER.info("%s", line)
    return report


__all__ = [
    "DeploymentContext",
    "OrchestrationReport",
    "PhaseResult",
    "Stage",
    "initialize",
    "run",
]
