"""Register the data availability committee keyset on a new rollup."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from eth_utils import keccak, to_hex

from . import chain_sdk
from .chain_sdk import CoreContracts
from .deployment import ensure_succeeded
from .errors import KeysetInstallFailed
from .transport import ClientPair, wait_for_receipt

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeysetInstallation:
    tx_hash: str
    upgrade_executor: str
    sequencer_inbox: str
    keyset_hash: str


def keyset_hash(keyset: bytes) -> str:
    """Identifier the sequencer inbox records for ``keyset``."""

    return to_hex(keccak(bytes(keyset)))


def install(
    core_contracts: Optional[CoreContracts],
    keyset: bytes,
    sender: str,
    clients: ClientPair,
    *,
    sdk: Any = None,
) -> KeysetInstallation:
    """Authorise ``keyset`` on the sequencer inbox via the upgrade executor.

    ``core_contracts`` must be the result of the deployment phase; without it
    there is nothing to install against and :class:`KeysetInstallFailed` is
    raised before any network call.
    """

    if core_contracts is None:
        raise KeysetInstallFailed(ValueError("no core contracts available from the deployment phase"))

    sdk = sdk or chain_sdk
    try:
        upgrade_executor = core_contracts.upgrade_executor
        sequencer_inbox = core_contracts.sequencer_inbox
        _LOGGER.info(
            "Setting valid keyset on sequencer inbox %s through upgrade executor %s",
            sequencer_inbox,
            upgrade_executor,
        )
        tx_request = sdk.prepare_keyset_transaction_request(core_contracts, keyset, sender, clients.read)
        tx_hash = clients.wallet.send_transaction(tx_request)
        _LOGGER.info("Keyset transaction %s sent. Waiting for confirmation...", tx_hash)
        receipt = wait_for_receipt(clients.read, tx_hash)
        ensure_succeeded(receipt, tx_hash)
    except Exception as exc:
        raise KeysetInstallFailed(exc) from exc

    installation = KeysetInstallation(
        tx_hash=tx_hash,
        upgrade_executor=upgrade_executor,
        sequencer_inbox=sequencer_inbox,
        keyset_hash=keyset_hash(keyset),
    )
    _LOGGER.info("Keyset %s installed in transaction %s", installation.keyset_hash, tx_hash)
    return installation


__all__ = ["KeysetInstallation", "install", "keyset_hash"]
