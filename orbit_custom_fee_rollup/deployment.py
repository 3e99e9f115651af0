"""Submit the ``createRollup`` transaction and collect the core contracts."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from . import chain_sdk
from .chain_sdk import CoreContracts
from .errors import DeploymentFailed
from .parameters import ChainParameters
from .transport import ClientPair, wait_for_receipt

_LOGGER = logging.getLogger(__name__)


def ensure_succeeded(receipt: Mapping[str, Any], tx_hash: str) -> None:
    if receipt.get("status") != 1:
        raise RuntimeError(f"Transaction {tx_hash} reverted in block {receipt.get('blockNumber')}")


def execute(
    params: ChainParameters,
    batch_posters: Sequence[str],
    validators: Sequence[str],
    native_fee_token: str,
    sender: str,
    clients: ClientPair,
    *,
    sdk: Any = None,
    rollup_creator: Optional[str] = None,
) -> CoreContracts:
    """Create the rollup on the parent chain and return its core contracts.

    Any failure while preparing, sending or confirming the transaction is
    raised as :class:`DeploymentFailed`. A failed attempt burns its chain id;
    re-run with freshly built parameters.
    """

    sdk = sdk or chain_sdk
    read = clients.read
    try:
        _LOGGER.info("Preparing rollup deployment for chain %s owned by %s", params.chain_id, params.owner)
        config = sdk.prepare_deployment_params(
            read,
            chain_id=params.chain_id,
            owner=params.owner,
            chain_config=params.chain_config,
            parent_chain=clients.chain,
        )
        tx_request = sdk.prepare_deployment_transaction_request(
            config,
            list(batch_posters),
            list(validators),
            native_fee_token,
            sender,
            read,
            parent_chain=clients.chain,
            rollup_creator=rollup_creator,
        )
        _LOGGER.info("Transaction request prepared successfully")
        _LOGGER.info("Parent Chain ID: %s", tx_request.get("chainId", clients.chain.chain_id))

        _LOGGER.info("Creating rollup...")
        tx_hash = clients.wallet.send_transaction(tx_request)
        _LOGGER.info("Transaction %s sent. Waiting for confirmation...", tx_hash)

        receipt = wait_for_receipt(read, tx_hash)
        ensure_succeeded(receipt, tx_hash)
        _LOGGER.info("Transaction confirmed: %s", tx_hash)

        core_contracts = sdk.prepare_deployment_receipt(receipt).get_core_contracts()
    except DeploymentFailed:
        raise
    except Exception as exc:
        raise DeploymentFailed(exc) from exc

    _LOGGER.info("Core contracts: %s", core_contracts)
    _LOGGER.info("Rollup address: %s", core_contracts.rollup)
    _LOGGER.info("Inbox address: %s", core_contracts.inbox)
    return core_contracts


__all__ = ["ensure_succeeded", "execute"]
