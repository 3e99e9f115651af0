"""Read and signing clients bound to the parent chain RPC endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, TYPE_CHECKING

from eth_account import Account
from web3 import Web3

from .chains import ParentChain
from .identities import Identity

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount
    from web3.types import TxReceipt
else:  # pragma: no cover - runtime fallback
    LocalAccount = Any  # type: ignore[assignment]
    TxReceipt = Mapping[str, Any]  # type: ignore[assignment,misc]

_LOGGER = logging.getLogger(__name__)


class WalletClient:
    """Signs transactions locally with the deployer key and broadcasts them."""

    def __init__(self, account: LocalAccount, web3: Web3, chain: ParentChain) -> None:
        self.account = account
        self.web3 = web3
        self.chain = chain

    @property
    def address(self) -> str:
        return self.account.address

    def send_transaction(self, tx: Mapping[str, Any]) -> str:
        """Sign ``tx`` and broadcast it, returning the ``0x`` transaction hash."""

        payload = dict(tx)
        sender = payload.get("from")
        if sender is not None and sender.lower() != self.address.lower():
            raise ValueError(f"Transaction sender {sender} does not match wallet account {self.address}")
        payload.pop("from", None)
        chain_id = int(payload.setdefault("chainId", self.chain.chain_id))
        if chain_id != self.chain.chain_id:
            raise ValueError(
                f"Transaction targets chain {chain_id} but the wallet is bound to {self.chain.name} ({self.chain.chain_id})"
            )

        signed = self.account.sign_transaction(payload)
        tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)


@dataclass(frozen=True)
class ClientPair:
    """The read client and signing client shared by both transactional phases."""

    read: Web3
    wallet: WalletClient
    chain: ParentChain
    rpc_url: str


def resolve_rpc_url(rpc_url: Optional[str], chain: ParentChain) -> str:
    if rpc_url:
        return rpc_url
    _LOGGER.warning(
        "You may encounter timeout errors while running the script with the default rpc endpoint "
        "(%s). Please provide the \"PARENT_CHAIN_RPC\" environment variable instead.",
        chain.default_rpc_url,
    )
    return chain.default_rpc_url


def bind_clients(rpc_url: Optional[str], chain: ParentChain, deployer: Identity) -> ClientPair:
    """Create the parent chain clients, falling back to the chain's public RPC."""

    endpoint = resolve_rpc_url(rpc_url, chain)
    # Every request is sent once; a re-sent eth_sendRawTransaction cannot be retracted.
    web3 = Web3(Web3.HTTPProvider(endpoint, exception_retry_configuration=None))
    account = Account.from_key(deployer.private_key)
    _LOGGER.debug("Bound parent chain %s (%s) at %s", chain.name, chain.chain_id, endpoint)
    return ClientPair(read=web3, wallet=WalletClient(account, web3, chain), chain=chain, rpc_url=endpoint)


def wait_for_receipt(read: Web3, tx_hash: str) -> TxReceipt:
    """Block until ``tx_hash`` is mined; timeouts are left to web3."""

    return read.eth.wait_for_transaction_receipt(tx_hash)


__all__ = [
    "ClientPair",
    "WalletClient",
    "bind_clients",
    "resolve_rpc_url",
    "wait_for_receipt",
]
