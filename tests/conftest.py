"""Shared fakes for the deployment flow; nothing here touches the network."""
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from orbit_custom_fee_rollup.chains import ARBITRUM_SEPOLIA
from orbit_custom_fee_rollup.transport import ClientPair

DEPLOYER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
BATCH_POSTER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
VALIDATOR_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
FEE_TOKEN = "0xFEE0000000000000000000000000000000000001"


class FakeEth:
    def __init__(self, receipts: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        self.receipts = receipts or {}
        self.waited: List[str] = []

    def wait_for_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        self.waited.append(tx_hash)
        return self.receipts.get(tx_hash, {"status": 1, "blockNumber": 7, "transactionHash": tx_hash, "logs": []})


class FakeWallet:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.sent: List[Dict[str, Any]] = []

    def send_transaction(self, tx: Dict[str, Any]) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append(dict(tx))
        return f"0x{len(self.sent):064x}"


class FakeSDK:
    """Records every chain-SDK call and returns canned values."""

    def __init__(self, core_contracts: Any = None, request_error: Optional[Exception] = None) -> None:
        self.core_contracts = core_contracts
        self.request_error = request_error
        self.calls: List[tuple] = []

    def prepare_deployment_params(self, read_client: Any, **kwargs: Any) -> Any:
        self.calls.append(("prepare_deployment_params", kwargs))
        return SimpleNamespace(**kwargs)

    def prepare_deployment_transaction_request(self, config, batch_posters, validators, native_token, sender, read_client, **kwargs):
        self.calls.append(
            (
                "prepare_deployment_transaction_request",
                {
                    "config": config,
                    "batch_posters": batch_posters,
                    "validators": validators,
                    "native_token": native_token,
                    "sender": sender,
                    **kwargs,
                },
            )
        )
        if self.request_error is not None:
            raise self.request_error
        return {"to": "0xcreator", "data": "0xdeadbeef", "chainId": ARBITRUM_SEPOLIA.chain_id}

    def prepare_deployment_receipt(self, receipt: Dict[str, Any]) -> Any:
        self.calls.append(("prepare_deployment_receipt", receipt))
        return SimpleNamespace(get_core_contracts=lambda: self.core_contracts)

    def prepare_keyset_transaction_request(self, core_contracts, keyset, sender, read_client):
        self.calls.append(("prepare_keyset_transaction_request", {"core_contracts": core_contracts, "keyset": keyset, "sender": sender}))
        return {"to": core_contracts.upgrade_executor, "data": "0x" + keyset.hex()}

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def core_contracts() -> SimpleNamespace:
    return SimpleNamespace(
        rollup="0xAAA",
        inbox="0xBBB",
        upgrade_executor="0xCCC",
        sequencer_inbox="0xDDD",
    )


@pytest.fixture()
def fake_clients() -> ClientPair:
    eth = FakeEth()
    return ClientPair(
        read=SimpleNamespace(eth=eth),  # type: ignore[arg-type]
        wallet=FakeWallet(),  # type: ignore[arg-type]
        chain=ARBITRUM_SEPOLIA,
        rpc_url="http://127.0.0.1:8547",
    )


@pytest.fixture()
def base_env() -> Dict[str, str]:
    return {
        "DEPLOYER_PRIVATE_KEY": DEPLOYER_KEY,
        "CUSTOM_FEE_TOKEN_ADDRESS": FEE_TOKEN,
        "PARENT_CHAIN_RPC": "http://127.0.0.1:8547",
    }
