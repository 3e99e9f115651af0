from __future__ import annotations

import logging
import random

import pytest

from orbit_custom_fee_rollup.deployment import execute
from orbit_custom_fee_rollup.errors import DeploymentFailed
from orbit_custom_fee_rollup.parameters import build

from .conftest import DEPLOYER_ADDRESS, FEE_TOKEN, FakeSDK, FakeWallet


@pytest.fixture()
def params():
    return build(FEE_TOKEN, DEPLOYER_ADDRESS, rng=random.Random(5))


def _execute(params, clients, sdk):
    return execute(params, ["0xBatch"], ["0xValidator"], FEE_TOKEN, DEPLOYER_ADDRESS, clients, sdk=sdk)


def test_execute_returns_core_contracts_and_logs_progress(caplog, params, fake_clients, core_contracts):
    caplog.set_level(logging.INFO)
    sdk = FakeSDK(core_contracts=core_contracts)

    result = _execute(params, fake_clients, sdk)

    assert result is core_contracts
    assert sdk.names() == [
        "prepare_deployment_params",
        "prepare_deployment_transaction_request",
        "prepare_deployment_receipt",
    ]
    request_call = sdk.calls[1][1]
    assert request_call["batch_posters"] == ["0xBatch"]
    assert request_call["validators"] == ["0xValidator"]
    assert request_call["native_token"] == FEE_TOKEN
    assert request_call["sender"] == DEPLOYER_ADDRESS
    assert sdk.calls[0][1]["chain_id"] == params.chain_id

    assert fake_clients.wallet.sent == [{"to": "0xcreator", "data": "0xdeadbeef", "chainId": 421614}]
    assert fake_clients.read.eth.waited == ["0x" + "0" * 63 + "1"]
    assert "Transaction request prepared successfully" in caplog.text
    assert "Creating rollup..." in caplog.text
    assert "Transaction confirmed" in caplog.text
    assert "Rollup address: 0xAAA" in caplog.text
    assert "Inbox address: 0xBBB" in caplog.text


def test_execute_wraps_submission_errors(params, fake_clients, core_contracts):
    error = ConnectionError("transport down")
    clients = type(fake_clients)(
        read=fake_clients.read,
        wallet=FakeWallet(error=error),  # type: ignore[arg-type]
        chain=fake_clients.chain,
        rpc_url=fake_clients.rpc_url,
    )
    sdk = FakeSDK(core_contracts=core_contracts)

    with pytest.raises(DeploymentFailed) as excinfo:
        _execute(params, clients, sdk)

    assert excinfo.value.cause is error
    assert excinfo.value.__cause__ is error
    assert "prepare_deployment_receipt" not in sdk.names()


def test_execute_wraps_request_construction_errors(params, fake_clients):
    sdk = FakeSDK(request_error=ValueError("Custom fee token has no contract code"))

    with pytest.raises(DeploymentFailed, match="no contract code"):
        _execute(params, fake_clients, sdk)
    assert fake_clients.wallet.sent == []


def test_execute_rejects_reverted_receipt(params, fake_clients, core_contracts):
    tx_hash = "0x" + "0" * 63 + "1"
    fake_clients.read.eth.receipts[tx_hash] = {"status": 0, "blockNumber": 9, "logs": []}
    sdk = FakeSDK(core_contracts=core_contracts)

    with pytest.raises(DeploymentFailed, match="reverted"):
        _execute(params, fake_clients, sdk)
    assert "prepare_deployment_receipt" not in sdk.names()
