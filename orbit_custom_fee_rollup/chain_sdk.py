"""Transaction builders and receipt parsers for the Arbitrum rollup creator.

This module covers the small slice of the Orbit chain SDK that the deployment
flow needs:

* ``prepare_chain_config`` renders the L2 chain configuration JSON.
* ``prepare_deployment_params`` fills the ``RollupCreator.Config`` struct with
  the defaults for the parent chain.
* ``prepare_deployment_transaction_request`` encodes ``createRollup``.
* ``prepare_deployment_receipt`` decodes the ``RollupCreated`` event into the
  addresses of the core contracts.
* ``prepare_keyset_transaction_request`` routes ``setValidKeyset`` through the
  chain's upgrade executor.

Every builder returns an immutable transaction mapping ready to be signed by
:class:`~orbit_custom_fee_rollup.transport.WalletClient`.
"""
from __future__ import annotations

import json
import random
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import (
    decode_hex,
    function_signature_to_4byte_selector,
    is_address,
    keccak,
    to_checksum_address,
)

from .chains import ParentChain, get_parent_chain

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_HASH = "0x" + "00" * 32

CHAIN_ID_MIN = 10_000_000_000
CHAIN_ID_MAX = 99_999_999_999

# consensus-v32
DEFAULT_WASM_MODULE_ROOT = "0x184884e1eb9fefdc158f6c8ac912bb183bf3cf83f0090317e0bc4ac5860baa39"
DEFAULT_ARBOS_VERSION = 32
DEFAULT_MAX_DATA_SIZE = 104_857
DEFAULT_MAX_FEE_PER_GAS_FOR_RETRYABLES = 100_000_000  # 0.1 gwei

_MAX_TIME_VARIATION_COMPONENTS = [
    {"internalType": "uint256", "name": "delayBlocks", "type": "uint256"},
    {"internalType": "uint256", "name": "futureBlocks", "type": "uint256"},
    {"internalType": "uint256", "name": "delaySeconds", "type": "uint256"},
    {"internalType": "uint256", "name": "futureSeconds", "type": "uint256"},
]

_CONFIG_COMPONENTS = [
    {"internalType": "uint64", "name": "confirmPeriodBlocks", "type": "uint64"},
    {"internalType": "uint64", "name": "extraChallengeTimeBlocks", "type": "uint64"},
    {"internalType": "address", "name": "stakeToken", "type": "address"},
    {"internalType": "uint256", "name": "baseStake", "type": "uint256"},
    {"internalType": "bytes32", "name": "wasmModuleRoot", "type": "bytes32"},
    {"internalType": "address", "name": "owner", "type": "address"},
    {"internalType": "address", "name": "loserStakeEscrow", "type": "address"},
    {"internalType": "uint256", "name": "chainId", "type": "uint256"},
    {"internalType": "string", "name": "chainConfig", "type": "string"},
    {"internalType": "uint64", "name": "genesisBlockNum", "type": "uint64"},
    {
        "components": _MAX_TIME_VARIATION_COMPONENTS,
        "internalType": "struct ISequencerInbox.MaxTimeVariation",
        "name": "sequencerInboxMaxTimeVariation",
        "type": "tuple",
    },
]

ROLLUP_CREATOR_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [
            {
                "components": [
                    {"components": _CONFIG_COMPONENTS, "internalType": "struct Config", "name": "config", "type": "tuple"},
                    {"internalType": "address[]", "name": "validators", "type": "address[]"},
                    {"internalType": "uint256", "name": "maxDataSize", "type": "uint256"},
                    {"internalType": "address", "name": "nativeToken", "type": "address"},
                    {"internalType": "bool", "name": "deployFactoriesToL2", "type": "bool"},
                    {"internalType": "uint256", "name": "maxFeePerGasForRetryables", "type": "uint256"},
                    {"internalType": "address[]", "name": "batchPosters", "type": "address[]"},
                    {"internalType": "address", "name": "batchPosterManager", "type": "address"},
                ],
                "internalType": "struct RollupCreator.RollupDeploymentParams",
                "name": "deployParams",
                "type": "tuple",
            }
        ],
        "name": "createRollup",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "payable",
        "type": "function",
    }
]

UPGRADE_EXECUTOR_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "address", "name": "target", "type": "address"},
            {"internalType": "bytes", "name": "targetCallData", "type": "bytes"},
        ],
        "name": "executeCall",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    }
]

ROLLUP_CREATED_SIGNATURE = (
    "RollupCreated(address,address,address,address,address,address,address,address,address,address,address,address)"
)
ROLLUP_CREATED_TOPIC = keccak(text=ROLLUP_CREATED_SIGNATURE)

SET_VALID_KEYSET_SIGNATURE = "setValidKeyset(bytes)"

# Non-indexed RollupCreated fields, in emission order.
_ROLLUP_CREATED_DATA_FIELDS = (
    "inbox",
    "outbox",
    "rollup_event_inbox",
    "challenge_manager",
    "admin_proxy",
    "sequencer_inbox",
    "bridge",
    "upgrade_executor",
    "validator_utils",
    "validator_wallet_creator",
)


def _checksum(value: str, label: str) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid {label} address: {value!r}")
    return to_checksum_address(value)


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return decode_hex(value)


def generate_chain_id(rng: Optional[random.Random] = None) -> int:
    """Draw a random chain id; collisions with live chains are not checked."""

    source = rng if rng is not None else random.SystemRandom()
    return source.randint(CHAIN_ID_MIN, CHAIN_ID_MAX)


def prepare_chain_config(chain_id: int, owner: str, *, data_availability_committee: bool = True) -> str:
    """Render the chain configuration JSON consumed by ``createRollup``."""

    config = {
        "chainId": int(chain_id),
        "homesteadBlock": 0,
        "daoForkBlock": None,
        "daoForkSupport": True,
        "eip150Block": 0,
        "eip150Hash": ZERO_HASH,
        "eip155Block": 0,
        "eip158Block": 0,
        "byzantiumBlock": 0,
        "constantinopleBlock": 0,
        "petersburgBlock": 0,
        "istanbulBlock": 0,
        "muirGlacierBlock": 0,
        "berlinBlock": 0,
        "londonBlock": 0,
        "clique": {"period": 0, "epoch": 0},
        "arbitrum": {
            "EnableArbOS": True,
            "AllowDebugPrecompiles": False,
            "DataAvailabilityCommittee": bool(data_availability_committee),
            "InitialArbOSVersion": DEFAULT_ARBOS_VERSION,
            "InitialChainOwner": _checksum(owner, "chain owner"),
            "GenesisBlockNum": 0,
            "MaxCodeSize": 24576,
            "MaxInitCodeSize": 49152,
        },
    }
    return json.dumps(config, separators=(",", ":"))


@dataclass(frozen=True)
class MaxTimeVariation:
    delay_blocks: int = 28_800
    future_blocks: int = 300
    delay_seconds: int = 345_600
    future_seconds: int = 3_600

    def as_abi(self) -> Tuple[int, int, int, int]:
        return (self.delay_blocks, self.future_blocks, self.delay_seconds, self.future_seconds)


@dataclass(frozen=True)
class RollupConfig:
    """The ``Config`` struct passed to ``RollupCreator.createRollup``."""

    confirm_period_blocks: int
    extra_challenge_time_blocks: int
    stake_token: str
    base_stake: int
    wasm_module_root: str
    owner: str
    loser_stake_escrow: str
    chain_id: int
    chain_config: str
    genesis_block_num: int = 0
    sequencer_inbox_max_time_variation: MaxTimeVariation = MaxTimeVariation()

    def as_abi(self) -> tuple:
        return (
            self.confirm_period_blocks,
            self.extra_challenge_time_blocks,
            self.stake_token,
            self.base_stake,
            _as_bytes(self.wasm_module_root),
            self.owner,
            self.loser_stake_escrow,
            self.chain_id,
            self.chain_config,
            self.genesis_block_num,
            self.sequencer_inbox_max_time_variation.as_abi(),
        )


def _resolve_parent_chain(read_client: Any, parent_chain: Optional[ParentChain]) -> ParentChain:
    if parent_chain is not None:
        return parent_chain
    return get_parent_chain(int(read_client.eth.chain_id))


def prepare_deployment_params(
    read_client: Any,
    *,
    chain_id: int,
    owner: str,
    chain_config: str,
    parent_chain: Optional[ParentChain] = None,
) -> RollupConfig:
    """Fill the rollup ``Config`` with the defaults for the parent chain."""

    chain = _resolve_parent_chain(read_client, parent_chain)
    owner = _checksum(owner, "owner")
    return RollupConfig(
        confirm_period_blocks=150 if chain.testnet else 45_818,
        extra_challenge_time_blocks=0,
        stake_token=to_checksum_address(chain.weth),
        base_stake=10**17 if chain.testnet else 10**18,
        wasm_module_root=DEFAULT_WASM_MODULE_ROOT,
        owner=owner,
        loser_stake_escrow=ZERO_ADDRESS,
        chain_id=int(chain_id),
        chain_config=chain_config,
    )


def _address_list(values: Sequence[str], label: str) -> List[str]:
    if isinstance(values, str) or not values:
        raise ValueError(f"At least one {label} address is required")
    return [_checksum(value, label) for value in values]


def _build(read_client: Any, function: Any, sender: str) -> Mapping[str, Any]:
    tx = function.build_transaction(
        {
            "from": sender,
            "value": 0,
            "nonce": read_client.eth.get_transaction_count(sender),
        }
    )
    return MappingProxyType(dict(tx))


def encode_deploy_params(
    params: RollupConfig,
    batch_posters: Sequence[str],
    validators: Sequence[str],
    native_token: str,
    *,
    deploy_factories_to_l2: bool = False,
    batch_poster_manager: str = ZERO_ADDRESS,
) -> tuple:
    """The ``RollupDeploymentParams`` tuple, in ABI field order."""

    return (
        params.as_abi(),
        _address_list(validators, "validator"),
        DEFAULT_MAX_DATA_SIZE,
        _checksum(native_token, "native token"),
        bool(deploy_factories_to_l2),
        DEFAULT_MAX_FEE_PER_GAS_FOR_RETRYABLES,
        _address_list(batch_posters, "batch poster"),
        _checksum(batch_poster_manager, "batch poster manager"),
    )


def prepare_deployment_transaction_request(
    params: RollupConfig,
    batch_posters: Sequence[str],
    validators: Sequence[str],
    native_token: str,
    sender: str,
    read_client: Any,
    *,
    parent_chain: Optional[ParentChain] = None,
    rollup_creator: Optional[str] = None,
    deploy_factories_to_l2: bool = False,
    batch_poster_manager: str = ZERO_ADDRESS,
) -> Mapping[str, Any]:
    """Encode and price a ``createRollup`` call from ``sender``.

    ``deploy_factories_to_l2`` is off by default: deploying the factories pays
    retryable fees in the custom fee token, which needs an ERC-20 allowance
    for the rollup creator.
    """

    chain = _resolve_parent_chain(read_client, parent_chain)
    sender = _checksum(sender, "sender")
    native_token = _checksum(native_token, "native token")
    creator = _checksum(rollup_creator or chain.rollup_creator, "rollup creator")

    if native_token != ZERO_ADDRESS and not read_client.eth.get_code(native_token):
        raise ValueError(f"Custom fee token {native_token} has no contract code on {chain.name}")

    deploy_params = encode_deploy_params(
        params,
        batch_posters,
        validators,
        native_token,
        deploy_factories_to_l2=deploy_factories_to_l2,
        batch_poster_manager=batch_poster_manager,
    )
    contract = read_client.eth.contract(address=creator, abi=ROLLUP_CREATOR_ABI)
    return _build(read_client, contract.functions.createRollup(deploy_params), sender)


@dataclass(frozen=True)
class CoreContracts:
    """Addresses of the contracts created by ``createRollup``."""

    rollup: str
    native_token: str
    inbox: str
    outbox: str
    rollup_event_inbox: str
    challenge_manager: str
    admin_proxy: str
    sequencer_inbox: str
    bridge: str
    upgrade_executor: str
    validator_utils: str
    validator_wallet_creator: str
    deployed_at_block_number: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DeploymentReceipt:
    """Wraps a confirmed ``createRollup`` receipt.

    Only ``RollupCreated`` logs emitted by ``rollup_creator`` are decoded; it
    defaults to the receipt's ``to`` address.
    """

    def __init__(self, receipt: Mapping[str, Any], rollup_creator: Optional[str] = None) -> None:
        self.receipt = receipt
        emitter = rollup_creator or receipt.get("to")
        self.rollup_creator = _checksum(emitter, "rollup creator") if emitter else None

    @property
    def transaction_hash(self) -> str:
        value = self.receipt.get("transactionHash")
        if isinstance(value, (bytes, bytearray)):
            return "0x" + bytes(value).hex()
        return str(value)

    def _find_rollup_created(self) -> Mapping[str, Any]:
        for log in self.receipt.get("logs", []):
            topics = log.get("topics") or []
            if not topics or _as_bytes(topics[0]) != ROLLUP_CREATED_TOPIC:
                continue
            if self.rollup_creator is not None and not self._emitted_by_creator(log):
                continue
            return log
        raise ValueError(f"No RollupCreated event found in transaction {self.transaction_hash}")

    def _emitted_by_creator(self, log: Mapping[str, Any]) -> bool:
        address = log.get("address")
        return bool(address) and is_address(address) and to_checksum_address(address) == self.rollup_creator

    def get_core_contracts(self) -> CoreContracts:
        """Decode the ``RollupCreated`` event; repeated calls yield equal results."""

        log = self._find_rollup_created()
        topics = log["topics"]
        rollup = decode(["address"], _as_bytes(topics[1]))[0]
        native_token = decode(["address"], _as_bytes(topics[2]))[0]
        values = decode(["address"] * len(_ROLLUP_CREATED_DATA_FIELDS), _as_bytes(log["data"]))
        fields = {name: to_checksum_address(value) for name, value in zip(_ROLLUP_CREATED_DATA_FIELDS, values)}
        return CoreContracts(
            rollup=to_checksum_address(rollup),
            native_token=to_checksum_address(native_token),
            deployed_at_block_number=int(self.receipt.get("blockNumber") or 0),
            **fields,
        )


def prepare_deployment_receipt(
    receipt: Mapping[str, Any], rollup_creator: Optional[str] = None
) -> DeploymentReceipt:
    return DeploymentReceipt(receipt, rollup_creator)


def encode_set_valid_keyset(keyset: bytes) -> bytes:
    """Calldata for ``SequencerInbox.setValidKeyset(keyset)``."""

    return function_signature_to_4byte_selector(SET_VALID_KEYSET_SIGNATURE) + encode(["bytes"], [bytes(keyset)])


def prepare_keyset_transaction_request(
    core_contracts: Any,
    keyset: bytes,
    sender: str,
    read_client: Any,
) -> Mapping[str, Any]:
    """Build ``UpgradeExecutor.executeCall(sequencerInbox, setValidKeyset(keyset))``."""

    if not keyset:
        raise ValueError("Keyset must not be empty")
    if isinstance(core_contracts, Mapping):
        upgrade_executor = core_contracts["upgrade_executor"]
        sequencer_inbox = core_contracts["sequencer_inbox"]
    else:
        upgrade_executor = core_contracts.upgrade_executor
        sequencer_inbox = core_contracts.sequencer_inbox

    upgrade_executor = _checksum(upgrade_executor, "upgrade executor")
    sequencer_inbox = _checksum(sequencer_inbox, "sequencer inbox")
    sender = _checksum(sender, "sender")

    contract = read_client.eth.contract(address=upgrade_executor, abi=UPGRADE_EXECUTOR_ABI)
    call = contract.functions.executeCall(sequencer_inbox, encode_set_valid_keyset(keyset))
    return _build(read_client, call, sender)


__all__ = [
    "CoreContracts",
    "DeploymentReceipt",
    "MaxTimeVariation",
    "ROLLUP_CREATED_TOPIC",
    "ROLLUP_CREATOR_ABI",
    "RollupConfig",
    "UPGRADE_EXECUTOR_ABI",
    "ZERO_ADDRESS",
    "encode_deploy_params",
    "encode_set_valid_keyset",
    "generate_chain_id",
    "prepare_chain_config",
    "prepare_deployment_params",
    "prepare_deployment_receipt",
    "prepare_deployment_transaction_request",
    "prepare_keyset_transaction_request",
]
