"""Environment driven configuration for the rollup deployment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, MutableMapping, Optional

from dotenv import load_dotenv
from eth_utils import is_address, is_hex, remove_0x_prefix

from .chains import DEFAULT_PARENT_CHAIN, ParentChain, get_parent_chain
from .errors import MissingRequiredConfig, OrbitDeploymentError

DEPLOYER_PRIVATE_KEY = "DEPLOYER_PRIVATE_KEY"
CUSTOM_FEE_TOKEN_ADDRESS = "CUSTOM_FEE_TOKEN_ADDRESS"
PARENT_CHAIN_RPC = "PARENT_CHAIN_RPC"
BATCH_POSTER_PRIVATE_KEY = "BATCH_POSTER_PRIVATE_KEY"
VALIDATOR_PRIVATE_KEY = "VALIDATOR_PRIVATE_KEY"
KEYSET = "KEYSET"
ROLLUP_CREATOR_ADDRESS = "ROLLUP_CREATOR_ADDRESS"
PARENT_CHAIN_ID = "PARENT_CHAIN_ID"

# Single committee member, threshold one.
DEFAULT_KEYSET = (
    "0x000000000000000100000000000000010121600e6aaa4020e004ce635a088fff55a10e2e53cdb6bff78b48b37e7d3ab93c8167e4c71"
    "9a123cd051726132b3c35b113380606924fddcb816562ae7616fc7f3f310cc65a605b687157340647613f449471434a86fd528b1b68dc"
    "cd91ab18ee7eb116db8475834d9c7577b034db754bfdd69f3b4f4e37599b9691fba1bf973777e49ed7b01fa6bbc06f41db6e8d85268a"
    "7b01912b627c19bb9baac20cd13fca76d08a9783b54c2c50fb8f513760114cd0b73161c2aaa8042e7dc5d5406720e31cde018fa7068a"
    "474ba985d6b9690cfd3cd3b88b1b9cb680b59ef089eddbc2fa875d0b01457688b3d7b7eabe4fb4018a812c03e19e84c802f5b12d6197"
    "15a8ac920831510636a641417adf8650f697bbe10457d5bd06ca261b4194efa9fc5b42eaaa"
)


@dataclass(frozen=True)
class DeploymentSettings:
    """Validated view over the recognised environment variables."""

    deployer_private_key: str
    custom_fee_token_address: str
    parent_chain_rpc: Optional[str] = None
    batch_poster_private_key: Optional[str] = None
    validator_private_key: Optional[str] = None
    keyset: bytes = bytes.fromhex(remove_0x_prefix(DEFAULT_KEYSET))
    rollup_creator: Optional[str] = None
    parent_chain: ParentChain = DEFAULT_PARENT_CHAIN

    def __repr__(self) -> str:
        return (
            "DeploymentSettings("
            f"custom_fee_token_address={self.custom_fee_token_address!r}, "
            f"parent_chain_rpc={self.parent_chain_rpc!r}, "
            f"parent_chain={self.parent_chain.name!r})"
        )


def _get_env() -> MutableMapping[str, str]:
    """Expose ``os.environ`` (after ``load_dotenv``) separately to simplify testing."""

    load_dotenv(override=False)
    return os.environ


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _required(env: Mapping[str, str], name: str) -> str:
    value = _optional(env, name)
    if value is None:
        raise MissingRequiredConfig(name)
    return value


def _parse_keyset(raw: str) -> bytes:
    if not is_hex(raw):
        raise OrbitDeploymentError(f'"{KEYSET}" must be a hex encoded keyset')
    text = remove_0x_prefix(raw)
    if len(text) % 2:
        raise OrbitDeploymentError(f'"{KEYSET}" must contain an even number of hex digits')
    return bytes.fromhex(text)


def load_settings(env: Mapping[str, str] | None = None) -> DeploymentSettings:
    """Read the deployment settings from ``env``.

    Parameters
    ----------
    env:
        Optional mapping used to resolve environment variables. When omitted
        ``os.environ`` (after ``load_dotenv``) is used.

    Raises
    ------
    MissingRequiredConfig
        If ``DEPLOYER_PRIVATE_KEY`` or ``CUSTOM_FEE_TOKEN_ADDRESS`` is unset.
    OrbitDeploymentError
        If a supplied value is malformed.
    """

    if env is None:
        env = _get_env()

    deployer_key = _required(env, DEPLOYER_PRIVATE_KEY)
    fee_token = _required(env, CUSTOM_FEE_TOKEN_ADDRESS)
    if not is_address(fee_token):
        raise OrbitDeploymentError(f'"{CUSTOM_FEE_TOKEN_ADDRESS}" is not a valid address: {fee_token}')

    rollup_creator = _optional(env, ROLLUP_CREATOR_ADDRESS)
    if rollup_creator is not None and not is_address(rollup_creator):
        raise OrbitDeploymentError(f'"{ROLLUP_CREATOR_ADDRESS}" is not a valid address: {rollup_creator}')

    parent_chain = DEFAULT_PARENT_CHAIN
    raw_chain_id = _optional(env, PARENT_CHAIN_ID)
    if raw_chain_id is not None:
        try:
            parent_chain = get_parent_chain(int(raw_chain_id))
        except ValueError as exc:
            raise OrbitDeploymentError(f'"{PARENT_CHAIN_ID}": {exc}') from exc

    raw_keyset = _optional(env, KEYSET)
    keyset = _parse_keyset(raw_keyset if raw_keyset is not None else DEFAULT_KEYSET)

    return DeploymentSettings(
        deployer_private_key=deployer_key,
        custom_fee_token_address=fee_token,
        parent_chain_rpc=_optional(env, PARENT_CHAIN_RPC),
        batch_poster_private_key=_optional(env, BATCH_POSTER_PRIVATE_KEY),
        validator_private_key=_optional(env, VALIDATOR_PRIVATE_KEY),
        keyset=keyset,
        rollup_creator=rollup_creator,
        parent_chain=parent_chain,
    )


__all__ = [
    "DEFAULT_KEYSET",
    "DeploymentSettings",
    "load_settings",
]
