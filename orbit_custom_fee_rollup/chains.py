"""Parent chains a rollup can be anchored to."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ParentChain:
    """Static description of a supported parent chain."""

    name: str
    chain_id: int
    default_rpc_url: str
    rollup_creator: str
    weth: str
    testnet: bool = True


ARBITRUM_SEPOLIA = ParentChain(
    name="arbitrum-sepolia",
    chain_id=421614,
    default_rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
    rollup_creator="0xfb774eA8A92ae528A596c8D90CBCF1bdBC4Cee79",
    weth="0x980B62Da83eFf3D4576C647993b0c1D7faf17c73",
)

ARBITRUM_ONE = ParentChain(
    name="arbitrum-one",
    chain_id=42161,
    default_rpc_url="https://arb1.arbitrum.io/rpc",
    rollup_creator="0x79607f00e61E6d7C0E6330bd7E9c4AC320D50FC9",
    weth="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
    testnet=False,
)

BASE_SEPOLIA = ParentChain(
    name="base-sepolia",
    chain_id=84532,
    default_rpc_url="https://sepolia.base.org",
    rollup_creator="0xfb774eA8A92ae528A596c8D90CBCF1bdBC4Cee79",
    weth="0x4200000000000000000000000000000000000006",
)

PARENT_CHAINS: Dict[int, ParentChain] = {
    chain.chain_id: chain for chain in (ARBITRUM_SEPOLIA, ARBITRUM_ONE, BASE_SEPOLIA)
}

DEFAULT_PARENT_CHAIN = ARBITRUM_SEPOLIA


def get_parent_chain(chain_id: int) -> ParentChain:
    try:
        return PARENT_CHAINS[chain_id]
    except KeyError:
        raise ValueError(f"Parent chain {chain_id} is not supported") from None


__all__ = [
    "ARBITRUM_ONE",
    "ARBITRUM_SEPOLIA",
    "BASE_SEPOLIA",
    "DEFAULT_PARENT_CHAIN",
    "PARENT_CHAINS",
    "ParentChain",
    "get_parent_chain",
]
