"""Derive the parameters of a fresh rollup chain."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from eth_utils import is_address, to_checksum_address

from . import chain_sdk


@dataclass(frozen=True)
class FeatureFlags:
    is_committee_da: bool = True
    is_custom_fee_token: bool = True


@dataclass(frozen=True)
class ChainParameters:
    """Everything needed to request a rollup deployment, minus the roles."""

    chain_id: int
    owner: str
    native_fee_token: str
    feature_flags: FeatureFlags = field(default_factory=FeatureFlags)
    chain_config: str = ""


def build(native_fee_token: str, owner_address: str, rng: Optional[random.Random] = None) -> ChainParameters:
    """Return :class:`ChainParameters` with a newly drawn chain id.

    The result depends only on the arguments and ``rng``: seeding ``rng``
    reproduces both the chain id and the encoded chain configuration.
    """

    for label, value in (("fee token", native_fee_token), ("owner", owner_address)):
        if not is_address(value):
            raise ValueError(f"Invalid {label} address: {value!r}")

    owner = to_checksum_address(owner_address)
    flags = FeatureFlags()
    chain_id = chain_sdk.generate_chain_id(rng)
    return ChainParameters(
        chain_id=chain_id,
        owner=owner,
        native_fee_token=to_checksum_address(native_fee_token),
        feature_flags=flags,
        chain_config=chain_sdk.prepare_chain_config(
            chain_id,
            owner,
            data_availability_committee=flags.is_committee_da,
        ),
    )


__all__ = ["ChainParameters", "FeatureFlags", "build"]
