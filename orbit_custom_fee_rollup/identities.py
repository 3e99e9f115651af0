"""Load or generate the deployer, batch poster and validator accounts."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from eth_account import Account

from .config import DeploymentSettings
from .errors import InvalidKeyFormat, MissingRequiredConfig

_LOGGER = logging.getLogger(__name__)

_PRIVATE_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")

# Order of the secp256k1 group; valid keys lie in [1, n).
_SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass(frozen=True)
class Identity:
    """A private key and the address it controls."""

    private_key: str = field(repr=False)
    address: str
    generated: bool = False


@dataclass(frozen=True)
class Identities:
    deployer: Identity
    batch_poster: Identity
    validator: Identity


def sanitize_private_key(raw: str) -> str:
    """Return ``raw`` as a ``0x``-prefixed, lower-case 32 byte hex key.

    Raises
    ------
    InvalidKeyFormat
        If ``raw`` is not 64 hex digits (with or without ``0x``).
    """

    if not isinstance(raw, str):
        raise InvalidKeyFormat("Private key must be a string")
    text = raw.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    if not _PRIVATE_KEY_RE.match(text):
        # Never echo the secret itself.
        raise InvalidKeyFormat(f"Invalid private key: expected 64 hex characters, got {len(text)}")
    if not 0 < int(text, 16) < _SECP256K1_N:
        raise InvalidKeyFormat("Invalid private key: value is outside the secp256k1 range")
    return "0x" + text.lower()


def generate_private_key() -> str:
    return "0x" + Account.create().key.hex().removeprefix("0x")


def with_fallback_private_key(raw: Optional[str]) -> str:
    """Sanitise ``raw`` or generate a fresh key when it is absent or empty."""

    if raw is None or raw == "":
        return generate_private_key()
    return sanitize_private_key(raw)


def address_of(private_key: str) -> str:
    return Account.from_key(private_key).address


def resolve_identity(raw: Optional[str], *, role: str, required: bool = False) -> Identity:
    """Build the :class:`Identity` for ``role`` from an optional secret."""

    if required:
        if not raw:
            raise MissingRequiredConfig(f"{role.upper()}_PRIVATE_KEY")
        key = sanitize_private_key(raw)
        return Identity(private_key=key, address=address_of(key))

    generated = not raw
    key = with_fallback_private_key(raw)
    identity = Identity(private_key=key, address=address_of(key), generated=generated)
    if generated:
        _LOGGER.info("Generated ephemeral %s account %s", role.replace("_", " "), identity.address)
    return identity


def resolve_identities(settings: DeploymentSettings) -> Identities:
    return Identities(
        deployer=resolve_identity(settings.deployer_private_key, role="deployer", required=True),
        batch_poster=resolve_identity(settings.batch_poster_private_key, role="batch_poster"),
        validator=resolve_identity(settings.validator_private_key, role="validator"),
    )


__all__ = [
    "Identities",
    "Identity",
    "address_of",
    "generate_private_key",
    "resolve_identities",
    "resolve_identity",
    "sanitize_private_key",
    "with_fallback_private_key",
]
