#!/usr/bin/env python3
"""Create an AnyTrust rollup that uses a custom fee token, then set its keyset.

Configuration comes from the environment (or a ``.env`` file)::

    DEPLOYER_PRIVATE_KEY=0x...          # required
    CUSTOM_FEE_TOKEN_ADDRESS=0x...      # required
    PARENT_CHAIN_RPC=https://...        # optional, public endpoint otherwise
    BATCH_POSTER_PRIVATE_KEY=0x...      # optional, generated otherwise
    VALIDATOR_PRIVATE_KEY=0x...         # optional, generated otherwise

Both phases always run; their outcome is reported in the log. The exit status
is non-zero only when the configuration is unusable.
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from orbit_custom_fee_rollup.errors import OrbitDeploymentError
from orbit_custom_fee_rollup.orchestrator import initialize, run


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging verbosity (DEBUG, INFO, WARNING)",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        context = initialize()
    except OrbitDeploymentError as exc:
        logging.error("%s", exc)
        return 1

    run(context)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
