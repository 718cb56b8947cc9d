#!/usr/bin/env python3
"""Wallet safety check for the deployer account."""

import sys

from deployer.cli import run_wallet_check


def main(argv=None) -> int:
    return run_wallet_check("Check the deployer balance against a rough deployment cost", argv)


if __name__ == "__main__":
    sys.exit(main())
