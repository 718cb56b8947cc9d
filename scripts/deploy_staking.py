#!/usr/bin/env python3
"""Deploy CrypticornStaking against the token at TOKEN_ADDRESS."""

import sys

from deployer.cli import run_deployment
from deployer.plans import staking_plan


def main(argv=None) -> int:
    return run_deployment("Deploy CrypticornStaking for an existing token", staking_plan, argv)


if __name__ == "__main__":
    sys.exit(main())
