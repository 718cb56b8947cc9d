#!/usr/bin/env python3
"""Deploy CrypticornStandardStaking against TOKEN_ADDRESS with INITIAL_APY_BPS."""

import sys

from deployer.cli import run_deployment
from deployer.plans import standard_staking_plan


def main(argv=None) -> int:
    return run_deployment("Deploy CrypticornStandardStaking for an existing token", standard_staking_plan, argv)


if __name__ == "__main__":
    sys.exit(main())
