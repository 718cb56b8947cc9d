#!/usr/bin/env python3
"""Full Crypticorn deployment: token, then staking bound to the token."""

import sys

from deployer.cli import run_deployment
from deployer.plans import full_plan


def main(argv=None) -> int:
    return run_deployment("Deploy the Crypticorn token and its staking contract", full_plan, argv)


if __name__ == "__main__":
    sys.exit(main())
