#!/usr/bin/env python3
"""Deploy the Crypticorn token on its own."""

import sys

from deployer.cli import run_deployment
from deployer.plans import token_plan


def main(argv=None) -> int:
    return run_deployment("Deploy the Crypticorn token", token_plan, argv)


if __name__ == "__main__":
    sys.exit(main())
