#!/usr/bin/env python3
"""Deploy the simplified Crypticorn token."""

import sys

from deployer.cli import run_deployment
from deployer.plans import simple_token_plan


def main(argv=None) -> int:
    return run_deployment("Deploy the simplified Crypticorn token", simple_token_plan, argv)


if __name__ == "__main__":
    sys.exit(main())
