#!/usr/bin/env python3
"""Estimate the cost of the full deployment before spending anything."""

import sys

from deployer.cli import run_estimate
from deployer.plans import full_plan


def main(argv=None) -> int:
    return run_estimate("Estimate the full deployment cost", full_plan, argv)


if __name__ == "__main__":
    sys.exit(main())
