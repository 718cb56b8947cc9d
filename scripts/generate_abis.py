#!/usr/bin/env python3
"""
Extract contract ABIs from the hardhat build output into plain JSON files
"""

import os
import sys
import logging
import argparse
from pathlib import Path

from deployer.artifacts import generate_abis
from deployer.config import configure_logging
from deployer.exceptions import DeploymentError

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate ABI files from compiled artifacts")
    parser.add_argument('--artifacts-dir', type=Path, default=Path(os.getenv("ARTIFACTS_DIR", "artifacts")))
    parser.add_argument('--output-dir', type=Path, default=None)
    args = parser.parse_args(argv)

    configure_logging(log_file=None)
    try:
        generate_abis(args.artifacts_dir, args.output_dir)
    except DeploymentError as e:
        logger.error(f"Error during ABI generation: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
