"""
Shared command-line plumbing for the deployment scripts
"""

import os
import argparse
import logging
from typing import Callable, List, Optional

from dotenv import load_dotenv

from .artifacts import ArtifactStore
from .config import DEFAULT_LOG_FILE, DeployConfig, configure_logging, load_config
from .exceptions import DeploymentError, EstimationError
from .models import DeploymentStep
from .pipeline import DeploymentPipeline, exit_code
from .processing.estimator import assess_wallet
from .processing.reporter import format_estimate, format_report, format_wallet_check
from .processing.verifier import VerificationAgent
from .provider import ChainProvider

logger = logging.getLogger(__name__)

PlanBuilder = Callable[[DeployConfig, str], List[DeploymentStep]]


def build_parser(description: str, deploys: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument('--network', help="target network (overrides NETWORK)")
    if deploys:
        parser.add_argument('--no-verify', action='store_true', help="skip explorer verification")
        parser.add_argument('--skip-estimate', action='store_true', help="skip the pre-flight cost estimate")
    return parser


def log_lines(lines: List[str]) -> None:
    for line in lines:
        logger.info(line)


def bootstrap(args: argparse.Namespace):
    """Load configuration, set up logging and connect; raises DeploymentError subclasses."""
    load_dotenv()
    configure_logging(os.environ.get("LOG_FILE") or DEFAULT_LOG_FILE)
    config = load_config(os.environ, network=args.network)
    profile = config.profile()
    provider = ChainProvider.connect(profile, config.private_key)
    artifacts = ArtifactStore(config.artifacts_dir)
    logger.info(f"Using account {provider.address} on {profile.name}")
    return config, profile, provider, artifacts


def run_deployment(description: str, plan: PlanBuilder, argv: Optional[List[str]] = None) -> int:
    args = build_parser(description).parse_args(argv)
    try:
        config, profile, provider, artifacts = bootstrap(args)
        steps = plan(config, provider.address)

        verifier = None
        if not args.no_verify and profile.has_explorer:
            verifier = VerificationAgent(artifacts, config.bscscan_api_key)

        pipeline = DeploymentPipeline(
            provider, artifacts, profile,
            verifier=verifier,
            buffer_factor=config.buffer_factor,
            confirmation_timeout=config.confirmation_timeout,
        )
        report = pipeline.deploy(steps, preflight=not args.skip_estimate)
    except DeploymentError as e:
        logger.error(f"Fatal error: {e}")
        return 1

    log_lines(format_report(report, profile))
    return exit_code(report)


def run_estimate(description: str, plan: PlanBuilder, argv: Optional[List[str]] = None) -> int:
    args = build_parser(description, deploys=False).parse_args(argv)
    try:
        config, profile, provider, artifacts = bootstrap(args)
        pipeline = DeploymentPipeline(provider, artifacts, profile, buffer_factor=config.buffer_factor)
        estimate = pipeline.estimate(plan(config, provider.address))
    except EstimationError as e:
        for step, message in e.failures.items():
            logger.error(f"Estimation failed for {step}: {message}")
        return 1
    except DeploymentError as e:
        logger.error(f"Error estimating costs: {e}")
        return 1

    log_lines(format_estimate(estimate, profile))
    return 0


def run_wallet_check(description: str, argv: Optional[List[str]] = None) -> int:
    args = build_parser(description, deploys=False).parse_args(argv)
    try:
        config, profile, provider, artifacts = bootstrap(args)
        check = assess_wallet(provider.address, provider.get_balance(), provider.get_gas_price())
    except DeploymentError as e:
        logger.error(f"Error checking wallet: {e}")
        return 1

    log_lines(format_wallet_check(check, profile))
    return 0
