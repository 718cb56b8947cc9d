#!/usr/bin/env python3
"""
Deployment Executor
Submits planned steps one at a time, waits for confirmation depth and threads
produced addresses into dependent steps
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from ..exceptions import ConfigurationError, DependencyUnresolved, DeploymentError, SubmissionError
from ..models import AddressOf, DeploymentResult, DeploymentStep, NetworkProfile, RunOutcome

logger = logging.getLogger(__name__)


def find_result(results: Sequence[DeploymentResult], name: str) -> Optional[DeploymentResult]:
    for result in results:
        if result.step.name == name:
            return result
    return None


def resolve_constructor_args(step: DeploymentStep, results: Sequence[DeploymentResult],
                             profile: NetworkProfile) -> Tuple[Any, ...]:
    """
    Replace `AddressOf` placeholders with the addresses of confirmed results.

    Args:
        step: Step about to be submitted
        results: Results produced so far in this run
        profile: Network profile giving the required confirmation depth

    Returns:
        Constructor arguments ready for submission

    Raises:
        DependencyUnresolved: If a referenced step has no result yet or is not
            confirmed deeply enough
    """
    required = [step.depends_on] if step.depends_on else []
    required += [name for name in step.placeholders() if name not in required]

    addresses = {}
    for name in required:
        dependency = find_result(results, name)
        if dependency is None:
            raise DependencyUnresolved(step.name, name)
        if dependency.confirmations_observed < profile.confirmation_depth:
            raise DependencyUnresolved(
                step.name, name,
                f"has {dependency.confirmations_observed} of {profile.confirmation_depth} required confirmations",
            )
        addresses[name] = dependency.address

    return tuple(addresses[arg.step] if isinstance(arg, AddressOf) else arg for arg in step.constructor_args)


class DeploymentExecutor:
    """
    Runs a deployment plan in the given order.

    The order of `steps` is the dependency order; the executor checks it while
    resolving placeholders but does not reorder anything.
    """

    def __init__(self, provider, artifacts, verifier=None, confirmation_timeout: Optional[float] = None):
        self.provider = provider
        self.artifacts = artifacts
        self.verifier = verifier
        self.confirmation_timeout = confirmation_timeout

    def run(self, steps: Sequence[DeploymentStep], profile: NetworkProfile) -> RunOutcome:
        """
        Deploy every step, stopping at the first failure.

        Results produced before a failure are returned unchanged together with
        the error; nothing already on chain is undone.

        Raises:
            ConfigurationError: If step names are not unique (checked before any submission)
        """
        names = [step.name for step in steps]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Step names must be unique: {names}")

        results: List[DeploymentResult] = []
        for index, step in enumerate(steps, start=1):
            logger.info(f"=== Step {index}/{len(steps)}: deploy {step.kind.contract_name} ({step.name}) ===")
            try:
                result = self._deploy(step, results, profile)
            except DeploymentError as e:
                logger.error(f"Deployment aborted at step '{step.name}': {e}")
                return RunOutcome(results=results, error=e)

            if self.verifier is not None:
                result = self.verifier.verify(result, profile)
            results.append(result)

        logger.info(f"All {len(results)} step(s) deployed on {profile.name}")
        return RunOutcome(results=results)

    def _deploy(self, step: DeploymentStep, results: Sequence[DeploymentResult],
                profile: NetworkProfile) -> DeploymentResult:
        args = resolve_constructor_args(step, results, profile)
        artifact = self.artifacts.get(step.kind)

        submitted = self.provider.submit_deployment(artifact, args)
        if not submitted.ok:
            raise SubmissionError(step.name, submitted.error)
        tx_id = submitted.value

        depth = step.required_confirmations(profile)
        logger.info(f"Waiting for {depth} block confirmation(s) of {tx_id}...")
        confirmed = self.provider.wait_for_confirmations(tx_id, depth, timeout=self.confirmation_timeout)
        if not confirmed.ok:
            raise SubmissionError(step.name, confirmed.error)
        receipt = confirmed.value

        logger.info(
            f"{step.kind.contract_name} deployed to {receipt.contract_address} "
            f"(block {receipt.block_number}, {receipt.confirmations} confirmations)"
        )
        return DeploymentResult(
            step=step,
            address=receipt.contract_address,
            transaction_id=tx_id,
            confirmations_observed=receipt.confirmations,
            constructor_args=args,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
        )
