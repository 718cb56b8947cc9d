#!/usr/bin/env python3
"""
Deployment Cost Estimator
Simulates a deployment plan against one gas price snapshot and judges the funded balance
"""

import logging
from decimal import Decimal
from typing import Dict, Sequence, Union

from web3 import Web3

from ..exceptions import ArtifactError, ConfigurationError, EstimationError
from ..models import AddressOf, CostEstimate, DeploymentStep, NetworkProfile, Verdict, WalletCheck

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_FACTOR = Decimal("1.20")

# Dependencies do not exist yet at estimation time; any non-zero address simulates the same
ESTIMATION_STAND_IN_ADDRESS = "0x0000000000000000000000000000000000000001"

ROUGH_DEPLOYMENT_GAS = 2_500_000
MINIMUM_BALANCE_WEI = Web3.to_wei(0.01, 'ether')

Amount = Union[int, Decimal]


def classify_funding(funded_balance: Amount, total_cost: Amount, cost_with_buffer: Amount) -> Verdict:
    """
    Judge a balance against a cost and its buffered cost.

    Args:
        funded_balance: Available balance
        total_cost: Unbuffered cost of the plan
        cost_with_buffer: Cost including the safety buffer

    Returns:
        SUFFICIENT when the balance covers the buffered cost, TIGHT when it
        only covers the plain cost, INSUFFICIENT otherwise
    """
    if funded_balance >= cost_with_buffer:
        return Verdict.SUFFICIENT
    if funded_balance >= total_cost:
        return Verdict.TIGHT
    return Verdict.INSUFFICIENT


def build_estimate(per_step_gas: Dict[str, int], unit_price: Amount, buffer_factor: Amount,
                   funded_balance: Amount) -> CostEstimate:
    """Price per-step gas figures and attach the funding verdict."""
    unit_price = Decimal(unit_price)
    buffer_factor = Decimal(buffer_factor)
    funded_balance = Decimal(funded_balance)

    total_cost = sum((Decimal(gas) * unit_price for gas in per_step_gas.values()), Decimal(0))
    cost_with_buffer = total_cost * buffer_factor

    return CostEstimate(
        per_step_gas=dict(per_step_gas),
        unit_price=unit_price,
        buffer_factor=buffer_factor,
        total_cost=total_cost,
        funded_balance=funded_balance,
        verdict=classify_funding(funded_balance, total_cost, cost_with_buffer),
    )


def stand_in_args(step: DeploymentStep) -> tuple:
    return tuple(ESTIMATION_STAND_IN_ADDRESS if isinstance(arg, AddressOf) else arg
                 for arg in step.constructor_args)


class CostEstimator:
    """Pre-flight gas and cost estimator; performs read-only queries only"""

    def __init__(self, provider, artifacts, buffer_factor: Amount = DEFAULT_BUFFER_FACTOR):
        """
        Initialize estimator

        Args:
            provider: ChainProvider (or compatible) used for price and simulation queries
            artifacts: ArtifactStore resolving step kinds to compiled contracts
            buffer_factor: Safety multiplier applied to the total cost (must exceed 1)
        """
        buffer_factor = Decimal(buffer_factor)
        if not buffer_factor > 1:
            raise ConfigurationError(f"buffer_factor must be greater than 1.0, got {buffer_factor}")
        self.provider = provider
        self.artifacts = artifacts
        self.buffer_factor = buffer_factor

    def estimate(self, steps: Sequence[DeploymentStep], profile: NetworkProfile,
                 funded_balance: Amount) -> CostEstimate:
        """
        Estimate the cost of deploying `steps`.

        Every step is simulated even after a failure so that all failing steps
        are reported together.

        Raises:
            ConfigurationError: If step names are not unique
            EstimationError: If any step could not be simulated
            NetworkConnectionError: If the gas price cannot be read
        """
        names = [step.name for step in steps]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Step names must be unique: {names}")

        unit_price = self.provider.get_gas_price()
        logger.info(f"Estimating {len(steps)} step(s) on {profile.name} at gas price {Web3.from_wei(unit_price, 'gwei')} gwei")

        per_step_gas: Dict[str, int] = {}
        failures: Dict[str, str] = {}
        for step in steps:
            try:
                artifact = self.artifacts.get(step.kind)
            except ArtifactError as e:
                failures[step.name] = str(e)
                logger.warning(f"Cannot estimate {step.name}: {e}")
                continue

            outcome = self.provider.simulate_deployment(artifact, stand_in_args(step))
            if outcome.ok:
                per_step_gas[step.name] = outcome.value
                logger.info(f"{step.name} ({step.kind.contract_name}): estimated gas {outcome.value}")
            else:
                failures[step.name] = outcome.error
                logger.warning(f"Cannot estimate {step.name}: {outcome.error}")

        if failures:
            raise EstimationError(failures)

        estimate = build_estimate(per_step_gas, unit_price, self.buffer_factor, funded_balance)
        logger.info(f"Estimated total cost {estimate.total_cost} wei, verdict {estimate.verdict.value}")
        return estimate


def assess_wallet(address: str, balance: int, gas_price: int,
                  estimated_gas: int = ROUGH_DEPLOYMENT_GAS,
                  minimum_balance: int = MINIMUM_BALANCE_WEI) -> WalletCheck:
    """Rough balance check for a single contract deployment of ~2.5M gas."""
    return WalletCheck(
        address=address,
        balance=balance,
        gas_price=gas_price,
        estimated_gas=estimated_gas,
        estimated_cost=estimated_gas * gas_price,
        minimum_balance=minimum_balance,
    )
