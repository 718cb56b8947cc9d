"""
Deployment pipeline
Wires estimator, executor, verifier and reporter into one run
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from .exceptions import DeploymentError
from .models import CostEstimate, DeploymentReport, DeploymentStep, NetworkProfile, Verdict
from .processing.estimator import DEFAULT_BUFFER_FACTOR, CostEstimator
from .processing.executor import DeploymentExecutor
from .processing.reporter import summarize

logger = logging.getLogger(__name__)


class DeploymentPipeline:
    """One network, one signer, one artifact store"""

    def __init__(self, provider, artifacts, profile: NetworkProfile, verifier=None,
                 buffer_factor: Decimal = DEFAULT_BUFFER_FACTOR,
                 confirmation_timeout: Optional[float] = None):
        self.provider = provider
        self.profile = profile
        self.estimator = CostEstimator(provider, artifacts, buffer_factor=buffer_factor)
        self.executor = DeploymentExecutor(provider, artifacts, verifier=verifier,
                                           confirmation_timeout=confirmation_timeout)

    def estimate(self, steps: Sequence[DeploymentStep]) -> CostEstimate:
        """Estimate against the signer's current balance; raises EstimationError on failure."""
        balance = self.provider.get_balance()
        return self.estimator.estimate(steps, self.profile, balance)

    def preflight(self, steps: Sequence[DeploymentStep]) -> Optional[CostEstimate]:
        """Estimate, turning any failure into a warning."""
        try:
            estimate = self.estimate(steps)
        except DeploymentError as e:
            logger.warning(f"Pre-flight cost estimation failed, continuing without it: {e}")
            return None

        if estimate.verdict is Verdict.INSUFFICIENT:
            logger.warning(
                f"Balance {estimate.funded_balance} wei is below the estimated cost {estimate.total_cost} wei; "
                "deployment will likely fail"
            )
        elif estimate.verdict is Verdict.TIGHT:
            logger.warning("Balance covers the estimated cost but not the safety buffer")
        return estimate

    def deploy(self, steps: Sequence[DeploymentStep], preflight: bool = True) -> DeploymentReport:
        estimate = self.preflight(steps) if preflight else None
        outcome = self.executor.run(steps, self.profile)
        failure = str(outcome.error) if outcome.error is not None else None
        return summarize(outcome.results, estimate, failure)


def exit_code(report: DeploymentReport) -> int:
    """0 when every step deployed (verification failures do not count), 1 otherwise."""
    return 0 if report.succeeded else 1
