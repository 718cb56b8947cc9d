"""
Deployment Pipeline Stages
=========================

Stages of a deployment run, in the order they are used:
- estimator: pre-flight gas and cost estimation with a funding verdict
- executor: sequential submission and confirmation of planned steps
- verifier: best-effort source registration with the explorer
- reporter: report aggregation and console formatting
"""

from .estimator import CostEstimator, assess_wallet, build_estimate, classify_funding
from .executor import DeploymentExecutor, resolve_constructor_args
from .reporter import format_estimate, format_report, format_wallet_check, summarize
from .verifier import ExplorerClient, VerificationAgent

__all__ = [
    'CostEstimator',
    'DeploymentExecutor',
    'ExplorerClient',
    'VerificationAgent',
    'assess_wallet',
    'build_estimate',
    'classify_funding',
    'format_estimate',
    'format_report',
    'format_wallet_check',
    'resolve_constructor_args',
    'summarize',
]
