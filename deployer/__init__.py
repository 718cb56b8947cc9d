"""
Crypticorn Deployer
===================

Deploys the Crypticorn token and staking contracts, verifies their sources on
BscScan and estimates deployment costs ahead of time.
"""

from .exceptions import (
    ConfigurationError,
    DependencyUnresolved,
    DeploymentError,
    EstimationError,
    SubmissionError,
)
from .models import (
    AddressOf,
    ArtifactKind,
    CostEstimate,
    DeploymentReport,
    DeploymentResult,
    DeploymentStep,
    NetworkProfile,
    Verdict,
)

__version__ = "1.0.0"

__all__ = [
    'AddressOf',
    'ArtifactKind',
    'ConfigurationError',
    'CostEstimate',
    'DependencyUnresolved',
    'DeploymentError',
    'DeploymentReport',
    'DeploymentResult',
    'DeploymentStep',
    'EstimationError',
    'NetworkProfile',
    'SubmissionError',
    'Verdict',
]
