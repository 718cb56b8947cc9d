"""Custom exception classes for the Crypticorn deployer."""

from typing import Dict


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when a required input is missing or invalid."""

    pass


class NetworkConnectionError(DeploymentError, ConnectionError):
    """Raised when the RPC endpoint is unreachable or serves the wrong chain."""

    pass


class ArtifactError(DeploymentError):
    """Base for problems with the compiled contract artifacts."""

    pass


class ArtifactNotFoundError(ArtifactError, FileNotFoundError):
    """Raised when a contract artifact or its build info is missing."""

    pass


class InvalidArtifactError(ArtifactError, ValueError):
    """Raised when an artifact file exists but cannot be read or parsed."""

    pass


class DependencyUnresolved(DeploymentError):
    """Raised when a step references a prior step that has no confirmed result."""

    def __init__(self, step: str, dependency: str, reason: str = "has not produced a result"):
        self.step = step
        self.dependency = dependency
        super().__init__(f"Step '{step}' depends on '{dependency}', which {reason}")


class SubmissionError(DeploymentError):
    """Raised when a step's transaction fails to submit or confirm."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"Step '{step}' failed: {message}")


class EstimationError(DeploymentError):
    """Raised when gas simulation fails for one or more steps."""

    def __init__(self, failures: Dict[str, str]):
        self.failures = dict(failures)
        details = "; ".join(f"{name}: {message}" for name, message in self.failures.items())
        super().__init__(f"Gas estimation failed for {len(self.failures)} step(s): {details}")


class ReportError(DeploymentError, ValueError):
    """Raised when the reporter receives malformed input."""

    pass
