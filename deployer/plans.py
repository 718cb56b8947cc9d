"""
Deployment plans
Builds ordered step lists from the deployment configuration
"""

from typing import List, Union

from .config import DeployConfig
from .exceptions import ConfigurationError
from .models import AddressOf, ArtifactKind, DeploymentStep

TOKEN_STEP = "token"
STAKING_STEP = "staking"
STANDARD_STAKING_STEP = "standard_staking"

# The standard staking deployment waits for a deeper confirmation than the others
STANDARD_STAKING_CONFIRMATIONS = 12

TokenRef = Union[str, AddressOf]


def token_step(config: DeployConfig, signer_address: str, simple: bool = False) -> DeploymentStep:
    return DeploymentStep(
        name=TOKEN_STEP,
        kind=ArtifactKind.SIMPLE_TOKEN if simple else ArtifactKind.TOKEN,
        constructor_args=(config.marketing_wallet or signer_address, config.token_name, config.token_symbol),
    )


def staking_step(token: TokenRef) -> DeploymentStep:
    return DeploymentStep(name=STAKING_STEP, kind=ArtifactKind.STAKING, constructor_args=(token,))


def standard_staking_step(token: TokenRef, initial_apy_bps: int) -> DeploymentStep:
    return DeploymentStep(
        name=STANDARD_STAKING_STEP,
        kind=ArtifactKind.STANDARD_STAKING,
        constructor_args=(token, initial_apy_bps),
        min_confirmations=STANDARD_STAKING_CONFIRMATIONS,
    )


def require_token_address(config: DeployConfig) -> str:
    if not config.token_address:
        raise ConfigurationError("TOKEN_ADDRESS environment variable is required")
    return config.token_address


def require_apy(config: DeployConfig) -> int:
    if config.initial_apy_bps is None:
        raise ConfigurationError("INITIAL_APY_BPS environment variable is required")
    return config.initial_apy_bps


def token_plan(config: DeployConfig, signer_address: str) -> List[DeploymentStep]:
    return [token_step(config, signer_address)]


def simple_token_plan(config: DeployConfig, signer_address: str) -> List[DeploymentStep]:
    """Simple token; like every step it waits for the full network confirmation depth."""
    return [token_step(config, signer_address, simple=True)]


def staking_plan(config: DeployConfig, signer_address: str) -> List[DeploymentStep]:
    """Staking against an already deployed token."""
    return [staking_step(require_token_address(config))]


def standard_staking_plan(config: DeployConfig, signer_address: str) -> List[DeploymentStep]:
    """Standard staking against an already deployed token."""
    token_address = require_token_address(config)
    return [standard_staking_step(token_address, require_apy(config))]


def full_plan(config: DeployConfig, signer_address: str) -> List[DeploymentStep]:
    """Token, then staking bound to the token's address."""
    return [token_step(config, signer_address), staking_step(AddressOf(TOKEN_STEP))]
