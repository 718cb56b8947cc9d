"""
Deployer configuration
Network profiles, environment loading and logging setup
"""

import os
import logging
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv
from web3 import Web3

from .exceptions import ConfigurationError
from .models import NetworkProfile

DEFAULT_NETWORK = "bscTestnet"
DEFAULT_TOKEN_NAME = "Crypticorn"
DEFAULT_TOKEN_SYMBOL = "CRYPTO"
DEFAULT_CONFIRMATION_TIMEOUT = 600
DEFAULT_BUFFER_FACTOR = Decimal("1.20")
DEFAULT_LOG_FILE = "deployment.log"

NETWORKS: Dict[str, NetworkProfile] = {
    "bscTestnet": NetworkProfile(
        name="bscTestnet",
        chain_id=97,
        rpc_url="https://bsc-testnet-rpc.publicnode.com",
        confirmation_depth=5,
        explorer_api_url="https://api-testnet.bscscan.com/api",
        explorer_browser_url="https://testnet.bscscan.com",
        native_symbol="BNB",
    ),
    "bscMainnet": NetworkProfile(
        name="bscMainnet",
        chain_id=56,
        rpc_url="https://bsc-rpc.publicnode.com",
        confirmation_depth=5,
        explorer_api_url="https://api.bscscan.com/api",
        explorer_browser_url="https://bscscan.com",
        native_symbol="BNB",
    ),
    "hardhat": NetworkProfile(
        name="hardhat",
        chain_id=31337,
        rpc_url="http://127.0.0.1:8545",
        confirmation_depth=1,
        native_symbol="ETH",
    ),
}


def get_network_profile(name: str, rpc_url: Optional[str] = None) -> NetworkProfile:
    """
    Look up a built-in network profile.

    Args:
        name: Profile name ("bscTestnet", "bscMainnet" or "hardhat")
        rpc_url: Optional RPC endpoint replacing the profile default

    Returns:
        The matching NetworkProfile

    Raises:
        ConfigurationError: If the network is unknown
    """
    try:
        profile = NETWORKS[name]
    except KeyError:
        known = ", ".join(sorted(NETWORKS))
        raise ConfigurationError(f"Unknown network '{name}' (known networks: {known})") from None
    if rpc_url:
        profile = replace(profile, rpc_url=rpc_url)
    return profile


@dataclass(frozen=True)
class DeployConfig:
    """Deployment inputs read from the environment"""
    private_key: str
    network: str = DEFAULT_NETWORK
    rpc_url: Optional[str] = None
    marketing_wallet: Optional[str] = None
    token_name: str = DEFAULT_TOKEN_NAME
    token_symbol: str = DEFAULT_TOKEN_SYMBOL
    token_address: Optional[str] = None
    initial_apy_bps: Optional[int] = None
    bscscan_api_key: Optional[str] = None
    confirmation_timeout: Optional[float] = DEFAULT_CONFIRMATION_TIMEOUT
    buffer_factor: Decimal = DEFAULT_BUFFER_FACTOR
    artifacts_dir: Path = Path("artifacts")

    def profile(self) -> NetworkProfile:
        return get_network_profile(self.network, self.rpc_url)


def parse_apy_bps(raw: str) -> int:
    """Parse INITIAL_APY_BPS; only non-negative integers are accepted."""
    value = raw.strip()
    if not value.isdigit():
        raise ConfigurationError(f"INITIAL_APY_BPS must be a non-negative integer, got '{raw}'")
    return int(value)


def parse_address(raw: str, variable: str) -> str:
    value = raw.strip()
    if not Web3.is_address(value):
        raise ConfigurationError(f"{variable} is not a valid address: '{raw}'")
    return Web3.to_checksum_address(value)


def parse_buffer_factor(raw: str) -> Decimal:
    try:
        factor = Decimal(raw.strip())
    except InvalidOperation:
        raise ConfigurationError(f"GAS_BUFFER_FACTOR must be a decimal number, got '{raw}'") from None
    if not factor > 1:
        raise ConfigurationError(f"GAS_BUFFER_FACTOR must be greater than 1.0, got {factor}")
    return factor


def parse_timeout(raw: str) -> Optional[float]:
    """Parse CONFIRMATION_TIMEOUT in seconds; 0 disables the timeout."""
    try:
        seconds = float(raw.strip())
    except ValueError:
        raise ConfigurationError(f"CONFIRMATION_TIMEOUT must be a number of seconds, got '{raw}'") from None
    if seconds < 0:
        raise ConfigurationError(f"CONFIRMATION_TIMEOUT must not be negative, got {seconds}")
    return seconds or None


def load_config(environ: Optional[Mapping[str, str]] = None, network: Optional[str] = None) -> DeployConfig:
    """
    Build a DeployConfig from environment variables.

    When no mapping is given the process environment is used, after loading
    a `.env` file from the working directory.

    Args:
        environ: Mapping to read variables from
        network: Network name overriding the NETWORK variable

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    def get(name: str) -> Optional[str]:
        value = environ.get(name)
        if value is None or not value.strip():
            return None
        return value.strip()

    private_key = get("PRIVATE_KEY")
    if not private_key:
        raise ConfigurationError("PRIVATE_KEY not found in environment")

    network_name = network or get("NETWORK") or DEFAULT_NETWORK
    # Fail on unknown networks here, before anything touches the network
    get_network_profile(network_name)

    marketing_wallet = get("MARKETING_WALLET")
    token_address = get("TOKEN_ADDRESS")
    apy = get("INITIAL_APY_BPS")
    buffer_factor = get("GAS_BUFFER_FACTOR")
    timeout = get("CONFIRMATION_TIMEOUT")

    return DeployConfig(
        private_key=private_key,
        network=network_name,
        rpc_url=get("RPC_URL"),
        marketing_wallet=parse_address(marketing_wallet, "MARKETING_WALLET") if marketing_wallet else None,
        token_name=get("TOKEN_NAME") or DEFAULT_TOKEN_NAME,
        token_symbol=get("TOKEN_SYMBOL") or DEFAULT_TOKEN_SYMBOL,
        token_address=parse_address(token_address, "TOKEN_ADDRESS") if token_address else None,
        initial_apy_bps=parse_apy_bps(apy) if apy is not None else None,
        bscscan_api_key=get("BSCSCAN_API_KEY"),
        confirmation_timeout=parse_timeout(timeout) if timeout is not None else DEFAULT_CONFIRMATION_TIMEOUT,
        buffer_factor=parse_buffer_factor(buffer_factor) if buffer_factor else DEFAULT_BUFFER_FACTOR,
        artifacts_dir=Path(get("ARTIFACTS_DIR") or "artifacts"),
    )


def configure_logging(log_file: Optional[str] = DEFAULT_LOG_FILE, level: int = logging.INFO) -> None:
    """Send log records to the console and, when given, to a log file."""
    handlers: list = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )
