"""
Deployment data model
Plans, results, cost estimates and the tagged outcome type shared by the pipeline stages
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from .exceptions import DeploymentError

T = TypeVar("T")


class ArtifactKind(Enum):
    """
    Deployable contract kinds.

    Values are the names used in plans and reports; `contract_name` is the
    hardhat artifact the kind is built from.
    """

    TOKEN = "Token"
    STAKING = "Staking"
    STANDARD_STAKING = "StandardStaking"
    SIMPLE_TOKEN = "SimpleToken"

    @property
    def contract_name(self) -> str:
        return _CONTRACT_NAMES[self]


_CONTRACT_NAMES = {
    ArtifactKind.TOKEN: "Crypticorn",
    ArtifactKind.STAKING: "CrypticornStaking",
    ArtifactKind.STANDARD_STAKING: "CrypticornStandardStaking",
    ArtifactKind.SIMPLE_TOKEN: "CrypticornSimple",
}


class Verdict(Enum):
    """Funding verdict of a cost estimate."""

    SUFFICIENT = "Sufficient"
    TIGHT = "Tight"
    INSUFFICIENT = "Insufficient"


@dataclass(frozen=True)
class NetworkProfile:
    """Static description of a target network"""
    name: str
    chain_id: int
    rpc_url: str
    confirmation_depth: int = 5
    explorer_api_url: Optional[str] = None
    explorer_browser_url: Optional[str] = None
    native_symbol: str = "BNB"

    def __post_init__(self):
        if self.confirmation_depth < 1:
            raise ValueError(f"confirmation_depth must be >= 1, got {self.confirmation_depth}")

    @property
    def has_explorer(self) -> bool:
        return bool(self.explorer_api_url)

    def address_url(self, address: str) -> Optional[str]:
        if not self.explorer_browser_url:
            return None
        return f"{self.explorer_browser_url}/address/{address}#code"

    def transaction_url(self, transaction_id: str) -> Optional[str]:
        if not self.explorer_browser_url:
            return None
        return f"{self.explorer_browser_url}/tx/{transaction_id}"


@dataclass(frozen=True)
class AddressOf:
    """Constructor argument placeholder for the address produced by a prior step"""
    step: str


@dataclass(frozen=True)
class DeploymentStep:
    """
    One planned contract deployment.

    `constructor_args` may contain `AddressOf` placeholders; they are resolved
    against earlier results right before submission. When `depends_on` is not
    given it is taken from the first placeholder.
    """

    name: str
    kind: ArtifactKind
    constructor_args: Tuple[Any, ...] = ()
    depends_on: Optional[str] = None
    min_confirmations: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "constructor_args", tuple(self.constructor_args))
        if self.depends_on is None:
            refs = self.placeholders()
            if refs:
                object.__setattr__(self, "depends_on", refs[0])

    def placeholders(self) -> List[str]:
        """Names of the steps referenced by placeholder arguments, in argument order."""
        return [arg.step for arg in self.constructor_args if isinstance(arg, AddressOf)]

    def required_confirmations(self, profile: NetworkProfile) -> int:
        return max(profile.confirmation_depth, self.min_confirmations or 0)


@dataclass(frozen=True)
class ConfirmedTransaction:
    """Receipt data of a deployment transaction that reached its confirmation depth"""
    contract_address: str
    block_number: int
    confirmations: int
    gas_used: int = 0


@dataclass(frozen=True)
class DeploymentResult:
    """A confirmed deployment; only the verification fields change, through copies"""
    step: DeploymentStep
    address: str
    transaction_id: str
    confirmations_observed: int
    constructor_args: Tuple[Any, ...] = ()
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    verified: bool = False
    verification_error: Optional[str] = None

    def with_verification(self, verified: bool, error: Optional[str] = None) -> "DeploymentResult":
        return replace(self, verified=verified, verification_error=None if verified else error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step.name,
            "kind": self.step.kind.value,
            "contract": self.step.kind.contract_name,
            "address": self.address,
            "transaction_id": self.transaction_id,
            "confirmations_observed": self.confirmations_observed,
            "constructor_args": [str(arg) if not isinstance(arg, int) else arg for arg in self.constructor_args],
            "block_number": self.block_number,
            "gas_used": self.gas_used,
            "verified": self.verified,
            "verification_error": self.verification_error,
        }


@dataclass(frozen=True)
class CostEstimate:
    """
    Priced gas estimate for a deployment plan.

    Monetary values are in the smallest native unit (wei). `per_step_gas` is
    keyed by step name in plan order.
    """

    per_step_gas: Dict[str, int]
    unit_price: Decimal
    buffer_factor: Decimal
    total_cost: Decimal
    funded_balance: Decimal
    verdict: Verdict

    @property
    def total_gas(self) -> int:
        return sum(self.per_step_gas.values())

    @property
    def cost_with_buffer(self) -> Decimal:
        return self.total_cost * self.buffer_factor

    @property
    def shortfall(self) -> Decimal:
        """Amount missing to reach `cost_with_buffer`; zero when funding is sufficient."""
        if self.verdict is Verdict.SUFFICIENT:
            return Decimal(0)
        return self.cost_with_buffer - self.funded_balance

    def step_cost(self, name: str) -> Decimal:
        return Decimal(self.per_step_gas[name]) * self.unit_price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per_step_gas": dict(self.per_step_gas),
            "total_gas": self.total_gas,
            "unit_price": str(self.unit_price),
            "buffer_factor": str(self.buffer_factor),
            "total_cost": str(self.total_cost),
            "cost_with_buffer": str(self.cost_with_buffer),
            "funded_balance": str(self.funded_balance),
            "verdict": self.verdict.value,
            "shortfall": str(self.shortfall),
        }


@dataclass(frozen=True)
class DeploymentReport:
    """Final output of a run: ordered results, optional estimate, optional fatal failure"""
    results: Tuple[DeploymentResult, ...] = ()
    estimate: Optional[CostEstimate] = None
    failure: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @property
    def unverified(self) -> List[DeploymentResult]:
        return [result for result in self.results if not result.verified]

    def address_of(self, step: str) -> Optional[str]:
        for result in self.results:
            if result.step.name == step:
                return result.address
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "failure": self.failure,
            "results": [result.to_dict() for result in self.results],
            "estimate": self.estimate.to_dict() if self.estimate is not None else None,
        }


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Tagged success/failure value returned by network-facing calls"""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Outcome[T]":
        return cls(error=error or "unknown error")


@dataclass
class RunOutcome:
    """Results produced by the executor, plus the error that stopped it if any"""
    results: List[DeploymentResult] = field(default_factory=list)
    error: Optional[DeploymentError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class WalletCheck:
    """Balance safety check for the signing account"""
    address: str
    balance: int
    gas_price: int
    estimated_gas: int
    estimated_cost: int
    minimum_balance: int

    @property
    def low_balance(self) -> bool:
        return self.balance < self.minimum_balance
