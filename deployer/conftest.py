"""Shared pytest fixtures for deployer tests."""

import json
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pytest

from deployer.artifacts import ContractArtifact
from deployer.config import NETWORKS
from deployer.exceptions import ArtifactNotFoundError
from deployer.models import ArtifactKind, ConfirmedTransaction, NetworkProfile, Outcome

SIGNER = "0x5b38da6a701c568545dcfcb03fcb875f56beddc4"

CONSTRUCTOR_INPUTS = {
    "Crypticorn": ["address", "string", "string"],
    "CrypticornSimple": ["address", "string", "string"],
    "CrypticornStaking": ["address"],
    "CrypticornStandardStaking": ["address", "uint256"],
}

DEFAULT_GAS = {
    "Crypticorn": 2_000_000,
    "CrypticornSimple": 1_200_000,
    "CrypticornStaking": 1_500_000,
    "CrypticornStandardStaking": 1_800_000,
}


def make_artifact(contract_name: str) -> ContractArtifact:
    inputs = [{"name": f"arg{i}", "type": t} for i, t in enumerate(CONSTRUCTOR_INPUTS[contract_name])]
    return ContractArtifact(
        contract_name=contract_name,
        source_name=f"contracts/{contract_name}.sol",
        abi=[{"type": "constructor", "inputs": inputs, "stateMutability": "nonpayable"}],
        bytecode="0x6080604052",
    )


def write_artifact(artifacts_dir: Path, contract_name: str, content: Union[str, Dict, None] = None) -> Path:
    """Write a hardhat artifact file; raw strings are written as-is."""
    if content is None:
        artifact = make_artifact(contract_name)
        content = {
            "contractName": contract_name,
            "sourceName": artifact.source_name,
            "abi": artifact.abi,
            "bytecode": artifact.bytecode,
        }
    path = Path(artifacts_dir) / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if isinstance(content, str) else json.dumps(content))
    return path


class FakeArtifacts:
    """In-memory stand-in for ArtifactStore"""

    def __init__(self, missing: Iterable[ArtifactKind] = (), without_build_info: bool = False):
        self.missing = set(missing)
        self.without_build_info = without_build_info

    def get(self, kind: ArtifactKind) -> ContractArtifact:
        if kind in self.missing:
            raise ArtifactNotFoundError(f"No artifact for contract {kind.contract_name}")
        return make_artifact(kind.contract_name)

    def build_info(self, artifact: ContractArtifact) -> Dict:
        if self.without_build_info:
            raise ArtifactNotFoundError(f"Build info for {artifact.contract_name} not found")
        return {
            "solcLongVersion": "0.8.20+commit.a1b79de6",
            "input": {"language": "Solidity", "sources": {artifact.source_name: {"content": "// src"}}},
        }


class FakeProvider:
    """
    Records every call in `events` so tests can check submission order.

    Contract addresses are handed out as 0x...01, 0x...02 in submission order.
    """

    def __init__(self, gas: Optional[Dict[str, int]] = None, gas_price: int = 5, balance: int = 0,
                 price_error: Optional[Exception] = None,
                 simulate_failures: Iterable[str] = (), submit_failures: Iterable[str] = (),
                 confirm_failures: Iterable[str] = (), short_confirmations: Iterable[str] = (),
                 extra_confirmations: int = 0):
        self.address = SIGNER
        self.gas = dict(DEFAULT_GAS if gas is None else gas)
        self.gas_price = gas_price
        self.price_error = price_error
        self.balance = balance
        self.simulate_failures = set(simulate_failures)
        self.submit_failures = set(submit_failures)
        self.confirm_failures = set(confirm_failures)
        self.short_confirmations = set(short_confirmations)
        self.extra_confirmations = extra_confirmations
        self.events = []
        self.price_calls = 0
        self.nonce = 0
        self.transactions = {}

    def get_balance(self, address=None) -> int:
        return self.balance

    def get_gas_price(self) -> int:
        self.price_calls += 1
        if self.price_error is not None:
            raise self.price_error
        return self.gas_price

    def simulate_deployment(self, artifact, args) -> Outcome:
        self.events.append(("simulate", artifact.contract_name, tuple(args)))
        if artifact.contract_name in self.simulate_failures:
            return Outcome.failure("execution reverted: invalid constructor arguments")
        return Outcome.success(self.gas[artifact.contract_name])

    def submit_deployment(self, artifact, args) -> Outcome:
        self.events.append(("submit", artifact.contract_name, tuple(args)))
        if artifact.contract_name in self.submit_failures:
            return Outcome.failure("insufficient funds for gas * price + value")
        self.nonce += 1
        tx_hash = f"0x{self.nonce:064x}"
        self.transactions[tx_hash] = (artifact.contract_name, f"0x{self.nonce:040x}")
        return Outcome.success(tx_hash)

    def wait_for_confirmations(self, tx_hash, depth, timeout=None) -> Outcome:
        contract_name, address = self.transactions[tx_hash]
        self.events.append(("confirmed", tx_hash, depth))
        if contract_name in self.confirm_failures:
            return Outcome.failure(f"transaction {tx_hash} reverted in block 100")
        confirmations = depth - 1 if contract_name in self.short_confirmations else depth + self.extra_confirmations
        return Outcome.success(ConfirmedTransaction(
            contract_address=address,
            block_number=100 + self.nonce,
            confirmations=confirmations,
            gas_used=self.gas.get(contract_name, 0),
        ))

    def index_of(self, kind: str, key: str) -> int:
        for index, event in enumerate(self.events):
            if event[0] == kind and event[1] == key:
                return index
        raise AssertionError(f"no {kind} event for {key}")


@pytest.fixture
def profile() -> NetworkProfile:
    """BSC testnet profile (5 confirmations, BscScan testnet explorer)."""
    return NETWORKS["bscTestnet"]


@pytest.fixture
def local_profile() -> NetworkProfile:
    """Local hardhat profile without an explorer."""
    return NETWORKS["hardhat"]


@pytest.fixture
def signer() -> str:
    return SIGNER


@pytest.fixture
def artifacts() -> FakeArtifacts:
    return FakeArtifacts()


@pytest.fixture
def make_artifacts():
    """Factory for FakeArtifacts instances."""
    return FakeArtifacts


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
