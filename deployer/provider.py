"""
Chain provider
Thin wrapper over web3 for the single signing account used by a deployment run
"""

import time
import logging
from typing import Any, Optional, Sequence

import requests
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ContractArtifact
from .exceptions import NetworkConnectionError
from .models import ConfirmedTransaction, NetworkProfile, Outcome

logger = logging.getLogger(__name__)

# Errors web3 raises for RPC failures, bad arguments and reverted calls
NETWORK_ERRORS = (Web3Exception, ValueError, TypeError, requests.exceptions.RequestException)


class ChainProvider:
    """
    Balance, price, simulation, submission and confirmation queries for one signer.

    Submissions are strictly sequential: each one takes the signer's pending
    transaction count as its nonce.
    """

    def __init__(self, w3: Web3, private_key: str, poll_interval: float = 3.0):
        self.w3 = w3
        self.private_key = private_key
        self.poll_interval = poll_interval
        self.account = w3.eth.account.from_key(private_key)

    @classmethod
    def connect(cls, profile: NetworkProfile, private_key: str, **kwargs) -> "ChainProvider":
        """
        Connect to the profile's RPC endpoint and check its chain id.

        Raises:
            NetworkConnectionError: If the endpoint is unreachable or reports another chain
        """
        w3 = Web3(Web3.HTTPProvider(profile.rpc_url, request_kwargs={"timeout": 60}))
        # BSC blocks carry PoA extra data
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise NetworkConnectionError(f"Could not connect to RPC URL: {profile.rpc_url}")

        try:
            chain_id = w3.eth.chain_id
        except NETWORK_ERRORS as e:
            raise NetworkConnectionError(f"Could not read chain id from {profile.rpc_url}: {e}") from e
        if chain_id != profile.chain_id:
            raise NetworkConnectionError(
                f"RPC URL {profile.rpc_url} serves chain {chain_id}, expected {profile.chain_id} ({profile.name})"
            )

        logger.info(f"Connected to {profile.name} (chain {chain_id}) at {profile.rpc_url}")
        return cls(w3, private_key, **kwargs)

    @property
    def address(self) -> str:
        return self.account.address

    def get_balance(self, address: Optional[str] = None) -> int:
        """Raises NetworkConnectionError when the node cannot answer."""
        address = address or self.address
        try:
            return self.w3.eth.get_balance(address)
        except NETWORK_ERRORS as e:
            raise NetworkConnectionError(f"Could not read balance of {address}: {e}") from e

    def get_gas_price(self) -> int:
        """Raises NetworkConnectionError when the node cannot answer."""
        try:
            return self.w3.eth.gas_price
        except NETWORK_ERRORS as e:
            raise NetworkConnectionError(f"Could not read gas price: {e}") from e

    def simulate_deployment(self, artifact: ContractArtifact, args: Sequence[Any]) -> Outcome[int]:
        """Estimate gas for deploying `artifact` without submitting anything."""
        try:
            contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            gas = contract.constructor(*args).estimate_gas({'from': self.address})
        except NETWORK_ERRORS as e:
            return Outcome.failure(f"gas simulation failed for {artifact.contract_name}: {e}")
        return Outcome.success(int(gas))

    def submit_deployment(self, artifact: ContractArtifact, args: Sequence[Any]) -> Outcome[str]:
        """
        Sign and send a deployment transaction.

        Returns:
            Outcome holding the transaction hash as a 0x-prefixed hex string
        """
        try:
            contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            constructor = contract.constructor(*args)
            tx = constructor.build_transaction({
                'from': self.address,
                'nonce': self.w3.eth.get_transaction_count(self.address, 'pending'),
                'gas': constructor.estimate_gas({'from': self.address}),
                'gasPrice': self.w3.eth.gas_price,
            })
            signed_tx = self.w3.eth.account.sign_transaction(tx, self.private_key)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except NETWORK_ERRORS as e:
            return Outcome.failure(f"submission of {artifact.contract_name} failed: {e}")

        tx_id = Web3.to_hex(tx_hash)
        logger.info(f"Deployment transaction for {artifact.contract_name} sent: {tx_id}")
        return Outcome.success(tx_id)

    def wait_for_confirmations(self, tx_hash: str, depth: int,
                               timeout: Optional[float] = None) -> Outcome[ConfirmedTransaction]:
        """
        Poll until the transaction is mined and `depth` blocks deep.

        The mined block counts as the first confirmation. With no timeout the
        wait only ends on success, revert or an RPC error.
        """
        deadline = time.monotonic() + timeout if timeout else None
        receipt = None
        try:
            while True:
                if receipt is None:
                    try:
                        receipt = self.w3.eth.get_transaction_receipt(tx_hash)
                    except TransactionNotFound:
                        receipt = None
                    if receipt is not None and receipt['status'] != 1:
                        return Outcome.failure(f"transaction {tx_hash} reverted in block {receipt['blockNumber']}")

                if receipt is not None:
                    confirmations = self.w3.eth.block_number - receipt['blockNumber'] + 1
                    if confirmations >= depth:
                        return Outcome.success(ConfirmedTransaction(
                            contract_address=receipt['contractAddress'],
                            block_number=receipt['blockNumber'],
                            confirmations=confirmations,
                            gas_used=receipt.get('gasUsed', 0),
                        ))
                    logger.debug(f"{tx_hash}: {confirmations}/{depth} confirmations")

                if deadline is not None and time.monotonic() >= deadline:
                    state = "not mined" if receipt is None else "under-confirmed"
                    return Outcome.failure(f"timed out after {timeout:g}s waiting for {tx_hash} ({state})")
                time.sleep(self.poll_interval)
        except NETWORK_ERRORS as e:
            return Outcome.failure(f"error while waiting for {tx_hash}: {e}")
