"""Unit tests for the web3 chain provider."""

from unittest.mock import MagicMock, PropertyMock, patch

import pytest
import requests
from web3.exceptions import ContractLogicError, TransactionNotFound, Web3RPCError

from deployer.conftest import SIGNER, make_artifact
from deployer.exceptions import NetworkConnectionError
from deployer.models import ConfirmedTransaction
from deployer.provider import ChainProvider

TX = "0x" + "ab" * 32
CONTRACT = "0x" + "0" * 39 + "7"


class FakeEth:
    """Serves receipts and block numbers from queues; the last item repeats"""

    def __init__(self, receipts, blocks):
        self.account = MagicMock()
        self.account.from_key.return_value.address = SIGNER
        self._receipts = list(receipts)
        self._blocks = list(blocks)
        self.receipt_calls = 0

    @staticmethod
    def _next(queue):
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def get_transaction_receipt(self, tx_hash):
        self.receipt_calls += 1
        item = self._next(self._receipts)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def block_number(self):
        return self._next(self._blocks)


def receipt(status=1, block=100):
    return {"status": status, "blockNumber": block, "contractAddress": CONTRACT, "gasUsed": 1_900_000}


def make_provider(receipts, blocks):
    w3 = MagicMock()
    w3.eth = FakeEth(receipts, blocks)
    return ChainProvider(w3, "0x" + "11" * 32, poll_interval=0)


class TestWaitForConfirmations:

    @patch('deployer.provider.time')
    def test_waits_until_depth_reached(self, mock_time):
        provider = make_provider([TransactionNotFound("not yet"), receipt(block=100)], [101, 102, 104])

        outcome = provider.wait_for_confirmations(TX, depth=5)

        assert outcome.ok
        assert outcome.value == ConfirmedTransaction(
            contract_address=CONTRACT, block_number=100, confirmations=5, gas_used=1_900_000)
        assert mock_time.sleep.call_count == 3

    @patch('deployer.provider.time')
    def test_receipt_fetched_once_mined(self, mock_time):
        provider = make_provider([receipt(block=10)], [10, 11, 12])
        provider.wait_for_confirmations(TX, depth=3)
        assert provider.w3.eth.receipt_calls == 1

    @patch('deployer.provider.time')
    def test_reverted_transaction(self, mock_time):
        provider = make_provider([receipt(status=0)], [200])

        outcome = provider.wait_for_confirmations(TX, depth=5)

        assert not outcome.ok
        assert "reverted" in outcome.error

    @patch('deployer.provider.time')
    def test_timeout(self, mock_time):
        mock_time.monotonic.side_effect = [0, 0, 11]
        provider = make_provider([TransactionNotFound("not yet")], [100])

        outcome = provider.wait_for_confirmations(TX, depth=5, timeout=10)

        assert not outcome.ok
        assert "timed out" in outcome.error
        assert "not mined" in outcome.error

    @patch('deployer.provider.time')
    def test_rpc_error_during_wait(self, mock_time):
        provider = make_provider([ValueError("connection reset")], [100])

        outcome = provider.wait_for_confirmations(TX, depth=5)

        assert not outcome.ok
        assert "connection reset" in outcome.error


class TestSimulateAndSubmit:

    def setup_method(self):
        self.w3 = MagicMock()
        self.w3.eth.account.from_key.return_value.address = SIGNER
        self.constructor = self.w3.eth.contract.return_value.constructor.return_value
        self.provider = ChainProvider(self.w3, "0x" + "11" * 32)
        self.artifact = make_artifact("CrypticornStaking")

    def test_simulation_returns_gas(self):
        self.constructor.estimate_gas.return_value = 1_500_000

        outcome = self.provider.simulate_deployment(self.artifact, [CONTRACT])

        assert outcome.ok and outcome.value == 1_500_000
        self.w3.eth.contract.return_value.constructor.assert_called_once_with(CONTRACT)
        self.constructor.estimate_gas.assert_called_once_with({'from': SIGNER})
        self.w3.eth.send_raw_transaction.assert_not_called()

    def test_simulation_failure_is_an_outcome(self):
        self.constructor.estimate_gas.side_effect = ContractLogicError("execution reverted")

        outcome = self.provider.simulate_deployment(self.artifact, [CONTRACT])

        assert not outcome.ok
        assert "CrypticornStaking" in outcome.error

    def test_submission_uses_pending_nonce(self):
        self.constructor.estimate_gas.return_value = 1_500_000
        self.constructor.build_transaction.return_value = {"data": "0x"}
        self.w3.eth.get_transaction_count.return_value = 7
        self.w3.eth.gas_price = 5
        self.w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)

        outcome = self.provider.submit_deployment(self.artifact, [CONTRACT])

        assert outcome.ok
        assert outcome.value == TX
        self.w3.eth.get_transaction_count.assert_called_once_with(SIGNER, 'pending')
        tx = self.constructor.build_transaction.call_args[0][0]
        assert tx == {'from': SIGNER, 'nonce': 7, 'gas': 1_500_000, 'gasPrice': 5}
        signed = self.w3.eth.account.sign_transaction.return_value
        self.w3.eth.send_raw_transaction.assert_called_once_with(signed.raw_transaction)

    def test_submission_failure_is_an_outcome(self):
        self.w3.eth.send_raw_transaction.side_effect = ValueError("insufficient funds for gas")

        outcome = self.provider.submit_deployment(self.artifact, [CONTRACT])

        assert not outcome.ok
        assert "insufficient funds" in outcome.error

    def test_balance_and_price(self):
        self.w3.eth.get_balance.return_value = 42
        self.w3.eth.gas_price = 3
        assert self.provider.get_balance() == 42
        self.w3.eth.get_balance.assert_called_once_with(SIGNER)
        assert self.provider.get_gas_price() == 3

    def test_balance_query_failure_is_a_connection_error(self):
        self.w3.eth.get_balance.side_effect = requests.exceptions.ConnectionError("rpc down")
        with pytest.raises(NetworkConnectionError, match="rpc down"):
            self.provider.get_balance()

    def test_price_query_failure_is_a_connection_error(self):
        type(self.w3.eth).gas_price = PropertyMock(side_effect=Web3RPCError("rpc down"))
        with pytest.raises(NetworkConnectionError, match="gas price"):
            self.provider.get_gas_price()


class TestConnect:

    @patch('deployer.provider.Web3')
    def test_chain_id_mismatch(self, mock_web3, profile):
        mock_web3.return_value.is_connected.return_value = True
        mock_web3.return_value.eth.chain_id = 1
        with pytest.raises(NetworkConnectionError, match="expected 97"):
            ChainProvider.connect(profile, "0x" + "11" * 32)

    @patch('deployer.provider.Web3')
    def test_unreachable(self, mock_web3, profile):
        mock_web3.return_value.is_connected.return_value = False
        with pytest.raises(NetworkConnectionError, match="Could not connect"):
            ChainProvider.connect(profile, "0x" + "11" * 32)
