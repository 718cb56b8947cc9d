"""Unit tests for explorer verification."""

from urllib.parse import parse_qs

import pytest
import responses

from deployer.models import ArtifactKind, DeploymentResult, DeploymentStep
from deployer.processing.verifier import (
    VerificationAgent,
    VerificationFailure,
    classify_explorer_message,
)

API_URL = "https://api-testnet.bscscan.com/api"
SIGNER = "0x5b38da6a701c568545dcfcb03fcb875f56beddc4"
TOKEN_ADDRESS = "0x" + "0" * 39 + "1"


@pytest.fixture
def token_result() -> DeploymentResult:
    step = DeploymentStep("token", ArtifactKind.TOKEN, (SIGNER, "Crypticorn", "CRYPTO"))
    return DeploymentResult(
        step=step,
        address=TOKEN_ADDRESS,
        transaction_id="0x" + "0" * 63 + "1",
        confirmations_observed=5,
        constructor_args=(SIGNER, "Crypticorn", "CRYPTO"),
    )


@pytest.fixture
def agent(artifacts) -> VerificationAgent:
    return VerificationAgent(artifacts, "TESTKEY", poll_interval=0)


def submitted(guid="guid-123"):
    responses.add(responses.POST, API_URL, json={"status": "1", "message": "OK", "result": guid})


def status(result, flag="1"):
    responses.add(responses.GET, API_URL, json={"status": flag, "message": "OK", "result": result})


class TestVerificationAgent:

    @responses.activate
    def test_successful_verification(self, agent, token_result, profile):
        submitted()
        status("Pending in queue", flag="0")
        status("Pass - Verified")

        verified = agent.verify(token_result, profile)

        assert verified.verified is True
        assert verified.verification_error is None
        assert len(responses.calls) == 3

    @responses.activate
    def test_request_carries_address_and_encoded_arguments(self, agent, token_result, profile):
        submitted()
        status("Pass - Verified")

        agent.verify(token_result, profile)

        form = parse_qs(responses.calls[0].request.body)
        assert form["action"] == ["verifysourcecode"]
        assert form["contractaddress"] == [TOKEN_ADDRESS]
        assert form["contractname"] == ["contracts/Crypticorn.sol:Crypticorn"]
        assert form["compilerversion"] == ["v0.8.20+commit.a1b79de6"]
        assert form["codeformat"] == ["solidity-standard-json-input"]
        encoded = form["constructorArguements"][0]
        assert encoded.startswith("0" * 24 + SIGNER[2:])
        assert "guid=guid-123" in responses.calls[1].request.url

    @responses.activate
    def test_rate_limit_is_recorded_not_raised(self, agent, token_result, profile):
        responses.add(responses.POST, API_URL, json={
            "status": "0", "message": "NOTOK",
            "result": "Max rate limit reached, please use API Key for higher rate limit",
        })

        result = agent.verify(token_result, profile)

        assert result.verified is False
        assert result.verification_error.startswith("rate-limited:")

    @responses.activate
    def test_bytecode_mismatch(self, agent, token_result, profile):
        submitted()
        status("Fail - Unable to verify. Compiled contract deployment bytecode does NOT match", flag="0")

        result = agent.verify(token_result, profile)

        assert result.verified is False
        assert result.verification_error.startswith("compilation-mismatch:")

    @responses.activate
    def test_already_verified_counts_as_verified(self, agent, token_result, profile):
        responses.add(responses.POST, API_URL, json={
            "status": "0", "message": "NOTOK", "result": "Contract source code already verified",
        })

        assert agent.verify(token_result, profile).verified is True

    @responses.activate
    def test_http_error(self, agent, token_result, profile):
        responses.add(responses.POST, API_URL, status=502)

        result = agent.verify(token_result, profile)

        assert result.verified is False
        assert result.verification_error.startswith("request-failed:")

    @responses.activate
    def test_pending_gives_up_after_bounded_checks(self, artifacts, token_result, profile):
        agent = VerificationAgent(artifacts, "TESTKEY", poll_interval=0, max_status_checks=2)
        submitted()
        status("Pending in queue", flag="0")

        result = agent.verify(token_result, profile)

        assert result.verification_error.startswith("pending:")
        assert len(responses.calls) == 3

    @responses.activate
    def test_missing_api_key_makes_no_request(self, artifacts, token_result, profile):
        agent = VerificationAgent(artifacts, None)

        result = agent.verify(token_result, profile)

        assert result.verification_error.startswith("missing-credentials:")
        assert len(responses.calls) == 0

    def test_network_without_explorer(self, agent, token_result, local_profile):
        result = agent.verify(token_result, local_profile)
        assert result.verified is False
        assert "no explorer configured" in result.verification_error

    @responses.activate
    def test_missing_build_info(self, make_artifacts, token_result, profile):
        agent = VerificationAgent(make_artifacts(without_build_info=True), "TESTKEY")

        result = agent.verify(token_result, profile)

        assert result.verified is False
        assert "Build info" in result.verification_error
        assert len(responses.calls) == 0

    @responses.activate
    def test_repeated_verification_is_safe(self, agent, token_result, profile):
        submitted()
        status("Pass - Verified")

        first = agent.verify(token_result, profile)
        second = agent.verify(first, profile)

        assert first.verified and second.verified
        assert token_result.verified is False
        posts = [call for call in responses.calls if call.request.method == "POST"]
        assert len(posts) == 2

    @responses.activate
    def test_failure_after_success_returns_new_copy(self, agent, token_result, profile):
        submitted()
        status("Pass - Verified")
        first = agent.verify(token_result, profile)

        responses.replace(responses.POST, API_URL, status=500)
        second = agent.verify(first, profile)

        assert first.verified is True
        assert second.verified is False
        assert second.address == first.address
        assert second.transaction_id == first.transaction_id


class TestClassifyExplorerMessage:

    @pytest.mark.parametrize("message, kind", [
        ("Contract source code already verified", VerificationFailure.ALREADY_VERIFIED),
        ("Max rate limit reached", VerificationFailure.RATE_LIMITED),
        ("Unable to locate ContractCode at 0x01", VerificationFailure.NOT_INDEXED),
        ("Invalid API Key", VerificationFailure.MISSING_CREDENTIALS),
        ("Fail - Unable to verify", VerificationFailure.COMPILATION_MISMATCH),
        ("Invalid constructor arguments provided", VerificationFailure.REJECTED),
        ("", VerificationFailure.REJECTED),
    ])
    def test_classification(self, message, kind):
        assert classify_explorer_message(message) is kind
