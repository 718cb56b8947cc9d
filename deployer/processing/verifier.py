#!/usr/bin/env python3
"""
Explorer Verification
Best-effort source registration of deployed contracts with a BscScan-compatible explorer
"""

import json
import time
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import requests

from ..artifacts import ContractArtifact
from ..exceptions import DeploymentError
from ..models import DeploymentResult, NetworkProfile, Outcome

logger = logging.getLogger(__name__)


class VerificationFailure(Enum):
    """Failure kinds reported by the explorer, used as error message prefixes"""

    ALREADY_VERIFIED = "already-verified"
    RATE_LIMITED = "rate-limited"
    COMPILATION_MISMATCH = "compilation-mismatch"
    NOT_INDEXED = "not-indexed"
    MISSING_CREDENTIALS = "missing-credentials"
    REQUEST_FAILED = "request-failed"
    PENDING = "pending"
    REJECTED = "rejected"


def classify_explorer_message(message: str) -> VerificationFailure:
    text = (message or "").lower()
    if "already verified" in text:
        return VerificationFailure.ALREADY_VERIFIED
    if "rate limit" in text:
        return VerificationFailure.RATE_LIMITED
    if "unable to locate contractcode" in text:
        return VerificationFailure.NOT_INDEXED
    if "api key" in text or "apikey" in text:
        return VerificationFailure.MISSING_CREDENTIALS
    if "unable to verify" in text or "bytecode" in text or "compil" in text:
        return VerificationFailure.COMPILATION_MISMATCH
    return VerificationFailure.REJECTED


def describe_failure(kind: VerificationFailure, message: str) -> str:
    return f"{kind.value}: {message}"


@dataclass(frozen=True)
class VerificationRequest:
    """What the explorer needs to match a deployed contract to its source"""
    address: str
    constructor_arguments: Tuple[Any, ...]
    artifact: ContractArtifact
    build_info: Dict[str, Any]

    def form_data(self, api_key: str) -> Dict[str, str]:
        return {
            'apikey': api_key,
            'module': 'contract',
            'action': 'verifysourcecode',
            'contractaddress': self.address,
            'sourceCode': json.dumps(self.build_info['input']),
            'codeformat': 'solidity-standard-json-input',
            'contractname': self.artifact.fully_qualified_name,
            'compilerversion': f"v{self.build_info['solcLongVersion']}",
            # Parameter name is misspelled in the explorer API itself
            'constructorArguements': self.artifact.encode_constructor_args(self.constructor_arguments),
        }


class ExplorerClient:
    """Client for the Etherscan-style `verifysourcecode` / `checkverifystatus` API"""

    def __init__(self, api_url: str, api_key: Optional[str], session: Optional[requests.Session] = None,
                 poll_interval: float = 5.0, max_status_checks: int = 12, timeout: float = 30):
        self.api_url = api_url
        self.api_key = api_key
        self.session = session or requests.Session()
        self.poll_interval = poll_interval
        self.max_status_checks = max_status_checks
        self.timeout = timeout

    def submit(self, request: VerificationRequest) -> Outcome[str]:
        """
        Submit a verification request and wait for the explorer's verdict.

        Returns:
            Outcome holding the explorer's final status message on success
        """
        if not self.api_key:
            return Outcome.failure(describe_failure(
                VerificationFailure.MISSING_CREDENTIALS, "BSCSCAN_API_KEY is not set"))

        try:
            form = request.form_data(self.api_key)
        except (KeyError, ValueError, TypeError) as e:
            return Outcome.failure(describe_failure(VerificationFailure.REJECTED, f"cannot build request: {e}"))

        body = self._call('post', data=form)
        if not body.ok:
            return body
        status, result = body.value
        if status != "1":
            return self._failure_from_message(result)
        return self._await_status(result)

    def check_status(self, guid: str) -> Outcome[Tuple[str, str]]:
        return self._call('get', params={
            'apikey': self.api_key,
            'module': 'contract',
            'action': 'checkverifystatus',
            'guid': guid,
        })

    def _await_status(self, guid: str) -> Outcome[str]:
        for attempt in range(self.max_status_checks):
            if attempt:
                time.sleep(self.poll_interval)
            body = self.check_status(guid)
            if not body.ok:
                return body
            _, result = body.value
            text = (result or "").lower()
            if "pending" in text:
                continue
            if text.startswith("pass") or "already verified" in text:
                return Outcome.success(result)
            return self._failure_from_message(result)

        return Outcome.failure(describe_failure(
            VerificationFailure.PENDING, f"still pending after {self.max_status_checks} checks (guid {guid})"))

    def _failure_from_message(self, message: str) -> Outcome[str]:
        kind = classify_explorer_message(message)
        if kind is VerificationFailure.ALREADY_VERIFIED:
            # The source is registered; repeating a verification must not unverify it
            return Outcome.success(message)
        return Outcome.failure(describe_failure(kind, message))

    def _call(self, method: str, **kwargs) -> Outcome[Tuple[str, str]]:
        try:
            response = self.session.request(method, self.api_url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            body = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            return Outcome.failure(describe_failure(VerificationFailure.REQUEST_FAILED, str(e)))
        if not isinstance(body, dict):
            return Outcome.failure(describe_failure(VerificationFailure.REQUEST_FAILED, f"unexpected response {body!r}"))
        return Outcome.success((str(body.get('status')), str(body.get('result', body.get('message', '')))))


class VerificationAgent:
    """
    Registers confirmed deployments with the network's explorer.

    Never raises for explorer or artifact problems: the outcome is recorded on
    the returned copy of the result.
    """

    def __init__(self, artifacts, api_key: Optional[str], session: Optional[requests.Session] = None,
                 **client_options):
        self.artifacts = artifacts
        self.api_key = api_key
        self.session = session
        self.client_options = client_options
        self._clients: Dict[str, ExplorerClient] = {}

    def client_for(self, profile: NetworkProfile) -> ExplorerClient:
        if profile.explorer_api_url not in self._clients:
            self._clients[profile.explorer_api_url] = ExplorerClient(
                profile.explorer_api_url, self.api_key, session=self.session, **self.client_options)
        return self._clients[profile.explorer_api_url]

    def verify(self, result: DeploymentResult, profile: NetworkProfile) -> DeploymentResult:
        logger.info(f"Verifying {result.step.kind.contract_name} at {result.address} on {profile.name}...")
        outcome = self._attempt(result, profile)
        if outcome.ok:
            link = profile.address_url(result.address)
            logger.info(f"{result.step.kind.contract_name} verified successfully{f': {link}' if link else ''}")
            return result.with_verification(True)

        logger.warning(f"Verification of {result.step.kind.contract_name} failed: {outcome.error}")
        return result.with_verification(False, outcome.error)

    def _attempt(self, result: DeploymentResult, profile: NetworkProfile) -> Outcome[str]:
        if not profile.has_explorer:
            return Outcome.failure(describe_failure(
                VerificationFailure.REJECTED, f"no explorer configured for {profile.name}"))
        try:
            artifact = self.artifacts.get(result.step.kind)
            build_info = self.artifacts.build_info(artifact)
        except DeploymentError as e:
            return Outcome.failure(describe_failure(VerificationFailure.REJECTED, str(e)))

        request = VerificationRequest(
            address=result.address,
            constructor_arguments=result.constructor_args,
            artifact=artifact,
            build_info=build_info,
        )
        return self.client_for(profile).submit(request)
