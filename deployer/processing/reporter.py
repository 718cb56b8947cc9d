#!/usr/bin/env python3
"""
Deployment Summary Reporter
Aggregates results into a DeploymentReport and renders reports as console lines
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Union

from web3 import Web3

from ..exceptions import ReportError
from ..models import CostEstimate, DeploymentReport, DeploymentResult, NetworkProfile, Verdict, WalletCheck

VERDICT_MESSAGES = {
    Verdict.SUFFICIENT: "SUFFICIENT FUNDS: You have enough {symbol} for deployment (with {buffer}% buffer)",
    Verdict.TIGHT: "TIGHT BUDGET: You have enough {symbol} but with minimal buffer",
    Verdict.INSUFFICIENT: "INSUFFICIENT FUNDS: You need more {symbol} for deployment",
}


def summarize(results: Sequence[DeploymentResult], estimate: Optional[CostEstimate] = None,
              failure: Optional[str] = None) -> DeploymentReport:
    """
    Aggregate step results and an optional estimate into one report.

    Args:
        results: Deployment results in plan order
        estimate: Pre-flight cost estimate, if one was made
        failure: Message of the error that stopped the run, if any

    Returns:
        DeploymentReport

    Raises:
        ReportError: If the inputs have the wrong shape
    """
    if isinstance(results, (str, bytes)) or not isinstance(results, Sequence):
        raise ReportError(f"results must be a sequence of DeploymentResult, got {type(results).__name__}")
    for index, result in enumerate(results):
        if not isinstance(result, DeploymentResult):
            raise ReportError(f"results[{index}] is {type(result).__name__}, expected DeploymentResult")
    if estimate is not None and not isinstance(estimate, CostEstimate):
        raise ReportError(f"estimate must be a CostEstimate, got {type(estimate).__name__}")
    if failure is not None and not isinstance(failure, str):
        raise ReportError(f"failure must be a message string, got {type(failure).__name__}")

    names = [result.step.name for result in results]
    if len(set(names)) != len(names):
        raise ReportError(f"Duplicate step results: {names}")

    return DeploymentReport(results=tuple(results), estimate=estimate, failure=failure)


def format_amount(wei: Union[int, Decimal], symbol: str) -> str:
    return f"{Web3.from_wei(int(wei), 'ether')} {symbol}"


def format_gas_price(wei: Union[int, Decimal]) -> str:
    return f"{Web3.from_wei(int(wei), 'gwei')} gwei"


def format_estimate(estimate: CostEstimate, profile: NetworkProfile) -> List[str]:
    symbol = profile.native_symbol
    buffer_pct = f"{float((estimate.buffer_factor - 1) * 100):g}"
    lines = [
        "=== Deployment Cost Estimation ===",
        f"Network: {profile.name} (chain {profile.chain_id})",
        f"Gas price: {format_gas_price(estimate.unit_price)}",
        "",
        "=== Cost Breakdown ===",
    ]
    for name, gas in estimate.per_step_gas.items():
        lines.append(f"{name}: {gas} gas, {format_amount(estimate.step_cost(name), symbol)}")
    lines += [
        "",
        f"Total gas: {estimate.total_gas}",
        f"Total cost: {format_amount(estimate.total_cost, symbol)}",
        f"Recommended balance: {format_amount(estimate.cost_with_buffer, symbol)} (with {buffer_pct}% buffer)",
        f"Funded balance: {format_amount(estimate.funded_balance, symbol)}",
        VERDICT_MESSAGES[estimate.verdict].format(symbol=symbol, buffer=buffer_pct),
    ]
    if estimate.verdict is Verdict.INSUFFICIENT:
        lines.append(f"Additional needed: {format_amount(estimate.shortfall, symbol)}")
    return lines


def format_report(report: DeploymentReport, profile: NetworkProfile) -> List[str]:
    lines = ["=== Deployment Summary ===", f"Network: {profile.name} (chain {profile.chain_id})"]
    for result in report.results:
        lines += [
            "",
            f"{result.step.kind.contract_name} ({result.step.name}):",
            f"  Address: {result.address}",
            f"  Transaction: {profile.transaction_url(result.transaction_id) or result.transaction_id}",
            f"  Confirmations: {result.confirmations_observed}",
        ]
        if result.constructor_args:
            lines.append(f"  Constructor args: {', '.join(str(arg) for arg in result.constructor_args)}")
        if result.verified:
            lines.append(f"  Verified: yes {profile.address_url(result.address) or ''}".rstrip())
        else:
            lines.append(f"  Verified: no ({result.verification_error or 'not attempted'})")

    if report.estimate is not None:
        lines += [""] + format_estimate(report.estimate, profile)

    lines.append("")
    if report.succeeded:
        unverified = len(report.unverified)
        suffix = f", {unverified} unverified" if unverified else ""
        lines.append(f"COMPLETE: {len(report.results)} contract(s) deployed{suffix}")
    else:
        lines.append(f"FAILED: {report.failure}")
        if report.results:
            lines.append("Contracts already deployed above remain on chain.")
    return lines


def format_wallet_check(check: WalletCheck, profile: NetworkProfile) -> List[str]:
    symbol = profile.native_symbol
    lines = [
        "=== Wallet Safety Check ===",
        f"Network: {profile.name}",
        f"Deployer address: {check.address}",
        f"Balance: {format_amount(check.balance, symbol)}",
        f"Current gas price: {format_gas_price(check.gas_price)}",
        f"Estimated deployment cost (~{check.estimated_gas} gas): ~{format_amount(check.estimated_cost, symbol)}",
    ]
    if check.low_balance:
        lines.append(f"WARNING: Low balance! You may not have enough {symbol} for deployment.")
    else:
        lines.append("Balance looks sufficient for deployment.")
    return lines
