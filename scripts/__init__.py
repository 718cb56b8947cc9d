"""
Deployment and Management Scripts
================================

Entry points for deploying and managing the Crypticorn contracts.

Structure:
- deploy_full: token followed by staking bound to the new token
- deploy_token / deploy_simple_token: token contracts only
- deploy_staking / deploy_standard_staking: staking against an existing token
- estimate_cost: pre-flight gas and cost estimate
- check_balance: wallet safety check
- generate_abis: ABI extraction from the build output
"""

__version__ = "1.0.0"
__author__ = "Crypticorn Team"
