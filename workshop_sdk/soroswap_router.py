"""
Soroban Workshop SDK - Soroswap Router (direct calls)

Swap and add liquidity by invoking the Soroswap router contract directly,
without the Soroswap API.
"""

import logging
from typing import Dict

from stellar_sdk import Keypair

from .config import DEFAULT_SLIPPAGE_BPS
from .payloads import (
    add_liquidity_args,
    deadline,
    from_units,
    swap_exact_tokens_for_tokens_args,
)
from .soroban_client import SorobanClient, require_success
from .workshop_types import TxResult

log = logging.getLogger(__name__)

# Router failures that usually point at balances or pool state
ROUTER_ERROR_HINTS = {
    "swap": [
        "Insufficient token balance or authorization",
        "Pool liquidity issues",
        "Expected on testnet when pools don't exist or have low liquidity",
    ],
    "add_liquidity": [
        "Insufficient token balances",
        "Wrong liquidity ratios (amounts don't match pool ratio)",
        "Expected on testnet when pools have specific ratio requirements",
    ],
}


def _log_router_hints(action: str, error: Exception):
    message = str(error)
    if "#506" in message or "#507" in message:
        log.warning("This error usually indicates:")
        for hint in ROUTER_ERROR_HINTS[action]:
            log.warning(f"  - {hint}")


def execute_swap(client: SorobanClient, router: str, asset_in: str, asset_out: str,
                 amount: int, wallet: Keypair) -> int:
    """
    Swap an exact amount of asset_in for asset_out via the router.

    amount_out_min is 0 so thin testnet pools never trip
    RouterInsufficientOutputAmount.

    Returns:
        Amount of asset_out received (stroops), 0 if the router returned none
    """
    log.info("Executing swap directly via Soroswap Router")
    log.info(f"  Token In:  {asset_in}")
    log.info(f"  Token Out: {asset_out}")
    log.info(f"  Amount In: {from_units(amount)}")

    args = swap_exact_tokens_for_tokens_args(
        amount=amount,
        amount_out_min=0,
        path=[asset_in, asset_out],
        to=wallet.public_key,
        deadline_ts=deadline(),
    )

    try:
        result = require_success(
            client.invoke_contract(router, "swap_exact_tokens_for_tokens", args, wallet),
            "swap"
        )
    except Exception as e:
        _log_router_hints("swap", e)
        raise

    amounts = result.native
    if isinstance(amounts, (list, tuple)):
        received = int(amounts[-1]) if amounts else 0
    else:
        received = int(amounts or 0)

    log.info(f"Swap executed! Received: {from_units(received)}")
    return received


def add_liquidity(client: SorobanClient, router: str, asset_a: str, asset_b: str,
                  amount_a: int, amount_b: int, wallet: Keypair,
                  slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> TxResult:
    """Provide liquidity to the asset_a/asset_b pool; LP tokens go to the wallet."""
    log.info("Adding liquidity directly via Soroswap Router")
    log.info(f"  Asset A: {asset_a} ({from_units(amount_a)})")
    log.info(f"  Asset B: {asset_b} ({from_units(amount_b)})")

    args = add_liquidity_args(
        asset_a, asset_b, amount_a, amount_b,
        to=wallet.public_key,
        deadline_ts=deadline(),
        slippage_bps=slippage_bps,
    )

    try:
        result = require_success(
            client.invoke_contract(router, "add_liquidity", args, wallet),
            "add_liquidity"
        )
    except Exception as e:
        _log_router_hints("add_liquidity", e)
        raise

    log.info(f"Liquidity added. Transaction hash: {result.hash}")
    return result


def get_balances(client: SorobanClient, wallet: str, tokens: Dict[str, str]) -> Dict[str, int]:
    """Balances keyed by display name, e.g. {"XLM": xlm_id, "USDC": usdc_id}."""
    return {name: client.get_token_balance(contract_id, wallet) for name, contract_id in tokens.items()}
