#!/usr/bin/env python3
"""
Soroswap Workshop - Direct Contract Calls

Same flow as soroswap_workshop.py, but every transaction is built by hand
with the Stellar SDK and sent straight to the Soroswap router contract:

    - no Soroswap API calls
    - parameters converted to SCVal manually (workshop_sdk.payloads)
    - transactions simulated, resource-bumped, signed and polled locally

Usage:
    python3 soroswap_direct_workshop.py
    python3 soroswap_direct_workshop.py --amount 5 --router C...
"""

import argparse
import logging
import sys
from typing import Optional

from stellar_sdk import Asset, Keypair

from workshop_sdk import (
    SorobanClient,
    WorkshopConfig,
    add_liquidity,
    execute_swap,
    get_balances,
    load_config,
    to_units,
)
from workshop_sdk.config import DEFAULT_SLIPPAGE_BPS
from workshop_sdk.narration import banner, format_amount, print_error, step

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
log = logging.getLogger('soroswap_direct_workshop')

DEFAULT_SWAP_XLM = 10
FALLBACK_LIQUIDITY_USDC = to_units(1)  # used when the swap produced nothing


def print_balances(client: SorobanClient, wallet: str, tokens: dict) -> dict:
    print("\nCurrent Balances:")
    balances = get_balances(client, wallet, tokens)
    for name, balance in balances.items():
        print(f"   {name}: {format_amount(balance)}")
    return balances


def run_workshop(config: WorkshopConfig, swap_xlm: float = DEFAULT_SWAP_XLM,
                 slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
                 client: Optional[SorobanClient] = None,
                 wallet: Optional[Keypair] = None) -> dict:
    """
    Run every step; swap and liquidity failures are reported and skipped.

    Returns:
        Summary dict (wallet, received, balances, liquidity_hash)
    """
    client = client or SorobanClient(config)
    summary = {"wallet": None, "received": 0, "balances": {}, "liquidity_hash": None}

    banner("Starting Soroswap Workshop (Direct Contract Calls)!")

    try:
        step(1, "Creating a Wallet")
        wallet = wallet or Keypair.random()
        summary["wallet"] = wallet.public_key
        print("User wallet created:")
        print(f"   Public Key: {wallet.public_key}")
        print(f"   Private Key: {wallet.secret}")

        step(2, "Funding Wallet with Testnet XLM")
        print("Funding wallet with Friendbot...")
        client.fund_with_friendbot(wallet.public_key)
        print("Wallet funded successfully")

        step(3, "Swapping XLM to USDC")
        xlm_contract = client.asset_contract_id(Asset.native())
        usdc_contract = config.soroswap_usdc
        print(f"XLM Contract ID: {xlm_contract}")
        print(f"USDC Contract ID: {usdc_contract}")

        swap_amount = to_units(swap_xlm)
        try:
            summary["received"] = execute_swap(client, config.soroswap_router,
                                               xlm_contract, usdc_contract, swap_amount, wallet)
        except Exception as e:
            print(f"Swap failed: {e}")
            print("This might happen if liquidity pools don't exist or contracts aren't set up")

        step(4, "Checking Balances")
        summary["balances"] = print_balances(client, wallet.public_key,
                                             {"XLM": xlm_contract, "USDC": usdc_contract})

        step(5, "Adding Liquidity to XLM/USDC Pool")
        liquidity_usdc = summary["received"] if summary["received"] > 0 else FALLBACK_LIQUIDITY_USDC
        try:
            result = add_liquidity(client, config.soroswap_router, xlm_contract, usdc_contract,
                                   swap_amount, liquidity_usdc, wallet, slippage_bps)
            summary["liquidity_hash"] = result.hash
        except Exception as e:
            print(f"Liquidity addition failed: {e}")
            print("This might happen if pools don't exist or amounts are insufficient")

        print("\n" + "=" * 70)
        print("Workshop Completed!")
        print("=" * 70)
        print("\nWhat we accomplished:")
        print("   1. Created and funded a wallet")
        print("   2. Swapped XLM to USDC using the Soroswap Router directly")
        print("   3. Checked token balances")
        print("   4. Added liquidity to the XLM/USDC pool directly")
        print("\nWallet Address:")
        print(f"   {wallet.public_key}")

    except Exception as e:
        print_error(e)
        summary["error"] = str(e)

    return summary


def main():
    parser = argparse.ArgumentParser(description="Soroswap Workshop (direct router calls)")
    parser.add_argument("--amount", type=float, default=DEFAULT_SWAP_XLM, help="XLM to swap (default: 10)")
    parser.add_argument("--slippage-bps", type=int, default=DEFAULT_SLIPPAGE_BPS,
                        help=f"Liquidity slippage in bps (default: {DEFAULT_SLIPPAGE_BPS})")
    parser.add_argument("--router", help="Soroswap router contract id")
    parser.add_argument("--rpc-url", help="Soroban RPC URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(soroswap_router=args.router, soroban_rpc_url=args.rpc_url)
    summary = run_workshop(config, swap_xlm=args.amount, slippage_bps=args.slippage_bps)
    return 1 if "error" in summary else 0


if __name__ == "__main__":
    sys.exit(main())
