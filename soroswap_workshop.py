#!/usr/bin/env python3
"""
Soroswap Workshop - Soroswap API

Walks through a swap and a liquidity deposit on Stellar testnet using the
Soroswap aggregator API for transaction construction:

    1. Create a wallet
    2. Fund it with friendbot
    3. Swap XLM -> USDC (quote -> build -> sign -> send)
    4. Read token balances
    5. Add XLM/USDC liquidity with the swapped amount

Requirements:
    pip install stellar-sdk requests python-dotenv

Usage:
    SOROSWAP_API_KEY=sk_... python3 soroswap_workshop.py
    python3 soroswap_workshop.py --api-key sk_... --amount 25
"""

import argparse
import logging
import sys
import time
from typing import Optional

from stellar_sdk import Asset, Keypair

from workshop_sdk import (
    SorobanClient,
    SoroswapAPI,
    WorkshopConfig,
    extract_amount_out,
    get_balances,
    load_config,
    sign_xdr,
    to_units,
)
from workshop_sdk.config import DEFAULT_SLIPPAGE_BPS
from workshop_sdk.narration import banner, countdown, format_amount, print_error, step

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
log = logging.getLogger('soroswap_workshop')

DEFAULT_SWAP_XLM = 10
SUBMIT_DELAY = 1  # seconds between signing and sending


def swap_with_api(api: SoroswapAPI, config: WorkshopConfig, wallet: Keypair,
                  asset_in: str, asset_out: str, amount: int, slippage_bps: int) -> int:
    """Quote, build, sign and send a swap. Returns the amount received."""
    print("Getting quote from Soroswap API...")
    quote = api.quote(asset_in, asset_out, amount, slippage_bps=slippage_bps)
    print("Quote received:")
    print(f"   Input: {format_amount(quote.amount_in, 'XLM')}")
    print(f"   Output: {format_amount(quote.amount_out, 'USDC')}")
    print(f"   Price Impact: {quote.price_impact_pct}%")
    print(f"   Platform: {quote.platform}")

    print("Building transaction from quote...")
    unsigned = api.build(quote, wallet.public_key)
    print("Transaction XDR received from Soroswap API")

    signed = sign_xdr(unsigned, wallet, config.network_passphrase)
    time.sleep(SUBMIT_DELAY)

    result = api.send(signed)
    log.info(f"Swap send response: {result}")
    return extract_amount_out(result) or 0


def between_steps(pause: int):
    """Give the audience time to read the explorer between steps."""
    if pause > 0:
        countdown(pause)


def add_liquidity_with_api(api: SoroswapAPI, config: WorkshopConfig, wallet: Keypair,
                           asset_a: str, asset_b: str, amount_a: int, amount_b: int,
                           slippage_bps: int) -> dict:
    unsigned = api.add_liquidity(asset_a, asset_b, amount_a, amount_b, wallet.public_key, slippage_bps)
    print("Liquidity transaction XDR received from Soroswap API")
    signed = sign_xdr(unsigned, wallet, config.network_passphrase)
    result = api.send(signed)
    log.info(f"Add liquidity send response: {result}")
    return result


def run_workshop(config: WorkshopConfig, swap_xlm: float = DEFAULT_SWAP_XLM,
                 slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
                 client: Optional[SorobanClient] = None,
                 api: Optional[SoroswapAPI] = None,
                 wallet: Optional[Keypair] = None,
                 pause: int = 0) -> dict:
    """
    Run every step; failed swap/liquidity steps are reported and skipped.

    Returns:
        Summary dict (wallet, received amount, balances, liquidity_added)
    """
    client = client or SorobanClient(config)
    api = api or SoroswapAPI(config.soroswap_api_key, config.soroswap_api_url,
                             config.soroswap_network, config.api_timeout)
    summary = {"wallet": None, "received": 0, "balances": {}, "liquidity_added": False}

    banner("Starting Soroswap Workshop!")

    if not config.soroswap_api_key:
        log.warning("SOROSWAP_API_KEY is not set - API calls will likely be rejected")

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
        between_steps(pause)

        step(3, "Swapping XLM to USDC")
        xlm_contract = client.asset_contract_id(Asset.native())
        usdc_contract = config.soroswap_usdc
        print(f"XLM Contract ID: {xlm_contract}")
        print(f"USDC Contract ID: {usdc_contract}")

        swap_amount = to_units(swap_xlm)
        try:
            summary["received"] = swap_with_api(api, config, wallet, xlm_contract,
                                                usdc_contract, swap_amount, slippage_bps)
            print(f"Swap executed! Received: {format_amount(summary['received'], 'USDC')}")
        except Exception as e:
            log.error(f"Swap failed: {e}")
            print("Using simulated swap (API may require an API key or pools may not exist)")
        between_steps(pause)

        step(4, "Checking Balances")
        summary["balances"] = get_balances(client, wallet.public_key,
                                           {"XLM": xlm_contract, "USDC": usdc_contract})
        for name, balance in summary["balances"].items():
            print(f"   {name}: {format_amount(balance)}")
        between_steps(pause)

        step(5, "Adding Liquidity to XLM/USDC Pool")
        try:
            add_liquidity_with_api(api, config, wallet, xlm_contract, usdc_contract,
                                   swap_amount, summary["received"], slippage_bps)
            summary["liquidity_added"] = True
            print("Liquidity added to XLM/USDC pool")
        except Exception as e:
            log.error(f"Add liquidity failed: {e}")
            print("Using simulated liquidity addition (API may require an API key)")

    except Exception as e:
        print_error(e)
        summary["error"] = str(e)

    return summary


def main():
    parser = argparse.ArgumentParser(description="Soroswap Workshop (Soroswap API)")
    parser.add_argument("--api-key", help="Soroswap API key (default: $SOROSWAP_API_KEY)")
    parser.add_argument("--amount", type=float, default=DEFAULT_SWAP_XLM, help="XLM to swap (default: 10)")
    parser.add_argument("--slippage-bps", type=int, default=DEFAULT_SLIPPAGE_BPS,
                        help=f"Slippage tolerance in bps (default: {DEFAULT_SLIPPAGE_BPS})")
    parser.add_argument("--rpc-url", help="Soroban RPC URL")
    parser.add_argument("--pause", type=int, default=0, help="Countdown seconds between steps (default: 0)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(soroswap_api_key=args.api_key, soroban_rpc_url=args.rpc_url)
    summary = run_workshop(config, swap_xlm=args.amount, slippage_bps=args.slippage_bps, pause=args.pause)
    return 1 if "error" in summary else 0


if __name__ == "__main__":
    sys.exit(main())
