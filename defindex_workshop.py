#!/usr/bin/env python3
"""
DeFindex Workshop - Direct Contract Calls

Creates a DeFindex vault through the factory contract and deposits into it
from two wallets, building every transaction by hand with the Stellar SDK.

Flow:
    1. Create and fund the vault manager wallet
    2. Configure the vault (roles, fee, assets/strategies, router, name)
    3. Create the vault via the factory
    4. Initial deposit from the manager
    5. Create and fund a second depositor
    6. Deposit from the depositor

Requirements:
    A deployed DeFindex factory: set DEFINDEX_FACTORY or pass --factory.

Usage:
    DEFINDEX_FACTORY=C... python3 defindex_workshop.py
"""

import argparse
import json
import logging
import sys
from typing import Optional

from stellar_sdk import Keypair

from workshop_sdk import (
    AssetStrategySet,
    SorobanClient,
    Strategy,
    VaultConfig,
    VaultRoles,
    WorkshopConfig,
    create_vault,
    deposit_to_vault,
    get_vault_balance,
    load_config,
)
from workshop_sdk.config import DEFAULT_SLIPPAGE_BPS
from workshop_sdk.narration import banner, format_amount, print_error, step

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
log = logging.getLogger('defindex_workshop')

VAULT_FEE_BPS = 2000            # 20% management fee
INITIAL_DEPOSIT = 100_000_000   # 10 tokens
SECOND_DEPOSIT = 10_000_000_000  # 1000 tokens
DEPOSIT_SLIPPAGE_BPS = DEFAULT_SLIPPAGE_BPS


def build_vault_config(config: WorkshopConfig, manager: str) -> VaultConfig:
    """One-asset, one-strategy vault with every role held by the manager."""
    return VaultConfig(
        roles=VaultRoles.single(manager),
        vault_fee_bps=VAULT_FEE_BPS,
        assets=[
            AssetStrategySet(
                address=config.vault_asset,
                strategies=[Strategy(address=config.vault_strategy, name="XLM Strategy", paused=False)]
            )
        ],
        soroswap_router=config.soroswap_router,
        name="TestVault",
        symbol="TV",
        upgradable=True,
    )


def print_deposit_details(depositor: str, amount: int):
    print("Deposit details:")
    print(f"   Depositor: {depositor}")
    print(f"   Amount: {format_amount(amount)} tokens")
    print(f"   Slippage tolerance: {DEPOSIT_SLIPPAGE_BPS / 100:.0f}%")
    print("   Invest immediately: No (keep as idle)")


def run_workshop(config: WorkshopConfig,
                 client: Optional[SorobanClient] = None,
                 manager: Optional[Keypair] = None,
                 depositor: Optional[Keypair] = None) -> dict:
    """
    Run the vault workshop.

    Returns:
        Summary dict (vault, manager, depositor, share balances)
    """
    client = client or SorobanClient(config)
    summary = {"vault": None, "manager": None, "depositor": None,
               "manager_shares": 0, "depositor_shares": 0}

    banner("Starting DeFindex Workshop (Direct Contract Calls)!")

    try:
        step(1, "Creating Vault Manager Wallet")
        manager = manager or Keypair.random()
        summary["manager"] = manager.public_key
        print("Vault Manager wallet created:")
        print(f"   Public Key: {manager.public_key}")
        print(f"   Secret Key: {manager.secret}")

        print("\nRequesting airdrop for vault manager...")
        client.request_airdrop(manager.public_key)
        print("Vault manager funded successfully")

        step(2, "Configuring Vault Parameters")
        vault_config = build_vault_config(config, manager.public_key)
        print("Vault Configuration:")
        print(f"   Name: {vault_config.name}")
        print(f"   Symbol: {vault_config.symbol}")
        print(f"   Fee: {vault_config.fee_percent:g}%")
        print(f"   Manager: {manager.public_key}")
        print(f"   Assets: {len(vault_config.assets)}")
        log.debug(json.dumps(vault_config.to_dict(), indent=2))

        if not config.factory_configured:
            print("\nWARNING: Factory address not set!")
            print("   Set the DEFINDEX_FACTORY environment variable or pass --factory")
            print("   Example: DEFINDEX_FACTORY=CC... python3 defindex_workshop.py")
            raise ValueError("Factory address not configured. Please set DEFINDEX_FACTORY environment variable.")

        step(3, "Creating Vault")
        vault = create_vault(client, config.defindex_factory, vault_config, manager)
        summary["vault"] = vault
        print("Vault created successfully!")
        print(f"Vault Contract Address: {vault}")

        step(4, "Making Initial Deposit to Vault")
        print_deposit_details(manager.public_key, INITIAL_DEPOSIT)
        deposit_to_vault(client, vault, [INITIAL_DEPOSIT], manager,
                         invest=False, slippage_bps=DEPOSIT_SLIPPAGE_BPS)
        summary["manager_shares"] = get_vault_balance(client, vault, manager.public_key)
        print(f"\nVault share balance: {format_amount(summary['manager_shares'])} tokens")

        step(5, "Creating Additional Depositor")
        depositor = depositor or Keypair.random()
        summary["depositor"] = depositor.public_key
        print("Depositor wallet created:")
        print(f"   Public Key: {depositor.public_key}")
        print(f"   Secret Key: {depositor.secret}")

        print("\nRequesting airdrop for depositor...")
        client.request_airdrop(depositor.public_key)
        print("Depositor funded successfully")

        step(6, "Making Deposit to Vault")
        print_deposit_details(depositor.public_key, SECOND_DEPOSIT)
        deposit_to_vault(client, vault, [SECOND_DEPOSIT], depositor,
                         invest=False, slippage_bps=DEPOSIT_SLIPPAGE_BPS)
        summary["depositor_shares"] = get_vault_balance(client, vault, depositor.public_key)
        print(f"\nDepositor vault share balance: {format_amount(summary['depositor_shares'])} tokens")

        print("\n" + "=" * 70)
        print("Workshop Summary")
        print("=" * 70)
        print("\nWhat we accomplished:")
        print("   1. Created vault manager wallet")
        print("   2. Configured vault with roles and strategies")
        print(f"   3. Created vault: {vault}")
        print(f"   4. Made initial deposit: {format_amount(INITIAL_DEPOSIT)} tokens")
        print("   5. Created depositor wallet")
        print(f"   6. Made additional deposit: {format_amount(SECOND_DEPOSIT)} tokens")
        print("\nImportant Addresses:")
        print(f"   Vault Contract: {vault}")
        print(f"   Vault Manager: {manager.public_key}")
        print(f"   Depositor: {depositor.public_key}")
        print("\nWorkshop completed successfully!")

    except Exception as e:
        print_error(e)
        summary["error"] = str(e)

    return summary


def main():
    parser = argparse.ArgumentParser(description="DeFindex Workshop (direct contract calls)")
    parser.add_argument("--factory", help="DeFindex factory contract id (default: $DEFINDEX_FACTORY)")
    parser.add_argument("--asset", help="Vault asset contract id")
    parser.add_argument("--strategy", help="Strategy contract id")
    parser.add_argument("--rpc-url", help="Soroban RPC URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(defindex_factory=args.factory, vault_asset=args.asset,
                         vault_strategy=args.strategy, soroban_rpc_url=args.rpc_url)
    summary = run_workshop(config)
    return 1 if "error" in summary else 0


if __name__ == "__main__":
    sys.exit(main())
