"""
Soroban Workshop SDK

Helpers behind the Stellar testnet DeFi workshops.

Architecture:
  - Soroswap API (quote/build/send) for aggregated swaps and liquidity
  - Direct Soroban contract calls for the Soroswap router and DeFindex
  - Every on-chain call follows: build -> simulate -> sign -> send -> poll

Usage:
    from workshop_sdk import SorobanClient, SoroswapAPI, load_config

    config = load_config()
    client = SorobanClient(config)

    # Fund a fresh wallet
    wallet = Keypair.random()
    client.fund_with_friendbot(wallet.public_key)

    # Swap 10 XLM for USDC through the router
    xlm = client.asset_contract_id(Asset.native())
    received = execute_swap(client, config.soroswap_router, xlm,
                            config.soroswap_usdc, to_units(10), wallet)
"""

from .config import WorkshopConfig, load_config
from .workshop_types import (
    TxStatus, TxResult, Quote,
    Strategy, AssetStrategySet, VaultRoles, VaultRole, VaultConfig,
)
from .soroban_client import (
    SorobanClient,
    SorobanError,
    SimulationError,
    TransactionFailed,
    TransactionTimeout,
    require_success,
)
from .soroswap_api import SoroswapAPI, SoroswapAPIError, TradeType, extract_amount_out, sign_xdr
from .soroswap_router import execute_swap, add_liquidity, get_balances
from .defindex_vault import create_vault, deposit_to_vault, get_vault_balance
from .contracts import (
    ArbitrageClient, SwapProxyClient, ZapClient,
    ContractError, ContractErrorCode, Invocation,
    parse_contract_error, router_swap_invocation,
)
from .payloads import apply_slippage, deadline, from_units, to_units

__version__ = "0.1.0"
__all__ = [
    # Config & types
    "WorkshopConfig", "load_config",
    "TxStatus", "TxResult", "Quote",
    "Strategy", "AssetStrategySet", "VaultRoles", "VaultRole", "VaultConfig",
    # Soroban
    "SorobanClient", "SorobanError", "SimulationError",
    "TransactionFailed", "TransactionTimeout", "require_success",
    # Soroswap
    "SoroswapAPI", "SoroswapAPIError", "TradeType", "extract_amount_out", "sign_xdr",
    "execute_swap", "add_liquidity", "get_balances",
    # DeFindex
    "create_vault", "deposit_to_vault", "get_vault_balance",
    # Companion contracts
    "ArbitrageClient", "SwapProxyClient", "ZapClient",
    "ContractError", "ContractErrorCode", "Invocation",
    "parse_contract_error", "router_swap_invocation",
    # Amounts
    "apply_slippage", "deadline", "from_units", "to_units",
]
