"""
Soroban Workshop SDK - Contract Payloads

Hand-built SCVal parameter lists for the Soroswap router and the DeFindex
factory/vault. Argument order and types follow the contract interfaces:

  router.swap_exact_tokens_for_tokens(amount: i128, amount_out_min: i128,
                                      path: Vec<Address>, to: Address,
                                      deadline: u64)
  router.add_liquidity(token_a, token_b, amount_a_desired, amount_b_desired,
                       amount_a_min, amount_b_min, to, deadline)
  factory.create_defindex_vault(roles: Map<u32, Address>, vault_fee: u32,
                                assets: Vec<AssetStrategySet>,
                                soroswap_router: Address,
                                name_symbol: Map<String, String>,
                                upgradable: bool)
  vault.deposit(amounts_desired: Vec<i128>, amounts_min: Vec<i128>,
                from: Address, invest: bool)

Soroban maps must be sorted by key; every builder below emits keys in
sorted order.
"""

import time
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple, Union

from stellar_sdk import scval
from stellar_sdk import xdr as stellar_xdr

from .config import BPS_DENOMINATOR, DEFAULT_SLIPPAGE_BPS, STROOPS_PER_UNIT
from .workshop_types import AssetStrategySet, Strategy, VaultConfig, VaultRoles

DEFAULT_DEADLINE_SECONDS = 3600


# ═══════════════════════════════════════════════════════════════════════════════
# AMOUNTS
# ═══════════════════════════════════════════════════════════════════════════════

def to_units(amount: Union[int, float, str, Decimal]) -> int:
    """Convert a token amount (7 decimals) to stroops."""
    return int(Decimal(str(amount)) * STROOPS_PER_UNIT)


def from_units(stroops: int) -> float:
    """Convert stroops to a display amount."""
    return int(stroops) / STROOPS_PER_UNIT


def apply_slippage(amount: int, slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> int:
    """
    Minimum acceptable amount after slippage, rounded down.

    Examples:
        >>> apply_slippage(100_000_000, 500)
        95000000
    """
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise ValueError(f"slippage_bps must be within 0..{BPS_DENOMINATOR}, got {slippage_bps}")
    return (int(amount) * (BPS_DENOMINATOR - slippage_bps)) // BPS_DENOMINATOR


def deadline(seconds: int = DEFAULT_DEADLINE_SECONDS, now: Optional[float] = None) -> int:
    """Unix timestamp `seconds` from now."""
    if now is None:
        now = time.time()
    return int(now) + seconds


# ═══════════════════════════════════════════════════════════════════════════════
# SCVAL HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def sc_map(entries: Sequence[Tuple[stellar_xdr.SCVal, stellar_xdr.SCVal]]) -> stellar_xdr.SCVal:
    """Build an SCV_MAP keeping the given entry order."""
    return stellar_xdr.SCVal(
        stellar_xdr.SCValType.SCV_MAP,
        map=stellar_xdr.SCMap([stellar_xdr.SCMapEntry(key=k, val=v) for k, v in entries]),
    )


def address_vec(addresses: Sequence[str]) -> stellar_xdr.SCVal:
    return scval.to_vec([scval.to_address(a) for a in addresses])


def i128_vec(amounts: Sequence[int]) -> stellar_xdr.SCVal:
    return scval.to_vec([scval.to_int128(int(a)) for a in amounts])


# ═══════════════════════════════════════════════════════════════════════════════
# SOROSWAP ROUTER
# ═══════════════════════════════════════════════════════════════════════════════

def swap_exact_tokens_for_tokens_args(amount: int, amount_out_min: int,
                                      path: Sequence[str], to: str,
                                      deadline_ts: int) -> List[stellar_xdr.SCVal]:
    """Parameters for router.swap_exact_tokens_for_tokens."""
    if len(path) < 2:
        raise ValueError("Swap path needs at least two assets")
    return [
        scval.to_int128(int(amount)),
        scval.to_int128(int(amount_out_min)),
        address_vec(path),
        scval.to_address(to),
        scval.to_uint64(int(deadline_ts)),
    ]


def add_liquidity_args(asset_a: str, asset_b: str, amount_a: int, amount_b: int,
                       to: str, deadline_ts: int,
                       slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> List[stellar_xdr.SCVal]:
    """Parameters for router.add_liquidity with slippage-derived minimums."""
    return [
        scval.to_address(asset_a),
        scval.to_address(asset_b),
        scval.to_int128(int(amount_a)),
        scval.to_int128(int(amount_b)),
        scval.to_int128(apply_slippage(amount_a, slippage_bps)),
        scval.to_int128(apply_slippage(amount_b, slippage_bps)),
        scval.to_address(to),
        scval.to_uint64(int(deadline_ts)),
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# DEFINDEX FACTORY / VAULT
# ═══════════════════════════════════════════════════════════════════════════════

def roles_map(roles: VaultRoles) -> stellar_xdr.SCVal:
    """Map<u32, Address>: 0 emergency, 1 fee receiver, 2 manager, 3 rebalance."""
    by_role = sorted(roles.by_role().items(), key=lambda item: item[0].value)
    return sc_map([(scval.to_uint32(role.value), scval.to_address(addr)) for role, addr in by_role])


def strategy_map(strategy: Strategy) -> stellar_xdr.SCVal:
    return sc_map([
        (scval.to_symbol("address"), scval.to_address(strategy.address)),
        (scval.to_symbol("name"), scval.to_string(strategy.name)),
        (scval.to_symbol("paused"), scval.to_bool(strategy.paused)),
    ])


def assets_array(assets: Sequence[AssetStrategySet]) -> stellar_xdr.SCVal:
    """Vec<AssetStrategySet> as symbol-keyed maps."""
    return scval.to_vec([
        sc_map([
            (scval.to_symbol("address"), scval.to_address(asset.address)),
            (scval.to_symbol("strategies"), scval.to_vec([strategy_map(s) for s in asset.strategies])),
        ])
        for asset in assets
    ])


def name_symbol_map(name: str, symbol: str) -> stellar_xdr.SCVal:
    """Map<String, String> (string keys, not symbols)."""
    return sc_map([
        (scval.to_string("name"), scval.to_string(name)),
        (scval.to_string("symbol"), scval.to_string(symbol)),
    ])


def create_vault_args(config: VaultConfig) -> List[stellar_xdr.SCVal]:
    """Parameters for factory.create_defindex_vault."""
    return [
        roles_map(config.roles),
        scval.to_uint32(config.vault_fee_bps),
        assets_array(config.assets),
        scval.to_address(config.soroswap_router),
        name_symbol_map(config.name, config.symbol),
        scval.to_bool(config.upgradable),
    ]


def deposit_args(amounts: Sequence[int], to: str, invest: bool = False,
                 slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> List[stellar_xdr.SCVal]:
    """Parameters for vault.deposit (one amount per vault asset)."""
    if not amounts:
        raise ValueError("At least one deposit amount is required")
    return [
        i128_vec(amounts),
        i128_vec([apply_slippage(a, slippage_bps) for a in amounts]),
        scval.to_address(to),
        scval.to_bool(invest),
    ]
