"""
Soroban Workshop SDK - Data Types

Transaction results, DEX quotes and DeFindex vault configuration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class TxStatus(Enum):
    """Union of sendTransaction and getTransaction statuses"""
    PENDING = "PENDING"
    NOT_FOUND = "NOT_FOUND"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    ERROR = "ERROR"
    DUPLICATE = "DUPLICATE"
    TRY_AGAIN_LATER = "TRY_AGAIN_LATER"

    @classmethod
    def parse(cls, status: Any) -> "TxStatus":
        """Accept SDK enums or raw strings."""
        value = getattr(status, "value", status)
        return cls(str(value).upper())


@dataclass
class TxResult:
    """
    Outcome of a submitted contract invocation.

    return_value is the raw SCVal returned by the contract (if any);
    native is the same value decoded to Python types.
    """
    hash: str
    status: TxStatus
    return_value: Any = None
    native: Any = None
    raw: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status == TxStatus.SUCCESS


@dataclass
class Quote:
    """Soroswap API quote (amounts in stroops)."""
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int
    price_impact_pct: str = "0"
    platform: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Quote":
        """Create Quote from API response."""
        return cls(
            asset_in=data.get("assetIn", ""),
            asset_out=data.get("assetOut", ""),
            amount_in=int(data.get("amountIn", 0)),
            amount_out=int(data.get("amountOut", 0)),
            price_impact_pct=str(data.get("priceImpactPct", "0")),
            platform=data.get("platform", ""),
            raw=data
        )


# ═══════════════════════════════════════════════════════════════════════════════
# DEFINDEX VAULT
# ═══════════════════════════════════════════════════════════════════════════════

class VaultRole(Enum):
    """Role keys used by the vault factory (u32 map keys)"""
    EMERGENCY_MANAGER = 0
    FEE_RECEIVER = 1
    MANAGER = 2
    REBALANCE_MANAGER = 3


@dataclass
class Strategy:
    address: str
    name: str
    paused: bool = False


@dataclass
class AssetStrategySet:
    """An asset managed by the vault and the strategies investing it."""
    address: str
    strategies: List[Strategy] = field(default_factory=list)


@dataclass
class VaultRoles:
    """
    Vault permissions:
      - emergency_manager: can pause the vault in emergencies
      - fee_receiver: receives vault management fees
      - manager: general vault management
      - rebalance_manager: can move assets across strategies
    """
    emergency_manager: str
    fee_receiver: str
    manager: str
    rebalance_manager: str

    @classmethod
    def single(cls, address: str) -> "VaultRoles":
        """All roles held by one address."""
        return cls(address, address, address, address)

    def by_role(self) -> Dict[VaultRole, str]:
        return {
            VaultRole.EMERGENCY_MANAGER: self.emergency_manager,
            VaultRole.FEE_RECEIVER: self.fee_receiver,
            VaultRole.MANAGER: self.manager,
            VaultRole.REBALANCE_MANAGER: self.rebalance_manager,
        }


@dataclass
class VaultConfig:
    roles: VaultRoles
    vault_fee_bps: int
    assets: List[AssetStrategySet]
    soroswap_router: str
    name: str
    symbol: str
    upgradable: bool = True

    def __post_init__(self):
        if not 0 <= self.vault_fee_bps <= 10_000:
            raise ValueError(f"vault_fee_bps out of range: {self.vault_fee_bps}")

    @property
    def fee_percent(self) -> float:
        return self.vault_fee_bps / 100

    def to_dict(self) -> dict:
        """Convert to dictionary for display."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "vault_fee_bps": self.vault_fee_bps,
            "manager": self.roles.manager,
            "soroswap_router": self.soroswap_router,
            "upgradable": self.upgradable,
            "assets": [
                {
                    "address": asset.address,
                    "strategies": [
                        {"address": s.address, "name": s.name, "paused": s.paused}
                        for s in asset.strategies
                    ]
                }
                for asset in self.assets
            ]
        }
