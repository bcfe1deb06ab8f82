"""
Soroban Workshop SDK - Configuration

Testnet endpoints and well-known contract addresses used by the workshops.

Values resolve in this order:
  1. Defaults below
  2. Environment variables (a local .env file is loaded first)
  3. Explicit overrides passed to load_config() (CLI flags)
"""

import os
from dataclasses import dataclass, field, fields
from typing import Optional

from dotenv import load_dotenv
from stellar_sdk import Network

load_dotenv()

# ═══════════════════════════════════════════════════════════════════════════════
# NETWORK
# ═══════════════════════════════════════════════════════════════════════════════

TESTNET_HORIZON_URL = "https://horizon-testnet.stellar.org"
TESTNET_SOROBAN_URL = "https://soroban-testnet.stellar.org"
TESTNET_PASSPHRASE = Network.TESTNET_NETWORK_PASSPHRASE

SOROSWAP_API_URL = "https://api.soroswap.finance"
SOROSWAP_NETWORK = "testnet"

# ═══════════════════════════════════════════════════════════════════════════════
# CONTRACTS (testnet)
# ═══════════════════════════════════════════════════════════════════════════════

SOROSWAP_ROUTER = "CCMAPXWVZD4USEKDWRYS7DA4Y3D7E2SDMGBFJUCEXTC7VN6CUBGWPFUS"
SOROSWAP_USDC = "CDWEFYYHMGEZEFC5TBUDXM3IJJ7K7W5BDGE765UIYQEV4JFWDOLSTOEK"

# Vault factory must be deployed (or borrowed) by the user
FACTORY_PLACEHOLDER = "YOUR_FACTORY_ADDRESS_HERE"
DEFINDEX_VAULT_ASSET = "CDLZFC3SYJYDZT7K67VZ75HPJVIEUVNIXF47ZG2FB2RMQQVU2HHGCYSC"
DEFINDEX_STRATEGY = "CCSPRGGUP32M23CTU7RUAGXDNOHSA6O2BS2IK4NVUP5X2JQXKTSIQJKE"

# ═══════════════════════════════════════════════════════════════════════════════
# AMOUNTS & TIMING
# ═══════════════════════════════════════════════════════════════════════════════

TOKEN_DECIMALS = 7
STROOPS_PER_UNIT = 10 ** TOKEN_DECIMALS
BPS_DENOMINATOR = 10_000
DEFAULT_SLIPPAGE_BPS = 500  # 5%

CONTRACT_CALL_FEE = 10000
BALANCE_QUERY_FEE = 2000
BALANCE_QUERY_TIMEOUT = 300

# Safety margins added on top of simulated resources
INSTRUCTION_MARGIN = 500_000
RESOURCE_FEE_MARGIN = 100_000
INCLUSION_FEE_MARGIN = 10_000_000

POLL_INTERVAL = 2.0      # seconds between getTransaction calls
DEPLOY_POLL_INTERVAL = 1.0
POLL_TIMEOUT = 120.0     # None disables the limit
API_TIMEOUT = 30         # seconds


# Environment variable for each overridable field
ENV_VARS = {
    "horizon_url": "HORIZON_URL",
    "soroban_rpc_url": "SOROBAN_RPC_URL",
    "soroswap_api_url": "SOROSWAP_API_URL",
    "soroswap_api_key": "SOROSWAP_API_KEY",
    "soroswap_router": "SOROSWAP_ROUTER",
    "soroswap_usdc": "SOROSWAP_USDC",
    "defindex_factory": "DEFINDEX_FACTORY",
    "vault_asset": "DEFINDEX_VAULT_ASSET",
    "vault_strategy": "DEFINDEX_STRATEGY",
}


@dataclass
class WorkshopConfig:
    """Resolved settings shared by every workshop."""
    horizon_url: str = TESTNET_HORIZON_URL
    soroban_rpc_url: str = TESTNET_SOROBAN_URL
    network_passphrase: str = TESTNET_PASSPHRASE

    soroswap_api_url: str = SOROSWAP_API_URL
    soroswap_api_key: str = ""
    soroswap_network: str = SOROSWAP_NETWORK
    soroswap_router: str = SOROSWAP_ROUTER
    soroswap_usdc: str = SOROSWAP_USDC

    defindex_factory: str = FACTORY_PLACEHOLDER
    vault_asset: str = DEFINDEX_VAULT_ASSET
    vault_strategy: str = DEFINDEX_STRATEGY

    api_timeout: int = API_TIMEOUT
    poll_interval: float = POLL_INTERVAL
    poll_timeout: Optional[float] = field(default=POLL_TIMEOUT)

    @property
    def factory_configured(self) -> bool:
        """True once a real factory address has been supplied."""
        return bool(self.defindex_factory) and self.defindex_factory != FACTORY_PLACEHOLDER


def load_config(**overrides) -> WorkshopConfig:
    """
    Build a WorkshopConfig from defaults, environment and overrides.

    Overrides set to None are ignored so argparse defaults can be passed
    straight through.

    Raises:
        TypeError: If an override names an unknown field
    """
    known = {f.name for f in fields(WorkshopConfig)}
    values = {}

    for name, env_var in ENV_VARS.items():
        env_value = os.environ.get(env_var)
        if env_value:
            values[name] = env_value

    for name, value in overrides.items():
        if name not in known:
            raise TypeError(f"Unknown config field: {name}")
        if value is not None:
            values[name] = value

    return WorkshopConfig(**values)
