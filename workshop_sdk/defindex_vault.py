"""
Soroban Workshop SDK - DeFindex Vaults

Create vaults through the DeFindex factory and deposit into them with
direct contract calls.
"""

import logging
from typing import Any, Sequence

from stellar_sdk import Keypair

from .config import DEFAULT_SLIPPAGE_BPS
from .payloads import create_vault_args, deposit_args
from .soroban_client import SorobanClient, TransactionFailed, require_success
from .workshop_types import VaultConfig

log = logging.getLogger(__name__)


def create_vault(client: SorobanClient, factory: str, config: VaultConfig,
                 creator: Keypair) -> str:
    """
    Deploy a vault via factory.create_defindex_vault.

    Returns:
        The new vault's contract address
    """
    log.info(f"Creating vault {config.name} ({config.symbol}) via factory {factory}")
    result = require_success(
        client.invoke_contract(factory, "create_defindex_vault", create_vault_args(config), creator),
        "create_defindex_vault"
    )

    vault = getattr(result.native, "address", result.native)
    if not vault:
        raise TransactionFailed("Factory did not return a vault address", result)

    log.info(f"Vault Contract Address: {vault}")
    return str(vault)


def deposit_to_vault(client: SorobanClient, vault: str, amounts: Sequence[int],
                     depositor: Keypair, invest: bool = False,
                     slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> Any:
    """
    Deposit into a vault; shares are minted to the depositor.

    Args:
        amounts: Desired amount per vault asset (stroops)
        invest: Invest into strategies immediately instead of leaving idle

    Returns:
        Decoded deposit result returned by the vault
    """
    log.info(f"Depositing {list(amounts)} into vault {vault} (invest={invest})")
    result = require_success(
        client.invoke_contract(vault, "deposit", deposit_args(amounts, depositor.public_key, invest, slippage_bps), depositor),
        "deposit"
    )
    log.info(f"Deposit Response: {result.native}")
    return result.native


def get_vault_balance(client: SorobanClient, vault: str, user: str) -> int:
    """Vault share balance (the vault is itself the share token)."""
    return client.get_token_balance(vault, user)
