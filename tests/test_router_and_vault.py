"""Tests for direct router calls and DeFindex vault operations."""

from unittest.mock import MagicMock

import pytest
from stellar_sdk import Address, Keypair, scval

from workshop_sdk.defindex_vault import create_vault, deposit_to_vault, get_vault_balance
from workshop_sdk.soroban_client import SimulationError, TransactionFailed
from workshop_sdk.soroswap_router import add_liquidity, execute_swap, get_balances
from workshop_sdk.workshop_types import (
    AssetStrategySet,
    Strategy,
    TxResult,
    TxStatus,
    VaultConfig,
    VaultRoles,
)

from soroban_fakes import ROUTER, STRATEGY, USDC_CONTRACT, XLM_CONTRACT

FACTORY = "CCMAPXWVZD4USEKDWRYS7DA4Y3D7E2SDMGBFJUCEXTC7VN6CUBGWPFUS"


def _client(native=None, status=TxStatus.SUCCESS):
    client = MagicMock()
    client.invoke_contract.return_value = TxResult(hash="ab" * 32, status=status, native=native)
    return client


@pytest.fixture
def user():
    return Keypair.random()


class TestExecuteSwap:
    def test_returns_last_path_amount(self, user):
        client = _client(native=[100_000_000, 2_500_000])

        assert execute_swap(client, ROUTER, XLM_CONTRACT, USDC_CONTRACT, 100_000_000, user) == 2_500_000

        contract_id, method, args, source = client.invoke_contract.call_args.args
        assert (contract_id, method, source) == (ROUTER, "swap_exact_tokens_for_tokens", user)
        assert scval.from_int128(args[0]) == 100_000_000
        assert scval.from_int128(args[1]) == 0
        assert scval.from_address(args[3]).address == user.public_key

    def test_empty_return_is_zero(self, user):
        assert execute_swap(_client(native=[]), ROUTER, XLM_CONTRACT, USDC_CONTRACT, 1, user) == 0
        assert execute_swap(_client(native=None), ROUTER, XLM_CONTRACT, USDC_CONTRACT, 1, user) == 0

    def test_failure_raises(self, user, caplog):
        client = MagicMock()
        client.invoke_contract.side_effect = SimulationError(ROUTER, "swap_exact_tokens_for_tokens",
                                                             "HostError: Error(Contract, #506)")

        with pytest.raises(SimulationError):
            execute_swap(client, ROUTER, XLM_CONTRACT, USDC_CONTRACT, 1, user)

        assert "Pool liquidity issues" in caplog.text

    def test_failed_status_raises(self, user):
        with pytest.raises(TransactionFailed):
            execute_swap(_client(status=TxStatus.FAILED), ROUTER, XLM_CONTRACT, USDC_CONTRACT, 1, user)


class TestAddLiquidity:
    def test_add_liquidity(self, user):
        client = _client(native=[100, 20, 44])

        result = add_liquidity(client, ROUTER, XLM_CONTRACT, USDC_CONTRACT, 100, 20, user, slippage_bps=1000)

        assert result.hash == "ab" * 32
        _, method, args, _ = client.invoke_contract.call_args.args
        assert method == "add_liquidity"
        assert scval.from_int128(args[4]) == 90
        assert scval.from_int128(args[5]) == 18

    def test_failure_raises(self, user):
        with pytest.raises(TransactionFailed):
            add_liquidity(_client(status=TxStatus.FAILED), ROUTER, XLM_CONTRACT, USDC_CONTRACT, 1, 1, user)


def test_get_balances(user):
    client = MagicMock()
    client.get_token_balance.side_effect = lambda contract_id, wallet: {XLM_CONTRACT: 50, USDC_CONTRACT: 7}[contract_id]

    balances = get_balances(client, user.public_key, {"XLM": XLM_CONTRACT, "USDC": USDC_CONTRACT})

    assert balances == {"XLM": 50, "USDC": 7}


class TestVault:
    @pytest.fixture
    def vault_config(self, user):
        return VaultConfig(
            roles=VaultRoles.single(user.public_key),
            vault_fee_bps=2000,
            assets=[AssetStrategySet(XLM_CONTRACT, [Strategy(STRATEGY, "XLM Strategy")])],
            soroswap_router=ROUTER,
            name="TestVault",
            symbol="TV",
        )

    def test_create_vault_returns_address(self, user, vault_config):
        client = _client(native=Address(STRATEGY))

        assert create_vault(client, FACTORY, vault_config, user) == STRATEGY
        contract_id, method, args, _ = client.invoke_contract.call_args.args
        assert (contract_id, method) == (FACTORY, "create_defindex_vault")
        assert len(args) == 6

    def test_create_vault_accepts_plain_string(self, user, vault_config):
        assert create_vault(_client(native=STRATEGY), FACTORY, vault_config, user) == STRATEGY

    def test_create_vault_without_address(self, user, vault_config):
        with pytest.raises(TransactionFailed):
            create_vault(_client(native=None), FACTORY, vault_config, user)

    def test_deposit(self, user):
        client = _client(native=[[100_000_000], 100_000_000])

        result = deposit_to_vault(client, STRATEGY, [100_000_000], user, invest=False, slippage_bps=500)

        assert result == [[100_000_000], 100_000_000]
        contract_id, method, args, source = client.invoke_contract.call_args.args
        assert (contract_id, method, source) == (STRATEGY, "deposit", user)
        assert [scval.from_int128(a) for a in scval.from_vec(args[1])] == [95_000_000]
        assert scval.from_bool(args[3]) is False

    def test_vault_balance(self, user):
        client = MagicMock()
        client.get_token_balance.return_value = 42

        assert get_vault_balance(client, STRATEGY, user.public_key) == 42
        client.get_token_balance.assert_called_once_with(STRATEGY, user.public_key)
