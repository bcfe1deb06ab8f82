"""Tests for SorobanClient against a mocked SorobanServer."""

from unittest.mock import MagicMock, patch

import pytest
from stellar_sdk import Asset, Keypair, Network, TransactionBuilder, scval
from stellar_sdk import xdr as stellar_xdr

from workshop_sdk.soroban_client import (
    SimulationError,
    SorobanClient,
    SorobanError,
    TransactionFailed,
    TransactionTimeout,
    require_success,
    transaction_return_value,
)
from workshop_sdk.workshop_types import TxResult, TxStatus

from soroban_fakes import ROUTER, XLM_CONTRACT, auth_entry_xdr, meta_xdr, simulation, tx_response


def _friendbot_response(status_code=200, text="", payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload or {"hash": "f" * 64}
    return response


class TestInvokeContract:
    def test_success_polls_until_found(self, client, server, wallet):
        result = client.invoke_contract(ROUTER, "get_factory", [], wallet)

        assert result.succeeded
        assert result.status == TxStatus.SUCCESS
        assert result.native is None
        assert server.get_transaction.call_count == 2
        assert server.get_transaction.call_args.args[0] == result.hash

    def test_assemble_adds_margins(self, client, server, wallet):
        client.invoke_contract(ROUTER, "get_factory", [], wallet)

        envelope = server.send_transaction.call_args.args[0]
        soroban_data = envelope.transaction.soroban_data
        assert soroban_data.resources.instructions.uint32 == 100_000 + 500_000
        assert soroban_data.resource_fee.int64 == 2_000 + 100_000
        assert envelope.transaction.fee == 10_000 + 1_000 + 10_000_000
        assert len(envelope.signatures) == 1

    def test_zero_instructions_stay_zero(self, client, server, wallet):
        server.simulate_transaction.return_value = simulation(instructions=0)

        client.invoke_contract(ROUTER, "get_factory", [], wallet)

        envelope = server.send_transaction.call_args.args[0]
        assert envelope.transaction.soroban_data.resources.instructions.uint32 == 0

    def test_simulation_error(self, client, server, wallet):
        server.simulate_transaction.return_value = simulation(error="HostError: Error(Contract, #3)")

        with pytest.raises(SimulationError) as exc_info:
            client.invoke_contract(ROUTER, "swap", [], wallet)

        assert exc_info.value.method == "swap"
        assert exc_info.value.contract_id == ROUTER
        server.send_transaction.assert_not_called()

    def test_simulate_only(self, client, server, wallet):
        response = client.invoke_contract(ROUTER, "get_factory", [], wallet, simulate_only=True)

        assert response is server.simulate_transaction.return_value
        server.send_transaction.assert_not_called()

    def test_non_pending_send_is_not_polled(self, client, server, wallet):
        server.send_transaction.return_value = tx_response("ERROR", hash="ab" * 32)

        result = client.invoke_contract(ROUTER, "get_factory", [], wallet)

        assert result.status == TxStatus.ERROR
        assert not result.succeeded
        server.get_transaction.assert_not_called()

    def test_failed_transaction_has_no_return_value(self, client, server, wallet):
        server.get_transaction.side_effect = [tx_response("FAILED")]

        result = client.invoke_contract(ROUTER, "get_factory", [], wallet)

        assert result.status == TxStatus.FAILED
        assert result.return_value is None

    def test_return_value_decoded(self, client, wallet):
        amounts = scval.to_vec([scval.to_int128(100), scval.to_int128(250)])
        with patch("workshop_sdk.soroban_client.transaction_return_value", return_value=amounts):
            result = client.invoke_contract(ROUTER, "swap_exact_tokens_for_tokens", [], wallet)

        assert result.return_value == amounts
        assert result.native == [100, 250]

    def test_auth_entries_attached(self, client, server, wallet):
        entry = auth_entry_xdr(ROUTER, "swap_exact_tokens_for_tokens")
        server.simulate_transaction.return_value = simulation(auth=[entry])

        client.invoke_contract(ROUTER, "swap_exact_tokens_for_tokens", [], wallet)

        envelope = server.send_transaction.call_args.args[0]
        expected = stellar_xdr.SorobanAuthorizationEntry.from_xdr(entry)
        assert envelope.transaction.operations[0].auth == [expected]

        decoded = TransactionBuilder.from_xdr(envelope.to_xdr(), Network.TESTNET_NETWORK_PASSPHRASE)
        assert decoded.transaction.operations[0].auth == [expected]

    @pytest.mark.parametrize("meta_version", [3, 4])
    def test_return_value_from_transaction_meta(self, client, server, wallet, meta_version):
        amounts = scval.to_vec([scval.to_int128(100), scval.to_int128(250)])
        server.get_transaction.side_effect = [
            tx_response("NOT_FOUND"),
            tx_response("SUCCESS", result_meta_xdr=meta_xdr(amounts, version=meta_version)),
        ]

        result = client.invoke_contract(ROUTER, "swap_exact_tokens_for_tokens", [], wallet)

        assert result.return_value == amounts
        assert result.native == [100, 250]

    def test_load_account_failure(self, client, server, wallet):
        server.load_account.side_effect = Exception("account not found")

        with pytest.raises(SorobanError):
            client.invoke_contract(ROUTER, "get_factory", [], wallet)


class TestWaitForTransaction:
    def test_timeout(self, client, server):
        server.get_transaction.side_effect = None
        server.get_transaction.return_value = tx_response("NOT_FOUND")

        with pytest.raises(TransactionTimeout) as exc_info:
            client.wait_for_transaction("ab" * 32, timeout=0)

        assert exc_info.value.tx_hash == "ab" * 32

    def test_uses_given_interval(self, config, server):
        client = SorobanClient(config, server=server, session=MagicMock())
        with patch("workshop_sdk.soroban_client.time.sleep") as sleep:
            response = client.wait_for_transaction("ab" * 32, interval=1.5)

        assert response.status == "SUCCESS"
        assert [c.args[0] for c in sleep.call_args_list] == [1.5, 1.5]


class TestQueries:
    def test_token_balance(self, client, server, wallet):
        server.simulate_transaction.return_value = simulation(retval=scval.to_int128(123_456))

        assert client.get_token_balance(XLM_CONTRACT, wallet.public_key) == 123_456
        server.send_transaction.assert_not_called()

    def test_token_balance_failure_is_zero(self, client, server, wallet):
        server.simulate_transaction.side_effect = Exception("rpc down")
        assert client.get_token_balance(XLM_CONTRACT, wallet.public_key) == 0

        server.simulate_transaction.side_effect = None
        server.simulate_transaction.return_value = simulation(error="contract missing")
        assert client.get_token_balance(XLM_CONTRACT, wallet.public_key) == 0

    def test_simulate_call_without_results(self, client, server, wallet):
        sim = simulation()
        sim.results = []
        server.simulate_transaction.return_value = sim

        assert client.simulate_call(XLM_CONTRACT, "decimals", [], wallet.public_key) is None


class TestFunding:
    def test_fund_with_friendbot(self, client, session, wallet):
        session.get.return_value = _friendbot_response()

        assert client.fund_with_friendbot(wallet.public_key) == {"hash": "f" * 64}
        session.get.assert_called_once_with(
            "https://horizon-testnet.stellar.org/friendbot",
            params={"addr": wallet.public_key},
            timeout=30,
        )

    def test_already_funded(self, client, session, wallet):
        response = _friendbot_response(400, text='{"detail": "op_already_exists createAccountAlreadyExist"}')
        session.get.return_value = response

        assert client.fund_with_friendbot(wallet.public_key) is None
        response.raise_for_status.assert_not_called()

    def test_friendbot_error_propagates(self, client, session, wallet):
        response = _friendbot_response(500, text="boom")
        response.raise_for_status.side_effect = Exception("500 Server Error")
        session.get.return_value = response

        with pytest.raises(Exception, match="500"):
            client.fund_with_friendbot(wallet.public_key)

    def test_request_airdrop_uses_rpc_friendbot(self, client, server, session, wallet):
        server.get_network.return_value = MagicMock(friendbot_url="https://friendbot.stellar.org/")
        session.get.return_value = _friendbot_response()

        client.request_airdrop(wallet.public_key)

        assert session.get.call_args.args[0] == "https://friendbot.stellar.org/"

    def test_request_airdrop_falls_back_to_horizon(self, client, server, session, wallet):
        server.get_network.return_value = MagicMock(friendbot_url=None)
        session.get.return_value = _friendbot_response()

        client.request_airdrop(wallet.public_key)

        assert session.get.call_args.args[0] == "https://horizon-testnet.stellar.org/friendbot"


class TestStellarAssets:
    def test_native_contract_id(self, client):
        assert client.asset_contract_id(Asset.native()) == XLM_CONTRACT

    def test_deploy_stellar_asset(self, client, server, wallet):
        asset = Asset("USDC", Keypair.random().public_key)
        server.prepare_transaction.side_effect = lambda tx: tx
        server.send_transaction.return_value = tx_response("PENDING", hash="cd" * 32)

        contract_id = client.deploy_stellar_asset(asset, wallet)

        assert contract_id == asset.contract_id(Network.TESTNET_NETWORK_PASSPHRASE)
        server.get_transaction.assert_called_with("cd" * 32)

    def test_deploy_rejected(self, client, server, wallet):
        server.prepare_transaction.side_effect = lambda tx: tx
        server.send_transaction.return_value = tx_response("ERROR", hash="cd" * 32)

        with pytest.raises(TransactionFailed):
            client.deploy_stellar_asset(Asset("USDC", Keypair.random().public_key), wallet)
        server.get_transaction.assert_not_called()

    def test_deploy_failed_on_ledger(self, client, server, wallet):
        server.prepare_transaction.side_effect = lambda tx: tx
        server.get_transaction.side_effect = [tx_response("FAILED")]

        with pytest.raises(TransactionFailed):
            client.deploy_stellar_asset(Asset("USDC", Keypair.random().public_key), wallet)


def test_transaction_return_value_without_meta():
    assert transaction_return_value(tx_response("SUCCESS")) is None
    assert transaction_return_value(object()) is None


@pytest.mark.parametrize("meta_version", [3, 4])
def test_transaction_return_value_reads_meta(meta_version):
    vault = scval.to_address(XLM_CONTRACT)
    response = tx_response("SUCCESS", result_meta_xdr=meta_xdr(vault, version=meta_version))

    assert scval.from_address(transaction_return_value(response)).address == XLM_CONTRACT


def test_require_success():
    ok = TxResult(hash="ab", status=TxStatus.SUCCESS)
    assert require_success(ok, "Swap") is ok

    failed = TxResult(hash="ab", status=TxStatus.FAILED)
    with pytest.raises(TransactionFailed) as exc_info:
        require_success(failed, "Swap")
    assert exc_info.value.result is failed
    assert "FAILED" in str(exc_info.value)
