"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock, patch

import pytest
from stellar_sdk import Account, Asset, Keypair, Network, TransactionBuilder

from workshop_sdk.config import WorkshopConfig
from workshop_sdk.soroban_client import SorobanClient

from soroban_fakes import simulation, tx_response


@pytest.fixture
def config() -> WorkshopConfig:
    """Testnet config with instant polling."""
    return WorkshopConfig(poll_interval=0, poll_timeout=None, soroswap_api_key="test-key")


@pytest.fixture
def wallet() -> Keypair:
    return Keypair.random()


@pytest.fixture
def server():
    """Mocked SorobanServer: one NOT_FOUND poll, then SUCCESS."""
    server = MagicMock()
    server.load_account.side_effect = lambda public_key: Account(public_key, 100)
    server.simulate_transaction.return_value = simulation()
    server.send_transaction.return_value = tx_response("PENDING", hash="ab" * 32)
    server.get_transaction.side_effect = [tx_response("NOT_FOUND"), tx_response("SUCCESS")]
    return server


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def client(config, server, session):
    with patch("workshop_sdk.soroban_client.time.sleep"):
        yield SorobanClient(config, server=server, session=session)


@pytest.fixture
def unsigned_xdr(wallet) -> str:
    """A real unsigned envelope for sign/send round trips."""
    return (
        TransactionBuilder(Account(wallet.public_key, 1), Network.TESTNET_NETWORK_PASSPHRASE, base_fee=100)
        .append_payment_op(destination=Keypair.random().public_key, asset=Asset.native(), amount="1")
        .set_timeout(30)
        .build()
        .to_xdr()
    )
