"""Tests for result, quote and vault types."""

import enum

import pytest

from workshop_sdk.workshop_types import Quote, TxResult, TxStatus, VaultConfig, VaultRole, VaultRoles


class _SdkStatus(enum.Enum):
    SUCCESS = "SUCCESS"


@pytest.mark.parametrize("raw,expected", [
    ("PENDING", TxStatus.PENDING),
    ("not_found", TxStatus.NOT_FOUND),
    (_SdkStatus.SUCCESS, TxStatus.SUCCESS),
])
def test_tx_status_parse(raw, expected):
    assert TxStatus.parse(raw) == expected


def test_tx_status_parse_unknown():
    with pytest.raises(ValueError):
        TxStatus.parse("BOGUS")


def test_tx_result_succeeded():
    assert TxResult("ab", TxStatus.SUCCESS).succeeded
    assert not TxResult("ab", TxStatus.DUPLICATE).succeeded


def test_quote_from_dict():
    data = {"assetIn": "CA", "assetOut": "CB", "amountIn": "100", "amountOut": "95",
            "priceImpactPct": 0.5, "platform": "soroswap", "routePlan": []}

    quote = Quote.from_dict(data)

    assert (quote.amount_in, quote.amount_out) == (100, 95)
    assert quote.price_impact_pct == "0.5"
    assert quote.raw is data


def test_vault_roles():
    roles = VaultRoles.single("GMANAGER")
    assert set(roles.by_role().values()) == {"GMANAGER"}
    assert [role.value for role in roles.by_role()] == [0, 1, 2, 3]
    assert VaultRole.REBALANCE_MANAGER.value == 3


def test_vault_config_to_dict():
    config = VaultConfig(VaultRoles.single("GMANAGER"), 2000, [], "CROUTER", "TestVault", "TV")

    assert config.fee_percent == 20
    assert config.to_dict()["manager"] == "GMANAGER"
    assert config.to_dict()["assets"] == []
