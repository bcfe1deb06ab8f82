"""
Soroban Workshop SDK - Soroswap API Client

HTTP client for the Soroswap aggregator API (quote -> build -> sign -> send).

Usage:
    api = SoroswapAPI(api_key="sk_...")
    quote = api.quote(xlm_contract, usdc_contract, 10_0000000)
    xdr = api.build(quote, wallet.public_key)
    result = api.send(sign_xdr(xdr, wallet, TESTNET_PASSPHRASE))
    received = extract_amount_out(result)
"""

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional

import requests
from stellar_sdk import Keypair, TransactionBuilder, scval
from stellar_sdk import xdr as stellar_xdr

from .config import API_TIMEOUT, DEFAULT_SLIPPAGE_BPS, SOROSWAP_API_URL, SOROSWAP_NETWORK
from .workshop_types import Quote

log = logging.getLogger(__name__)


class TradeType(Enum):
    """Which side of the trade is fixed"""
    EXACT_IN = "EXACT_IN"
    EXACT_OUT = "EXACT_OUT"


class SoroswapAPIError(Exception):
    """Soroswap API call failed."""
    def __init__(self, status_code: int, message: str, payload: Any = None):
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(f"Soroswap API Error {status_code}: {message}")


class SoroswapAPI:
    """
    Soroswap aggregator API client.

    Amounts are passed as integers (stroops) and serialized as decimal
    strings, matching the API's bigint encoding.
    """

    def __init__(self, api_key: str, base_url: str = SOROSWAP_API_URL,
                 network: str = SOROSWAP_NETWORK, timeout: int = API_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.network = network
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _request(self, method: str, path: str, body: Optional[dict] = None,
                 params: Optional[dict] = None) -> Any:
        """Make API call."""
        query = {"network": self.network}
        if params:
            query.update(params)

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=query,
                json=body,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise SoroswapAPIError(-1, f"Connection failed: {e}")

        if not response.ok:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            message = payload.get("message", response.reason) if isinstance(payload, dict) else str(payload)
            raise SoroswapAPIError(response.status_code, message, payload)

        try:
            return response.json()
        except ValueError:
            raise SoroswapAPIError(response.status_code, "Response is not valid JSON", response.text)

    # ═══════════════════════════════════════════════════════════════════════
    # TRADING
    # ═══════════════════════════════════════════════════════════════════════

    def quote(self, asset_in: str, asset_out: str, amount: int,
              trade_type: TradeType = TradeType.EXACT_IN,
              protocols: Iterable[str] = ("soroswap",),
              slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> Quote:
        """Get the best route for a trade."""
        body = {
            "assetIn": asset_in,
            "assetOut": asset_out,
            "amount": str(int(amount)),
            "tradeType": TradeType(trade_type).value,
            "protocols": list(protocols),
            "slippageBps": slippage_bps,
        }
        log.info(f"Requesting quote {asset_in[:8]}... -> {asset_out[:8]}... amount={amount}")
        return Quote.from_dict(self._request("POST", "/quote", body))

    def build(self, quote: Quote, from_address: str, to_address: Optional[str] = None) -> str:
        """Build an unsigned transaction XDR from a quote."""
        body = {"quote": quote.raw, "from": from_address}
        if to_address:
            body["to"] = to_address
        return self._request("POST", "/quote/build", body)["xdr"]

    def send(self, signed_xdr: str, launchtube: bool = False) -> dict:
        """Submit a signed transaction XDR."""
        return self._request("POST", "/send", {"xdr": signed_xdr, "launchtube": launchtube})

    # ═══════════════════════════════════════════════════════════════════════
    # LIQUIDITY
    # ═══════════════════════════════════════════════════════════════════════

    def add_liquidity(self, asset_a: str, asset_b: str, amount_a: int, amount_b: int,
                      to: str, slippage_bps: int = DEFAULT_SLIPPAGE_BPS) -> str:
        """Build an unsigned add-liquidity transaction XDR."""
        body = {
            "assetA": asset_a,
            "assetB": asset_b,
            "amountA": str(int(amount_a)),
            "amountB": str(int(amount_b)),
            "to": to,
            "slippageBps": str(slippage_bps),
        }
        return self._request("POST", "/liquidity/add", body)["xdr"]

    def get_pools(self, protocols: Iterable[str] = ("soroswap",)) -> List[dict]:
        """List pools for the given protocols."""
        return self._request("GET", "/pools", params={"protocol": list(protocols)})


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def sign_xdr(unsigned_xdr: str, keypair: Keypair, passphrase: str) -> str:
    """Parse a transaction envelope XDR, sign it and re-encode."""
    envelope = TransactionBuilder.from_xdr(unsigned_xdr, passphrase)
    envelope.sign(keypair)
    return envelope.to_xdr()


def _last_amount(values: Any) -> Optional[int]:
    if isinstance(values, (list, tuple)):
        return int(values[-1]) if values else None
    return int(values)


def extract_amount_out(send_response: dict) -> Optional[int]:
    """
    Amount received from a swap submitted through send().

    The router returns the amounts along the path; the received amount is
    the last one. returnValue may arrive as base64 SCVal XDR, a plain list
    or number, or a JS-serialized ScVal
    ({"_value": [in, {"_value": {"_attributes": {"lo": {"_value": ...}}}}]}).
    """
    value = send_response.get("returnValue") if send_response else None
    if value is None:
        return None

    try:
        if isinstance(value, str):
            if value.lstrip("-").isdigit():
                return int(value)
            return _last_amount(scval.to_native(stellar_xdr.SCVal.from_xdr(value)))

        if isinstance(value, dict):
            items = value.get("_value")
            if not isinstance(items, list) or not items:
                return None
            last = items[-1].get("_value", {})
            attributes = last.get("_attributes", {})
            return int(attributes["lo"]["_value"])

        return _last_amount(value)
    except Exception as e:
        log.warning(f"Could not decode returnValue {value!r}: {e}")
        return None
