"""
Soroban Workshop SDK - Soroban Client

Build, simulate, assemble, sign, submit and poll Soroban contract calls.

Every contract interaction in the workshops goes through invoke_contract():

    build tx -> simulate -> bump resources -> sign -> sendTransaction
             -> poll getTransaction until it leaves NOT_FOUND

Usage:
    client = SorobanClient(load_config())
    wallet = Keypair.random()
    client.fund_with_friendbot(wallet.public_key)

    result = client.invoke_contract(router, "swap_exact_tokens_for_tokens", args, wallet)
    if result.succeeded:
        print(result.native)
"""

import logging
import time
from typing import Any, Optional, Sequence

import requests
from stellar_sdk import Asset, Keypair, SorobanServer, TransactionBuilder, scval
from stellar_sdk import xdr as stellar_xdr

from .config import (
    BALANCE_QUERY_FEE,
    BALANCE_QUERY_TIMEOUT,
    CONTRACT_CALL_FEE,
    DEPLOY_POLL_INTERVAL,
    INCLUSION_FEE_MARGIN,
    INSTRUCTION_MARGIN,
    RESOURCE_FEE_MARGIN,
    WorkshopConfig,
    load_config,
)
from .workshop_types import TxResult, TxStatus

log = logging.getLogger(__name__)

DEPLOY_FEE = 100
_DEFAULT = object()


class SorobanError(Exception):
    """Base error for Soroban interactions."""


class SimulationError(SorobanError):
    """simulateTransaction returned an error."""
    def __init__(self, contract_id: str, method: str, error: str):
        self.contract_id = contract_id
        self.method = method
        self.error = error
        super().__init__(f"Simulation of {method} on {contract_id} failed: {error}")


class TransactionFailed(SorobanError):
    """Transaction was rejected or failed on-ledger."""
    def __init__(self, message: str, result: Optional[TxResult] = None):
        self.result = result
        super().__init__(message)


class TransactionTimeout(SorobanError):
    """Transaction did not leave NOT_FOUND before the poll timeout."""
    def __init__(self, tx_hash: str, waited: float):
        self.tx_hash = tx_hash
        self.waited = waited
        super().__init__(f"Transaction {tx_hash} still pending after {waited:.0f}s")


def transaction_return_value(response: Any) -> Optional[stellar_xdr.SCVal]:
    """Extract the contract return value from a getTransaction response."""
    meta_xdr = getattr(response, "result_meta_xdr", None)
    if not meta_xdr:
        return None
    meta = stellar_xdr.TransactionMeta.from_xdr(meta_xdr)
    for version in ("v4", "v3"):
        soroban_meta = getattr(getattr(meta, version, None), "soroban_meta", None)
        if soroban_meta is not None and soroban_meta.return_value is not None:
            return soroban_meta.return_value
    return None


def require_success(result: TxResult, action: str) -> TxResult:
    """Raise TransactionFailed unless the result is SUCCESS."""
    if not result.succeeded:
        raise TransactionFailed(f"{action} failed with status {result.status.value} (hash {result.hash})", result)
    return result


class SorobanClient:
    """
    Thin workflow layer over stellar_sdk.SorobanServer.

    Args:
        config: Workshop configuration (endpoints, passphrase, polling)
        server: Pre-built SorobanServer (tests inject a mock)
        session: requests session used for friendbot calls
    """

    def __init__(self, config: Optional[WorkshopConfig] = None,
                 server: Optional[SorobanServer] = None,
                 session: Optional[requests.Session] = None):
        self.config = config or load_config()
        self.server = server or SorobanServer(self.config.soroban_rpc_url)
        self.session = session or requests.Session()

    @property
    def passphrase(self) -> str:
        return self.config.network_passphrase

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSACTION BUILDING
    # ═══════════════════════════════════════════════════════════════════════

    def tx_builder(self, public_key: str, fee: int = CONTRACT_CALL_FEE) -> TransactionBuilder:
        """Load the account and return a builder with open time bounds."""
        try:
            account = self.server.load_account(public_key)
        except Exception as e:
            log.error(f"Failed to load account {public_key}: {e}")
            raise SorobanError(f"Unable to create tx builder for {public_key}") from e
        return TransactionBuilder(account, self.passphrase, base_fee=fee).add_time_bounds(0, 0)

    @staticmethod
    def assemble(envelope, simulation):
        """
        Apply simulation results to the envelope in place.

        Adds a margin to the simulated instructions (when non-zero) and to
        the resource fee, raises the transaction fee by the minimum resource
        fee plus INCLUSION_FEE_MARGIN, and attaches recorded auth entries.
        """
        soroban_data = stellar_xdr.SorobanTransactionData.from_xdr(simulation.transaction_data)
        instructions = soroban_data.resources.instructions.uint32
        if instructions:
            soroban_data.resources.instructions = stellar_xdr.Uint32(instructions + INSTRUCTION_MARGIN)
        soroban_data.resource_fee = stellar_xdr.Int64(soroban_data.resource_fee.int64 + RESOURCE_FEE_MARGIN)

        transaction = envelope.transaction
        transaction.soroban_data = soroban_data
        transaction.fee += int(simulation.min_resource_fee or 0) + INCLUSION_FEE_MARGIN

        if simulation.results and simulation.results[0].auth:
            transaction.operations[0].auth = [
                stellar_xdr.SorobanAuthorizationEntry.from_xdr(entry)
                for entry in simulation.results[0].auth
            ]
        return envelope

    # ═══════════════════════════════════════════════════════════════════════
    # CONTRACT CALLS
    # ═══════════════════════════════════════════════════════════════════════

    def invoke_contract(self, contract_id: str, method: str,
                        params: Sequence[stellar_xdr.SCVal], source: Keypair,
                        simulate_only: bool = False):
        """
        Invoke a contract method signed by `source`.

        Returns:
            The simulation response when simulate_only is set, otherwise a
            TxResult. A send status other than PENDING (ERROR, DUPLICATE,
            TRY_AGAIN_LATER) is returned as-is without polling.

        Raises:
            SimulationError: If simulation reports an error
            TransactionTimeout: If polling exceeds config.poll_timeout
        """
        log.info(f"Invoking contract {contract_id} method: {method}")

        envelope = (
            self.tx_builder(source.public_key)
            .append_invoke_contract_function_op(
                contract_id=contract_id,
                function_name=method,
                parameters=list(params),
            )
            .build()
        )

        simulation = self.server.simulate_transaction(envelope)
        if simulation.error:
            log.error(f"Simulation error: {simulation.error}")
            raise SimulationError(contract_id, method, simulation.error)
        if simulate_only:
            return simulation

        self.assemble(envelope, simulation)
        envelope.sign(source)
        tx_hash = envelope.hash_hex()

        log.info("Submitting tx...")
        send_response = self.server.send_transaction(envelope)
        log.info(f"Hash: {tx_hash}")

        status = TxStatus.parse(send_response.status)
        if status != TxStatus.PENDING:
            log.warning(f"sendTransaction returned {status.value} for {tx_hash}")
            return TxResult(hash=tx_hash, status=status, raw=send_response)

        response = self.wait_for_transaction(tx_hash)
        return self._to_result(tx_hash, response)

    def wait_for_transaction(self, tx_hash: str, interval: Optional[float] = None,
                             timeout: Any = _DEFAULT):
        """
        Poll getTransaction until the status is no longer pending.

        Args:
            tx_hash: Transaction hash (hex)
            interval: Seconds between polls (default config.poll_interval)
            timeout: Give up after this many seconds; None waits forever
                     (default config.poll_timeout)
        """
        if interval is None:
            interval = self.config.poll_interval
        if timeout is _DEFAULT:
            timeout = self.config.poll_timeout

        started = time.monotonic()
        while True:
            time.sleep(interval)
            log.info("Checking tx...")
            response = self.server.get_transaction(tx_hash)
            if TxStatus.parse(response.status) not in (TxStatus.PENDING, TxStatus.NOT_FOUND):
                return response

            waited = time.monotonic() - started
            if timeout is not None and waited >= timeout:
                raise TransactionTimeout(tx_hash, waited)

    def _to_result(self, tx_hash: str, response: Any) -> TxResult:
        status = TxStatus.parse(response.status)
        return_value = transaction_return_value(response) if status == TxStatus.SUCCESS else None
        native = scval.to_native(return_value) if return_value is not None else None
        if status == TxStatus.SUCCESS:
            log.info(f"Transaction {tx_hash[:16]}... confirmed")
        else:
            log.error(f"Transaction {tx_hash[:16]}... finished with {status.value}")
        return TxResult(hash=tx_hash, status=status, return_value=return_value,
                        native=native, raw=response)

    def simulate_call(self, contract_id: str, method: str,
                      params: Sequence[stellar_xdr.SCVal], public_key: str,
                      fee: int = BALANCE_QUERY_FEE) -> Any:
        """Read-only call: simulate and decode the return value."""
        account = self.server.load_account(public_key)
        envelope = (
            TransactionBuilder(account, self.passphrase, base_fee=fee)
            .append_invoke_contract_function_op(
                contract_id=contract_id,
                function_name=method,
                parameters=list(params),
            )
            .set_timeout(BALANCE_QUERY_TIMEOUT)
            .build()
        )
        simulation = self.server.simulate_transaction(envelope)
        if simulation.error:
            raise SimulationError(contract_id, method, simulation.error)
        if not simulation.results:
            return None
        return scval.to_native(stellar_xdr.SCVal.from_xdr(simulation.results[0].xdr))

    def get_token_balance(self, contract_id: str, wallet: str) -> int:
        """Token balance of `wallet` in stroops (0 when the query fails)."""
        try:
            balance = self.simulate_call(contract_id, "balance", [scval.to_address(wallet)], wallet)
            return int(balance or 0)
        except Exception as e:
            log.warning(f"Failed to get balance for contract {contract_id}: {e}")
            return 0

    # ═══════════════════════════════════════════════════════════════════════
    # FUNDING
    # ═══════════════════════════════════════════════════════════════════════

    def _call_friendbot(self, url: str, public_key: str) -> Optional[dict]:
        resp = self.session.get(url, params={"addr": public_key}, timeout=self.config.api_timeout)
        if resp.status_code == 400 and "createAccountAlreadyExist" in resp.text:
            log.info(f"Account {public_key} already funded")
            return None
        resp.raise_for_status()
        return resp.json()

    def fund_with_friendbot(self, public_key: str) -> Optional[dict]:
        """Fund a testnet account through Horizon's friendbot."""
        log.info(f"Funding {public_key} with friendbot")
        return self._call_friendbot(f"{self.config.horizon_url.rstrip('/')}/friendbot", public_key)

    def request_airdrop(self, public_key: str) -> Optional[dict]:
        """Fund via the friendbot advertised by the RPC getNetwork call."""
        network = self.server.get_network()
        friendbot_url = getattr(network, "friendbot_url", None)
        if not friendbot_url:
            log.info("RPC has no friendbot configured, falling back to Horizon")
            return self.fund_with_friendbot(public_key)
        log.info(f"Requesting airdrop for {public_key}")
        return self._call_friendbot(friendbot_url, public_key)

    # ═══════════════════════════════════════════════════════════════════════
    # STELLAR ASSET CONTRACTS
    # ═══════════════════════════════════════════════════════════════════════

    def asset_contract_id(self, asset: Asset) -> str:
        """Stellar Asset Contract id of a classic asset on this network."""
        return asset.contract_id(self.passphrase)

    def deploy_stellar_asset(self, asset: Asset, source: Keypair) -> str:
        """
        Deploy the Stellar Asset Contract for a classic asset.

        Returns:
            The (predicted) contract id

        Raises:
            TransactionFailed: If the deploy transaction does not succeed
        """
        log.info(f"Deploying {asset.code} to Soroban...")
        contract_id = self.asset_contract_id(asset)
        log.info(f"Predicted Contract ID: {contract_id}")

        account = self.server.load_account(source.public_key)
        envelope = (
            TransactionBuilder(account, self.passphrase, base_fee=DEPLOY_FEE)
            .append_create_stellar_asset_contract_from_asset_op(asset)
            .set_timeout(30)
            .build()
        )
        prepared = self.server.prepare_transaction(envelope)
        prepared.sign(source)

        send_response = self.server.send_transaction(prepared)
        send_status = TxStatus.parse(send_response.status)
        if send_status not in (TxStatus.PENDING, TxStatus.DUPLICATE):
            raise TransactionFailed(f"Failed to deploy {asset.code}: {send_status.value}")
        log.info(f"Deploy transaction submitted: {send_response.hash}")

        response = self.wait_for_transaction(send_response.hash, interval=DEPLOY_POLL_INTERVAL)
        status = TxStatus.parse(response.status)
        if status != TxStatus.SUCCESS:
            raise TransactionFailed(f"Failed to deploy {asset.code}: {status.value}")

        log.info(f"{asset.code} deployed to Soroban successfully")
        return contract_id
