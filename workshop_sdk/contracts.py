"""
Soroban Workshop SDK - Companion Contract Clients

Client-side bindings for the workshop's own Soroban contracts:

  SwapProxyClient   swap(caller, token_in, token_out, amount) -> i128
                    (direct proxy and custom-auth variants share the ABI)
  ZapClient         deposit(caller, token_in, amount) -> i128
                    swap any token to the vault asset, then deposit
  ArbitrageClient   pwnd_arb(caller, blend_pool, loan_asset, loan_amount,
                             invocations, min_profit) -> i128
                    pwnd_exec(caller, invocations) -> Vec<Val>

Argument checks mirror the contracts so obviously invalid calls fail
before a simulation round-trip.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Optional, Sequence

from stellar_sdk import Keypair, scval
from stellar_sdk import xdr as stellar_xdr

from .payloads import swap_exact_tokens_for_tokens_args
from .soroban_client import SimulationError, SorobanClient, require_success

log = logging.getLogger(__name__)

MAX_INVOCATIONS = 10

_CONTRACT_ERROR_RE = re.compile(r"Error\(Contract,\s*#(\d+)\)")


class ContractErrorCode(IntEnum):
    """Error codes shared by the companion contracts"""
    INSUFFICIENT_PROFIT = 1
    INVALID_INVOCATIONS = 2
    SWAP_FAILED = 3
    REPAYMENT_FAILED = 4
    UNAUTHORIZED = 5
    INVALID_ARGUMENT = 6
    NEGATIVE_NOT_ALLOWED = 7


def parse_contract_error(message: str) -> Optional[int]:
    """Extract N from 'Error(Contract, #N)' in a host error message."""
    match = _CONTRACT_ERROR_RE.search(message or "")
    return int(match.group(1)) if match else None


class ContractError(Exception):
    """A contract returned (or would return) an error code."""
    def __init__(self, code: int, message: str = ""):
        self.code = code
        try:
            self.name = ContractErrorCode(code).name
        except ValueError:
            self.name = "UNKNOWN"
        super().__init__(f"Contract error #{code} ({self.name}) {message}".strip())


def check_nonnegative_amount(amount: int):
    if amount < 0:
        raise ContractError(ContractErrorCode.NEGATIVE_NOT_ALLOWED, f"amount={amount}")


@dataclass
class Invocation:
    """
    A sub-call executed by the arbitrage contract.

    Encoded as the tuple (Address, Symbol, Vec<Val>), plus a trailing
    can_fail bool for pwnd_exec.
    """
    contract: str
    method: str
    args: List[stellar_xdr.SCVal] = field(default_factory=list)
    can_fail: bool = False

    def to_scval(self, with_can_fail: bool = False) -> stellar_xdr.SCVal:
        items = [
            scval.to_address(self.contract),
            scval.to_symbol(self.method),
            scval.to_vec(list(self.args)),
        ]
        if with_can_fail:
            items.append(scval.to_bool(self.can_fail))
        return scval.to_vec(items)


def router_swap_invocation(router: str, amount: int, amount_out_min: int,
                           path: Sequence[str], to: str, deadline_ts: int) -> Invocation:
    """Invocation of router.swap_exact_tokens_for_tokens for an arbitrage leg."""
    return Invocation(
        contract=router,
        method="swap_exact_tokens_for_tokens",
        args=swap_exact_tokens_for_tokens_args(amount, amount_out_min, path, to, deadline_ts),
    )


class _ContractClient:
    def __init__(self, client: SorobanClient, contract_id: str):
        self.client = client
        self.contract_id = contract_id

    def _invoke(self, method: str, args: List[stellar_xdr.SCVal], caller: Keypair) -> Any:
        try:
            result = self.client.invoke_contract(self.contract_id, method, args, caller)
        except SimulationError as e:
            code = parse_contract_error(e.error)
            if code is not None:
                raise ContractError(code, f"in {method}") from e
            raise
        return require_success(result, method).native


class SwapProxyClient(_ContractClient):
    """Swap through a proxy contract that forwards to the Soroswap router."""

    def swap(self, caller: Keypair, token_in: str, token_out: str, amount: int) -> int:
        check_nonnegative_amount(amount)
        log.info(f"Proxy swap {amount} {token_in[:8]}... -> {token_out[:8]}...")
        args = [
            scval.to_address(caller.public_key),
            scval.to_address(token_in),
            scval.to_address(token_out),
            scval.to_int128(int(amount)),
        ]
        return int(self._invoke("swap", args, caller) or 0)


class ZapClient(_ContractClient):
    """Swap any token into a vault's underlying asset and deposit it."""

    def deposit(self, caller: Keypair, token_in: str, amount: int) -> int:
        check_nonnegative_amount(amount)
        log.info(f"Zap deposit {amount} of {token_in[:8]}...")
        args = [
            scval.to_address(caller.public_key),
            scval.to_address(token_in),
            scval.to_int128(int(amount)),
        ]
        return int(self._invoke("deposit", args, caller) or 0)


class ArbitrageClient(_ContractClient):
    """Flash-loan arbitrage: borrow, run the invocations, repay, keep profit."""

    @staticmethod
    def validate(invocations: Sequence[Invocation], loan_amount: int, min_profit: int):
        if not invocations or len(invocations) > MAX_INVOCATIONS:
            raise ContractError(ContractErrorCode.INVALID_INVOCATIONS,
                                f"need 1..{MAX_INVOCATIONS} invocations, got {len(invocations)}")
        if loan_amount <= 0 or min_profit < 0:
            raise ContractError(ContractErrorCode.INVALID_ARGUMENT,
                                f"loan_amount={loan_amount} min_profit={min_profit}")

    def pwnd_arb(self, caller: Keypair, blend_pool: str, loan_asset: str,
                 loan_amount: int, invocations: Sequence[Invocation],
                 min_profit: int = 0) -> int:
        """Returns the net profit transferred to the caller."""
        self.validate(invocations, loan_amount, min_profit)
        args = [
            scval.to_address(caller.public_key),
            scval.to_address(blend_pool),
            scval.to_address(loan_asset),
            scval.to_int128(int(loan_amount)),
            scval.to_vec([inv.to_scval() for inv in invocations]),
            scval.to_int128(int(min_profit)),
        ]
        profit = int(self._invoke("pwnd_arb", args, caller) or 0)
        log.info(f"Arbitrage profit: {profit}")
        return profit

    def pwnd_exec(self, caller: Keypair, invocations: Sequence[Invocation]) -> list:
        """Run invocations in order; can_fail ones record their error instead of reverting."""
        args = [
            scval.to_address(caller.public_key),
            scval.to_vec([inv.to_scval(with_can_fail=True) for inv in invocations]),
        ]
        return list(self._invoke("pwnd_exec", args, caller) or [])
