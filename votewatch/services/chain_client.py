"""Chain RPC client for fetching ledger data."""

import itertools
import time
from typing import Any, Callable, Optional

import httpx
import structlog

from config import get_settings
from votewatch.services.errors import ChainConnectionError, RPCError
from votewatch.services.schemas.chain import (
    Block,
    BlockProduction,
    EpochInfo,
    LeaderSchedule,
    VoteAccounts,
)

logger = structlog.get_logger(__name__)


class ChainClient:
    """Client for a Solana JSON-RPC endpoint."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        commitment: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self.rpc_url = rpc_url or settings.rpc.rpc_url
        self.commitment = commitment or settings.rpc.commitment
        self.timeout = timeout or settings.rpc.rpc_timeout
        attempts = settings.rpc.retry_attempts if retry_attempts is None else retry_attempts
        self.retry_attempts = max(attempts, 1)
        self.retry_delay = settings.rpc.retry_delay if retry_delay is None else retry_delay
        self._http = httpx.Client(timeout=self.timeout, transport=transport)
        self._ids = itertools.count(1)

    def __enter__(self) -> "ChainClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _retry_call(self, func: Callable[[], Any], method: str) -> Any:
        last_error = None
        for attempt in range(self.retry_attempts):
            try:
                return func()
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "RPC call failed, retrying",
                    method=method,
                    attempt=attempt + 1,
                    error=str(e)[:100],
                )
                if attempt < self.retry_attempts - 1:
                    time.sleep(self.retry_delay * (attempt + 1))
        raise ChainConnectionError(
            f"{method} failed after {self.retry_attempts} attempts: {last_error}"
        )

    def _request(self, method: str, params: Optional[list[Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        def _post():
            response = self._http.post(self.rpc_url, json=payload)
            response.raise_for_status()
            return response.json()

        try:
            data = self._retry_call(_post, method)
        except httpx.HTTPStatusError as e:
            raise RPCError(
                f"{method} returned HTTP {e.response.status_code}", method=method
            ) from e
        except ValueError as e:
            raise RPCError(f"{method} returned invalid JSON: {e}", method=method) from e

        if not isinstance(data, dict):
            raise RPCError(
                f"{method} returned a {type(data).__name__}, expected a JSON object",
                method=method,
            )

        error = data.get("error")
        if isinstance(error, dict):
            raise RPCError(
                f"{method}: {error.get('message', 'unknown error')}",
                code=error.get("code"),
                method=method,
            )
        if error:
            raise RPCError(f"{method}: {error}", method=method)
        return data.get("result")

    def get_epoch_info(self) -> EpochInfo:
        result = self._request("getEpochInfo", [{"commitment": self.commitment}])
        return EpochInfo.from_rpc(result)

    def get_block(self, slot: int, rewards_only: bool = True) -> Block:
        config: dict[str, Any] = {
            "encoding": "json",
            "maxSupportedTransactionVersion": 0,
            "commitment": self.commitment,
        }
        if rewards_only:
            config.update(transactionDetails="none", rewards=True)
        result = self._request("getBlock", [slot, config])
        return Block.from_rpc(slot, result or {})

    def get_vote_accounts(self, vote_pubkey: Optional[str] = None) -> VoteAccounts:
        config: dict[str, Any] = {
            "commitment": self.commitment,
            "keepUnstakedDelinquents": False,
        }
        if vote_pubkey:
            config["votePubkey"] = vote_pubkey
        result = self._request("getVoteAccounts", [config])
        return VoteAccounts.from_rpc(result or {})

    def get_block_production(
        self, identity: str, first_slot: int, last_slot: int
    ) -> dict[str, BlockProduction]:
        result = self._request(
            "getBlockProduction",
            [
                {
                    "identity": identity,
                    "range": {"firstSlot": first_slot, "lastSlot": last_slot},
                    "commitment": self.commitment,
                }
            ],
        )
        by_identity = (result or {}).get("value", {}).get("byIdentity", {})
        return {
            leader: BlockProduction(leader_slots=int(slots), blocks_produced=int(produced))
            for leader, (slots, produced) in by_identity.items()
        }

    def get_leader_schedule(self, slot: int, identity: str) -> Optional[LeaderSchedule]:
        result = self._request("getLeaderSchedule", [slot, {"identity": identity}])
        if result is None:
            return None
        return {leader: list(slots) for leader, slots in result.items()}
