"""Shared fixtures — scripted in-memory chain client and vote account factories."""

from collections.abc import Generator, Iterable
from typing import Optional

import pytest
import structlog

from votewatch.services.errors import RPCError
from votewatch.services.schemas.chain import (
    Block,
    BlockProduction,
    EpochCredits,
    EpochInfo,
    LeaderSchedule,
    Reward,
    RewardType,
    VoteAccount,
    VoteAccounts,
)

VOTE_A: str = "Vote111111111111111111111111111111111111111"
VOTE_B: str = "Stake11111111111111111111111111111111111111"
VOTE_C: str = "Config1111111111111111111111111111111111111"
VOTE_D: str = "SysvarC1ock11111111111111111111111111111111"
NODE_A: str = "11111111111111111111111111111111"
NODE_B: str = "SysvarRent111111111111111111111111111111111"


def make_account(
    vote_pubkey: str = VOTE_A,
    node_pubkey: str = NODE_A,
    activated_stake: int = 0,
    last_vote: int = 0,
    root_slot: int = 0,
    commission: int = 0,
    epoch_credits: Iterable[tuple[int, int, int]] = (),
) -> VoteAccount:
    return VoteAccount(
        vote_pubkey=vote_pubkey,
        node_pubkey=node_pubkey,
        activated_stake=activated_stake,
        last_vote=last_vote,
        root_slot=root_slot,
        commission=commission,
        epoch_credits=[EpochCredits(e, c, p) for e, c, p in epoch_credits],
    )


def voting_reward(pubkey: str, commission: Optional[int]) -> Reward:
    return Reward(pubkey=pubkey, reward_type=RewardType.VOTING, commission=commission)


def skipped(slot: int, long_term: bool = False) -> RPCError:
    code = -32009 if long_term else -32007
    return RPCError(f"Slot {slot} was skipped", code=code, method="getBlock")


class FakeChainClient:
    """Chain client double that replays scripted responses and records calls."""

    def __init__(
        self,
        blocks: Optional[dict[int, Block | Exception]] = None,
        vote_accounts: Optional[VoteAccounts] = None,
        production: Optional[dict[str, BlockProduction]] = None,
        leader_schedule: Optional[LeaderSchedule] = None,
        epoch_info: Optional[EpochInfo] = None,
    ):
        self.epoch_info = epoch_info
        self.blocks = blocks or {}
        self.vote_accounts = vote_accounts or VoteAccounts()
        self.production = production or {}
        self.leader_schedule = leader_schedule
        self.block_requests: list[int] = []
        self.production_requests: list[tuple[str, int, int]] = []
        self.schedule_requests: list[tuple[int, str]] = []
        self.closed = False

    def __enter__(self) -> "FakeChainClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def get_epoch_info(self) -> EpochInfo:
        assert self.epoch_info is not None
        return self.epoch_info

    def get_block(self, slot: int, rewards_only: bool = True) -> Block:
        self.block_requests.append(slot)
        outcome = self.blocks.get(slot, skipped(slot))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get_vote_accounts(self, vote_pubkey: Optional[str] = None) -> VoteAccounts:
        if vote_pubkey is None:
            return self.vote_accounts
        return VoteAccounts(
            current=[a for a in self.vote_accounts.current if a.vote_pubkey == vote_pubkey],
            delinquent=[a for a in self.vote_accounts.delinquent if a.vote_pubkey == vote_pubkey],
        )

    def get_block_production(
        self, identity: str, first_slot: int, last_slot: int
    ) -> dict[str, BlockProduction]:
        self.production_requests.append((identity, first_slot, last_slot))
        return {k: v for k, v in self.production.items() if k == identity}

    def get_leader_schedule(self, slot: int, identity: str) -> Optional[LeaderSchedule]:
        self.schedule_requests.append((slot, identity))
        return self.leader_schedule


@pytest.fixture()
def epoch_info() -> EpochInfo:
    # Epoch 10 started at slot 4000; 250 slots in.
    return EpochInfo(epoch=10, absolute_slot=4250, slot_index=250, slots_in_epoch=400)


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()
