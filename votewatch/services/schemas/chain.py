"""Chain-related data transfer objects, built from JSON-RPC results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RewardType(str, Enum):
    FEE = "Fee"
    RENT = "Rent"
    STAKING = "Staking"
    VOTING = "Voting"

    @classmethod
    def _missing_(cls, value: object) -> "RewardType | None":
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


@dataclass(frozen=True)
class EpochInfo:
    epoch: int
    absolute_slot: int
    slot_index: int
    slots_in_epoch: int

    @classmethod
    def from_rpc(cls, raw: dict[str, Any]) -> "EpochInfo":
        return cls(
            epoch=int(raw["epoch"]),
            absolute_slot=int(raw["absoluteSlot"]),
            slot_index=int(raw["slotIndex"]),
            slots_in_epoch=int(raw["slotsInEpoch"]),
        )


@dataclass(frozen=True)
class Reward:
    pubkey: str
    reward_type: RewardType | None = None
    commission: int | None = None
    lamports: int = 0

    @classmethod
    def from_rpc(cls, raw: dict[str, Any]) -> "Reward":
        reward_type = raw.get("rewardType")
        try:
            parsed_type = RewardType(reward_type) if reward_type else None
        except ValueError:
            parsed_type = None
        commission = raw.get("commission")
        return cls(
            pubkey=str(raw.get("pubkey", "")),
            reward_type=parsed_type,
            commission=int(commission) if commission is not None else None,
            lamports=int(raw.get("lamports") or 0),
        )


@dataclass(frozen=True)
class Block:
    slot: int
    rewards: list[Reward] | None = None

    @classmethod
    def from_rpc(cls, slot: int, raw: dict[str, Any]) -> "Block":
        rewards = raw.get("rewards")
        return cls(
            slot=slot,
            rewards=[Reward.from_rpc(r) for r in rewards] if rewards is not None else None,
        )


@dataclass(frozen=True)
class EpochCredits:
    epoch: int
    credits: int
    previous_credits: int

    @property
    def earned(self) -> int:
        return max(self.credits - self.previous_credits, 0)


@dataclass(frozen=True)
class VoteAccount:
    vote_pubkey: str
    node_pubkey: str
    activated_stake: int
    last_vote: int
    root_slot: int
    commission: int
    epoch_credits: list[EpochCredits] = field(default_factory=list)

    @classmethod
    def from_rpc(cls, raw: dict[str, Any]) -> "VoteAccount":
        return cls(
            vote_pubkey=raw["votePubkey"],
            node_pubkey=raw["nodePubkey"],
            activated_stake=int(raw.get("activatedStake") or 0),
            last_vote=int(raw.get("lastVote") or 0),
            root_slot=int(raw.get("rootSlot") or 0),
            commission=int(raw.get("commission") or 0),
            epoch_credits=[
                EpochCredits(epoch=int(e), credits=int(c), previous_credits=int(p))
                for e, c, p in raw.get("epochCredits") or []
            ],
        )

    def credits_for_epoch(self, epoch: int) -> EpochCredits | None:
        for entry in self.epoch_credits:
            if entry.epoch == epoch:
                return entry
        return None


@dataclass(frozen=True)
class VoteAccounts:
    current: list[VoteAccount] = field(default_factory=list)
    delinquent: list[VoteAccount] = field(default_factory=list)

    @classmethod
    def from_rpc(cls, raw: dict[str, Any]) -> "VoteAccounts":
        return cls(
            current=[VoteAccount.from_rpc(a) for a in raw.get("current") or []],
            delinquent=[VoteAccount.from_rpc(a) for a in raw.get("delinquent") or []],
        )


@dataclass(frozen=True)
class BlockProduction:
    leader_slots: int
    blocks_produced: int


LeaderSchedule = dict[str, list[int]]
