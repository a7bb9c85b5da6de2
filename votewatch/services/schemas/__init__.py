"""Shared dataclasses for votewatch services."""

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
from votewatch.services.schemas.results import (
    BandwidthUsage,
    RankedEntry,
    ValidatorStatus,
)

__all__ = [
    # Chain schemas
    "Block",
    "BlockProduction",
    "EpochCredits",
    "EpochInfo",
    "LeaderSchedule",
    "Reward",
    "RewardType",
    "VoteAccount",
    "VoteAccounts",
    # Result schemas
    "BandwidthUsage",
    "RankedEntry",
    "ValidatorStatus",
]
