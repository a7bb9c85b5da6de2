"""Result types returned by service operations."""

from dataclasses import dataclass
from typing import NamedTuple


class RankedEntry(NamedTuple):
    staker_credits: int
    vote_pubkey: str
    activated_stake: int


@dataclass
class ValidatorStatus:
    epoch: int
    epoch_progress: int
    credits: int
    vote_distance: int
    delegated_stake: int
    leader_slots_count: int
    leader_slots_elapsed: int
    blocks_produced: int
    skip_rate: float
    is_delinquent: bool

    def summary(self) -> str:
        node_state = "!! delinquent !!" if self.is_delinquent else "not delinquent"
        return (
            f"\tEpoch {self.epoch} is {self.epoch_progress}% over\n"
            f"\tThe node is {node_state}\n"
            f"\t{self.delegated_stake} SOLs are staked\n"
            f"\t{self.leader_slots_count} total leader slots\n"
            f"\t{self.blocks_produced} produced out of {self.leader_slots_elapsed}\n"
            f"\t{self.skip_rate:.2f}% skip rate\n"
            f"\t{self.vote_distance} vote distance\n"
            f"\t{self.credits} vote credits\n"
        )


@dataclass
class BandwidthUsage:
    inbound: int
    outbound: int
    quota: int
    inbound_usage: int
    outbound_usage: int
