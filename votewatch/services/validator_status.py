"""Single-validator performance snapshot."""

from typing import Optional, Protocol

import structlog

from votewatch.services.epoch import epoch_slot_range
from votewatch.services.schemas.chain import (
    BlockProduction,
    EpochInfo,
    LeaderSchedule,
    VoteAccount,
    VoteAccounts,
)
from votewatch.services.schemas.results import ValidatorStatus

logger = structlog.get_logger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000


class ValidatorDataSource(Protocol):
    def get_vote_accounts(self, vote_pubkey: Optional[str] = None) -> VoteAccounts: ...

    def get_block_production(
        self, identity: str, first_slot: int, last_slot: int
    ) -> dict[str, BlockProduction]: ...

    def get_leader_schedule(self, slot: int, identity: str) -> Optional[LeaderSchedule]: ...


def _find_account(accounts: list[VoteAccount], vote_pubkey: str) -> Optional[VoteAccount]:
    return next((a for a in accounts if a.vote_pubkey == vote_pubkey), None)


def skip_rate(production: BlockProduction) -> float:
    if production.leader_slots == 0:
        return 0.0
    missed = max(production.leader_slots - production.blocks_produced, 0)
    return 100.0 * missed / production.leader_slots


def epoch_progress(epoch_info: EpochInfo, epoch: int) -> int:
    if epoch < epoch_info.epoch:
        return 100
    return epoch_info.slot_index * 100 // epoch_info.slots_in_epoch


def vote_distance(account: VoteAccount) -> int:
    distance = account.last_vote - account.root_slot
    if distance < 0:
        logger.warning(
            "Last vote is behind root slot",
            vote_pubkey=account.vote_pubkey,
            last_vote=account.last_vote,
            root_slot=account.root_slot,
        )
        return 0
    return distance


def compute_validator_status(
    client: ValidatorDataSource,
    vote_accounts: VoteAccounts,
    epoch_info: EpochInfo,
    epoch: int,
    vote_pubkey: str,
) -> Optional[ValidatorStatus]:
    """Build the status of ``vote_pubkey`` for ``epoch``.

    Returns None when the vote account is in neither the current nor the
    delinquent set. Block production and leader schedule are fetched from
    ``client`` for the validator's node identity; RPC errors propagate.
    """
    account = _find_account(vote_accounts.current, vote_pubkey)
    is_delinquent = account is None
    if account is None:
        account = _find_account(vote_accounts.delinquent, vote_pubkey)
    if account is None:
        return None

    entry = account.credits_for_epoch(epoch)
    credits = entry.earned if entry else 0

    identity = account.node_pubkey
    first_slot, last_slot = epoch_slot_range(epoch_info, epoch)

    production = client.get_block_production(identity, first_slot, last_slot).get(identity)
    if production is None:
        production = BlockProduction(leader_slots=0, blocks_produced=0)

    schedule = client.get_leader_schedule(first_slot, identity)
    leader_slots_count = len(schedule.get(identity, [])) if schedule else 0

    return ValidatorStatus(
        epoch=epoch,
        epoch_progress=epoch_progress(epoch_info, epoch),
        credits=credits,
        vote_distance=vote_distance(account),
        delegated_stake=account.activated_stake // LAMPORTS_PER_SOL,
        leader_slots_count=leader_slots_count,
        leader_slots_elapsed=production.leader_slots,
        blocks_produced=production.blocks_produced,
        skip_rate=skip_rate(production),
        is_delinquent=is_delinquent,
    )


def get_validator_status(
    client: ValidatorDataSource,
    vote_pubkey: str,
    epoch_info: EpochInfo,
    epoch: int,
) -> Optional[ValidatorStatus]:
    vote_accounts = client.get_vote_accounts(vote_pubkey=vote_pubkey)
    return compute_validator_status(client, vote_accounts, epoch_info, epoch, vote_pubkey)
