"""Validator ranking by staker credits earned in an epoch."""

from typing import Optional, Protocol

import structlog

from votewatch.services.commissions import BlockSource, get_epoch_commissions, is_valid_pubkey
from votewatch.services.epoch import first_slot_in_epoch
from votewatch.services.errors import MissingCommissionError
from votewatch.services.schemas.chain import EpochInfo, VoteAccount, VoteAccounts
from votewatch.services.schemas.results import RankedEntry

logger = structlog.get_logger(__name__)


class RankingDataSource(BlockSource, Protocol):
    def get_vote_accounts(self, vote_pubkey: Optional[str] = None) -> VoteAccounts: ...


def staker_credits(epoch_credits: int, commission: int) -> int:
    return epoch_credits * (100 - commission) // 100


def _commission_for(
    account: VoteAccount,
    epoch: int,
    ignore_commission: bool,
    epoch_commissions: Optional[dict[str, int]],
) -> int:
    if ignore_commission:
        return 0
    if epoch_commissions is None:
        return account.commission
    try:
        return epoch_commissions[account.vote_pubkey]
    except KeyError:
        raise MissingCommissionError(account.vote_pubkey, epoch) from None


def rank_by_credit_score(
    vote_accounts: VoteAccounts,
    epoch: int,
    ignore_commission: bool = False,
    epoch_commissions: Optional[dict[str, int]] = None,
) -> list[RankedEntry]:
    """Rank every vote account by the credits its stakers earned in ``epoch``.

    ``epoch_commissions`` holds the commission each vote account charged in
    ``epoch``; when omitted the accounts' current commission is used. The
    result is ordered by staker credits, highest first, keeping the input
    order (current, then delinquent) for ties.
    """
    ranking: list[RankedEntry] = []
    for account in [*vote_accounts.current, *vote_accounts.delinquent]:
        if not is_valid_pubkey(account.vote_pubkey):
            continue

        credits = 0
        entry = account.credits_for_epoch(epoch)
        if entry is not None:
            commission = _commission_for(account, epoch, ignore_commission, epoch_commissions)
            credits = staker_credits(entry.earned, commission)
            logger.debug(
                "Staker credits",
                vote_pubkey=account.vote_pubkey,
                total_credits=entry.earned,
                staker_credits=credits,
                epoch=epoch,
            )
        ranking.append(RankedEntry(credits, account.vote_pubkey, account.activated_stake))

    ranking.sort(key=lambda r: r.staker_credits, reverse=True)
    return ranking


def get_validators_by_credit_score(
    client: RankingDataSource,
    epoch_info: EpochInfo,
    epoch: int,
    ignore_commission: bool = False,
) -> list[RankedEntry]:
    epoch_commissions = None
    if epoch != epoch_info.epoch:
        first_slot = first_slot_in_epoch(epoch_info, epoch)
        epoch_commissions = get_epoch_commissions(
            client, first_slot, max_slots=epoch_info.slots_in_epoch
        )
        logger.info(
            "Loaded historical commissions",
            epoch=epoch,
            validators=len(epoch_commissions),
        )

    vote_accounts = client.get_vote_accounts()
    return rank_by_credit_score(vote_accounts, epoch, ignore_commission, epoch_commissions)
