"""Historical voting commission lookup from block rewards."""

from typing import Optional, Protocol

import structlog
from solders.pubkey import Pubkey

from votewatch.services.errors import (
    BlockFetchError,
    ChainClientError,
    RPCError,
    ScanExhaustedError,
)
from votewatch.services.schemas.chain import Block, RewardType

logger = structlog.get_logger(__name__)


class BlockSource(Protocol):
    def get_block(self, slot: int, rewards_only: bool = True) -> Block: ...


def is_valid_pubkey(value: str) -> bool:
    try:
        Pubkey.from_string(value)
    except ValueError:
        return False
    return True


def voting_commissions(block: Block) -> dict[str, int]:
    """Map vote account -> commission for the voting rewards paid in ``block``."""
    commissions: dict[str, int] = {}
    for reward in block.rewards or []:
        if reward.reward_type is not RewardType.VOTING or reward.commission is None:
            continue
        if not is_valid_pubkey(reward.pubkey):
            logger.debug("Dropping reward with unparsable pubkey", pubkey=reward.pubkey)
            continue
        commissions[reward.pubkey] = reward.commission
    return commissions


def get_epoch_commissions(
    client: BlockSource,
    first_slot: int,
    max_slots: Optional[int] = None,
) -> dict[str, int]:
    """Read voting commissions from the first produced block at or after ``first_slot``.

    Skipped slots are stepped over one at a time. With ``max_slots`` set, the
    scan gives up with ``ScanExhaustedError`` after that many slots; without it
    the scan only ends on a fetched block or a non-skip error.
    """
    slot = first_slot
    attempts = 0
    while max_slots is None or attempts < max_slots:
        attempts += 1
        logger.info("Fetching block", slot=slot)
        try:
            block = client.get_block(slot, rewards_only=True)
        except ChainClientError as e:
            if isinstance(e, RPCError) and e.is_slot_skipped:
                logger.info("Slot skipped", slot=slot)
                slot += 1
                continue
            raise BlockFetchError(slot, e) from e
        return voting_commissions(block)

    raise ScanExhaustedError(first_slot, attempts)
