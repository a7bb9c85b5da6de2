"""Epoch slot window resolution."""

from votewatch.services.errors import FutureEpochError
from votewatch.services.schemas.chain import EpochInfo


def first_slot_in_epoch(epoch_info: EpochInfo, epoch: int) -> int:
    if epoch > epoch_info.epoch:
        raise FutureEpochError(epoch, epoch_info.epoch)
    epoch_start = max(epoch_info.absolute_slot - epoch_info.slot_index, 0)
    offset = (epoch_info.epoch - epoch) * epoch_info.slots_in_epoch
    return max(epoch_start - offset, 0)


def epoch_slot_range(epoch_info: EpochInfo, epoch: int) -> tuple[int, int]:
    """Return ``(first_slot, last_slot)`` for ``epoch``.

    ``last_slot`` is clamped to the latest observed slot, so an epoch still in
    progress is never queried past the chain tip.
    """
    first_slot = first_slot_in_epoch(epoch_info, epoch)
    last_slot = min(first_slot + epoch_info.slots_in_epoch, epoch_info.absolute_slot)
    return first_slot, last_slot
