"""Shared exception hierarchy for votewatch services."""

# JSON-RPC server error codes reported for slots without a block.
SLOT_SKIPPED = -32007
LONG_TERM_STORAGE_SLOT_SKIPPED = -32009

# ── Chain ─────────────────────────────────────────────────────────────────────


class ChainClientError(Exception):
    """Base exception for chain client errors."""


class RPCError(ChainClientError):
    """RPC call failed."""

    def __init__(self, message: str, code: int | None = None, method: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.method = method

    @property
    def is_slot_skipped(self) -> bool:
        return self.code in (SLOT_SKIPPED, LONG_TERM_STORAGE_SLOT_SKIPPED)


class ChainConnectionError(ChainClientError):
    """Cannot reach the RPC endpoint."""


# ── Epochs / blocks ───────────────────────────────────────────────────────────


class EpochError(Exception):
    """Base exception for epoch window errors."""


class FutureEpochError(EpochError):
    """Requested epoch has not been reached yet."""

    def __init__(self, epoch: int, current_epoch: int):
        super().__init__(f"Future epoch, {epoch}, requested (current epoch is {current_epoch})")
        self.epoch = epoch
        self.current_epoch = current_epoch


class BlockFetchError(ChainClientError):
    """A block could not be fetched for a reason other than a skipped slot."""

    def __init__(self, slot: int, cause: Exception):
        super().__init__(f"Failed to fetch the block for slot {slot}: {cause}")
        self.slot = slot
        self.cause = cause


class ScanExhaustedError(ChainClientError):
    """Every slot in the scanned range was skipped."""

    def __init__(self, first_slot: int, attempts: int):
        super().__init__(
            f"No block found in {attempts} slots starting at slot {first_slot}"
        )
        self.first_slot = first_slot
        self.attempts = attempts


# ── Credit score ──────────────────────────────────────────────────────────────


class CreditScoreError(Exception):
    """Base exception for credit score ranking errors."""


class MissingCommissionError(CreditScoreError):
    """Historical commission map has no entry for a ranked vote account."""

    def __init__(self, vote_pubkey: str, epoch: int):
        super().__init__(
            f"No voting commission recorded for {vote_pubkey} in epoch {epoch}"
        )
        self.vote_pubkey = vote_pubkey
        self.epoch = epoch


# ── Bandwidth ─────────────────────────────────────────────────────────────────


class BandwidthError(Exception):
    """Base exception for bandwidth quota errors."""


class DateConstructionError(BandwidthError):
    """Billing cycle start day does not exist in the target month."""

    def __init__(self, year: int, month: int, day: int):
        super().__init__(f"Day {day} does not exist in {year:04d}-{month:02d}")
        self.year = year
        self.month = month
        self.day = day


class QuotaAPIError(BandwidthError):
    """Usage API request failed."""
