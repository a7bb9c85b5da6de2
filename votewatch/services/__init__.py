"""Business logic services for votewatch."""

from votewatch.services.bandwidth import LatitudeClient, LatitudeConfig, get_date_range
from votewatch.services.chain_client import ChainClient
from votewatch.services.commissions import get_epoch_commissions
from votewatch.services.credit_score import get_validators_by_credit_score, rank_by_credit_score
from votewatch.services.epoch import epoch_slot_range
from votewatch.services.validator_status import compute_validator_status, get_validator_status

__all__ = [
    "ChainClient",
    "LatitudeClient",
    "LatitudeConfig",
    "compute_validator_status",
    "epoch_slot_range",
    "get_date_range",
    "get_epoch_commissions",
    "get_validator_status",
    "get_validators_by_credit_score",
    "rank_by_credit_score",
]
