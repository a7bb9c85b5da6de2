"""Tests for votewatch.services.validator_status."""

import pytest

from conftest import NODE_A, NODE_B, VOTE_A, VOTE_B, FakeChainClient, make_account
from votewatch.services.errors import FutureEpochError, RPCError
from votewatch.services.schemas.chain import BlockProduction, EpochInfo, VoteAccounts
from votewatch.services.schemas.results import ValidatorStatus
from votewatch.services.validator_status import (
    LAMPORTS_PER_SOL,
    compute_validator_status,
    get_validator_status,
    skip_rate,
)

ACCOUNT_A = make_account(
    vote_pubkey=VOTE_A,
    node_pubkey=NODE_A,
    activated_stake=1_500 * LAMPORTS_PER_SOL + 999_999_999,
    last_vote=4248,
    root_slot=4216,
    commission=8,
    epoch_credits=[(8, 1000, 600), (9, 1500, 1000), (10, 1700, 1500)],
)


def _client(**kwargs: object) -> FakeChainClient:
    defaults: dict[str, object] = {
        "vote_accounts": VoteAccounts(current=[ACCOUNT_A]),
        "production": {NODE_A: BlockProduction(leader_slots=40, blocks_produced=38)},
        "leader_schedule": {NODE_A: list(range(0, 400, 5))},
    }
    defaults.update(kwargs)
    return FakeChainClient(**defaults)  # type: ignore[arg-type]


class TestCurrentEpoch:
    def test_full_status(self, epoch_info: EpochInfo) -> None:
        client = _client()
        status = get_validator_status(client, VOTE_A, epoch_info, 10)

        assert status == ValidatorStatus(
            epoch=10,
            epoch_progress=62,
            credits=200,
            vote_distance=32,
            delegated_stake=1_500,
            leader_slots_count=80,
            leader_slots_elapsed=40,
            blocks_produced=38,
            skip_rate=5.0,
            is_delinquent=False,
        )
        assert client.production_requests == [(NODE_A, 4000, 4250)]
        assert client.schedule_requests == [(4000, NODE_A)]

    def test_unknown_validator_is_none(self, epoch_info: EpochInfo) -> None:
        assert get_validator_status(_client(), VOTE_B, epoch_info, 10) is None


class TestPastEpoch:
    def test_progress_is_complete(self, epoch_info: EpochInfo) -> None:
        status = get_validator_status(_client(), VOTE_A, epoch_info, 9)
        assert status is not None
        assert status.epoch_progress == 100
        assert status.credits == 500

    def test_queries_full_epoch_window(self, epoch_info: EpochInfo) -> None:
        client = _client()
        get_validator_status(client, VOTE_A, epoch_info, 8)
        assert client.production_requests == [(NODE_A, 3200, 3600)]

    def test_no_credits_entry(self, epoch_info: EpochInfo) -> None:
        status = get_validator_status(_client(), VOTE_A, epoch_info, 3)
        assert status is not None
        assert status.credits == 0

    def test_future_epoch_rejected(self, epoch_info: EpochInfo) -> None:
        with pytest.raises(FutureEpochError):
            get_validator_status(_client(), VOTE_A, epoch_info, 11)


class TestDelinquency:
    def test_delinquent_only(self, epoch_info: EpochInfo) -> None:
        client = _client(vote_accounts=VoteAccounts(delinquent=[ACCOUNT_A]))
        status = get_validator_status(client, VOTE_A, epoch_info, 10)
        assert status is not None
        assert status.is_delinquent is True

    def test_current_takes_precedence(self, epoch_info: EpochInfo) -> None:
        accounts = VoteAccounts(current=[ACCOUNT_A], delinquent=[ACCOUNT_A])
        status = compute_validator_status(_client(), accounts, epoch_info, 10, VOTE_A)
        assert status is not None
        assert status.is_delinquent is False

    def test_picks_matching_account(self, epoch_info: EpochInfo) -> None:
        other = make_account(vote_pubkey=VOTE_B, node_pubkey=NODE_B)
        accounts = VoteAccounts(current=[other], delinquent=[ACCOUNT_A])
        status = compute_validator_status(_client(), accounts, epoch_info, 10, VOTE_A)
        assert status is not None
        assert status.is_delinquent is True
        assert status.delegated_stake == 1_500


class TestBlockProduction:
    def test_identity_missing_from_production(self, epoch_info: EpochInfo) -> None:
        status = get_validator_status(_client(production={}), VOTE_A, epoch_info, 10)
        assert status is not None
        assert (status.leader_slots_elapsed, status.blocks_produced, status.skip_rate) == (
            0,
            0,
            0.0,
        )

    def test_zero_leader_slots_has_zero_skip_rate(self) -> None:
        assert skip_rate(BlockProduction(leader_slots=0, blocks_produced=0)) == 0.0

    def test_skip_rate_fraction(self) -> None:
        assert skip_rate(BlockProduction(leader_slots=3, blocks_produced=2)) == pytest.approx(
            33.3333, rel=1e-4
        )

    def test_no_leader_schedule(self, epoch_info: EpochInfo) -> None:
        status = get_validator_status(_client(leader_schedule=None), VOTE_A, epoch_info, 10)
        assert status is not None
        assert status.leader_slots_count == 0

    def test_identity_absent_from_schedule(self, epoch_info: EpochInfo) -> None:
        client = _client(leader_schedule={NODE_B: [1, 2, 3]})
        status = get_validator_status(client, VOTE_A, epoch_info, 10)
        assert status is not None
        assert status.leader_slots_count == 0

    def test_rpc_error_propagates(self, epoch_info: EpochInfo) -> None:
        class FailingClient(FakeChainClient):
            def get_block_production(self, identity, first_slot, last_slot):  # type: ignore[no-untyped-def]
                raise RPCError("node is behind", code=-32005, method="getBlockProduction")

        client = FailingClient(vote_accounts=VoteAccounts(current=[ACCOUNT_A]))
        with pytest.raises(RPCError) as exc_info:
            get_validator_status(client, VOTE_A, epoch_info, 10)
        assert exc_info.value.code == -32005


class TestVoteDistance:
    def test_last_vote_behind_root_is_zero(self, epoch_info: EpochInfo) -> None:
        account = make_account(last_vote=100, root_slot=150)
        status = compute_validator_status(
            _client(), VoteAccounts(current=[account]), epoch_info, 10, VOTE_A
        )
        assert status is not None
        assert status.vote_distance == 0


class TestSummary:
    def test_summary_lines(self) -> None:
        status = ValidatorStatus(
            epoch=10,
            epoch_progress=62,
            credits=200,
            vote_distance=32,
            delegated_stake=1_500,
            leader_slots_count=80,
            leader_slots_elapsed=40,
            blocks_produced=38,
            skip_rate=5.0,
            is_delinquent=True,
        )
        text = status.summary()
        assert "\tEpoch 10 is 62% over\n" in text
        assert "\tThe node is !! delinquent !!\n" in text
        assert "\t38 produced out of 40\n" in text
        assert "\t5.00% skip rate\n" in text
