"""Action variant and track builder tests."""

import struct

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm.actions import (
    Claim,
    DualTrackAction,
    SingleTrackAction,
    Stake,
    Unstake,
    instruction_name,
    parse_action,
    track_action,
)
from atrixfarm.discriminator import instruction_discriminator
from atrixfarm.errors import InvalidAmount, InvalidCropCount
from atrixfarm.instructions import CropAccounts, StakeAccounts

PROGRAM_ID = Pubkey.from_string("BLDDrex4ZSWBgPYaaH6CQCzkJXWfzCiiur9cSFJT8t3x")


def _crop() -> CropAccounts:
    return CropAccounts(*(Pubkey.new_unique() for _ in range(4)))


@pytest.fixture
def stake_accounts() -> StakeAccounts:
    return StakeAccounts(*(Pubkey.new_unique() for _ in range(5)))


class TestParseAction:
    def test_stake(self):
        assert parse_action("stake", 10) == Stake(10)

    def test_unstake(self):
        assert parse_action("unstake", 3) == Unstake(3)

    def test_claim_ignores_amount(self):
        assert parse_action("claim", 99) == Claim()
        assert parse_action("claim").amount is None

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown action"):
            parse_action("harvest", 1)

    def test_stake_requires_amount(self):
        with pytest.raises(InvalidAmount):
            parse_action("stake")

    @pytest.mark.parametrize("amount", [0, -5, 1 << 64, 1.5, True])
    def test_invalid_amounts(self, amount):
        with pytest.raises(InvalidAmount):
            Stake(amount)
        with pytest.raises(InvalidAmount):
            Unstake(amount)


class TestSingleTrack:
    def test_stake_encoding(self, stake_accounts):
        crop = _crop()
        (ix,) = track_action(PROGRAM_ID, stake_accounts, [crop]).build(Stake(10_000))
        assert ix.program_id == PROGRAM_ID
        assert ix.data == instruction_discriminator("stake") + struct.pack("<Q", 10_000)
        keys = [m.pubkey for m in ix.accounts]
        assert keys[:3] == [
            stake_accounts.farm_account,
            stake_accounts.staker_account,
            stake_accounts.farm_stake_token_account,
        ]
        assert keys[3:7] == [
            crop.crop_account,
            crop.crop_reward_token_account,
            crop.harvester_account,
            crop.user_reward_token_account,
        ]
        assert keys[7] == stake_accounts.user_stake_token_account
        assert keys[8] == stake_accounts.authority
        assert len(keys) == 11

    def test_only_authority_signs(self, stake_accounts):
        (ix,) = SingleTrackAction(
            PROGRAM_ID, track_action(PROGRAM_ID, stake_accounts, [_crop()]).accounts
        ).build(Unstake(1))
        signers = [m.pubkey for m in ix.accounts if m.is_signer]
        assert signers == [stake_accounts.authority]

    def test_claim_has_no_args(self, stake_accounts):
        (ix,) = track_action(PROGRAM_ID, stake_accounts, [_crop()]).build(Claim())
        assert ix.data == instruction_discriminator("claim")


class TestDualTrack:
    def test_selected_for_two_crops(self, stake_accounts):
        builder = track_action(PROGRAM_ID, stake_accounts, [_crop(), _crop()])
        assert isinstance(builder, DualTrackAction)

    @pytest.mark.parametrize(
        "action, name",
        [
            (Stake(5), "stake_dual_crop"),
            (Unstake(5), "unstake_dual_crop"),
            (Claim(), "claim_dual_crop"),
        ],
    )
    def test_instruction_names(self, stake_accounts, action, name):
        (ix,) = track_action(PROGRAM_ID, stake_accounts, [_crop(), _crop()]).build(action)
        assert ix.data[:8] == instruction_discriminator(name)

    def test_crop_groups_in_order(self, stake_accounts):
        crop1, crop2 = _crop(), _crop()
        (ix,) = track_action(PROGRAM_ID, stake_accounts, [crop1, crop2]).build(Stake(1))
        keys = [m.pubkey for m in ix.accounts]
        assert keys[3] == crop1.crop_account
        assert keys[7] == crop2.crop_account
        assert len(keys) == 15


@pytest.mark.parametrize("count", [0, 3])
def test_invalid_crop_count(stake_accounts, count):
    with pytest.raises(InvalidCropCount):
        track_action(PROGRAM_ID, stake_accounts, [_crop() for _ in range(count)])


class TestInstructionName:
    @pytest.mark.parametrize(
        "action, single, dual",
        [
            (Stake(3), "stake", "stake_dual_crop"),
            (Unstake(3), "unstake", "unstake_dual_crop"),
            (Claim(), "claim", "claim_dual_crop"),
        ],
    )
    def test_names(self, action, single, dual):
        assert instruction_name(action) == single
        assert instruction_name(action, dual=True) == dual

    def test_unknown_action_type(self):
        with pytest.raises(TypeError, match="unsupported action"):
            instruction_name("stake")  # type: ignore[arg-type]
