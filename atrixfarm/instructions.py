"""Instruction encoders for the farm program.

Each encoder returns a ``solders`` Instruction whose data is the Anchor
sighash followed by the Borsh-encoded arguments, and whose account list
follows the program's account struct order. The account order is ABI:
changing it here without a matching program upgrade produces instructions
the program rejects.
"""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass

from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import ID as SYSTEM_PROGRAM_ID  # type: ignore[import-untyped]
from solders.sysvar import CLOCK, RENT  # type: ignore[import-untyped]
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore[import-untyped]

from atrixfarm.discriminator import instruction_discriminator


def _w(pubkey: Pubkey, signer: bool = False) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=signer, is_writable=True)


def _r(pubkey: Pubkey, signer: bool = False) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=signer, is_writable=False)


def _ix(
    program_id: Pubkey, name: str, args: bytes, accounts: list[AccountMeta]
) -> Instruction:
    return Instruction(program_id, instruction_discriminator(name) + args, accounts)


@dataclass(frozen=True)
class CropAccounts:
    """The per-crop account group shared by every stake/unstake/claim variant."""

    crop_account: Pubkey
    crop_reward_token_account: Pubkey
    harvester_account: Pubkey
    user_reward_token_account: Pubkey

    def metas(self) -> list[AccountMeta]:
        return [
            _w(self.crop_account),
            _w(self.crop_reward_token_account),
            _w(self.harvester_account),
            _w(self.user_reward_token_account),
        ]


@dataclass(frozen=True)
class StakeAccounts:
    """Farm-level accounts of a stake/unstake/claim instruction."""

    farm_account: Pubkey
    staker_account: Pubkey
    farm_stake_token_account: Pubkey
    user_stake_token_account: Pubkey
    authority: Pubkey


# -- Admin --


def create_farm(
    program_id: Pubkey,
    bump: int,
    base: Pubkey,
    farm_account: Pubkey,
    stake_mint: Pubkey,
    farm_stake_token_account: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
) -> Instruction:
    return _ix(
        program_id,
        "create_farm",
        struct.pack("<B", bump),
        [
            _r(base, signer=True),
            _w(farm_account),
            _r(stake_mint),
            _r(farm_stake_token_account),
            _r(authority, signer=True),
            _w(payer, signer=True),
            _r(TOKEN_PROGRAM_ID),
            _r(SYSTEM_PROGRAM_ID),
            _r(RENT),
        ],
    )


def create_crop(
    program_id: Pubkey,
    bump: int,
    farm_account: Pubkey,
    crop_account: Pubkey,
    reward_mint: Pubkey,
    crop_reward_token_account: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
) -> Instruction:
    return _ix(
        program_id,
        "create_crop",
        struct.pack("<B", bump),
        [
            _w(farm_account),
            _w(crop_account),
            _r(reward_mint),
            _r(crop_reward_token_account),
            _r(authority, signer=True),
            _w(payer, signer=True),
            _r(TOKEN_PROGRAM_ID),
            _r(SYSTEM_PROGRAM_ID),
            _r(CLOCK),
            _r(RENT),
        ],
    )


def set_crop_reward_rate(
    program_id: Pubkey,
    rate: int,
    farm_account: Pubkey,
    farm_stake_token_account: Pubkey,
    crop_account: Pubkey,
    authority: Pubkey,
) -> Instruction:
    return _ix(
        program_id,
        "set_crop_reward_rate",
        struct.pack("<Q", rate),
        [
            _r(farm_account),
            _r(farm_stake_token_account),
            _w(crop_account),
            _r(authority, signer=True),
            _r(CLOCK),
        ],
    )


def deposit_crop_rewards(
    program_id: Pubkey,
    amount: int,
    crop_account: Pubkey,
    authority: Pubkey,
    crop_reward_token_account: Pubkey,
    owner_reward_token_account: Pubkey,
) -> Instruction:
    return _ix(
        program_id,
        "deposit_crop_rewards",
        struct.pack("<Q", amount),
        [
            _w(crop_account),
            _r(authority, signer=True),
            _w(crop_reward_token_account),
            _w(owner_reward_token_account),
            _r(TOKEN_PROGRAM_ID),
        ],
    )


# -- User records --


def create_staker(
    program_id: Pubkey,
    bump: int,
    farm_account: Pubkey,
    staker_account: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
) -> Instruction:
    return _ix(
        program_id,
        "create_staker",
        struct.pack("<B", bump),
        [
            _r(farm_account),
            _w(staker_account),
            _r(authority, signer=True),
            _w(payer, signer=True),
            _r(SYSTEM_PROGRAM_ID),
            _r(RENT),
        ],
    )


def create_harvester(
    program_id: Pubkey,
    bump: int,
    crop_account: Pubkey,
    harvester_account: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
) -> Instruction:
    return _ix(
        program_id,
        "create_harvester",
        struct.pack("<B", bump),
        [
            _r(crop_account),
            _w(harvester_account),
            _r(authority, signer=True),
            _w(payer, signer=True),
            _r(SYSTEM_PROGRAM_ID),
            _r(RENT),
        ],
    )


# -- Stake / unstake / claim --


def crop_action(
    program_id: Pubkey,
    name: str,
    amount: int | None,
    stake: StakeAccounts,
    crops: Sequence[CropAccounts],
) -> Instruction:
    """Encode a stake, unstake or claim instruction against one or more crop groups.

    ``amount`` is None for the claim variants, which take no arguments.
    """
    args = b"" if amount is None else struct.pack("<Q", amount)
    accounts = [
        _w(stake.farm_account),
        _w(stake.staker_account),
        _w(stake.farm_stake_token_account),
    ]
    for crop in crops:
        accounts.extend(crop.metas())
    accounts.extend(
        [
            _w(stake.user_stake_token_account),
            _r(stake.authority, signer=True),
            _r(TOKEN_PROGRAM_ID),
            _r(CLOCK),
        ]
    )
    return _ix(program_id, name, args, accounts)
