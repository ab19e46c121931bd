"""Shared fixtures: an in-memory RPC and account encoders."""

from __future__ import annotations

import struct
from types import SimpleNamespace

import pytest
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID  # type: ignore[import-untyped]

from atrixfarm.client import Client
from atrixfarm.discriminator import (
    DISCRIMINATOR_CROP,
    DISCRIMINATOR_FARM,
    DISCRIMINATOR_HARVESTER,
    DISCRIMINATOR_STAKER,
    instruction_discriminator,
)
from atrixfarm.pda import derive_crop_pda, derive_farm_pda
from atrixfarm.state import MAX_CROPS
from atrixfarm.token_accounts import TokenAccounts

PROGRAM_ID = Pubkey.from_string("BLDDrex4ZSWBgPYaaH6CQCzkJXWfzCiiur9cSFJT8t3x")
RENT_EXEMPT_TOKEN_ACCOUNT = 2_039_280


def encode_option(key: Pubkey | None) -> bytes:
    return b"\x00" if key is None else b"\x01" + bytes(key)


def encode_farm(
    base: Pubkey,
    authority: Pubkey,
    stake_mint: Pubkey,
    vault: Pubkey,
    crops: list[Pubkey | None],
    bump: int = 255,
) -> bytes:
    slots = list(crops) + [None] * (MAX_CROPS - len(crops))
    return (
        DISCRIMINATOR_FARM
        + bytes(base)
        + bytes(authority)
        + bytes(stake_mint)
        + bytes(vault)
        + b"".join(encode_option(c) for c in slots)
        + bytes([bump])
    )


def encode_crop(
    farm: Pubkey,
    authority: Pubkey,
    reward_mint: Pubkey,
    vault: Pubkey,
    rate: int = 0,
    bump: int = 255,
) -> bytes:
    return (
        DISCRIMINATOR_CROP
        + bytes(farm)
        + bytes(authority)
        + bytes(reward_mint)
        + bytes(vault)
        + struct.pack("<QB", rate, bump)
    )


def encode_staker(farm: Pubkey, authority: Pubkey, amount: int = 0, bump: int = 255) -> bytes:
    return DISCRIMINATOR_STAKER + bytes(farm) + bytes(authority) + struct.pack("<QB", amount, bump)


def encode_harvester(crop: Pubkey, authority: Pubkey, bump: int = 255) -> bytes:
    return DISCRIMINATOR_HARVESTER + bytes(crop) + bytes(authority) + bytes([bump])


class FakeRpc:
    """Serves account data from a dict, shaped like solana-py responses."""

    def __init__(self) -> None:
        self.accounts: dict[Pubkey, bytes] = {}
        self.calls: list[tuple[str, object]] = []

    def _account(self, pubkey: Pubkey):
        data = self.accounts.get(pubkey)
        return None if data is None else SimpleNamespace(data=data)

    def get_account_info(self, pubkey: Pubkey):
        self.calls.append(("get_account_info", pubkey))
        return SimpleNamespace(value=self._account(pubkey))

    def get_multiple_accounts(self, pubkeys: list[Pubkey]):
        self.calls.append(("get_multiple_accounts", list(pubkeys)))
        return SimpleNamespace(value=[self._account(p) for p in pubkeys])

    def get_minimum_balance_for_rent_exemption(self, usize: int):
        self.calls.append(("get_minimum_balance_for_rent_exemption", usize))
        return SimpleNamespace(value=RENT_EXEMPT_TOKEN_ACCOUNT)

    def land(self, instructions: list[Instruction]) -> None:
        """Apply the account creations of a landed transaction."""
        create_staker = instruction_discriminator("create_staker")
        create_harvester = instruction_discriminator("create_harvester")
        for ix in instructions:
            keys = [m.pubkey for m in ix.accounts]
            if ix.program_id == ASSOCIATED_TOKEN_PROGRAM_ID:
                self.accounts[keys[1]] = b"\x00" * 165
            elif ix.program_id == PROGRAM_ID and ix.data[:8] == create_staker:
                self.accounts[keys[1]] = encode_staker(keys[0], keys[2])
            elif ix.program_id == PROGRAM_ID and ix.data[:8] == create_harvester:
                self.accounts[keys[1]] = encode_harvester(keys[0], keys[2])


class FarmWorld:
    """A farm with its crops written into a FakeRpc."""

    def __init__(
        self,
        rpc: FakeRpc,
        stake_mint: Pubkey,
        reward_mints: list[Pubkey | None],
        vault: Pubkey | None = None,
    ):
        self.rpc = rpc
        self.stake_mint = stake_mint
        self.admin = Pubkey.new_unique()
        self.base = Keypair().pubkey()
        self.farm_key, bump = derive_farm_pda(PROGRAM_ID, self.base)
        self.crop_keys: list[Pubkey | None] = []
        for mint in reward_mints:
            if mint is None:
                self.crop_keys.append(None)
                continue
            crop_key, crop_bump = derive_crop_pda(PROGRAM_ID, self.farm_key, mint)
            rpc.accounts[crop_key] = encode_crop(
                self.farm_key,
                self.admin,
                mint,
                TokenAccounts.address(crop_key, mint),
                rate=100,
                bump=crop_bump,
            )
            self.crop_keys.append(crop_key)
        rpc.accounts[self.farm_key] = encode_farm(
            self.base,
            self.admin,
            stake_mint,
            vault if vault is not None else TokenAccounts.address(self.farm_key, stake_mint),
            self.crop_keys,
            bump,
        )

    def give_token_account(self, owner: Pubkey, mint: Pubkey) -> Pubkey:
        addr = TokenAccounts.address(owner, mint)
        self.rpc.accounts[addr] = b"\x00" * 165
        return addr


@pytest.fixture
def rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture
def client(rpc: FakeRpc) -> Client:
    return Client(rpc, PROGRAM_ID)


@pytest.fixture
def user() -> Pubkey:
    return Keypair().pubkey()


@pytest.fixture
def payer() -> Pubkey:
    return Keypair().pubkey()
