"""On-chain account data structures for the farm program.

Accounts are Anchor-framed: an 8-byte discriminator followed by the Borsh
encoding of the fields, little-endian. Deserialization uses
struct.unpack_from and tolerates extra trailing bytes for forward
compatibility.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm.discriminator import (
    DISCRIMINATOR_CROP,
    DISCRIMINATOR_FARM,
    DISCRIMINATOR_HARVESTER,
    DISCRIMINATOR_SIZE,
    DISCRIMINATOR_STAKER,
    validate_discriminator,
)
from atrixfarm.errors import InvalidAccountData

MAX_CROPS = 2


def _pubkey(data: bytes, offset: int) -> Pubkey:
    return Pubkey.from_bytes(data[offset : offset + 32])


def _option_pubkey(data: bytes, offset: int) -> tuple[Pubkey | None, int]:
    """Read a Borsh ``Option<Pubkey>``; returns the value and bytes consumed."""
    if len(data) <= offset:
        raise InvalidAccountData(f"option tag missing at offset {offset}")
    tag = data[offset]
    if tag == 0:
        return None, 1
    if tag != 1:
        raise InvalidAccountData(f"invalid option tag {tag} at offset {offset}")
    if len(data) < offset + 33:
        raise InvalidAccountData(f"option pubkey truncated at offset {offset}")
    return _pubkey(data, offset + 1), 33


def _deserialize(data: bytes, discriminator: bytes, min_size: int) -> bytes:
    """Validate discriminator and return the body bytes."""
    validate_discriminator(data, discriminator)
    body = data[DISCRIMINATOR_SIZE:]
    if len(body) < min_size:
        raise InvalidAccountData(
            f"account data too short: have {len(body)} bytes, need at least {min_size}"
        )
    return body


@dataclass
class Farm:
    base: Pubkey
    authority: Pubkey
    stake_mint: Pubkey
    farm_stake_token_account: Pubkey
    crop_accounts: list[Pubkey | None]  # [Option<Pubkey>; 2]
    bump: int  # u8

    MIN_SIZE = 4 * 32 + MAX_CROPS + 1

    @classmethod
    def from_bytes(cls, data: bytes) -> Farm:
        b = _deserialize(data, DISCRIMINATOR_FARM, cls.MIN_SIZE)
        off = 0
        base = _pubkey(b, off); off += 32
        authority = _pubkey(b, off); off += 32
        stake_mint = _pubkey(b, off); off += 32
        vault = _pubkey(b, off); off += 32
        crops: list[Pubkey | None] = []
        for _ in range(MAX_CROPS):
            crop, n = _option_pubkey(b, off); off += n
            crops.append(crop)
        if len(b) < off + 1:
            raise InvalidAccountData("farm account truncated before bump")
        bump = b[off]
        return cls(base, authority, stake_mint, vault, crops, bump)

    @property
    def populated_crops(self) -> list[Pubkey]:
        """Crop keys in slot order, empty slots skipped."""
        return [c for c in self.crop_accounts if c is not None]


@dataclass
class Crop:
    farm: Pubkey
    authority: Pubkey
    reward_mint: Pubkey
    crop_reward_token_account: Pubkey
    reward_rate: int  # u64
    bump: int  # u8

    STRUCT_SIZE = 4 * 32 + 8 + 1

    @classmethod
    def from_bytes(cls, data: bytes) -> Crop:
        b = _deserialize(data, DISCRIMINATOR_CROP, cls.STRUCT_SIZE)
        farm = _pubkey(b, 0)
        authority = _pubkey(b, 32)
        reward_mint = _pubkey(b, 64)
        vault = _pubkey(b, 96)
        rate, bump = struct.unpack_from("<QB", b, 128)
        return cls(farm, authority, reward_mint, vault, rate, bump)


@dataclass
class Staker:
    farm: Pubkey
    authority: Pubkey
    staked_amount: int  # u64
    bump: int  # u8

    STRUCT_SIZE = 2 * 32 + 8 + 1

    @classmethod
    def from_bytes(cls, data: bytes) -> Staker:
        b = _deserialize(data, DISCRIMINATOR_STAKER, cls.STRUCT_SIZE)
        amount, bump = struct.unpack_from("<QB", b, 64)
        return cls(_pubkey(b, 0), _pubkey(b, 32), amount, bump)


@dataclass
class Harvester:
    crop: Pubkey
    authority: Pubkey
    bump: int  # u8

    STRUCT_SIZE = 2 * 32 + 1

    @classmethod
    def from_bytes(cls, data: bytes) -> Harvester:
        b = _deserialize(data, DISCRIMINATOR_HARVESTER, cls.STRUCT_SIZE)
        return cls(_pubkey(b, 0), _pubkey(b, 32), b[64])
