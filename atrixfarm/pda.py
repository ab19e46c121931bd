"""PDA derivation for farm program accounts.

Seed order is part of the program's account validation and must not be
rearranged: a reordered seed list derives a different, silently wrong
address.
"""

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm.derivation import derive_address

SEED_FARM = b"atrix-farm"
SEED_CROP = b"atrix-farm-crop"
SEED_STAKER = b"atrix-farm-stake"
SEED_HARVESTER = b"atrix-farm-harvester"


def derive_farm_pda(program_id: Pubkey, base: Pubkey) -> tuple[Pubkey, int]:
    return derive_address([SEED_FARM, bytes(base)], program_id)


def derive_crop_pda(
    program_id: Pubkey, farm: Pubkey, reward_mint: Pubkey
) -> tuple[Pubkey, int]:
    return derive_address(
        [SEED_CROP, bytes(farm), bytes(reward_mint)], program_id
    )


def derive_staker_pda(
    program_id: Pubkey, farm: Pubkey, authority: Pubkey
) -> tuple[Pubkey, int]:
    return derive_address(
        [SEED_STAKER, bytes(authority), bytes(farm)], program_id
    )


def derive_harvester_pda(
    program_id: Pubkey, crop: Pubkey, authority: Pubkey
) -> tuple[Pubkey, int]:
    return derive_address(
        [SEED_HARVESTER, bytes(authority), bytes(crop)], program_id
    )
