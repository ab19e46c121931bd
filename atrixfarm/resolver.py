"""Resolution of every account a user action touches.

The resolver only reads and derives. Creation instructions for missing
user reward token accounts are handed back as ``pending`` so the caller
can place them ahead of the action instruction.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm.instructions import CropAccounts, StakeAccounts
from atrixfarm.logging import get_logger
from atrixfarm.pda import derive_crop_pda, derive_harvester_pda, derive_staker_pda
from atrixfarm.token_accounts import TokenAccounts

logger = get_logger("resolver")


@dataclass
class ResolvedCrops:
    crops: list[CropAccounts]
    pending: list[Instruction] = field(default_factory=list)


class ResourceResolver:
    def __init__(self, program_id: Pubkey, token_accounts: TokenAccounts) -> None:
        self._program_id = program_id
        self._tokens = token_accounts

    def resolve_farm(
        self,
        farm_key: Pubkey,
        farm_stake_token_account: Pubkey,
        authority: Pubkey,
        user_stake_token_account: Pubkey,
    ) -> StakeAccounts:
        staker, _ = derive_staker_pda(self._program_id, farm_key, authority)
        return StakeAccounts(
            farm_account=farm_key,
            staker_account=staker,
            farm_stake_token_account=farm_stake_token_account,
            user_stake_token_account=user_stake_token_account,
            authority=authority,
        )

    def resolve_crop(
        self,
        farm_key: Pubkey,
        reward_mint: Pubkey,
        authority: Pubkey,
        payer: Pubkey | None = None,
    ) -> tuple[CropAccounts, Instruction | None]:
        crop, _ = derive_crop_pda(self._program_id, farm_key, reward_mint)
        harvester, _ = derive_harvester_pda(self._program_id, crop, authority)
        user_reward, create_ix = self._tokens.resolve_or_create(
            authority, reward_mint, payer
        )
        accounts = CropAccounts(
            crop_account=crop,
            crop_reward_token_account=self._tokens.address(crop, reward_mint),
            harvester_account=harvester,
            user_reward_token_account=user_reward,
        )
        logger.debug("resolved crop %s for reward mint %s", crop, reward_mint)
        return accounts, create_ix

    def resolve_crops(
        self,
        farm_key: Pubkey,
        reward_mints: Sequence[Pubkey],
        authority: Pubkey,
        payer: Pubkey | None = None,
    ) -> ResolvedCrops:
        """Resolve crop groups in the order of ``reward_mints``."""
        resolved = ResolvedCrops(crops=[])
        for mint in reward_mints:
            accounts, create_ix = self.resolve_crop(farm_key, mint, authority, payer)
            resolved.crops.append(accounts)
            if create_ix is not None:
                resolved.pending.append(create_ix)
        return resolved
