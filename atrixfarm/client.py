"""RPC-backed client for the farm program.

Besides the account fetchers and the admin builders, :meth:`Client.build_action`
assembles a complete user transaction: it checks which per-user records
already exist, queues creation of the missing ones, wraps SOL when the farm
stakes the native mint, and appends the single- or dual-crop action.
Calling it again after a partially landed transaction is safe, because
every creation step is guarded by an existence check.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import nullcontext
from typing import Protocol

from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.rpc.responses import (  # type: ignore[import-untyped]
    GetAccountInfoResp,
    GetMinimumBalanceForRentExemptionResp,
    GetMultipleAccountsResp,
)
from spl.token.constants import ACCOUNT_LEN, WRAPPED_SOL_MINT  # type: ignore[import-untyped]

from atrixfarm import instructions
from atrixfarm.actions import Action, parse_action, track_action
from atrixfarm.config import PROGRAM_ID, RPC_URLS
from atrixfarm.errors import (
    CropNotFound,
    FarmNotFound,
    InvalidAccountData,
    InvalidCropCount,
)
from atrixfarm.logging import get_logger
from atrixfarm.pda import (
    derive_crop_pda,
    derive_farm_pda,
    derive_harvester_pda,
    derive_staker_pda,
)
from atrixfarm.resolver import ResourceResolver
from atrixfarm.rpc import new_rpc_client
from atrixfarm.state import Crop, Farm, Harvester, Staker
from atrixfarm.token_accounts import TokenAccounts, WrappedNative
from atrixfarm.transaction import BuiltTransaction, TransactionEnvelope

logger = get_logger("client")


class SolanaClient(Protocol):
    def get_account_info(self, pubkey: Pubkey) -> GetAccountInfoResp: ...

    def get_multiple_accounts(
        self, pubkeys: list[Pubkey]
    ) -> GetMultipleAccountsResp: ...

    def get_minimum_balance_for_rent_exemption(
        self, usize: int
    ) -> GetMinimumBalanceForRentExemptionResp: ...


class Client:
    """Transaction builder and account reader for the farm program."""

    def __init__(self, solana_rpc: SolanaClient, program_id: Pubkey) -> None:
        self._solana_rpc = solana_rpc
        self._program_id = program_id
        self._tokens = TokenAccounts(solana_rpc)
        self._resolver = ResourceResolver(program_id, self._tokens)

    @classmethod
    def from_env(cls, env: str) -> Client:
        """Create a client for one of the clusters in ``RPC_URLS``."""
        if env not in RPC_URLS:
            raise ValueError(f"unknown environment {env!r}, expected one of {sorted(RPC_URLS)}")
        return cls(new_rpc_client(RPC_URLS[env]), Pubkey.from_string(PROGRAM_ID))

    @classmethod
    def mainnet_beta(cls) -> Client:
        return cls.from_env("mainnet-beta")

    @classmethod
    def devnet(cls) -> Client:
        return cls.from_env("devnet")

    @classmethod
    def localnet(cls) -> Client:
        return cls.from_env("localnet")

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    # -- Accounts --

    def fetch_farm(self, farm_key: Pubkey) -> Farm | None:
        data = self._fetch_account_data(farm_key)
        return None if data is None else Farm.from_bytes(data)

    def fetch_crop(self, crop_key: Pubkey) -> Crop | None:
        data = self._fetch_account_data(crop_key)
        return None if data is None else Crop.from_bytes(data)

    def fetch_staker(self, staker_key: Pubkey) -> Staker | None:
        data = self._fetch_account_data(staker_key)
        return None if data is None else Staker.from_bytes(data)

    def fetch_harvester(self, harvester_key: Pubkey) -> Harvester | None:
        data = self._fetch_account_data(harvester_key)
        return None if data is None else Harvester.from_bytes(data)

    # -- Admin --

    def create_farm(
        self, stake_mint: Pubkey, authority: Pubkey
    ) -> tuple[Pubkey, Pubkey, TransactionEnvelope]:
        """Build a farm creation under a fresh base key.

        Returns the farm address, its stake vault and the envelope; the base
        keypair is carried in the envelope's signers.
        """
        base = Keypair()
        farm_account, bump = derive_farm_pda(self._program_id, base.pubkey())
        vault, create_vault = self._tokens.resolve_or_create(
            farm_account, stake_mint, authority
        )
        txe = TransactionEnvelope(signers=[base])
        if create_vault is not None:
            txe.add(create_vault)
        txe.add(
            instructions.create_farm(
                self._program_id,
                bump,
                base=base.pubkey(),
                farm_account=farm_account,
                stake_mint=stake_mint,
                farm_stake_token_account=vault,
                authority=authority,
                payer=authority,
            )
        )
        return farm_account, vault, txe

    def create_crop(
        self, farm_key: Pubkey, reward_mint: Pubkey, authority: Pubkey
    ) -> tuple[Pubkey, Pubkey, TransactionEnvelope]:
        crop_account, bump = derive_crop_pda(self._program_id, farm_key, reward_mint)
        vault, create_vault = self._tokens.resolve_or_create(
            crop_account, reward_mint, authority
        )
        txe = TransactionEnvelope()
        if create_vault is not None:
            txe.add(create_vault)
        txe.add(
            instructions.create_crop(
                self._program_id,
                bump,
                farm_account=farm_key,
                crop_account=crop_account,
                reward_mint=reward_mint,
                crop_reward_token_account=vault,
                authority=authority,
                payer=authority,
            )
        )
        return crop_account, vault, txe

    def set_crop_reward_rate(
        self,
        farm_key: Pubkey,
        crop_key: Pubkey,
        authority: Pubkey,
        rate: int,
        farm_stake_token_account: Pubkey | None = None,
    ) -> TransactionEnvelope:
        if farm_stake_token_account is None:
            farm_stake_token_account = self._require_farm(farm_key).farm_stake_token_account
        return TransactionEnvelope().add(
            instructions.set_crop_reward_rate(
                self._program_id,
                rate,
                farm_account=farm_key,
                farm_stake_token_account=farm_stake_token_account,
                crop_account=crop_key,
                authority=authority,
            )
        )

    def deposit_crop_rewards(
        self,
        crop_key: Pubkey,
        authority: Pubkey,
        amount: int,
        owner_reward_token_account: Pubkey,
        crop_reward_token_account: Pubkey | None = None,
    ) -> TransactionEnvelope:
        if crop_reward_token_account is None:
            crop = self.fetch_crop(crop_key)
            if crop is None:
                raise CropNotFound(crop_key)
            crop_reward_token_account = crop.crop_reward_token_account
        return TransactionEnvelope().add(
            instructions.deposit_crop_rewards(
                self._program_id,
                amount,
                crop_account=crop_key,
                authority=authority,
                crop_reward_token_account=crop_reward_token_account,
                owner_reward_token_account=owner_reward_token_account,
            )
        )

    # -- User records --

    def create_staker(
        self, farm_key: Pubkey, authority: Pubkey, payer: Pubkey
    ) -> tuple[Pubkey, TransactionEnvelope]:
        staker_key, bump = derive_staker_pda(self._program_id, farm_key, authority)
        txe = TransactionEnvelope().add(
            instructions.create_staker(
                self._program_id, bump, farm_key, staker_key, authority, payer
            )
        )
        return staker_key, txe

    def create_harvester(
        self, crop_key: Pubkey, authority: Pubkey, payer: Pubkey
    ) -> tuple[Pubkey, TransactionEnvelope]:
        harvester_key, bump = derive_harvester_pda(self._program_id, crop_key, authority)
        txe = TransactionEnvelope().add(
            instructions.create_harvester(
                self._program_id, bump, crop_key, harvester_key, authority, payer
            )
        )
        return harvester_key, txe

    # -- Full action --

    def build_action(
        self,
        farm_key: Pubkey,
        authority: Pubkey,
        payer: Pubkey,
        action: Action | str,
        amount: int | None = None,
        user_stake_token_account: Pubkey | None = None,
    ) -> BuiltTransaction:
        """Assemble a stake, unstake or claim with every prerequisite it needs.

        Instruction order: stake token account (or wrapped SOL open),
        staker creation, harvester creations, user reward token accounts,
        the action itself, and the wrapped SOL close when SOL was wrapped.
        """
        if isinstance(action, str):
            action = parse_action(action, amount)

        farm = self._require_farm(farm_key)
        crop_keys = farm.populated_crops
        if len(crop_keys) not in (1, 2):
            raise InvalidCropCount(farm_key, len(crop_keys))

        txe = TransactionEnvelope()
        queued_accounts: set[Pubkey] = set()
        wrapped: WrappedNative | None = None
        if user_stake_token_account is None:
            if farm.stake_mint == WRAPPED_SOL_MINT:
                wrapped = WrappedNative(
                    txe.instructions,
                    authority,
                    action.amount or 0,
                    self._rent_exemption(ACCOUNT_LEN),
                )
                txe.signers.append(wrapped.keypair)
                user_stake_token_account = wrapped.address
            else:
                user_stake_token_account, create_ata = self._tokens.resolve_or_create(
                    authority, farm.stake_mint, payer
                )
                if create_ata is not None:
                    queued_accounts.add(user_stake_token_account)
                    txe.add(create_ata)

        with wrapped if wrapped is not None else nullcontext():
            self._queue_user_records(txe, farm_key, crop_keys, authority, payer)
            crops = self._fetch_crops(crop_keys)
            resolved = self._resolver.resolve_crops(
                farm_key, [c.reward_mint for c in crops], authority, payer
            )
            for slot_key, accounts in zip(crop_keys, resolved.crops):
                if accounts.crop_account != slot_key:
                    raise InvalidAccountData(
                        f"farm {farm_key} lists crop {slot_key} but its reward mint "
                        f"derives {accounts.crop_account}"
                    )
            for create_ix in resolved.pending:
                # A reward mint equal to the stake mint shares its token account.
                target = create_ix.accounts[1].pubkey
                if target not in queued_accounts:
                    queued_accounts.add(target)
                    txe.add(create_ix)
            stake = self._resolver.resolve_farm(
                farm_key,
                farm.farm_stake_token_account,
                authority,
                user_stake_token_account,
            )
            txe.add(*track_action(self._program_id, stake, resolved.crops).build(action))

        logger.debug(
            "built %s for farm %s with %d instructions",
            action.name, farm_key, len(txe.instructions),
        )
        return txe.build(payer)

    # -- Internal helpers --

    def _queue_user_records(
        self,
        txe: TransactionEnvelope,
        farm_key: Pubkey,
        crop_keys: Sequence[Pubkey],
        authority: Pubkey,
        payer: Pubkey,
    ) -> None:
        """Append creation of the staker and harvesters that do not exist yet."""
        staker_key, staker_bump = derive_staker_pda(self._program_id, farm_key, authority)
        harvesters = [
            (crop_key, *derive_harvester_pda(self._program_id, crop_key, authority))
            for crop_key in crop_keys
        ]
        existing = self._fetch_many([staker_key] + [h for _, h, _ in harvesters])

        if existing[0] is None:
            logger.info("staker %s missing, queueing creation", staker_key)
            txe.add(
                instructions.create_staker(
                    self._program_id, staker_bump, farm_key, staker_key, authority, payer
                )
            )
        for (crop_key, harvester_key, bump), data in zip(harvesters, existing[1:]):
            if data is None:
                logger.info("harvester %s for crop %s missing, queueing creation", harvester_key, crop_key)
                txe.add(
                    instructions.create_harvester(
                        self._program_id, bump, crop_key, harvester_key, authority, payer
                    )
                )

    def _fetch_crops(self, crop_keys: Sequence[Pubkey]) -> list[Crop]:
        crops = []
        for key, data in zip(crop_keys, self._fetch_many(list(crop_keys))):
            if data is None:
                raise CropNotFound(key)
            crops.append(Crop.from_bytes(data))
        return crops

    def _require_farm(self, farm_key: Pubkey) -> Farm:
        farm = self.fetch_farm(farm_key)
        if farm is None:
            raise FarmNotFound(farm_key)
        return farm

    def _rent_exemption(self, size: int) -> int:
        return self._solana_rpc.get_minimum_balance_for_rent_exemption(size).value

    def _fetch_account_data(self, addr: Pubkey) -> bytes | None:
        resp = self._solana_rpc.get_account_info(addr)
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    def _fetch_many(self, addrs: list[Pubkey]) -> list[bytes | None]:
        logger.debug("fetching %d accounts", len(addrs))
        resp = self._solana_rpc.get_multiple_accounts(addrs)
        return [None if acct is None else bytes(acct.data) for acct in resp.value]
