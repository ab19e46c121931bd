"""SPL token account helpers: associated token accounts and wrapped SOL."""

from __future__ import annotations

from types import TracebackType
from typing import Protocol

from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.rpc.responses import GetAccountInfoResp  # type: ignore[import-untyped]
from solders.system_program import CreateAccountParams, create_account  # type: ignore[import-untyped]
from spl.token.constants import ACCOUNT_LEN, TOKEN_PROGRAM_ID, WRAPPED_SOL_MINT  # type: ignore[import-untyped]
from spl.token.instructions import (  # type: ignore[import-untyped]
    CloseAccountParams,
    InitializeAccountParams,
    close_account,
    create_associated_token_account,
    get_associated_token_address,
    initialize_account,
)

from atrixfarm.logging import get_logger

logger = get_logger("token")


class AccountReader(Protocol):
    def get_account_info(self, pubkey: Pubkey) -> GetAccountInfoResp: ...


class TokenAccounts:
    """Resolves associated token accounts, emitting a creation instruction when absent."""

    def __init__(self, rpc: AccountReader) -> None:
        self._rpc = rpc

    @staticmethod
    def address(owner: Pubkey, mint: Pubkey) -> Pubkey:
        return get_associated_token_address(owner, mint)

    def resolve_or_create(
        self, owner: Pubkey, mint: Pubkey, payer: Pubkey | None = None
    ) -> tuple[Pubkey, Instruction | None]:
        """Return the ATA for (owner, mint) and, if it does not exist yet, its creation instruction."""
        address = self.address(owner, mint)
        resp = self._rpc.get_account_info(address)
        if resp.value is not None:
            return address, None
        logger.info("token account %s for mint %s missing, queueing creation", address, mint)
        ix = create_associated_token_account(payer or owner, owner, mint)
        return address, ix


class WrappedNative:
    """A single-use wrapped SOL token account living for one transaction.

    Entering the context appends the create-and-fund and initialize
    instructions to ``instructions``; leaving it appends the close
    instruction that unwraps the balance back to ``owner``. Everything
    appended inside the ``with`` block therefore lands between the two.
    The close is appended only on normal exit: on an exception the
    partially built instruction list is abandoned by the caller anyway.
    """

    def __init__(
        self,
        instructions: list[Instruction],
        owner: Pubkey,
        lamports: int,
        rent_exemption: int,
        keypair: Keypair | None = None,
    ) -> None:
        self._instructions = instructions
        self.owner = owner
        self.lamports = lamports
        self.rent_exemption = rent_exemption
        self.keypair = keypair or Keypair()

    @property
    def address(self) -> Pubkey:
        return self.keypair.pubkey()

    def open_instructions(self) -> list[Instruction]:
        create = create_account(
            CreateAccountParams(
                from_pubkey=self.owner,
                to_pubkey=self.address,
                lamports=self.lamports + self.rent_exemption,
                space=ACCOUNT_LEN,
                owner=TOKEN_PROGRAM_ID,
            )
        )
        init = initialize_account(
            InitializeAccountParams(
                program_id=TOKEN_PROGRAM_ID,
                account=self.address,
                mint=WRAPPED_SOL_MINT,
                owner=self.owner,
            )
        )
        return [create, init]

    def close_instruction(self) -> Instruction:
        return close_account(
            CloseAccountParams(
                program_id=TOKEN_PROGRAM_ID,
                account=self.address,
                dest=self.owner,
                owner=self.owner,
            )
        )

    def __enter__(self) -> WrappedNative:
        logger.info(
            "wrapping %d lamports into ephemeral account %s", self.lamports, self.address
        )
        self._instructions.extend(self.open_instructions())
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self._instructions.append(self.close_instruction())
