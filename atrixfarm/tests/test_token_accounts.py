"""Token account helper tests."""

import pytest
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID  # type: ignore[import-untyped]

from atrixfarm.token_accounts import TokenAccounts, WrappedNative


class TestTokenAccounts:
    def test_address_is_associated_token_pda(self):
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        expected, _ = Pubkey.find_program_address(
            [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
            ASSOCIATED_TOKEN_PROGRAM_ID,
        )
        assert TokenAccounts.address(owner, mint) == expected

    def test_existing_account_needs_no_creation(self, rpc):
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        rpc.accounts[TokenAccounts.address(owner, mint)] = b"\x00" * 165
        address, ix = TokenAccounts(rpc).resolve_or_create(owner, mint)
        assert address == TokenAccounts.address(owner, mint)
        assert ix is None

    def test_missing_account_paid_by_payer(self, rpc):
        owner, mint, payer = (Pubkey.new_unique() for _ in range(3))
        address, ix = TokenAccounts(rpc).resolve_or_create(owner, mint, payer)
        assert ix.program_id == ASSOCIATED_TOKEN_PROGRAM_ID
        assert ix.accounts[0].pubkey == payer
        assert ix.accounts[1].pubkey == address

    def test_owner_pays_by_default(self, rpc):
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        _, ix = TokenAccounts(rpc).resolve_or_create(owner, mint)
        assert ix.accounts[0].pubkey == owner


class TestWrappedNative:
    def test_bracket(self):
        ixs = []
        owner = Pubkey.new_unique()
        marker = object()
        with WrappedNative(ixs, owner, 10, 5) as wrapped:
            assert len(ixs) == 2
            ixs.append(marker)
        assert ixs[2] is marker
        close = ixs[3]
        assert close.program_id == TOKEN_PROGRAM_ID
        assert close.accounts[0].pubkey == wrapped.address
        assert close.accounts[1].pubkey == owner

    def test_no_close_on_error(self):
        ixs = []
        with pytest.raises(RuntimeError):
            with WrappedNative(ixs, Pubkey.new_unique(), 10, 5):
                raise RuntimeError("boom")
        assert len(ixs) == 2

    def test_uses_given_keypair(self):
        kp = Keypair()
        wrapped = WrappedNative([], Pubkey.new_unique(), 0, 0, keypair=kp)
        assert wrapped.address == kp.pubkey()
        init = wrapped.open_instructions()[1]
        assert init.accounts[0].pubkey == kp.pubkey()
