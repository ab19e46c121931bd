"""Instruction accumulation and unsigned transaction assembly."""

from __future__ import annotations

from dataclasses import dataclass, field

from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.message import Message  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.transaction import Transaction  # type: ignore[import-untyped]


@dataclass
class BuiltTransaction:
    """An unsigned transaction together with everything needed to sign it.

    ``signers`` lists every pubkey whose signature the message requires, fee
    payer first. ``ephemeral_signers`` holds the keypairs generated while
    building (wrapped SOL accounts, farm base keys); the caller signs with
    these plus its own wallet.
    """

    transaction: Transaction
    instructions: list[Instruction]
    signers: list[Pubkey]
    ephemeral_signers: list[Keypair]


@dataclass
class TransactionEnvelope:
    instructions: list[Instruction] = field(default_factory=list)
    signers: list[Keypair] = field(default_factory=list)

    def add(self, *ixs: Instruction) -> TransactionEnvelope:
        self.instructions.extend(ixs)
        return self

    def build(self, payer: Pubkey) -> BuiltTransaction:
        """Compile the instructions into an unsigned transaction paid by ``payer``.

        The recent blockhash is left unset; the submitting layer fills it in
        when signing.
        """
        message = Message(self.instructions, payer)
        n = message.header.num_required_signatures
        return BuiltTransaction(
            transaction=Transaction.new_unsigned(message),
            instructions=list(self.instructions),
            signers=list(message.account_keys[:n]),
            ephemeral_signers=list(self.signers),
        )
