"""Program-derived address computation.

An address is the SHA-256 digest of the seeds, a bump byte, the program id
and the ``ProgramDerivedAddress`` marker. Digests that decode to a point on
the ed25519 curve are rejected, so no private key can ever sign for a
derived address. The bump is searched downward from 255 and the first
off-curve hit is canonical.

Results match ``Pubkey.find_program_address`` byte for byte; the search is
spelled out here so the seed-length and exhaustion failures surface as the
SDK's own error types.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm.errors import NoViableBump, OnCurveAddress, SeedTooLong
from atrixfarm.logging import get_logger

MAX_SEED_LENGTH = 32
MAX_BUMP = 255
PDA_MARKER = b"ProgramDerivedAddress"

logger = get_logger("derivation")


def validate_seeds(seeds: Sequence[bytes]) -> None:
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LENGTH:
            raise SeedTooLong(i, len(seed), MAX_SEED_LENGTH)


def is_on_curve(address: bytes) -> bool:
    """Report whether 32 raw bytes decode to an ed25519 curve point."""
    return Pubkey.from_bytes(address).is_on_curve()


def _hash(seeds: Sequence[bytes], program_id: Pubkey) -> bytes:
    h = hashlib.sha256()
    for seed in seeds:
        h.update(seed)
    h.update(bytes(program_id))
    h.update(PDA_MARKER)
    return h.digest()


def create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    """Derive an address from seeds that already include the bump byte.

    Raises ``OnCurveAddress`` when the digest is a valid curve point.
    """
    validate_seeds(seeds)
    digest = _hash(seeds, program_id)
    if is_on_curve(digest):
        raise OnCurveAddress("invalid seeds, address must fall off the curve")
    return Pubkey.from_bytes(digest)


def derive_address(
    seeds: Sequence[bytes], program_id: Pubkey
) -> tuple[Pubkey, int]:
    """Find the canonical (address, bump) pair for ``seeds`` under ``program_id``."""
    validate_seeds(seeds)
    seeds = list(seeds)
    for bump in range(MAX_BUMP, 0, -1):
        digest = _hash(seeds + [bytes([bump])], program_id)
        if is_on_curve(digest):
            continue
        address = Pubkey.from_bytes(digest)
        logger.debug("derived %s with bump %d", address, bump)
        return address, bump
    raise NoViableBump(program_id)
