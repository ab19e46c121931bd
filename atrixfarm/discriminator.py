import hashlib

from atrixfarm.errors import InvalidAccountData

DISCRIMINATOR_SIZE = 8


def _sha256_first8(s: str) -> bytes:
    return hashlib.sha256(s.encode()).digest()[:DISCRIMINATOR_SIZE]


def instruction_discriminator(name: str) -> bytes:
    """Anchor sighash for a snake_case instruction name."""
    return _sha256_first8(f"global:{name}")


DISCRIMINATOR_FARM = _sha256_first8("account:FarmAccount")
DISCRIMINATOR_CROP = _sha256_first8("account:CropAccount")
DISCRIMINATOR_STAKER = _sha256_first8("account:StakerAccount")
DISCRIMINATOR_HARVESTER = _sha256_first8("account:HarvesterAccount")


def validate_discriminator(data: bytes, expected: bytes) -> None:
    """Validate the 8-byte discriminator prefix. Raises InvalidAccountData on mismatch."""
    if len(data) < DISCRIMINATOR_SIZE:
        raise InvalidAccountData(
            f"data too short: {len(data)} bytes, need at least {DISCRIMINATOR_SIZE}"
        )
    got = data[:DISCRIMINATOR_SIZE]
    if got != expected:
        raise InvalidAccountData(
            f"invalid discriminator: got {got.hex()}, want {expected.hex()}"
        )
