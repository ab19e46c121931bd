"""Error types raised by the farm SDK."""

from __future__ import annotations

from solders.pubkey import Pubkey  # type: ignore[import-untyped]


class FarmError(Exception):
    """Base class for all farm SDK errors."""


class SeedTooLong(FarmError, ValueError):
    def __init__(self, index: int, length: int, limit: int) -> None:
        super().__init__(
            f"seed {index} is {length} bytes, max seed length is {limit}"
        )
        self.index = index
        self.length = length


class OnCurveAddress(FarmError, ValueError):
    """Raised when a single derivation attempt lands on the ed25519 curve."""


class NoViableBump(FarmError):
    def __init__(self, program_id: Pubkey) -> None:
        super().__init__(
            f"unable to find a viable program address bump for program {program_id}"
        )
        self.program_id = program_id


class AccountNotFound(FarmError):
    kind = "account"

    def __init__(self, address: Pubkey) -> None:
        super().__init__(f"{self.kind} not found: {address}")
        self.address = address


class FarmNotFound(AccountNotFound):
    kind = "farm"


class CropNotFound(AccountNotFound):
    kind = "crop"


class InvalidCropCount(FarmError):
    def __init__(self, farm: Pubkey, count: int) -> None:
        super().__init__(
            f"farm {farm} has {count} populated crop slots, expected 1 or 2"
        )
        self.farm = farm
        self.count = count


class InvalidAmount(FarmError, ValueError):
    pass


class InvalidAccountData(FarmError, ValueError):
    pass
