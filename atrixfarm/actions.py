"""User actions and the single/dual track instruction builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm import instructions
from atrixfarm.errors import InvalidAmount, InvalidCropCount
from atrixfarm.instructions import CropAccounts, StakeAccounts


def _check_amount(name: str, amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{name} amount must be an integer, got {amount!r}")
    if amount <= 0:
        raise InvalidAmount(f"{name} amount must be positive, got {amount}")
    if amount >= 1 << 64:
        raise InvalidAmount(f"{name} amount {amount} does not fit in a u64")


@dataclass(frozen=True)
class Stake:
    amount: int
    name: ClassVar[str] = "stake"

    def __post_init__(self) -> None:
        _check_amount(self.name, self.amount)


@dataclass(frozen=True)
class Unstake:
    amount: int
    name: ClassVar[str] = "unstake"

    def __post_init__(self) -> None:
        _check_amount(self.name, self.amount)


@dataclass(frozen=True)
class Claim:
    name: ClassVar[str] = "claim"

    @property
    def amount(self) -> None:
        return None


Action = Union[Stake, Unstake, Claim]

ACTIONS: dict[str, type] = {cls.name: cls for cls in (Stake, Unstake, Claim)}


def parse_action(name: str, amount: int | None = None) -> Action:
    """Map an action name and optional amount onto its variant."""
    cls = ACTIONS.get(name)
    if cls is None:
        raise ValueError(f"unknown action {name!r}, expected one of {sorted(ACTIONS)}")
    if cls is Claim:
        return Claim()
    if amount is None:
        raise InvalidAmount(f"{name} requires an amount")
    return cls(amount)


def instruction_name(action: Action, dual: bool = False) -> str:
    """Program instruction that carries ``action`` on a single or dual track."""
    match action:
        case Stake():
            name = "stake"
        case Unstake():
            name = "unstake"
        case Claim():
            name = "claim"
        case _:
            raise TypeError(f"unsupported action {action!r}")
    return f"{name}_dual_crop" if dual else name


@dataclass(frozen=True)
class SingleTrackAccounts:
    stake: StakeAccounts
    crop: CropAccounts


@dataclass(frozen=True)
class DualTrackAccounts:
    stake: StakeAccounts
    crop1: CropAccounts
    crop2: CropAccounts


@dataclass(frozen=True)
class SingleTrackAction:
    """Action against a farm with one crop: ``stake``/``unstake``/``claim``."""

    program_id: Pubkey
    accounts: SingleTrackAccounts

    def build(self, action: Action) -> list[Instruction]:
        return [
            instructions.crop_action(
                self.program_id,
                instruction_name(action),
                action.amount,
                self.accounts.stake,
                [self.accounts.crop],
            )
        ]


@dataclass(frozen=True)
class DualTrackAction:
    """Action against a farm with two crops: the ``*_dual_crop`` variants."""

    program_id: Pubkey
    accounts: DualTrackAccounts

    def build(self, action: Action) -> list[Instruction]:
        return [
            instructions.crop_action(
                self.program_id,
                instruction_name(action, dual=True),
                action.amount,
                self.accounts.stake,
                [self.accounts.crop1, self.accounts.crop2],
            )
        ]


TrackAction = Union[SingleTrackAction, DualTrackAction]


def track_action(
    program_id: Pubkey, stake: StakeAccounts, crops: list[CropAccounts]
) -> TrackAction:
    """Select the track variant for the number of resolved crops."""
    if len(crops) == 1:
        return SingleTrackAction(program_id, SingleTrackAccounts(stake, crops[0]))
    if len(crops) == 2:
        return DualTrackAction(
            program_id, DualTrackAccounts(stake, crops[0], crops[1])
        )
    raise InvalidCropCount(stake.farm_account, len(crops))
