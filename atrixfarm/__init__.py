from atrixfarm.actions import (
    Claim,
    DualTrackAction,
    SingleTrackAction,
    Stake,
    Unstake,
    parse_action,
)
from atrixfarm.client import Client
from atrixfarm.config import PROGRAM_ID, RPC_URLS
from atrixfarm.derivation import create_program_address, derive_address
from atrixfarm.errors import (
    AccountNotFound,
    CropNotFound,
    FarmError,
    FarmNotFound,
    InvalidAccountData,
    InvalidAmount,
    InvalidCropCount,
    NoViableBump,
    OnCurveAddress,
    SeedTooLong,
)
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

__all__ = [
    "Client",
    "PROGRAM_ID",
    "RPC_URLS",
    "Claim",
    "Stake",
    "Unstake",
    "SingleTrackAction",
    "DualTrackAction",
    "parse_action",
    "Crop",
    "Farm",
    "Harvester",
    "Staker",
    "ResourceResolver",
    "TokenAccounts",
    "WrappedNative",
    "BuiltTransaction",
    "TransactionEnvelope",
    "AccountNotFound",
    "CropNotFound",
    "FarmError",
    "FarmNotFound",
    "InvalidAccountData",
    "InvalidAmount",
    "InvalidCropCount",
    "NoViableBump",
    "OnCurveAddress",
    "SeedTooLong",
    "create_program_address",
    "derive_address",
    "derive_crop_pda",
    "derive_farm_pda",
    "derive_harvester_pda",
    "derive_staker_pda",
    "new_rpc_client",
]
