from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel

from arena_payments.schemas.domain import Customer, LedgerEntry, Participant, PaymentRecord, PixQrCode, Tournament


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PROFILE_NOT_READY = "profile_not_ready"
    INVALID_CATEGORY = "invalid_category"
    MISSING_TEAM_NAME = "missing_team_name"
    DUPLICATE_REGISTRATION = "duplicate_registration"
    MISSING_TAX_ID = "missing_tax_id"
    INVALID_TAX_ID_LENGTH = "invalid_tax_id_length"
    INVALID_TAX_ID = "invalid_tax_id"
    GATEWAY_REQUEST_FAILED = "gateway_request_failed"
    PARTICIPANT_NOT_FOUND = "participant_not_found"
    PLAYER_NOT_FOUND = "player_not_found"
    UNEXPECTED = "unexpected"


class Failure(BaseModel):
    success: Literal[False] = False
    error: ErrorCode
    message: str
    retryable: bool = False
    hosted_url: Optional[str] = None


class AdmissionSuccess(BaseModel):
    success: Literal[True] = True
    participant: Participant
    tournament: Tournament


class TaxIdValidation(BaseModel):
    success: Literal[True] = True
    normalized_id: str


class PaymentSuccess(BaseModel):
    success: Literal[True] = True
    payment: PaymentRecord
    customer: Optional[Customer] = None


class PaymentDetailsSuccess(BaseModel):
    success: Literal[True] = True
    payment: PaymentRecord
    pix_qr_code: Optional[PixQrCode] = None
    bank_slip_url: Optional[str] = None


class ReconciliationSuccess(BaseModel):
    success: Literal[True] = True
    tournament: Tournament
    ledger_entry: LedgerEntry
