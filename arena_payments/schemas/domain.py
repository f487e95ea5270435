import uuid
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Annotated, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from arena_payments.config import (
    LEDGER_CATEGORY,
    LEDGER_TYPE_REVENUE,
    BillingType,
    InviteStatus,
    Modality,
    ParticipantPaymentStatus,
    PlayerPaymentStatus,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UserRef(BaseModel):
    """The authenticated profile acting on the tournament."""
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class Arena(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    asaas_api_key: Optional[str] = None
    asaas_wallet_id: Optional[str] = None


class Category(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    group: str = ""
    level: str = ""
    registration_fee: Optional[Decimal] = None
    prize_1st: Optional[str] = None
    prize_2nd: Optional[str] = None
    prize_3rd: Optional[str] = None
    third_place_winner_id: Optional[str] = None


class PlayerEntry(BaseModel):
    profile_id: Optional[str] = None
    member_id: Optional[str] = None
    name: str
    phone: Optional[str] = None
    status: InviteStatus = InviteStatus.ACCEPTED
    payment_status: PlayerPaymentStatus = PlayerPaymentStatus.PENDENTE
    checked_in: bool = False


def aggregate_payment_status(players: Iterable[PlayerEntry]) -> ParticipantPaymentStatus:
    """
    Participant-level status derived from its players.

    ``pago`` needs at least one accepted player and every accepted player paid;
    pending invitees never block it. Any other paid row makes it partial.
    """
    players = list(players)
    accepted = [p for p in players if p.status == InviteStatus.ACCEPTED]
    if accepted and all(p.payment_status == PlayerPaymentStatus.PAGO for p in accepted):
        return ParticipantPaymentStatus.PAGO
    if any(p.payment_status == PlayerPaymentStatus.PAGO for p in players):
        return ParticipantPaymentStatus.PARCIALMENTE_PAGO
    return ParticipantPaymentStatus.PENDENTE


class Participant(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: f"participant_{uuid.uuid4()}")
    category_id: str
    name: str
    email: Optional[str] = None
    players: list[PlayerEntry] = Field(default_factory=list)
    on_waitlist: bool = False
    payment_status: ParticipantPaymentStatus = ParticipantPaymentStatus.PENDENTE

    def find_player(self, profile_id: str) -> Optional[PlayerEntry]:
        return next((p for p in self.players if p.profile_id == profile_id), None)


class Tournament(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    arena_id: str
    name: str
    modality: Modality = Modality.INDIVIDUAL
    categories: list[Category] = Field(default_factory=list)
    max_participants: int = 0
    registration_fee: Decimal = Decimal("0")
    participants: list[Participant] = Field(default_factory=list)

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        return next((p for p in self.participants if p.id == participant_id), None)

    def resolve_fee(self, category_id: str) -> Decimal:
        category = self.get_category(category_id)
        if category is not None and category.registration_fee is not None:
            return category.registration_fee
        return self.registration_fee


class SavedCard(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    token: str
    last4: Optional[str] = None
    brand: Optional[str] = None
    holder_name: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class _CustomerRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    asaas_customer_id: Optional[str] = None
    credit_cards: list[SavedCard] = Field(default_factory=list)

    def has_card_token(self, token: str) -> bool:
        return any(card.token == token for card in self.credit_cards)


class MemberCustomer(_CustomerRecord):
    """Arena member record; lives in the arena's own partition."""
    kind: Literal["member"] = "member"
    arena_id: Optional[str] = None
    cpf: Optional[str] = None

    @property
    def tax_id(self) -> Optional[str]:
        return self.cpf


class ProfileCustomer(_CustomerRecord):
    """Platform-wide profile; lives in the global partition."""
    kind: Literal["profile"] = "profile"
    cpf_cnpj: Optional[str] = None

    @property
    def tax_id(self) -> Optional[str]:
        return self.cpf_cnpj


Customer = Annotated[Union[MemberCustomer, ProfileCustomer], Field(discriminator="kind")]


class PixQrCode(BaseModel):
    encoded_image: str
    payload: str
    expiration_date: Optional[str] = None


class PaymentRecord(BaseModel):
    id: str
    billing_type: BillingType
    value: Decimal
    due_date: date
    status: str
    invoice_url: Optional[str] = None
    bank_slip_url: Optional[str] = None
    identification_field: Optional[str] = None
    pix_qr_code: Optional[PixQrCode] = None
    credit_card_last4: Optional[str] = None
    simulated: bool = False


class CreditCard(BaseModel):
    holder_name: str
    number: str
    expiry_month: str
    expiry_year: str
    ccv: str


class CreditCardHolderInfo(BaseModel):
    name: str
    email: str
    cpf_cnpj: str
    postal_code: str
    address_number: str
    phone: str


class PaymentRequest(BaseModel):
    arena: Arena
    customer: Customer
    description: str
    amount: Decimal
    billing_type: BillingType
    due_date: Optional[date] = None
    external_reference: Optional[str] = None
    credit_card: Optional[CreditCard] = None
    credit_card_holder_info: Optional[CreditCardHolderInfo] = None
    credit_card_token: Optional[str] = None
    save_card: bool = False


class GatewayStatus(BaseModel):
    configured: bool = False
    sandbox: bool = True


class LedgerEntry(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    arena_id: str
    description: str
    amount: Decimal
    type: str = LEDGER_TYPE_REVENUE
    category: str = LEDGER_CATEGORY
    date: date
    participant_id: Optional[str] = None
    profile_id: Optional[str] = None
    payment_id: Optional[str] = None


class Notification(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    profile_id: str
    arena_id: str
    message: str
    type: str
    link_to: Optional[str] = None
    sender_id: Optional[str] = None
    sender_name: Optional[str] = None
    sender_avatar_url: Optional[str] = None
    read: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
