from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from arena_payments.config import BillingType
from arena_payments.helpers import digits_only, placeholder_email
from arena_payments.schemas.domain import (
    CreditCard,
    CreditCardHolderInfo,
    MemberCustomer,
    PaymentRecord,
    PixQrCode,
    ProfileCustomer,
)


class GatewayCustomerRequest(BaseModel):
    name: str
    email: str
    cpfCnpj: str
    phone: str
    externalReference: str

    @classmethod
    def from_customer(cls, customer: MemberCustomer | ProfileCustomer, tax_id: str) -> "GatewayCustomerRequest":
        return cls(
            name=customer.name,
            email=customer.email or placeholder_email(customer.id),
            cpfCnpj=tax_id,
            phone=customer.phone or "",
            externalReference=customer.id,
        )


class CreditCardPayload(BaseModel):
    holderName: str
    number: str
    expiryMonth: str
    expiryYear: str
    ccv: str

    @classmethod
    def from_credit_card(cls, card: CreditCard) -> "CreditCardPayload":
        return cls(
            holderName=card.holder_name,
            number=digits_only(card.number),
            expiryMonth=card.expiry_month,
            expiryYear=card.expiry_year,
            ccv=card.ccv,
        )


class CreditCardHolderInfoPayload(BaseModel):
    name: str
    email: str
    cpfCnpj: str
    postalCode: str
    addressNumber: str
    phone: str

    @classmethod
    def from_holder_info(cls, info: CreditCardHolderInfo) -> "CreditCardHolderInfoPayload":
        return cls(
            name=info.name,
            email=info.email,
            cpfCnpj=digits_only(info.cpf_cnpj),
            postalCode=digits_only(info.postal_code),
            addressNumber=info.address_number,
            phone=digits_only(info.phone),
        )


class GatewayPaymentRequest(BaseModel):
    customer: str
    billingType: BillingType
    value: float
    dueDate: date
    description: str
    externalReference: str
    creditCard: Optional[CreditCardPayload] = None
    creditCardHolderInfo: Optional[CreditCardHolderInfoPayload] = None
    creditCardToken: Optional[str] = None


class GatewayCreditCard(BaseModel):
    creditCardNumber: Optional[str] = None
    creditCardBrand: Optional[str] = None
    creditCardToken: Optional[str] = None


class GatewayPaymentResponse(BaseModel):
    id: str
    billingType: BillingType
    value: Decimal
    dueDate: date
    status: str
    invoiceUrl: Optional[str] = None
    bankSlipUrl: Optional[str] = None
    identificationField: Optional[str] = None
    creditCard: Optional[GatewayCreditCard] = None

    def to_payment_record(self) -> PaymentRecord:
        last4 = None
        if self.creditCard and self.creditCard.creditCardNumber:
            last4 = digits_only(self.creditCard.creditCardNumber)[-4:] or None
        return PaymentRecord(
            id=self.id,
            billing_type=self.billingType,
            value=self.value,
            due_date=self.dueDate,
            status=self.status,
            invoice_url=self.invoiceUrl,
            bank_slip_url=self.bankSlipUrl,
            identification_field=self.identificationField,
            credit_card_last4=last4,
        )


class GatewayPixQrCode(BaseModel):
    encodedImage: str
    payload: str
    expirationDate: Optional[str] = None

    def to_pix_qr_code(self) -> PixQrCode:
        return PixQrCode(
            encoded_image=self.encodedImage,
            payload=self.payload,
            expiration_date=self.expirationDate,
        )
