from arena_payments.clients.gateway_client import GatewayClient, gateway_client
from arena_payments.config import BillingType
from arena_payments.errors import GatewayRequestFailed
from arena_payments.helpers import is_simulated_payment
from arena_payments.logging_config import get_logger
from arena_payments.schemas.domain import PaymentRecord
from arena_payments.schemas.results import ErrorCode, Failure, PaymentDetailsSuccess


logger = get_logger(__name__)


def _hosted_url(payment: PaymentRecord | None) -> str | None:
    if payment is None:
        return None
    return payment.bank_slip_url or payment.invoice_url


async def fetch_payment_details(
    payment_id: str,
    billing_type: BillingType,
    client: GatewayClient | None = None,
    payment: PaymentRecord | None = None,
) -> PaymentDetailsSuccess | Failure:
    """
    Fetch the renderable side of a payment (QR code, bank slip) after creation.

    ``payment`` is the record returned at creation time, when the caller has it.
    Failures here say nothing about the payment itself, which may already be
    valid, so they are always reported as retryable, linking to the gateway's
    hosted page when the record carries one.
    """
    known = payment if payment is not None and payment.id == payment_id else None
    if is_simulated_payment(payment_id):
        if known is not None:
            return PaymentDetailsSuccess(payment=known, pix_qr_code=known.pix_qr_code)
        return Failure(
            error=ErrorCode.UNEXPECTED,
            message="Pagamento simulado não possui detalhes no gateway.",
        )

    client = client or gateway_client
    try:
        fetched = (await client.get_payment(payment_id)).to_payment_record()
        known = fetched.model_copy(update={
            "bank_slip_url": fetched.bank_slip_url or (known.bank_slip_url if known else None),
            "invoice_url": fetched.invoice_url or (known.invoice_url if known else None),
        })
        if billing_type == BillingType.PIX:
            pix_qr_code = (await client.get_pix_qr_code(payment_id)).to_pix_qr_code()
            known = known.model_copy(update={"pix_qr_code": pix_qr_code})
            return PaymentDetailsSuccess(payment=known, pix_qr_code=pix_qr_code)
        if billing_type == BillingType.BOLETO:
            bank_slip_url = await client.get_bank_slip(payment_id)
            return PaymentDetailsSuccess(payment=known, bank_slip_url=bank_slip_url)
        return PaymentDetailsSuccess(payment=known)
    except GatewayRequestFailed as exc:
        logger.warning("Fetching payment details failed id=%s billingType=%s error=%s", payment_id, billing_type.value, exc.message)
        return exc.to_failure(retryable=True, hosted_url=_hosted_url(known))
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error fetching payment details id=%s", payment_id)
        return Failure(
            error=ErrorCode.UNEXPECTED,
            message="Erro ao buscar detalhes do pagamento",
            retryable=True,
            hosted_url=_hosted_url(known),
        )
