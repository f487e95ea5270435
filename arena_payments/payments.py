from arena_payments.clients.gateway_client import GatewayClient, gateway_client
from arena_payments.config import SIMULATED_PAYMENT_STATUS, BillingType, customer_collection_map, settings
from arena_payments.contracts.contracts import (
    CreditCardHolderInfoPayload,
    CreditCardPayload,
    GatewayCustomerRequest,
    GatewayPaymentRequest,
    GatewayPaymentResponse,
)
from arena_payments.db import RecordStore
from arena_payments.errors import ArenaPaymentsError, GatewayRequestFailed
from arena_payments.helpers import default_due_date, new_external_reference, simulated_payment_id
from arena_payments.logging_config import get_logger
from arena_payments.schemas.domain import (
    Arena,
    GatewayStatus,
    MemberCustomer,
    PaymentRecord,
    PaymentRequest,
    PixQrCode,
    ProfileCustomer,
    SavedCard,
)
from arena_payments.schemas.results import ErrorCode, Failure, PaymentSuccess
from arena_payments.tax_id import validate_tax_id


logger = get_logger(__name__)

SIMULATED_BOLETO_LINE = "23793.38128 60007.827136 95000.063305 9 84410000010000"
SIMULATED_PIX_PAYLOAD = (
    "00020126330014BR.GOV.BCB.PIX0111000000000005204000053039865802BR"
    "5914ARENA SIMULADA6009SAO PAULO62070503***6304ABCD"
)
# 1x1 transparent PNG
SIMULATED_PIX_IMAGE = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


def arena_has_gateway_credentials(arena: Arena) -> bool:
    return bool(arena.asaas_api_key and arena.asaas_api_key.strip())


async def check_gateway_config(client: GatewayClient | None = None) -> GatewayStatus:
    """
    Platform-wide gateway status. Any failure to read it counts as not configured.
    """
    client = client or gateway_client
    try:
        return await client.get_config()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Could not read gateway config, treating as not configured: %s", exc)
        return GatewayStatus(configured=False)


def simulate_payment(request: PaymentRequest) -> PaymentRecord:
    record = PaymentRecord(
        id=simulated_payment_id(),
        billing_type=request.billing_type,
        value=request.amount,
        due_date=request.due_date or default_due_date(),
        status=SIMULATED_PAYMENT_STATUS,
        simulated=True,
    )
    if request.billing_type == BillingType.BOLETO:
        record.identification_field = SIMULATED_BOLETO_LINE
    elif request.billing_type == BillingType.PIX:
        record.pix_qr_code = PixQrCode(encoded_image=SIMULATED_PIX_IMAGE, payload=SIMULATED_PIX_PAYLOAD)
    return record


class PaymentFacade:
    """
    Single entry point for charging a customer, whether the arena bills through
    the gateway or falls back to the simulated flow.
    """

    def __init__(self, client: GatewayClient | None = None, store: RecordStore | None = None):
        self.client = client or gateway_client
        self.store = store or RecordStore()

    async def create_payment(self, request: PaymentRequest, gateway: GatewayStatus) -> PaymentSuccess | Failure:
        use_real_gateway = arena_has_gateway_credentials(request.arena) and gateway.configured
        if not use_real_gateway:
            payment = simulate_payment(request)
            logger.info(
                "Simulated payment created id=%s arena=%s billingType=%s value=%s",
                payment.id,
                request.arena.id,
                payment.billing_type.value,
                payment.value,
            )
            return PaymentSuccess(payment=payment, customer=request.customer)
        try:
            return await self._create_gateway_payment(request)
        except ArenaPaymentsError as exc:
            logger.warning("Gateway payment failed arena=%s customer=%s error=%s", request.arena.id, request.customer.id, exc.message)
            return exc.to_failure()
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error creating payment arena=%s customer=%s", request.arena.id, request.customer.id)
            return Failure(error=ErrorCode.UNEXPECTED, message="Erro ao processar pagamento")

    async def _create_gateway_payment(self, request: PaymentRequest) -> PaymentSuccess | Failure:
        validation = validate_tax_id(request.customer)
        if isinstance(validation, Failure):
            return validation

        customer = await self._resolve_customer(request.arena, request.customer, validation.normalized_id)
        payment_request = self._build_payment_request(request, customer.asaas_customer_id)
        response = await self.client.create_payment(payment_request)
        logger.info(
            "Gateway payment created id=%s customer=%s billingType=%s status=%s",
            response.id,
            customer.asaas_customer_id,
            response.billingType.value,
            response.status,
        )
        if request.save_card:
            customer = await self._save_card(request, customer, response)
        return PaymentSuccess(payment=response.to_payment_record(), customer=customer)

    async def _resolve_customer(self, arena: Arena, customer: MemberCustomer | ProfileCustomer, tax_id: str):
        if customer.asaas_customer_id:
            return customer
        created = await self.client.create_customer(GatewayCustomerRequest.from_customer(customer, tax_id))
        remote_id = created.get("id")
        if not remote_id:
            raise GatewayRequestFailed("Gateway não retornou o identificador do cliente")
        customer = customer.model_copy(update={"asaas_customer_id": remote_id})
        await self._persist_customer(arena, customer)
        logger.info("Created gateway customer id=%s for %s id=%s", remote_id, customer.kind, customer.id)
        return customer

    async def _persist_customer(self, arena: Arena, customer: MemberCustomer | ProfileCustomer) -> None:
        collection = customer_collection_map[customer.kind]
        if isinstance(customer, MemberCustomer):
            partition = customer.arena_id or arena.id
        else:
            partition = settings.global_partition
        await self.store.upsert(collection, [customer.model_dump(mode="json")], partition)

    def _build_payment_request(self, request: PaymentRequest, customer_id: str) -> GatewayPaymentRequest:
        payment_request = GatewayPaymentRequest(
            customer=customer_id,
            billingType=request.billing_type,
            value=float(request.amount),
            dueDate=request.due_date or default_due_date(),
            description=request.description,
            externalReference=request.external_reference or new_external_reference(),
        )
        if request.billing_type != BillingType.CREDIT_CARD:
            return payment_request
        if request.credit_card_token:
            payment_request.creditCardToken = request.credit_card_token
        elif request.credit_card and request.credit_card_holder_info:
            payment_request.creditCard = CreditCardPayload.from_credit_card(request.credit_card)
            payment_request.creditCardHolderInfo = CreditCardHolderInfoPayload.from_holder_info(
                request.credit_card_holder_info
            )
        return payment_request

    async def _save_card(
        self,
        request: PaymentRequest,
        customer: MemberCustomer | ProfileCustomer,
        response: GatewayPaymentResponse,
    ) -> MemberCustomer | ProfileCustomer:
        card_info = response.creditCard
        if not card_info or not card_info.creditCardToken:
            return customer
        if customer.has_card_token(card_info.creditCardToken):
            return customer
        last4 = response.to_payment_record().credit_card_last4
        saved_card = SavedCard(
            token=card_info.creditCardToken,
            last4=last4,
            brand=card_info.creditCardBrand,
            holder_name=request.credit_card.holder_name if request.credit_card else customer.name,
        )
        customer = customer.model_copy(update={"credit_cards": [*customer.credit_cards, saved_card]})
        await self._persist_customer(request.arena, customer)
        logger.info("Saved card ending %s for %s id=%s", last4, customer.kind, customer.id)
        return customer
