import httpx

from arena_payments.config import settings
from arena_payments.contracts.contracts import (
    GatewayCustomerRequest,
    GatewayPaymentRequest,
    GatewayPaymentResponse,
    GatewayPixQrCode,
)
from arena_payments.errors import GatewayRequestFailed
from arena_payments.logging_config import get_logger
from arena_payments.schemas.domain import GatewayStatus


logger = get_logger(__name__)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    errors = body.get("errors")
    if errors and isinstance(errors, list) and isinstance(errors[0], dict):
        return errors[0].get("description") or fallback
    detail = body.get("detail")
    return body.get("error") or body.get("message") or (detail if isinstance(detail, str) else None) or fallback


class GatewayClient:
    """Async client for the payment gateway proxy."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client or httpx.AsyncClient(base_url=str(settings.gateway_proxy_url))

    async def _request(self, method: str, url: str, fallback: str, json: dict | None = None) -> httpx.Response:
        try:
            response = await self.client.request(method, url, json=json)
        except httpx.RequestError as exc:
            # Surface network/DNS errors as a gateway failure.
            raise GatewayRequestFailed(f"{fallback}: {exc}") from exc
        if response.status_code >= 400:
            message = _error_message(response, fallback)
            logger.warning("Gateway %s %s failed status=%s error=%s", method, url, response.status_code, message)
            raise GatewayRequestFailed(message, status_code=response.status_code)
        return response

    async def save_config(self, api_key: str, is_sandbox: bool) -> dict:
        resp = await self._request(
            "POST", "config", "Erro ao salvar configuração",
            json={"apiKey": api_key, "isSandbox": is_sandbox},
        )
        return resp.json()

    async def get_config(self) -> GatewayStatus:
        resp = await self._request("GET", "config", "Erro ao buscar configuração")
        body = resp.json()
        return GatewayStatus(configured=bool(body.get("configured")), sandbox=bool(body.get("isSandbox", True)))

    async def create_customer(self, customer: GatewayCustomerRequest) -> dict:
        resp = await self._request(
            "POST", "customers", "Erro ao criar cliente",
            json={"customerData": customer.model_dump(mode="json")},
        )
        return resp.json()

    async def get_customer(self, customer_id: str) -> dict:
        resp = await self._request("GET", f"customers/{customer_id}", "Erro ao buscar cliente")
        return resp.json()

    async def create_payment(self, payment: GatewayPaymentRequest) -> GatewayPaymentResponse:
        resp = await self._request(
            "POST", "payments", "Erro ao criar pagamento",
            json={"paymentData": payment.model_dump(mode="json", exclude_none=True)},
        )
        return GatewayPaymentResponse.model_validate(resp.json())

    async def get_payment(self, payment_id: str) -> GatewayPaymentResponse:
        resp = await self._request("GET", f"payments/{payment_id}", "Erro ao buscar pagamento")
        return GatewayPaymentResponse.model_validate(resp.json())

    async def get_pix_qr_code(self, payment_id: str) -> GatewayPixQrCode:
        resp = await self._request("GET", f"payments/{payment_id}/qr-code", "Erro ao buscar QR Code PIX")
        return GatewayPixQrCode.model_validate(resp.json())

    async def get_bank_slip(self, payment_id: str) -> str:
        resp = await self._request("GET", f"payments/{payment_id}/bank-slip", "Erro ao buscar boleto")
        return resp.json()["url"]


gateway_client = GatewayClient()
