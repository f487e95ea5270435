import hashlib
import logging
import uuid
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("mock-gateway")

app = FastAPI(title="Mock Payment Gateway Proxy")
router = APIRouter(prefix="/api/asaas")

SANDBOX_BASE_URL = "https://sandbox.asaas.com"
MOCK_BOLETO_LINE = "34191.79001 01043.510047 91020.150008 1 96610000015000"
MOCK_PIX_IMAGE = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="

STATE: dict[str, Any] = {}


def reset_state():
    STATE.clear()
    STATE.update({"config": {"apiKey": "", "isSandbox": True}, "customers": {}, "payments": {}})


reset_state()


class ConfigBody(BaseModel):
    apiKey: str = ""
    isSandbox: bool = True


class CustomerBody(BaseModel):
    customerData: dict


class PaymentBody(BaseModel):
    paymentData: dict


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _not_configured() -> Optional[JSONResponse]:
    if not STATE["config"]["apiKey"]:
        return _error(500, "API key não configurada no servidor")
    return None


def _card_info(payment_data: dict) -> Optional[dict]:
    token = payment_data.get("creditCardToken")
    if token:
        for payment in STATE["payments"].values():
            card = payment.get("creditCard") or {}
            if card.get("creditCardToken") == token:
                return dict(card)
        return {"creditCardNumber": None, "creditCardBrand": None, "creditCardToken": token}
    card = payment_data.get("creditCard")
    if not card:
        return None
    number = card.get("number", "")
    return {
        "creditCardNumber": number[-4:],
        "creditCardBrand": "VISA" if number.startswith("4") else "MASTERCARD",
        "creditCardToken": "tok_" + hashlib.sha256(number.encode()).hexdigest()[:16],
    }


@router.post("/config")
async def save_config(body: ConfigBody):
    if not body.apiKey:
        return _error(400, "API key não fornecida")
    STATE["config"] = {"apiKey": body.apiKey, "isSandbox": body.isSandbox}
    logger.info("Gateway configured sandbox=%s", body.isSandbox)
    return {"success": True, "message": "Configuração salva com sucesso!"}


@router.get("/config")
async def get_config():
    return {"configured": bool(STATE["config"]["apiKey"]), "isSandbox": STATE["config"]["isSandbox"]}


@router.post("/customers")
async def create_customer(body: CustomerBody):
    if (error := _not_configured()) is not None:
        return error
    data = body.customerData
    tax_id = "".join(ch for ch in str(data.get("cpfCnpj", "")) if ch.isdigit())
    if len(tax_id) not in (11, 14):
        return _error(400, "O CPF/CNPJ informado é inválido.")
    customer = {**data, "id": f"cus_{uuid.uuid4().hex[:12]}", "object": "customer"}
    STATE["customers"][customer["id"]] = customer
    logger.info("Created customer id=%s externalReference=%s", customer["id"], data.get("externalReference"))
    return customer


@router.get("/customers/{customer_id}")
async def get_customer(customer_id: str):
    if (error := _not_configured()) is not None:
        return error
    customer = STATE["customers"].get(customer_id)
    if not customer:
        return _error(404, "Cliente não encontrado.")
    return customer


@router.post("/payments")
async def create_payment(body: PaymentBody):
    if (error := _not_configured()) is not None:
        return error
    data = body.paymentData
    if data.get("customer") not in STATE["customers"]:
        return _error(400, "Customer inválido ou não informado.")
    billing_type = data.get("billingType")
    if billing_type not in ("BOLETO", "PIX", "CREDIT_CARD"):
        return _error(400, "Forma de pagamento inválida.")
    card = _card_info(data) if billing_type == "CREDIT_CARD" else None
    if billing_type == "CREDIT_CARD" and card is None:
        return _error(400, "Informe os dados do cartão de crédito.")

    payment_id = f"pay_{uuid.uuid4().hex[:12]}"
    payment = {
        "id": payment_id,
        "object": "payment",
        "customer": data["customer"],
        "billingType": billing_type,
        "value": data.get("value"),
        "dueDate": data.get("dueDate") or date.today().isoformat(),
        "description": data.get("description"),
        "externalReference": data.get("externalReference"),
        "status": "CONFIRMED" if billing_type == "CREDIT_CARD" else "PENDING",
        "invoiceUrl": f"{SANDBOX_BASE_URL}/i/{payment_id}",
        "bankSlipUrl": f"{SANDBOX_BASE_URL}/b/pdf/{payment_id}" if billing_type == "BOLETO" else None,
        "identificationField": MOCK_BOLETO_LINE if billing_type == "BOLETO" else None,
        "creditCard": card,
    }
    STATE["payments"][payment_id] = payment
    logger.info("Created payment id=%s billingType=%s value=%s", payment_id, billing_type, payment["value"])
    return payment


@router.get("/payments/{payment_id}")
async def get_payment(payment_id: str):
    if (error := _not_configured()) is not None:
        return error
    payment = STATE["payments"].get(payment_id)
    if not payment:
        return _error(404, "Pagamento não encontrado.")
    return payment


@router.get("/payments/{payment_id}/qr-code")
async def get_pix_qr_code(payment_id: str):
    if (error := _not_configured()) is not None:
        return error
    payment = STATE["payments"].get(payment_id)
    if not payment or payment["billingType"] != "PIX":
        return _error(404, "QR Code PIX não disponível para este pagamento.")
    return {
        "encodedImage": MOCK_PIX_IMAGE,
        "payload": f"00020101021226800014br.gov.bcb.pix2558pix.mock/{payment_id}5204000053039865802BR6304ABCD",
        "expirationDate": payment["dueDate"] + " 23:59:59",
    }


@router.get("/payments/{payment_id}/bank-slip")
async def get_bank_slip(payment_id: str):
    if (error := _not_configured()) is not None:
        return error
    payment = STATE["payments"].get(payment_id)
    if not payment or payment["billingType"] != "BOLETO":
        return _error(404, "Boleto não disponível para este pagamento.")
    return {"url": f"{SANDBOX_BASE_URL}/api/v3/payments/{payment_id}/bankSlipPdf"}


@router.post("/admin/clear")
async def clear_state():
    """
    Dangerous: drops config, customers and payments.
    """
    reset_state()
    logger.warning("Cleared mock gateway state via admin endpoint")
    return {"status": "cleared"}


app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
