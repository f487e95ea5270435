import asyncio
from datetime import date, timedelta
from decimal import Decimal

import httpx
import pytest

from arena_payments.clients.gateway_client import GatewayClient
from arena_payments.config import BillingType, Collection
from arena_payments.payments import PaymentFacade, check_gateway_config
from arena_payments.schemas.domain import (
    CreditCard,
    CreditCardHolderInfo,
    GatewayStatus,
    MemberCustomer,
    PaymentRequest,
    ProfileCustomer,
)
from arena_payments.schemas.results import ErrorCode

CONFIGURED = GatewayStatus(configured=True, sandbox=True)


class ExplodingClient:
    def __getattr__(self, name):
        raise AssertionError(f"gateway client used: {name}")


def _request(arena, customer, billing_type=BillingType.PIX, **kwargs):
    return PaymentRequest(
        arena=arena,
        customer=customer,
        description="Inscrição Torneio: Open de Verão",
        amount=Decimal("50.00"),
        billing_type=billing_type,
        **kwargs,
    )


def _card_request(arena, customer, **kwargs):
    return _request(
        arena,
        customer,
        BillingType.CREDIT_CARD,
        credit_card=CreditCard(holder_name="ANA SOUZA", number="4111 1111 1111 1111", expiry_month="12", expiry_year="2030", ccv="123"),
        credit_card_holder_info=CreditCardHolderInfo(
            name="Ana Souza",
            email="ana@example.com",
            cpf_cnpj="111.444.777-35",
            postal_code="01310-100",
            address_number="100",
            phone="(11) 98888-7777",
        ),
        **kwargs,
    )


@pytest.mark.parametrize("billing_type", list(BillingType))
def test_simulated_path_never_touches_tax_id_or_gateway(monkeypatch, store, arena_without_key, billing_type):
    def fail_validation(customer):
        raise AssertionError("tax id validated on simulated path")

    monkeypatch.setattr("arena_payments.payments.validate_tax_id", fail_validation)
    facade = PaymentFacade(client=ExplodingClient(), store=store)
    customer = MemberCustomer(id="aluno-1", name="Sem CPF")

    result = asyncio.run(facade.create_payment(_request(arena_without_key, customer, billing_type), CONFIGURED))

    assert result.success is True
    payment = result.payment
    assert payment.status == "CONFIRMED"
    assert payment.simulated is True
    assert payment.id.startswith("sim_")
    assert payment.value == Decimal("50.00")
    assert payment.due_date == date.today() + timedelta(days=7)
    assert (payment.identification_field is not None) == (billing_type == BillingType.BOLETO)
    assert (payment.pix_qr_code is not None) == (billing_type == BillingType.PIX)
    assert asyncio.run(store.select(Collection.MEMBERS, "arena-1")) == []


def test_arena_without_credentials_falls_back_even_when_gateway_configured(store, arena_without_key, member_one):
    facade = PaymentFacade(client=ExplodingClient(), store=store)
    result = asyncio.run(facade.create_payment(_request(arena_without_key, member_one), CONFIGURED))
    assert result.success is True
    assert result.payment.simulated is True


def test_unconfigured_platform_falls_back_even_with_arena_credentials(store, arena, member_one):
    facade = PaymentFacade(client=ExplodingClient(), store=store)
    result = asyncio.run(facade.create_payment(_request(arena, member_one), GatewayStatus(configured=False)))
    assert result.payment.simulated is True


def test_real_boleto_creates_customer_once_and_persists_it(store, configured_gateway, gateway_client, arena, member_one):
    facade = PaymentFacade(client=gateway_client, store=store)

    async def scenario():
        first = await facade.create_payment(_request(arena, member_one, BillingType.BOLETO), CONFIGURED)
        stored = await store.get(Collection.MEMBERS, "aluno-1", "arena-1")
        second = await facade.create_payment(
            _request(arena, MemberCustomer.model_validate(stored), BillingType.BOLETO), CONFIGURED
        )
        return first, stored, second

    first, stored, second = asyncio.run(scenario())

    assert first.success is True and second.success is True
    assert first.payment.id.startswith("pay_")
    assert first.payment.status == "PENDING"
    assert first.payment.bank_slip_url
    assert first.payment.identification_field
    assert stored["asaas_customer_id"] == first.customer.asaas_customer_id
    assert len(configured_gateway.STATE["customers"]) == 1
    assert len(configured_gateway.STATE["payments"]) == 2
    remote_customer = configured_gateway.STATE["customers"][stored["asaas_customer_id"]]
    assert remote_customer["cpfCnpj"] == "11144477735"
    assert remote_customer["externalReference"] == "aluno-1"


def test_profile_customer_gets_placeholder_email_and_global_persistence(store, configured_gateway, gateway_client, arena, profile_customer):
    facade = PaymentFacade(client=gateway_client, store=store)
    result = asyncio.run(facade.create_payment(_request(arena, profile_customer), CONFIGURED))

    assert result.success is True
    remote_customer = next(iter(configured_gateway.STATE["customers"].values()))
    assert remote_customer["email"] == "profile-9@matchplay.com"
    profiles = asyncio.run(store.select(Collection.PROFILES, "all"))
    assert profiles[0]["asaas_customer_id"] == remote_customer["id"]
    assert profiles[0]["kind"] == "profile"
    assert asyncio.run(store.select(Collection.MEMBERS, "arena-1")) == []


def test_invalid_tax_id_fails_without_contacting_gateway(store, configured_gateway, gateway_client, arena):
    facade = PaymentFacade(client=gateway_client, store=store)
    customer = MemberCustomer(id="aluno-3", name="Zé", cpf="000.000.000-00")
    result = asyncio.run(facade.create_payment(_request(arena, customer), CONFIGURED))

    assert result.success is False
    assert result.error == ErrorCode.INVALID_TAX_ID
    assert configured_gateway.STATE["customers"] == {}
    assert configured_gateway.STATE["payments"] == {}


def test_gateway_error_becomes_failure_result(store, mock_gateway, gateway_client, arena, member_one):
    # Platform reported as configured but the proxy has no API key.
    facade = PaymentFacade(client=gateway_client, store=store)
    result = asyncio.run(facade.create_payment(_request(arena, member_one), CONFIGURED))

    assert result.success is False
    assert result.error == ErrorCode.GATEWAY_REQUEST_FAILED
    assert result.message == "API key não configurada no servidor"


def test_card_fields_are_normalized_and_external_reference_kept(monkeypatch, store, configured_gateway, gateway_client, arena, member_one):
    captured = {}
    original_create_payment = gateway_client.create_payment

    async def capture(payment):
        captured["payment"] = payment
        return await original_create_payment(payment)

    monkeypatch.setattr(gateway_client, "create_payment", capture)
    facade = PaymentFacade(client=gateway_client, store=store)
    request = _card_request(arena, member_one, external_reference="participant_1:profile-1", due_date=date(2030, 1, 15))
    result = asyncio.run(facade.create_payment(request, CONFIGURED))

    sent = captured["payment"]
    assert sent.creditCard.number == "4111111111111111"
    assert sent.creditCardHolderInfo.cpfCnpj == "11144477735"
    assert sent.creditCardHolderInfo.postalCode == "01310100"
    assert sent.creditCardHolderInfo.phone == "11988887777"
    assert sent.externalReference == "participant_1:profile-1"
    assert sent.dueDate == date(2030, 1, 15)
    assert result.payment.status == "CONFIRMED"
    assert result.payment.credit_card_last4 == "1111"


def test_saved_card_is_deduplicated_by_token(store, configured_gateway, gateway_client, arena, member_one):
    facade = PaymentFacade(client=gateway_client, store=store)

    async def pay_with_stored_customer(request_factory):
        stored = await store.get(Collection.MEMBERS, "aluno-1", "arena-1")
        customer = MemberCustomer.model_validate(stored) if stored else member_one
        return await facade.create_payment(request_factory(customer), CONFIGURED)

    async def scenario():
        await pay_with_stored_customer(lambda c: _card_request(arena, c, save_card=True))
        await pay_with_stored_customer(lambda c: _card_request(arena, c, save_card=True))
        stored = await store.get(Collection.MEMBERS, "aluno-1", "arena-1")
        token = stored["credit_cards"][0]["token"]
        reuse = await pay_with_stored_customer(
            lambda c: _request(arena, c, BillingType.CREDIT_CARD, credit_card_token=token, save_card=True)
        )
        return reuse, await store.get(Collection.MEMBERS, "aluno-1", "arena-1")

    reuse, stored = asyncio.run(scenario())

    assert reuse.success is True
    assert len(stored["credit_cards"]) == 1
    card = stored["credit_cards"][0]
    assert card["last4"] == "1111"
    assert card["brand"] == "VISA"
    assert card["holder_name"] == "ANA SOUZA"


def test_card_not_saved_unless_requested(store, configured_gateway, gateway_client, arena, member_one):
    facade = PaymentFacade(client=gateway_client, store=store)
    result = asyncio.run(facade.create_payment(_card_request(arena, member_one), CONFIGURED))
    assert result.customer.credit_cards == []


def test_check_gateway_config(configured_gateway, gateway_client):
    status = asyncio.run(check_gateway_config(gateway_client))
    assert status.configured is True
    assert status.sandbox is True


def test_check_gateway_config_treats_errors_as_unconfigured():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = GatewayClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://gateway/api/asaas/"))
    status = asyncio.run(check_gateway_config(client))
    assert status.configured is False
