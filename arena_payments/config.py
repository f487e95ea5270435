from enum import Enum
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    gateway_proxy_url: AnyHttpUrl = "http://mock-gateway:8001/api/asaas/"
    db_url: str = "sqlite:///./arena.db"
    default_due_days: int = 7
    placeholder_email_domain: str = "matchplay.com"
    global_partition: str = "all"
    log_level: str = "INFO"

settings = Settings()

class BillingType(str, Enum):
    BOLETO = "BOLETO"
    PIX = "PIX"
    CREDIT_CARD = "CREDIT_CARD"

class Modality(str, Enum):
    INDIVIDUAL = "individual"
    DUPLAS = "duplas"
    EQUIPES = "equipes"

class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

class PlayerPaymentStatus(str, Enum):
    PENDENTE = "pendente"
    PAGO = "pago"

class ParticipantPaymentStatus(str, Enum):
    PENDENTE = "pendente"
    PARCIALMENTE_PAGO = "parcialmente_pago"
    PAGO = "pago"

class Collection(str, Enum):
    TOURNAMENTS = "torneios"
    LEDGER = "finance_transactions"
    NOTIFICATIONS = "notificacoes"
    MEMBERS = "alunos"
    PROFILES = "profiles"

customer_collection_map = {
    "member": Collection.MEMBERS,
    "profile": Collection.PROFILES,
}

SIMULATED_PAYMENT_PREFIX = "sim_"
SIMULATED_PAYMENT_STATUS = "CONFIRMED"
LEDGER_CATEGORY = "Torneio"
LEDGER_TYPE_REVENUE = "receita"
