import random
import re
import string
import time
import uuid
from datetime import date, timedelta

from arena_payments.config import SIMULATED_PAYMENT_PREFIX, Collection, settings
from arena_payments.schemas.domain import Tournament


def digits_only(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def default_due_date(today: date | None = None) -> date:
    return (today or date.today()) + timedelta(days=settings.default_due_days)


def new_external_reference() -> str:
    return str(uuid.uuid4())


def simulated_payment_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{SIMULATED_PAYMENT_PREFIX}{int(time.time() * 1000)}_{suffix}"


def is_simulated_payment(payment_id: str) -> bool:
    return payment_id.startswith(SIMULATED_PAYMENT_PREFIX)


def placeholder_email(local_id: str) -> str:
    return f"{local_id}@{settings.placeholder_email_domain}"


async def load_fresh_tournament(store, tournament: Tournament) -> Tournament:
    """
    Re-read the stored copy of ``tournament``; falls back to a copy of the
    given one when it has never been persisted.
    """
    data = await store.get(Collection.TOURNAMENTS, tournament.id, tournament.arena_id)
    if data is None:
        return tournament.model_copy(deep=True)
    return Tournament.model_validate(data)
