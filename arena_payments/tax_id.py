from arena_payments.helpers import digits_only
from arena_payments.logging_config import get_logger
from arena_payments.schemas.domain import MemberCustomer, ProfileCustomer
from arena_payments.schemas.results import ErrorCode, Failure, TaxIdValidation


logger = get_logger(__name__)

CPF_LENGTH = 11
CNPJ_LENGTH = 14
REPEATED_CPFS = frozenset(str(d) * CPF_LENGTH for d in range(10))


def validate_tax_id(customer: MemberCustomer | ProfileCustomer) -> TaxIdValidation | Failure:
    """
    Cheap CPF/CNPJ gate run before a gateway customer is created.

    Only length and the all-same-digit CPFs are rejected; check digits are left
    to the gateway.
    """
    normalized = digits_only(customer.tax_id)
    if not normalized:
        logger.info("Tax id missing for %s customer id=%s", customer.kind, customer.id)
        return Failure(
            error=ErrorCode.MISSING_TAX_ID,
            message="CPF/CNPJ não informado. Atualize seu cadastro para continuar.",
        )
    if len(normalized) not in (CPF_LENGTH, CNPJ_LENGTH):
        return Failure(
            error=ErrorCode.INVALID_TAX_ID_LENGTH,
            message="CPF/CNPJ deve conter 11 ou 14 dígitos.",
        )
    if len(normalized) == CPF_LENGTH and normalized in REPEATED_CPFS:
        return Failure(error=ErrorCode.INVALID_TAX_ID, message="CPF inválido.")
    return TaxIdValidation(normalized_id=normalized)
