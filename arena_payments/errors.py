from arena_payments.schemas.results import ErrorCode, Failure


class ArenaPaymentsError(Exception):
    """Carries an error code and a message fit for direct display."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_failure(self, **extra) -> Failure:
        return Failure(error=self.code, message=self.message, **extra)


class GatewayRequestFailed(ArenaPaymentsError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(ErrorCode.GATEWAY_REQUEST_FAILED, message)
        self.status_code = status_code
