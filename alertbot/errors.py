import logging
from typing import Dict, Optional, Tuple

from .constants import (
    DISCORD_INVALID_FORM_BODY,
    DISCORD_MISSING_PERMISSIONS,
    DISCORD_UNKNOWN_CHANNEL,
)

logger = logging.getLogger(__name__)


class AlertBotError(Exception):
    """Erro com status HTTP e mensagem pública associados."""

    status = 500
    public_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)

    def to_response(self) -> Tuple[Dict[str, str], int]:
        return {"error": str(self)}, self.status


class ValidationError(AlertBotError):
    status = 400
    public_message = "Invalid request"


class NotReadyError(AlertBotError):
    status = 503
    public_message = "Bot is not ready"


class NotFoundError(AlertBotError):
    status = 404
    public_message = "Channel not found"


class PermissionDeniedError(AlertBotError):
    status = 403
    public_message = "Missing permissions"


class MalformedRequestError(AlertBotError):
    status = 400
    public_message = "Invalid form body"


class UnclassifiedError(AlertBotError):
    status = 500
    public_message = "Internal server error"


class TranslationError(ValueError):
    pass


class LoginError(Exception):
    pass


class DiscordAPIError(Exception):
    """Resposta não-2xx da API REST do Discord."""

    def __init__(self, message: str, code: Optional[int] = None, status: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.status = status


# código do Discord -> classe de erro HTTP
DISCORD_CODE_ERRORS = {
    DISCORD_UNKNOWN_CHANNEL: NotFoundError,
    DISCORD_MISSING_PERMISSIONS: PermissionDeniedError,
    DISCORD_INVALID_FORM_BODY: MalformedRequestError,
}


def classify_error(exc: Exception) -> Tuple[Dict[str, str], int]:
    """
    Converte uma falha de resolução de canal, tradução, envio ou reação
    em (corpo JSON, status HTTP). Sempre registra o erro original.
    """
    logger.error("Erro ao enviar alerta: %r", exc)

    if isinstance(exc, AlertBotError) and not isinstance(exc, UnclassifiedError):
        return exc.to_response()

    error_cls = DISCORD_CODE_ERRORS.get(getattr(exc, "code", None))
    if error_cls is not None:
        return error_cls().to_response()

    return {"error": UnclassifiedError.public_message, "details": str(exc)}, UnclassifiedError.status
