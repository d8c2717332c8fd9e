"""Helper utilities shared across API route handlers."""

from fastapi import HTTPException, status

from app.domain.exceptions import (
    EmptyMessageError,
    MessagingError,
    StoreUnavailable,
    ThreadAccessDenied,
    ThreadCreationConflict,
    ThreadNotFound,
)

_STATUS_BY_ERROR: tuple[tuple[type[MessagingError], int, str], ...] = (
    (EmptyMessageError, status.HTTP_422_UNPROCESSABLE_ENTITY, "A mensagem não pode estar vazia"),
    (ThreadNotFound, status.HTTP_404_NOT_FOUND, "Conversa não encontrada"),
    (ThreadAccessDenied, status.HTTP_403_FORBIDDEN, "Você não participa desta conversa"),
    (
        ThreadCreationConflict,
        status.HTTP_409_CONFLICT,
        "Não foi possível iniciar a conversa, tente novamente",
    ),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE, "Falha ao enviar, tente novamente"),
)


def to_http_exception(exc: MessagingError) -> HTTPException:
    """Return the :class:`HTTPException` describing ``exc`` to the client."""

    for error_type, status_code, detail in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
