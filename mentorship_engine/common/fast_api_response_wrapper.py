from http import HTTPStatus

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _envelope(success: bool, message: str, data, status_code: HTTPStatus) -> JSONResponse:
    # DTOs are emitted with their camelCase aliases.
    body = jsonable_encoder(
        {"success": success, "message": message, "data": data}, by_alias=True
    )
    return JSONResponse(status_code=status_code.value, content=body)


def api_response(
    message: str,
    data=None,
    status_code: HTTPStatus = HTTPStatus.OK,
) -> JSONResponse:
    """
    Wrap a successful result in the engine's `{success, message, data}` envelope.

    Args:
        message (str): Human-readable outcome, e.g. "Cycle launched.".
        data: A DTO, a list of DTOs, a dict or None.
        status_code (HTTPStatus): 200 unless the endpoint created something.

    Example:
        return api_response(
            message="Certificate issued.",
            data=certificate,
            status_code=HTTPStatus.CREATED,
        )
    """
    return _envelope(True, message, data, status_code)


def api_error(message: str, status_code: HTTPStatus) -> JSONResponse:
    """Envelope for a refused request: `success` is false and `data` is null."""
    return _envelope(False, message, None, status_code)
