from __future__ import annotations

from fastapi import HTTPException, status

from weather_dashboard.exceptions import GatewayErrorKind, WeatherGatewayError

STATUS_BY_KIND: dict[GatewayErrorKind, int] = {
    GatewayErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    GatewayErrorKind.CITY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    GatewayErrorKind.INVALID_CREDENTIALS: status.HTTP_502_BAD_GATEWAY,
    GatewayErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    GatewayErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    GatewayErrorKind.NETWORK_FAILURE: status.HTTP_504_GATEWAY_TIMEOUT,
    GatewayErrorKind.MALFORMED_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    GatewayErrorKind.UNKNOWN: status.HTTP_502_BAD_GATEWAY,
}


def gateway_http_exception(exc: WeatherGatewayError) -> HTTPException:
    """Translate a gateway error into a JSON error response.

    Upstream bodies and status codes stay in the logs; clients only see the
    error kind and the user-safe message.
    """
    return HTTPException(
        status_code=STATUS_BY_KIND.get(exc.kind, status.HTTP_502_BAD_GATEWAY),
        detail={"kind": exc.kind.value, "message": exc.message},
    )
