from typing import Any, Optional
from fastapi.responses import ORJSONResponse


def generate_response(
    status_code: int,
    response_message: str,
    customer_message: str,
    body: Optional[Any] = None,
) -> ORJSONResponse:
    """
    Build the standard response envelope.

    Args:
        status_code: HTTP status code, repeated in the payload
        response_message: Message for API consumers
        customer_message: Message safe to show end users
        body: Response data

    Returns:
        ORJSONResponse: The enveloped response
    """
    return ORJSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "response_message": response_message,
            "customer_message": customer_message,
            "body": body,
        },
    )
