from __future__ import annotations

from pydantic import ValidationError

from app.exceptions import InvalidPostalCode, MalformedBody, MethodNotAllowed
from app.models.schemas import ZipcodeRequest

ZIPCODE_LENGTH = 8


def validate_lookup_request(body: bytes, method: str, allowed_method: str) -> ZipcodeRequest:
    """
    Turn a raw inbound body into a ZipcodeRequest or raise.

    Only the length of the zipcode is checked; digits are not enforced.
    """
    if method.upper() != allowed_method.upper():
        raise MethodNotAllowed()

    try:
        request = ZipcodeRequest.model_validate_json(body)
    except ValidationError as exc:
        raise MalformedBody() from exc

    if len(request.zipcode) != ZIPCODE_LENGTH:
        raise InvalidPostalCode()

    return request
