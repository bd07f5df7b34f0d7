from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr


class ZipcodeRequest(BaseModel):
    """Inbound lookup request. Only shape is checked here; length is checked by the validator."""

    model_config = ConfigDict(frozen=True)

    zipcode: StrictStr


class LocalityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    locality_name: str = ""
    found: bool = False


class WeatherReport(BaseModel):
    # NaN and infinities would serialize as null.
    model_config = ConfigDict(allow_inf_nan=False)

    city: str
    temp_c: float
    temp_f: float
    temp_k: float


class ErrorResponse(BaseModel):
    detail: str
    code: str


# Upstream payloads. Strict so a mistyped field is a parse failure, not a silent coercion.


class LocalityPayload(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True)

    localidade: StrictStr = ""
    # The real API sends `"erro": true`; older docs describe a string.
    erro: StrictStr | StrictBool | None = None

    @property
    def not_found(self) -> bool:
        if isinstance(self.erro, bool):
            return self.erro
        return bool(self.erro)


class WeatherLocation(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True)

    name: StrictStr


class WeatherCurrent(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True, allow_inf_nan=False)

    temp_c: float
    temp_f: float


class WeatherPayload(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True)

    location: WeatherLocation
    current: WeatherCurrent
