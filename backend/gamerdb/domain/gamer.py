from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class InvalidGamerInput(ValueError):
    """Request payload could not be decoded into a gamer profile."""

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class GamerInput(BaseModel):
    """Client-supplied fields. `id`/`createdAt` in a payload are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    phone_number: str = Field(default="", alias="phoneNumber")
    attribute: str = ""

    @field_validator("name", "phone_number", "attribute", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class GamerRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    created_at: int = Field(alias="createdAt")
    name: str = ""
    phone_number: str = Field(default="", alias="phoneNumber")
    attribute: str = ""

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_item(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> GamerRecord:
        # The resource layer hands numbers back as Decimal.
        data = dict(item)
        if "createdAt" in data and data["createdAt"] is not None:
            ts = data["createdAt"]
            if isinstance(ts, str):
                ts = ts.strip()
            num = ts if isinstance(ts, Decimal) else Decimal(ts)
            if num != num.to_integral_value():
                raise ValueError(f"createdAt is not a whole number of seconds: {ts!r}")
            data["createdAt"] = int(num)
        return cls.model_validate(data)


def parse_gamer_input(payload: str | bytes | dict[str, Any] | None) -> GamerInput:
    if payload is None or (isinstance(payload, (str, bytes)) and not payload.strip()):
        raise InvalidGamerInput("Request body is required")
    try:
        if isinstance(payload, (str, bytes)):
            return GamerInput.model_validate_json(payload)
        return GamerInput.model_validate(payload)
    except ValidationError as e:
        raise InvalidGamerInput(
            "Invalid request body",
            errors=[
                {
                    "path": ".".join(str(x) for x in (err.get("loc") or ())),
                    "message": err.get("msg", "Invalid value"),
                    "type": err.get("type"),
                }
                for err in e.errors()
            ],
        ) from e
