"""
Carrier-agnostic rate request / response schemas.

Validation happens here, once, before a request reaches any carrier.
"""
from typing import Annotated, Any, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from carrier_rates.core.enums import ServiceLevel
from carrier_rates.core.exceptions import ValidationError

MAX_PACKAGE_WEIGHT = 150
MAX_PACKAGE_LENGTH = 108
MAX_PACKAGES = 50

StreetLine = Annotated[str, StringConstraints(min_length=1)]


class BaseSchema(BaseModel):
    """Base schema: snake_case attributes, camelCase accepted on input and used on output"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Address(BaseSchema):
    street: List[StreetLine] = Field(min_length=1, max_length=3)
    city: str = Field(min_length=1, max_length=50)
    state: str = Field(min_length=2, max_length=2)
    postal_code: str = Field(min_length=5, max_length=10)
    country: str = Field(min_length=2, max_length=2)


class Package(BaseSchema):
    """Package weight (lbs) and dimensions (inches)"""
    weight: float = Field(gt=0, le=MAX_PACKAGE_WEIGHT)
    length: float = Field(gt=0, le=MAX_PACKAGE_LENGTH)
    width: float = Field(gt=0, le=MAX_PACKAGE_LENGTH)
    height: float = Field(gt=0, le=MAX_PACKAGE_LENGTH)


class RateRequest(BaseSchema):
    origin: Address
    destination: Address
    packages: List[Package] = Field(min_length=1, max_length=MAX_PACKAGES)
    service_level: Optional[ServiceLevel] = None


class RateQuote(BaseSchema):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    service_level: ServiceLevel
    service_name: str
    total_cost: float
    currency: str
    estimated_days: Optional[int] = None
    carrier: str


class RateResponse(BaseSchema):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    quotes: Tuple[RateQuote, ...]
    request_id: str


def _format_errors(errors: List[dict]) -> str:
    return ", ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in errors
    )


def validate_rate_request(data: Union[RateRequest, Mapping[str, Any]]) -> RateRequest:
    """
    Validate caller input into a RateRequest.

    Args:
        data: A RateRequest (validated again, it may have been changed since
            construction) or a plain mapping (snake_case or camelCase keys)

    Returns:
        RateRequest: The validated request

    Raises:
        ValidationError: If the input does not satisfy the request constraints
    """
    if isinstance(data, RateRequest):
        data = data.model_dump(warnings=False)
    elif not isinstance(data, Mapping):
        raise ValidationError(f"Invalid rate request: expected an object, got {type(data).__name__}")

    try:
        return RateRequest.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        raise ValidationError(
            f"Invalid rate request: {_format_errors(errors)}",
            details={"validation_errors": errors},
            cause=e,
        ) from e
