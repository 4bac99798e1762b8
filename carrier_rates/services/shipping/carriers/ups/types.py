"""
UPS Rating API wire types.

Only the response fields the mapper reads are modelled; everything else in
the UPS payload is accepted and ignored.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carrier_rates.core.enums import ServiceLevel

UPS_CARRIER_NAME = "UPS"
UPS_RATING_PATH = "/api/rating/v1/Rate"
UPS_SUCCESS_STATUS = "1"

UPS_SERVICE_CODES: Dict[ServiceLevel, str] = {
    ServiceLevel.GROUND: "03",
    ServiceLevel.NEXT_DAY_AIR: "01",
    ServiceLevel.SECOND_DAY_AIR: "02",
    ServiceLevel.THREE_DAY_SELECT: "12",
    ServiceLevel.NEXT_DAY_AIR_EARLY: "14",
    ServiceLevel.SECOND_DAY_AIR_AM: "59",
    ServiceLevel.WORLDWIDE_EXPRESS: "07",
    ServiceLevel.WORLDWIDE_EXPRESS_PLUS: "54",
    ServiceLevel.WORLDWIDE_EXPEDITED: "08",
    ServiceLevel.STANDARD: "11",
    ServiceLevel.EXPRESS: "07",
}

UPS_SERVICE_NAMES: Dict[ServiceLevel, str] = {
    ServiceLevel.GROUND: "UPS Ground",
    ServiceLevel.NEXT_DAY_AIR: "UPS Next Day Air",
    ServiceLevel.SECOND_DAY_AIR: "UPS 2nd Day Air",
    ServiceLevel.THREE_DAY_SELECT: "UPS 3 Day Select",
    ServiceLevel.NEXT_DAY_AIR_EARLY: "UPS Next Day Air Early",
    ServiceLevel.SECOND_DAY_AIR_AM: "UPS 2nd Day Air A.M.",
    ServiceLevel.WORLDWIDE_EXPRESS: "UPS Worldwide Express",
    ServiceLevel.WORLDWIDE_EXPRESS_PLUS: "UPS Worldwide Express Plus",
    ServiceLevel.WORLDWIDE_EXPEDITED: "UPS Worldwide Expedited",
    ServiceLevel.STANDARD: "UPS Standard",
    ServiceLevel.EXPRESS: "UPS Express",
}

# "07" is shared by worldwideExpress and express; responses report the former
UPS_CODE_TO_SERVICE_LEVEL: Dict[str, ServiceLevel] = {
    "03": ServiceLevel.GROUND,
    "01": ServiceLevel.NEXT_DAY_AIR,
    "02": ServiceLevel.SECOND_DAY_AIR,
    "12": ServiceLevel.THREE_DAY_SELECT,
    "14": ServiceLevel.NEXT_DAY_AIR_EARLY,
    "59": ServiceLevel.SECOND_DAY_AIR_AM,
    "07": ServiceLevel.WORLDWIDE_EXPRESS,
    "54": ServiceLevel.WORLDWIDE_EXPRESS_PLUS,
    "08": ServiceLevel.WORLDWIDE_EXPEDITED,
    "11": ServiceLevel.STANDARD,
}


def _as_list(value):
    # UPS sends a bare object instead of a one-element array
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return value


class UpsModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class UpsCodeDescription(UpsModel):
    code: str = Field(alias="Code")
    description: Optional[str] = Field(default=None, alias="Description")


class UpsMoney(UpsModel):
    currency_code: str = Field(alias="CurrencyCode")
    monetary_value: str = Field(alias="MonetaryValue")


class UpsNegotiatedRateCharges(UpsModel):
    total_charge: UpsMoney = Field(alias="TotalCharge")


class UpsGuaranteedDelivery(UpsModel):
    date: Optional[str] = Field(default=None, alias="Date")
    time: Optional[str] = Field(default=None, alias="Time")
    business_days_in_transit: Optional[str] = Field(default=None, alias="BusinessDaysInTransit")


class UpsRatedShipment(UpsModel):
    service: UpsCodeDescription = Field(alias="Service")
    total_charges: UpsMoney = Field(alias="TotalCharges")
    total_charges_with_taxes: Optional[UpsMoney] = Field(default=None, alias="TotalChargesWithTaxes")
    negotiated_rate_charges: Optional[UpsNegotiatedRateCharges] = Field(default=None, alias="NegotiatedRateCharges")
    guaranteed_delivery: Optional[UpsGuaranteedDelivery] = Field(default=None, alias="GuaranteedDelivery")


class UpsResponseStatus(UpsModel):
    code: str = Field(alias="Code")
    description: str = Field(default="", alias="Description")


class UpsResponseMeta(UpsModel):
    response_status: UpsResponseStatus = Field(alias="ResponseStatus")
    alert: List[UpsCodeDescription] = Field(default_factory=list, alias="Alert")

    @field_validator("alert", mode="before")
    @classmethod
    def wrap_single_alert(cls, value):
        return _as_list(value)


class UpsRateResponseBody(UpsModel):
    response: UpsResponseMeta = Field(alias="Response")
    rated_shipment: List[UpsRatedShipment] = Field(default_factory=list, alias="RatedShipment")

    @field_validator("rated_shipment", mode="before")
    @classmethod
    def wrap_single_shipment(cls, value):
        return _as_list(value)


class UpsRateResponse(UpsModel):
    rate_response: UpsRateResponseBody = Field(alias="RateResponse")
