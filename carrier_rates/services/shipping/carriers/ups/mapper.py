"""
UPS Rate Mapper

Translates carrier-agnostic rate requests into the UPS Rating API payload and
UPS responses back into RateResponse.
"""

import logging
import math
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from carrier_rates.core.enums import ErrorCode, ServiceLevel
from carrier_rates.core.exceptions import CarrierError, ValidationError
from carrier_rates.schemas.rates import Address, Package, RateQuote, RateRequest, RateResponse

from .types import (
    UPS_CARRIER_NAME,
    UPS_CODE_TO_SERVICE_LEVEL,
    UPS_SERVICE_CODES,
    UPS_SERVICE_NAMES,
    UPS_SUCCESS_STATUS,
    UpsMoney,
    UpsRatedShipment,
    UpsRateResponse,
)

logger = logging.getLogger(__name__)

MS_PER_DAY = 86400000


def _now_ms() -> float:
    return time.time() * 1000


def _parse_delivery_date(value: str) -> Optional[datetime]:
    """UPS sends YYYYMMDD; ISO dates are accepted too"""
    for parse in (lambda v: datetime.strptime(v, "%Y%m%d"), datetime.fromisoformat):
        try:
            parsed = parse(value)
        except ValueError:
            continue
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


class UpsRateMapper:

    def __init__(
        self,
        account_number: Optional[str] = None,
        service_codes: Optional[Mapping[ServiceLevel, str]] = None,
        now: Optional[Callable[[], float]] = None,
    ):
        self.account_number = account_number or None
        self.service_codes = dict(service_codes if service_codes is not None else UPS_SERVICE_CODES)
        self._now = now or _now_ms

    def supports_service_level(self, service_level: Any) -> bool:
        try:
            return ServiceLevel(service_level) in self.service_codes
        except ValueError:
            return False

    def to_wire_request(self, request: RateRequest) -> Dict[str, Any]:
        """
        Build the UPS Rating API request body

        Raises:
            ValidationError: If the requested service level has no UPS service code
        """
        shipper: Dict[str, Any] = {"Address": self._to_ups_address(request.origin)}
        if self.account_number:
            shipper["ShipperNumber"] = self.account_number

        shipment: Dict[str, Any] = {
            "Shipper": shipper,
            "ShipTo": {"Address": self._to_ups_address(request.destination)},
            "Package": [self._to_ups_package(pkg) for pkg in request.packages],
        }
        if self.account_number:
            shipment["ShipmentRatingOptions"] = {"NegotiatedRatesIndicator": ""}

        if request.service_level is not None:
            service_level = self._resolve_service_level(request.service_level)
            shipment["Service"] = {
                "Code": self.service_codes[service_level],
                "Description": UPS_SERVICE_NAMES.get(service_level, ""),
            }

        return {
            "RateRequest": {
                "Request": {"RequestOption": "Rate" if request.service_level is not None else "Shop"},
                "Shipment": shipment,
            }
        }

    def from_wire_response(self, response: UpsRateResponse, request_id: str) -> RateResponse:
        """
        Normalize a parsed UPS response

        Raises:
            CarrierError: API_ERROR if UPS reports failure or returns no quotes,
                MALFORMED_RESPONSE if a charge is not a number
        """
        body = response.rate_response
        status = body.response.response_status

        if status.code != UPS_SUCCESS_STATUS:
            alerts = [alert.description or alert.code for alert in body.response.alert]
            raise CarrierError(
                ErrorCode.API_ERROR,
                f"UPS API error: {status.description}. {'; '.join(alerts)}".strip(),
                UPS_CARRIER_NAME,
                details={"code": status.code, "alerts": alerts},
            )

        if not body.rated_shipment:
            raise CarrierError(
                ErrorCode.API_ERROR,
                "UPS API returned no rate quotes",
                UPS_CARRIER_NAME,
            )

        quotes = tuple(self._to_quote(shipment) for shipment in body.rated_shipment)
        logger.debug(f"Mapped {len(quotes)} UPS quotes for request {request_id}")
        return RateResponse(quotes=quotes, request_id=request_id)

    def _resolve_service_level(self, value: Any) -> ServiceLevel:
        try:
            service_level = ServiceLevel(value)
        except ValueError:
            service_level = None
        if service_level is None or service_level not in self.service_codes:
            raise ValidationError(
                f"Unsupported service level: {getattr(value, 'value', value)}",
                details={"carrier": UPS_CARRIER_NAME},
            )
        return service_level

    def _to_quote(self, shipment: UpsRatedShipment) -> RateQuote:
        service_level = UPS_CODE_TO_SERVICE_LEVEL.get(shipment.service.code, ServiceLevel.EXPRESS)

        # negotiated (account) pricing wins over the published rate
        if shipment.negotiated_rate_charges is not None:
            charges = shipment.negotiated_rate_charges.total_charge
        elif shipment.total_charges_with_taxes is not None:
            charges = shipment.total_charges_with_taxes
        else:
            charges = shipment.total_charges

        return RateQuote(
            service_level=service_level,
            service_name=shipment.service.description or UPS_SERVICE_NAMES.get(service_level, "Unknown"),
            total_cost=self._parse_amount(charges),
            currency=charges.currency_code,
            estimated_days=self._estimated_days(shipment),
            carrier=UPS_CARRIER_NAME,
        )

    def _parse_amount(self, charges: UpsMoney) -> float:
        try:
            amount = float(charges.monetary_value)
        except ValueError as e:
            raise CarrierError(
                ErrorCode.MALFORMED_RESPONSE,
                f"UPS returned a non-numeric charge: {charges.monetary_value!r}",
                UPS_CARRIER_NAME,
                cause=e,
            ) from e
        if not math.isfinite(amount):
            raise CarrierError(
                ErrorCode.MALFORMED_RESPONSE,
                f"UPS returned a non-numeric charge: {charges.monetary_value!r}",
                UPS_CARRIER_NAME,
            )
        return amount

    def _estimated_days(self, shipment: UpsRatedShipment) -> Optional[int]:
        delivery = shipment.guaranteed_delivery
        if delivery is None or not delivery.date:
            return None
        delivery_date = _parse_delivery_date(delivery.date)
        if delivery_date is None:
            logger.debug(f"Ignoring unparseable UPS delivery date: {delivery.date}")
            return None
        return math.ceil((delivery_date.timestamp() * 1000 - self._now()) / MS_PER_DAY)

    @staticmethod
    def _to_ups_address(address: Address) -> Dict[str, Any]:
        return {
            "AddressLine": list(address.street),
            "City": address.city,
            "StateProvinceCode": address.state,
            "PostalCode": address.postal_code,
            "CountryCode": address.country,
        }

    @staticmethod
    def _to_ups_package(pkg: Package) -> Dict[str, Any]:
        return {
            "PackagingType": {"Code": "02", "Description": "Package"},
            "Dimensions": {
                "UnitOfMeasurement": {"Code": "IN"},
                "Length": _format_number(pkg.length),
                "Width": _format_number(pkg.width),
                "Height": _format_number(pkg.height),
            },
            "PackageWeight": {
                "UnitOfMeasurement": {"Code": "LBS"},
                "Weight": _format_number(pkg.weight),
            },
        }


def _format_number(value: float) -> str:
    """5.0 -> "5", 5.25 -> "5.25", 0.00001 -> "0.00001"; never exponent notation."""
    return f"{float(value):.6f}".rstrip("0").rstrip(".")
