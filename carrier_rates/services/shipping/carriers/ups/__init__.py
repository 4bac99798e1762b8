from .carrier import UpsRateCarrier
from .client import UpsRateClient, classify_status
from .mapper import UpsRateMapper
from .register import build_ups_carrier, register_ups_carrier
