from .stub_http_client import StubHttpClient, json_response, text_response
from .ups_payloads import AUTH_URL, BASE_URL, RATING_URL, rate_payload, rated_shipment, token_payload
