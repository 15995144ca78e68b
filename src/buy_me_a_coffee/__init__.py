"""
buy_me_a_coffee - typed client for the Buy Me a Coffee developer API

Fetches memberships, one-time supporters and extra purchases with a
personal access token and returns them as immutable pydantic records.

Usage:
------
    from buy_me_a_coffee import BuyMeACoffeeClient, MemberStatus, APIClientEmptyResult

    client = BuyMeACoffeeClient("personal access token here")

    try:
        page = client.members(MemberStatus.ACTIVE, page=1)
    except APIClientEmptyResult:
        page = None  # nobody has joined yet

Errors:
-------
Every failure is an APIClientError:

    APIClientTransportError        - no HTTP response (APIClientTimeout for timeouts)
    APIClientHTTPError             - API rejected the request (.status_code, .message)
    APIClientEmptyResult           - "No subscriptions"-style answer; treat as zero items
    APIClientDeserializationError  - response did not match the expected shape

Configuration:
--------------
BuyMeACoffeeClient.from_env() reads:

    BUYMEACOFFEE_ACCESS_TOKEN  - Personal access token (required)
    BUYMEACOFFEE_BASE_URL      - Override the API base URL
    BUYMEACOFFEE_TIMEOUT_SEC   - Request timeout (default: 15)
"""

# -----------------------------------------------------------------------------
# Transport and error taxonomy
# -----------------------------------------------------------------------------
from .client_base import (
    BaseAPIClient,
    APIClientError,
    APIClientTransportError,
    APIClientTimeout,
    APIClientHTTPError,
    APIClientEmptyResult,
    APIClientDeserializationError,
)

# -----------------------------------------------------------------------------
# Buy Me a Coffee client
# -----------------------------------------------------------------------------
from .client import (
    API_BASE_URL,
    BuyMeACoffeeClient,
    BuyMeACoffeeConfigError,
    Resource,
)

# -----------------------------------------------------------------------------
# Response records
# -----------------------------------------------------------------------------
from .schema import Extra, MemberStatus, Membership, Page, Purchase, Support

from .version import __version__


__all__ = [
    # Base client and errors
    "BaseAPIClient",
    "APIClientError",
    "APIClientTransportError",
    "APIClientTimeout",
    "APIClientHTTPError",
    "APIClientEmptyResult",
    "APIClientDeserializationError",
    # Buy Me a Coffee client
    "API_BASE_URL",
    "BuyMeACoffeeClient",
    "BuyMeACoffeeConfigError",
    "Resource",
    # Schema
    "Extra",
    "MemberStatus",
    "Membership",
    "Page",
    "Purchase",
    "Support",
    "__version__",
]
