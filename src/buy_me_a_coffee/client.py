from __future__ import annotations

import os
import re
from re import Pattern
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from .client_base import BaseAPIClient, APIClientDeserializationError
from .schema import MemberStatus, Membership, Page, Purchase, RecordId, Support


logger = logging.getLogger(__name__)

API_BASE_URL = "https://developers.buymeacoffee.com/api"

M = TypeVar("M", bound=BaseModel)


class BuyMeACoffeeConfigError(RuntimeError):
    """Raised when required environment configuration is missing or invalid."""


@dataclass(frozen=True)
class Resource:
    """A list endpoint and the message the API sends when it has no records."""

    path: str
    empty_sentinel: Pattern[str]


def _sentinel(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern


# The exact wording differs per endpoint ("No subscriptions",
# "No active memberships", "No supporters", ...). Override through the
# client's ``empty_sentinels`` argument if the API changes it.
DEFAULT_RESOURCES: Dict[str, Resource] = {
    "members": Resource(
        "/v1/subscriptions",
        _sentinel(r"^no( \w+)? (subscriptions|memberships|members)\b"),
    ),
    "supporters": Resource(
        "/v1/supporters",
        _sentinel(r"^no( \w+)? supporters\b"),
    ),
    "extras": Resource(
        "/v1/extras",
        _sentinel(r"^no( \w+)? (purchases|extras)\b"),
    ),
}


def _check_page(page: Any) -> int:
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValueError(f"page must be an integer >= 1, got {page!r}")
    return page


def _check_status(status: Union[MemberStatus, str]) -> MemberStatus:
    if isinstance(status, MemberStatus):
        return status
    if isinstance(status, str):
        try:
            return MemberStatus(status.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(s.value for s in MemberStatus)
    raise ValueError(f"status must be one of {allowed}, got {status!r}")


def _check_id(record_id: Any) -> str:
    if isinstance(record_id, bool) or not isinstance(record_id, (int, str)):
        raise ValueError(f"id must be an int or str, got {record_id!r}")
    text = str(record_id).strip()
    if not text:
        raise ValueError("id must not be empty")
    return quote(text, safe="")


class BuyMeACoffeeClient(BaseAPIClient):
    """
    Authenticated client for the Buy Me a Coffee developer API.

    One instance can be shared between threads: the token is fixed at
    construction and no call mutates client state. Pagination is left to
    the caller, e.g.::

        page_num = 1
        while True:
            try:
                page = client.members(MemberStatus.ACTIVE, page_num)
            except APIClientEmptyResult:
                break
            if page.is_empty:
                break
            ...
            page_num += 1

    Uses BaseAPIClient for all HTTP calls (session, timeout, JSON parsing).
    """

    def __init__(
        self,
        token: str,
        base_url: str = API_BASE_URL,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        empty_sentinels: Optional[Mapping[str, Union[str, Pattern[str]]]] = None,
    ) -> None:
        self._token = str(token)

        resources = dict(DEFAULT_RESOURCES)
        for name, pattern in (empty_sentinels or {}).items():
            if name not in resources:
                raise ValueError(f"Unknown resource family '{name}'")
            resources[name] = Resource(resources[name].path, _sentinel(pattern))
        self.resources: Mapping[str, Resource] = MappingProxyType(resources)

        super().__init__(
            base_url=base_url,
            default_headers={
                # Never log the token; just attach it to headers.
                "Authorization": f"Bearer {self._token}",
            },
            timeout=timeout,
            retries=retries,
        )
        logger.debug("BuyMeACoffeeClient initialized for %s", self.base_url)

    @classmethod
    def from_env(cls) -> "BuyMeACoffeeClient":
        """
        Build a client from BUYMEACOFFEE_* environment variables.

        BUYMEACOFFEE_ACCESS_TOKEN is required; BUYMEACOFFEE_BASE_URL and
        BUYMEACOFFEE_TIMEOUT_SEC are optional.
        """
        token = (os.getenv("BUYMEACOFFEE_ACCESS_TOKEN") or "").strip()
        if not token:
            raise BuyMeACoffeeConfigError(
                "BUYMEACOFFEE_ACCESS_TOKEN must be set to a personal access token."
            )

        base_url = os.getenv("BUYMEACOFFEE_BASE_URL") or API_BASE_URL

        timeout_raw = os.getenv("BUYMEACOFFEE_TIMEOUT_SEC", "15").strip()
        try:
            timeout_sec = float(timeout_raw)
        except ValueError as e:
            raise BuyMeACoffeeConfigError(
                f"BUYMEACOFFEE_TIMEOUT_SEC must be a number, got '{timeout_raw}'."
            ) from e
        if timeout_sec <= 0:
            raise BuyMeACoffeeConfigError(
                f"BUYMEACOFFEE_TIMEOUT_SEC must be positive, got '{timeout_raw}'."
            )

        return cls(token, base_url=base_url, timeout=timeout_sec)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(base_url={self.base_url!r}, "
            f"token={'*' * len(self._token)!r})"
        )

    # -------------------------------------------------
    # Public methods
    # -------------------------------------------------
    def members(
        self, status: Union[MemberStatus, str] = MemberStatus.ALL, page: int = 1
    ) -> Page[Membership]:
        """
        Return one page of memberships filtered by ``status``.

        Raises APIClientEmptyResult when the account has no memberships.
        """
        status = _check_status(status)
        page = _check_page(page)
        return self._list("members", Membership, {"status": status.value, "page": page})

    def supporters(self, page: int = 1) -> Page[Support]:
        """
        Return one page of one-time supporters.

        Raises APIClientEmptyResult when the account has no supporters.
        """
        return self._list("supporters", Support, {"page": _check_page(page)})

    def extras(self, page: int = 1) -> Page[Purchase]:
        """
        Return one page of extra purchases.

        Raises APIClientEmptyResult when the account has no extra purchases.
        """
        return self._list("extras", Purchase, {"page": _check_page(page)})

    def membership(self, membership_id: RecordId) -> Membership:
        """Return a single membership by its subscription id."""
        return self._get_one("members", Membership, membership_id)

    def support(self, support_id: RecordId) -> Support:
        """Return a single one-time support by id."""
        return self._get_one("supporters", Support, support_id)

    def extra(self, purchase_id: RecordId) -> Purchase:
        """Return a single extra purchase. ``purchase_id`` is Purchase.id, not Extra.id."""
        return self._get_one("extras", Purchase, purchase_id)

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    def _list(self, name: str, model: Type[M], params: Dict[str, Any]) -> Page[M]:
        resource = self.resources[name]
        payload = self.get_json(
            resource.path,
            params=params,
            empty_sentinel=resource.empty_sentinel,
        )
        return self._parse(Page[model], payload, resource.path)

    def _get_one(self, name: str, model: Type[M], record_id: Any) -> M:
        path = f"{self.resources[name].path}/{_check_id(record_id)}"
        payload = self.get_json(path)
        return self._parse(model, payload, path)

    def _parse(self, model: Type[M], payload: Any, path: str) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise APIClientDeserializationError(
                f"{model.__name__} did not match response: {e}",
                url=f"{self.base_url}{path}",
            ) from e
