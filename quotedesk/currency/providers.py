"""Async httpx clients for the external USD rate providers.

Both providers answer with a payload shaped like
``{"base": "USD", "rates": {"BRL": 5.4169, ...}}``. Any failure (timeout,
transport error, non-2xx, malformed body, non-numeric or non-positive rate)
is raised as RateProviderError for the resolver to absorb.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

import httpx

from quotedesk.config import settings
from quotedesk.errors import RateProviderError

logger = logging.getLogger(__name__)


class HttpRateProvider:
    """GET `url`, read `rates[<currency>]`.

    The whole call, including connection setup, is bounded by `timeout`
    seconds so an outage cannot stall quotation rendering.
    """

    def __init__(self, name: str, url: str, timeout: float | None = None) -> None:
        self.name = name
        self._url = url
        self._timeout = timeout if timeout is not None else settings.rates.rate_provider_timeout
        self._headers = {"User-Agent": settings.rates.user_agent}

    async def fetch(self, currency: str) -> float:
        """Return units of `currency` per 1 USD."""
        try:
            async with asyncio.timeout(self._timeout):
                async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                    response = await client.get(self._url, headers=self._headers)
                    response.raise_for_status()
                    payload = response.json()
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise RateProviderError(self.name, "timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise RateProviderError(self.name, f"http_{exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RateProviderError(self.name, f"transport: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise RateProviderError(self.name, "invalid JSON") from exc

        return self._parse(payload, currency)

    def _parse(self, payload: Any, currency: str) -> float:
        if not isinstance(payload, dict) or not isinstance(payload.get("rates"), dict):
            raise RateProviderError(self.name, "payload has no 'rates' object")

        value = payload["rates"].get(currency.upper())
        # bool is an int subclass; a JSON true is not a rate
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise RateProviderError(self.name, f"non-numeric rate for {currency}: {value!r}")

        rate = float(value)
        if not math.isfinite(rate) or rate <= 0:
            raise RateProviderError(self.name, f"non-positive rate for {currency}: {rate}")

        logger.debug("%s returned %s=%.4f", self.name, currency, rate)
        return rate

    def __repr__(self) -> str:
        return f"<HttpRateProvider {self.name}>"


def build_primary_provider() -> HttpRateProvider:
    return HttpRateProvider("exchangerate-api", settings.rates.primary_rate_url)


def build_fallback_provider() -> HttpRateProvider:
    return HttpRateProvider("fixer", settings.rates.fallback_rate_url)
