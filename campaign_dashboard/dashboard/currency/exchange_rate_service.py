"""
Exchange Rate Service

Owns the process-wide USD -> BRL rate used to reconcile campaigns recorded in
different currencies.

- get_rate() never blocks: it returns whatever is cached. Before the first
  successful fetch that is the fallback constant (5.50 by default).
- refresh() is the only call that does I/O. It asks AwesomeAPI for the latest
  quote and replaces the cache on success. On failure the cache is left alone
  and RateFetchFailed is raised; the dashboard keeps working on the stale rate.
- Concurrent refresh() calls share one in-flight request.

AwesomeAPI response shape (GET /json/last/USD-BRL):

    {"USDBRL": {"code": "USD", "codein": "BRL", "bid": "5.4321",
                "ask": "5.4331", "timestamp": "1721650000", ...}}
"""

import math
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
import logging

import requests

from ...config import config
from ...utils.timezone_utils import from_epoch_seconds, format_for_display

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = 'fallback'
AWESOMEAPI_SOURCE = 'awesomeapi'
CAMPAIGN_SOURCE = 'campaign'


@dataclass(frozen=True)
class ExchangeRate:
    """
    A USD -> BRL multiplier.

    fetched_at is the time of the successful fetch that produced it (aware,
    UTC), or None for the built-in fallback and for rates cached on a
    campaign record.
    """
    rate: float
    fetched_at: Optional[datetime] = None
    source: str = FALLBACK_SOURCE

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rate': self.rate,
            'fetched_at': self.fetched_at.isoformat() if self.fetched_at else None,
            'last_updated': format_for_display(self.fetched_at) if self.fetched_at else None,
            'source': self.source,
            'is_fallback': self.is_fallback
        }


class RateFetchFailed(Exception):
    """
    Advisory: a refresh did not produce a new rate.

    The provider still holds a usable rate, available as `current`.
    """

    def __init__(self, message: str, current: ExchangeRate, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.current = current
        self.cause = cause


def format_exchange_rate(rate: float) -> str:
    """Render a USD -> BRL rate the way the rate badge shows it: R$ 5.5000"""
    return f"R$ {rate:.4f}"


class ExchangeRateProvider:
    """Single cache cell for the USD -> BRL rate, refreshed on demand"""

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None,
                 fallback_rate: Optional[float] = None, session: Optional[requests.Session] = None):
        self.api_url = api_url or config.EXCHANGE_RATE_API_URL
        self.timeout = timeout if timeout is not None else config.EXCHANGE_RATE_TIMEOUT
        fallback = fallback_rate if fallback_rate is not None else config.FALLBACK_EXCHANGE_RATE
        if not math.isfinite(fallback) or fallback <= 0:
            raise ValueError(f"Fallback exchange rate must be positive, got {fallback}")
        self._session = session
        self._current = ExchangeRate(rate=fallback)
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None
        self._lazy_attempted = False
        self.last_error: Optional[str] = None

    def get_rate(self) -> ExchangeRate:
        """Current cached rate. Never blocks, never None."""
        return self._current

    def refresh(self) -> ExchangeRate:
        """
        Fetch the latest rate and install it.

        If another thread is already refreshing, wait for and return that
        result instead of issuing a second request.

        Returns:
            ExchangeRate: The freshly installed rate

        Raises:
            RateFetchFailed: the fetch failed; the cache is unchanged
        """
        with self._lock:
            inflight = self._inflight
            owner = inflight is None
            if owner:
                inflight = Future()
                self._inflight = inflight

        if not owner:
            logger.debug("Exchange rate refresh already in flight, waiting for it")
            return inflight.result()

        try:
            exchange_rate = self._fetch()
        except RateFetchFailed as e:
            self.last_error = str(e)
            logger.warning(f"Exchange rate refresh failed, keeping {self._current.rate}: {e}")
            inflight.set_exception(e)
            raise
        except Exception as e:
            inflight.set_exception(e)
            raise
        else:
            self._current = exchange_rate
            self.last_error = None
            logger.info(f"Exchange rate updated: USD->BRL {exchange_rate.rate} ({exchange_rate.fetched_at.isoformat()})")
            inflight.set_result(exchange_rate)
            return exchange_rate
        finally:
            with self._lock:
                self._inflight = None

    def try_refresh(self) -> Tuple[ExchangeRate, Optional[str]]:
        """
        refresh() without raising.

        Returns:
            tuple: (rate, error) where rate is the rate now in the cache and
            error is None on success or the failure message
        """
        try:
            return self.refresh(), None
        except RateFetchFailed as e:
            return e.current, str(e)

    def ensure_rate(self) -> ExchangeRate:
        """
        Lazy first refresh: fetch at most once, and only while still serving
        the fallback.

        A failure is logged and the fallback is returned. Later calls return
        the cached rate without fetching; only refresh() tries again.
        """
        with self._lock:
            current = self._current
            if not current.is_fallback or self._lazy_attempted:
                return current
            self._lazy_attempted = True
        rate, _ = self.try_refresh()
        return rate

    def _fetch(self) -> ExchangeRate:
        http = self._session or requests
        try:
            response = http.get(self.api_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 'unknown'
            raise RateFetchFailed(f"Exchange rate API returned status {status}", self._current, e) from e
        except (requests.exceptions.JSONDecodeError, ValueError) as e:
            raise RateFetchFailed(f"Exchange rate API returned invalid JSON: {e}", self._current, e) from e
        except requests.exceptions.RequestException as e:
            raise RateFetchFailed(f"Exchange rate API request failed: {e}", self._current, e) from e

        return self._parse(payload)

    def _parse(self, payload: Any) -> ExchangeRate:
        try:
            quote = payload['USDBRL']
            rate = float(quote['bid'])
            fetched_at = from_epoch_seconds(quote['timestamp'])
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            raise RateFetchFailed(f"Malformed exchange rate response: {e!r}", self._current, e) from e

        if not math.isfinite(rate) or rate <= 0:
            raise RateFetchFailed(f"Exchange rate API returned non-positive rate {rate}", self._current)

        return ExchangeRate(rate=rate, fetched_at=fetched_at, source=AWESOMEAPI_SOURCE)


# Process-wide provider
exchange_rate_provider = ExchangeRateProvider()
