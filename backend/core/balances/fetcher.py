"""
Balance fetching through the balance relay.

One relay round-trip per (address, network), consulting the TTL cache first.
Failures never raise: they come back as a BalanceView with an error message,
so one network failing does not block the others.
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Callable

import httpx
from loguru import logger

from core.balances.cache import BalanceCache
from core.errors import BalanceFetchFailed
from core.networks import NetworkDescriptor
from core.paths import API_TIMEOUT, BALANCE_RELAY_URL, RATE_LIMIT_DELAY

# =============================================================================
# CONFIGURATION
# =============================================================================
MAX_FRACTION_DIGITS = 6


# =============================================================================
# DATA MODELS
# =============================================================================


@dataclass(frozen=True)
class BalanceView:
    """Result of one fetch attempt. On error the numeric fields are zero."""

    address: str
    network_id: str
    raw_balance: str
    formatted_balance: str
    observed_at: float
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# FORMATTING
# =============================================================================


def parse_balance(value: Any) -> int:
    """Parse a hex ("0x...") or decimal balance into a non-negative int."""
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            result = int(text[2:], 16)
        else:
            result = int(text, 10)
    else:
        raise TypeError(f"Unsupported balance type: {type(value).__name__}")

    if result < 0:
        raise ValueError("Balance cannot be negative")
    return result


def format_balance(raw: str | int, decimals: int = 18) -> str:
    """
    Render a raw integer balance in whole units.

    Floors to at most 6 fractional digits, trailing zeros stripped.
    Unparsable input renders as "0".

    Examples:
        >>> format_balance("1500000000000000000", 18)
        '1.5'
        >>> format_balance("1000000", 6)
        '1'
    """
    try:
        value = parse_balance(raw)
    except (TypeError, ValueError):
        return "0"

    if decimals <= 0:
        return str(value)

    integer_part, remainder = divmod(value, 10**decimals)
    if remainder == 0:
        return str(integer_part)

    fraction = str(remainder).zfill(decimals).rstrip("0")[:MAX_FRACTION_DIGITS]
    if not fraction:
        return str(integer_part)

    return f"{integer_part}.{fraction}"


# =============================================================================
# BALANCE FETCHER
# =============================================================================


class BalanceFetcher:
    """
    Fetches native balances from the relay with a TTL cache in front.

    Args:
        relay_url: Relay endpoint accepting {address, networkId}.
        cache: Shared BalanceCache (a private one is created if omitted).
        client: Optional httpx.AsyncClient owned by the caller.
        timeout: Upper bound in seconds for one round-trip.
    """

    def __init__(
        self,
        relay_url: str = BALANCE_RELAY_URL,
        cache: BalanceCache | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = API_TIMEOUT,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.relay_url = relay_url
        # BalanceCache defines __len__, so an empty cache is falsy
        self.cache = cache if cache is not None else BalanceCache()
        self.timeout = timeout
        self.clock = clock or self.cache.clock
        self._client = client

    async def _post(self, payload: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.relay_url, json=payload)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.relay_url, json=payload)

    async def _request_balance(self, address: str, network_id: str) -> int:
        """One relay round-trip. Raises BalanceFetchFailed on any failure."""
        payload = {"address": address, "networkId": network_id}

        try:
            resp = await asyncio.wait_for(self._post(payload), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise BalanceFetchFailed("Request timed out") from e
        except httpx.RequestError as e:
            raise BalanceFetchFailed(f"Request failed: {type(e).__name__}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise BalanceFetchFailed(message or f"HTTP {resp.status_code}")

        if not isinstance(data, dict):
            raise BalanceFetchFailed("Malformed response")

        balance = data.get("balance")
        if not data.get("success") or balance in (None, ""):
            raise BalanceFetchFailed(data.get("error") or "API failed")

        try:
            return parse_balance(balance)
        except (TypeError, ValueError) as e:
            raise BalanceFetchFailed(f"Malformed balance: {balance!r}") from e

    async def get_balance(self, address: str, network: NetworkDescriptor) -> BalanceView:
        """Balance for one address on one network; cached for the TTL."""
        cached = self.cache.get(address, network.id)
        if cached is not None:
            logger.debug(f"Cache hit for {address} on {network.id}")
            return BalanceView(
                address=address,
                network_id=network.id,
                raw_balance=cached.raw_balance,
                formatted_balance=format_balance(cached.raw_balance, network.native_decimals),
                observed_at=cached.observed_at,
            )

        try:
            value = await self._request_balance(address, network.id)
        except BalanceFetchFailed as e:
            logger.warning(f"Balance fetch failed for {address} on {network.id}: {e}")
            return BalanceView(
                address=address,
                network_id=network.id,
                raw_balance="0",
                formatted_balance="0",
                observed_at=self.clock(),
                error=str(e),
            )

        entry = self.cache.put(address, network.id, str(value))
        return BalanceView(
            address=address,
            network_id=network.id,
            raw_balance=entry.raw_balance,
            formatted_balance=format_balance(entry.raw_balance, network.native_decimals),
            observed_at=entry.observed_at,
        )

    async def get_balances_for_wallet(
        self,
        addresses: dict[str, str],
        networks: list[NetworkDescriptor],
        pacing_delay: float = RATE_LIMIT_DELAY,
    ) -> list[BalanceView]:
        """
        Fetch every network of one wallet, sequentially and in order.

        Networks without a matching address are skipped. Requests after the
        first wait pacing_delay seconds to stay under upstream rate limits.
        """
        results: list[BalanceView] = []

        for network in networks:
            address = addresses.get(network.address_key)
            if not address:
                continue

            if results:
                await asyncio.sleep(pacing_delay)

            results.append(await self.get_balance(address, network))

        return results
