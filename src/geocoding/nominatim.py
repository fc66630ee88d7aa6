import requests
import time
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from src.errors import AddressUnresolvable

# Constants
NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "YelpCampApp/1.0"
REQUEST_TIMEOUT = 10
RATE_LIMIT_DELAY = 1.1
MAX_RETRIES = 3

# Get logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAddress:
    lat: float
    lng: float
    formatted_address: str


# Cache to minimize API calls for the same free-text address
# Format: {normalized_query: ResolvedAddress}
geocoding_cache = {}

# Add lock for thread-safe cache access
cache_lock = Lock()

# Nominatim allows one request per second from a client
_last_request_at = 0.0
rate_lock = Lock()


def _wait_for_rate_limit():
    global _last_request_at
    with rate_lock:
        elapsed = time.monotonic() - _last_request_at
        if elapsed < RATE_LIMIT_DELAY:
            time.sleep(RATE_LIMIT_DELAY - elapsed)
        _last_request_at = time.monotonic()


def resolve_address(text, user_agent: Optional[str] = None) -> ResolvedAddress:
    """Geocode a free-text address, raising AddressUnresolvable when nothing matches."""
    cache_key = " ".join((text or "").split()).lower()
    if not cache_key:
        raise AddressUnresolvable()

    # Check cache first to avoid redundant API calls
    with cache_lock:
        if cache_key in geocoding_cache:
            return geocoding_cache[cache_key]

    params = {
        "q": text,
        "format": "json",
        "limit": 1,
        "addressdetails": 0
    }
    headers = {
        "User-Agent": user_agent or USER_AGENT
    }

    retries = 0
    while retries < MAX_RETRIES:
        try:
            _wait_for_rate_limit()

            response = requests.get(
                NOMINATIM_BASE_URL,
                params=params,
                headers=headers,
                timeout=REQUEST_TIMEOUT
            )

            if response.status_code == 200:
                results = response.json()
                if not results:
                    logger.warning(f"No match found for address '{text}'")
                    raise AddressUnresolvable()

                first = results[0]
                resolved = ResolvedAddress(
                    lat=float(first["lat"]),
                    lng=float(first["lon"]),
                    formatted_address=first.get("display_name") or text,
                )
                with cache_lock:
                    geocoding_cache[cache_key] = resolved
                logger.info(f"Successfully geocoded '{text}' to ({resolved.lat}, {resolved.lng})")
                return resolved

            retries += 1
            wait_time = RATE_LIMIT_DELAY * (retries + 1)
            logger.warning(f"Geocoding HTTP error ({response.status_code}) for '{text}'. Retrying in {wait_time}s... (Attempt {retries}/{MAX_RETRIES})")
            time.sleep(wait_time)

        except requests.RequestException as e:
            retries += 1
            wait_time = RATE_LIMIT_DELAY * (retries + 1)
            logger.warning(f"Network error for '{text}': {e}. Retrying in {wait_time}s... (Attempt {retries}/{MAX_RETRIES})")
            time.sleep(wait_time)
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Unexpected geocoding response for '{text}': {e}")
            raise AddressUnresolvable() from e

    logger.error(f"Failed to geocode '{text}' after {MAX_RETRIES} attempts")
    raise AddressUnresolvable()
