"""
Weather Feed
============

One-shot weather badge data for the session:

1. Ask the geolocator for coordinates. No geolocator, or a failed lookup,
   means the configured fallback point is used and the user is told so.
2. Fetch current conditions from open-meteo for those coordinates.
3. Publish a WeatherState. Failures publish an error state and one toast;
   there is no retry.

The HTTP work runs on a daemon thread. The result is handed back to the UI
thread with ``scheduler.after(0, ...)`` so state only ever changes there.
"""

from __future__ import annotations

import json
import logging
import math
import threading
import urllib.error
import urllib.parse
import urllib.request
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

from .dependency_injection import FeedConfig
from .error_handling import (
    ErrorContext,
    ErrorHandler,
    GeolocationError,
    NetworkError,
    StartPageError,
)
from .models import Coordinates, WeatherSample, WeatherState
from .scheduling import Scheduler

logger = logging.getLogger("bartstart.weather")

USER_AGENT = "BartStart"

MSG_FETCH_FAILED = "Could not fetch weather data."
MSG_LOCATION_DENIED = "Location access denied. Using default."
MSG_GEOLOCATION_UNSUPPORTED = "Geolocation not supported. Using default."


# ============================================================================
# ICONS
# ============================================================================

class WeatherIcon(Enum):
    RAIN = "rain"
    CLOUD = "cloud"
    PARTLY_CLOUDY = "partly_cloudy"
    SUN = "sun"


def weather_icon(sample: Optional[WeatherSample]) -> Optional[WeatherIcon]:
    """Pick the badge icon; precipitation beats cloud cover."""
    if sample is None:
        return None
    if sample.precipitation_mm > 0.1:
        return WeatherIcon.RAIN
    if sample.cloud_cover_pct > 75:
        return WeatherIcon.CLOUD
    if sample.cloud_cover_pct > 25:
        return WeatherIcon.PARTLY_CLOUDY
    return WeatherIcon.SUN


def format_temperature(sample: WeatherSample) -> str:
    return f"{sample.temperature_c}°C"


# ============================================================================
# GEOLOCATION
# ============================================================================

class Geolocator(Protocol):
    def locate(self) -> Coordinates:
        """Current coordinates. Raises GeolocationError when unavailable."""
        ...


class StaticGeolocator:
    """Coordinates fixed in the config file"""

    def __init__(self, latitude: float, longitude: float):
        self.coordinates = Coordinates(latitude, longitude)

    def locate(self) -> Coordinates:
        return self.coordinates


class IpGeolocator:
    """Approximate location from the public IP address"""

    def __init__(self, endpoint: str, timeout_s: float = 5.0):
        self.endpoint = endpoint
        self.timeout_s = timeout_s

    def locate(self) -> Coordinates:
        try:
            data = _get_json(self.endpoint, self.timeout_s)
            return Coordinates(float(data["latitude"]), float(data["longitude"]))
        except (NetworkError, KeyError, TypeError, ValueError) as e:
            raise GeolocationError(
                f"IP geolocation failed: {e}",
                context={"endpoint": self.endpoint}
            ) from e


def create_geolocator(config: FeedConfig) -> Optional[Geolocator]:
    """Build the geolocator the config asks for; None means unsupported."""
    if config.geolocation == "static":
        if config.static_latitude is None or config.static_longitude is None:
            logger.warning("Static geolocation without coordinates; treating as unsupported")
            return None
        return StaticGeolocator(config.static_latitude, config.static_longitude)
    if config.geolocation == "ip":
        return IpGeolocator(config.geolocation_endpoint, timeout_s=config.weather_timeout_s)
    return None


# ============================================================================
# PROVIDER
# ============================================================================

def _get_json(url: str, timeout_s: float) -> dict:
    req = urllib.request.Request(
        url,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        method="GET",
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise NetworkError(f"HTTP {status} from {url}", context={"url": url})
            data = json.loads(resp.read().decode("utf-8"))
    except (urllib.error.URLError, TimeoutError, OSError, ValueError) as e:
        raise NetworkError(f"Request to {url} failed: {e}", context={"url": url}) from e
    if not isinstance(data, dict):
        raise NetworkError(f"Unexpected payload from {url}", context={"url": url})
    return data


def build_forecast_url(endpoint: str, coords: Coordinates) -> str:
    query = urllib.parse.urlencode({
        "latitude": coords.latitude,
        "longitude": coords.longitude,
        "current": "temperature_2m,precipitation,cloud_cover",
    }, safe=",")
    return f"{endpoint}?{query}"


def parse_current_conditions(data: dict) -> Optional[WeatherSample]:
    """Sample from an open-meteo payload; None when ``current`` is absent."""
    current = data.get("current")
    if current is None:
        return None
    try:
        temperature, precipitation, cloud_cover = (
            float(current[key]) for key in ("temperature_2m", "precipitation", "cloud_cover")
        )
        if not all(map(math.isfinite, (temperature, precipitation, cloud_cover))):
            raise ValueError("non-finite value in current conditions")
        return WeatherSample(
            temperature_c=int(math.floor(temperature + 0.5)),
            precipitation_mm=precipitation,
            cloud_cover_pct=cloud_cover,
        )
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        raise NetworkError(f"Malformed weather payload: {e}", user_message=MSG_FETCH_FAILED) from e


def fetch_current_conditions(
    endpoint: str,
    coords: Coordinates,
    timeout_s: float = 10.0,
) -> Optional[WeatherSample]:
    """Blocking fetch. Raises NetworkError on any transport or parse failure."""
    data = _get_json(build_forecast_url(endpoint, coords), timeout_s)
    return parse_current_conditions(data)


# ============================================================================
# FEED
# ============================================================================

class WeatherFeed:
    """Runs the locate -> fetch sequence once and publishes the result"""

    def __init__(
        self,
        scheduler: Scheduler,
        config: FeedConfig,
        geolocator: Optional[Geolocator],
        error_handler: Optional[ErrorHandler] = None,
        fetcher: Callable[[str, Coordinates, float], Optional[WeatherSample]] = fetch_current_conditions,
        background: bool = True,
    ):
        self.scheduler = scheduler
        self.config = config
        self.geolocator = geolocator
        self.error_handler = error_handler
        self.fetcher = fetcher
        self.background = background

        self.state = WeatherState()
        self._started = False
        self._listeners: List[Callable[[WeatherState], None]] = []

    @property
    def fallback(self) -> Coordinates:
        return Coordinates(self.config.fallback_latitude, self.config.fallback_longitude)

    def add_listener(self, callback: Callable[[WeatherState], None]):
        self._listeners.append(callback)

    def start(self):
        """Begin the one-shot fetch. Later calls do nothing."""
        if self._started:
            return
        self._started = True

        if self.background:
            threading.Thread(target=self._work, name="weather-feed", daemon=True).start()
        else:
            self._work()

    # --- worker side -------------------------------------------------------

    def _locate(self) -> Tuple[Coordinates, Optional[StartPageError]]:
        if self.geolocator is None:
            return self.fallback, GeolocationError(
                "No geolocation capability", user_message=MSG_GEOLOCATION_UNSUPPORTED
            )
        try:
            return self.geolocator.locate(), None
        except GeolocationError as e:
            return self.fallback, e

    def _work(self):
        coords, location_error = self._locate()
        errors: List[StartPageError] = [location_error] if location_error else []

        sample: Optional[WeatherSample] = None
        fetch_error: Optional[str] = None
        try:
            sample = self.fetcher(self.config.weather_endpoint, coords, self.config.weather_timeout_s)
        except NetworkError as e:
            fetch_error = MSG_FETCH_FAILED
            errors.append(NetworkError(e.message, user_message=MSG_FETCH_FAILED, context=e.context))
        except Exception as e:
            fetch_error = MSG_FETCH_FAILED
            errors.append(NetworkError(f"Weather fetch crashed: {e!r}", user_message=MSG_FETCH_FAILED))

        state = WeatherState(
            sample=sample,
            error=fetch_error,
            used_fallback=location_error is not None,
            notice=location_error.user_message if location_error else None,
            coordinates=coords,
        )
        self.scheduler.after(0, lambda: self._publish(state, errors))

    # --- UI side -----------------------------------------------------------

    def _publish(self, state: WeatherState, errors: List[StartPageError]):
        self.state = state
        if state.sample is not None:
            logger.info(
                "Weather at %.4f,%.4f: %s", state.coordinates.latitude,
                state.coordinates.longitude, format_temperature(state.sample),
            )

        for error in errors:
            if self.error_handler is not None:
                self.error_handler.handle_error(
                    error, ErrorContext(operation="fetch", component="WeatherFeed", details={})
                )
            else:
                logger.warning("%s", error.message)

        for callback in list(self._listeners):
            callback(state)
