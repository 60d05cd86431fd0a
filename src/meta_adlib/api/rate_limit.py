"""Rate-quota signal derived from the ``X-App-Usage`` response header.

Graph reports application-level usage as a JSON object of percentages, e.g.
``{"call_count": 28, "total_cputime": 25, "total_time": 25}``. Once any of
them reaches 100 the API starts rejecting calls (error 4 / HTTP 613), so the
client warns ahead of time. The check is advisory only and never throttles.
"""

import json
import logging
from typing import Mapping, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

APP_USAGE_HEADER = "X-App-Usage"
DEFAULT_WARNING_THRESHOLD = 75


class RateQuotaSignal(BaseModel):
    """Usage percentages reported for one response."""

    call_count: float = 0
    total_cputime: float = 0
    total_time: float = 0

    @property
    def usage_percent(self) -> float:
        """The highest of the reported sub-metrics."""
        return max(self.call_count, self.total_cputime, self.total_time)

    def exceeds(self, threshold: float) -> bool:
        return self.usage_percent > threshold


def parse_app_usage(headers: Mapping[str, str]) -> Optional[RateQuotaSignal]:
    """Parse the usage header.

    :param headers: Response headers (case-insensitive mapping)
    :return: The signal, or None when the header is missing or malformed
    """
    raw = headers.get(APP_USAGE_HEADER)
    if not raw:
        return None
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("not a JSON object")
        return RateQuotaSignal.model_validate(data)
    except (ValueError, PydanticValidationError) as e:
        logger.debug("Ignoring malformed %s header %r: %s", APP_USAGE_HEADER, raw, e)
        return None


def check_rate_limit(
    headers: Mapping[str, str], threshold: float = DEFAULT_WARNING_THRESHOLD
) -> Optional[RateQuotaSignal]:
    """Warn once when reported usage exceeds ``threshold`` percent.

    :param headers: Response headers
    :param threshold: Percentage above which a warning is emitted
    :return: The parsed signal (whether or not it warned)
    """
    signal = parse_app_usage(headers)
    if signal is not None and signal.exceeds(threshold):
        logger.warning(
            "rate limit %g%% used, slow down to avoid HTTP 613",
            signal.usage_percent,
        )
    return signal
