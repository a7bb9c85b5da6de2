"""Bandwidth quota usage from the Latitude.sh traffic API."""

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog

from config import LatitudeSettings
from votewatch.services.errors import DateConstructionError, QuotaAPIError
from votewatch.services.schemas.results import BandwidthUsage

logger = structlog.get_logger(__name__)

DATE_FORMAT = "%Y-%m-%dT00:00:00"
GB_PER_TB = 1024


def shift_months(dt: datetime, months: int) -> datetime:
    """Move ``dt`` by whole calendar months, clamping to the last day of the month."""
    index = dt.year * 12 + (dt.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def get_date_range(start_day: int, reference: datetime) -> tuple[str, str]:
    """Return the ``[start, end)`` billing cycle containing ``reference``.

    The cycle renews at midnight on ``start_day`` of every month. Both bounds
    are formatted without an offset; callers append ``Z`` for the API filter.
    """
    try:
        cycle_day = reference.replace(
            day=start_day, hour=0, minute=0, second=0, microsecond=0
        )
    except ValueError:
        raise DateConstructionError(reference.year, reference.month, start_day) from None

    if reference.day < start_day:
        start, end = shift_months(cycle_day, -1), cycle_day
    else:
        start, end = cycle_day, shift_months(cycle_day, 1)
    return start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)


def current_dt_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_u64(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def _dig(tree: Any, *path: str | int) -> Any:
    for key in path:
        try:
            tree = tree[key]
        except (KeyError, IndexError, TypeError):
            return None
    return tree


@dataclass(frozen=True)
class LatitudeConfig:
    api_key: Optional[str]
    base_url: str = "https://api.latitude.sh"
    billing_start_day: int = 5
    timeout: float = 15.0

    @classmethod
    def disabled(cls) -> "LatitudeConfig":
        return cls(api_key=None)

    @classmethod
    def from_settings(cls, settings: LatitudeSettings) -> "LatitudeConfig":
        if not settings.enabled:
            return cls.disabled()
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            billing_start_day=settings.billing_start_day,
            timeout=settings.timeout,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


class LatitudeClient:
    """Reads the traffic quota and the current billing cycle's usage."""

    def __init__(
        self,
        config: LatitudeConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    def _get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        headers = {
            "Authorization": self.config.api_key or "",
            "accept": "application/json",
        }
        try:
            with httpx.Client(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as http:
                response = http.get(path, params=params, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise QuotaAPIError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise QuotaAPIError(f"GET {path} returned invalid JSON: {e}") from e

    def get_traffic_quota(self) -> Optional[tuple[int, str]]:
        """Return ``(quota_gb, project_id)`` for the first project, or None."""
        if not self.config.enabled:
            return None

        response = self._get("/traffic/quota")
        project = _dig(response, "data", "attributes", "quota_per_project", 0)
        project_id = _dig(project, "project_id")
        total_tb = _as_u64(_dig(project, "quota_per_region", 0, "quota_in_tb", "total"))
        if not isinstance(project_id, str) or total_tb is None:
            logger.warning("Unexpected traffic quota response")
            return None
        return total_tb * GB_PER_TB, project_id

    def get_bandwidth_usage(self, reference: Optional[datetime] = None) -> Optional[BandwidthUsage]:
        quota_info = self.get_traffic_quota()
        if quota_info is None:
            return None
        quota, project_id = quota_info

        start, end = get_date_range(
            self.config.billing_start_day, reference or current_dt_utc()
        )
        response = self._get(
            "/traffic",
            params={
                "filter[project]": project_id,
                "filter[date][gte]": f"{start}Z",
                "filter[date][lte]": f"{end}Z",
            },
        )
        inbound = _as_u64(_dig(response, "data", "attributes", "total_inbound_gb"))
        outbound = _as_u64(_dig(response, "data", "attributes", "total_outbound_gb"))
        if inbound is None or outbound is None:
            logger.warning("Unexpected traffic response", project_id=project_id)
            return None

        if quota == 0:
            logger.warning("Traffic quota is zero", project_id=project_id)
            inbound_usage = outbound_usage = 0
        else:
            inbound_usage = inbound * 100 // quota
            outbound_usage = outbound * 100 // quota

        logger.info(
            "Bandwidth usage",
            project_id=project_id,
            start=start,
            end=end,
            inbound_gb=inbound,
            outbound_gb=outbound,
        )
        return BandwidthUsage(
            inbound=inbound,
            outbound=outbound,
            quota=quota,
            inbound_usage=inbound_usage,
            outbound_usage=outbound_usage,
        )
