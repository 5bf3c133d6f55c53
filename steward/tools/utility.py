"""Built-in utility tools."""

import logging
import zoneinfo
from datetime import UTC, datetime

from pydantic import Field

from steward.tools.base import ToolParams, ToolResult
from steward.tools.registry import registry

logger = logging.getLogger(__name__)


class CurrentTimeParams(ToolParams):
    timezone: str | None = Field(
        default=None,
        description='Optional IANA timezone (e.g. "Europe/Istanbul"). Defaults to UTC.',
    )


@registry.tool(
    name="get_current_time",
    description=(
        "Returns the current date and time in ISO 8601 format with timezone offset. "
        "Use this when the user asks what time it is, the current date, or anything "
        "time-related."
    ),
    category="utility",
    params_model=CurrentTimeParams,
)
async def get_current_time(timezone: str | None = None) -> ToolResult:
    now = datetime.now(UTC)
    if not timezone:
        return ToolResult(
            data={
                "iso": now.isoformat(),
                "date": now.strftime("%Y-%m-%d"),
                "time": now.strftime("%H:%M:%S"),
                "day_of_week": now.strftime("%A"),
                "timezone": "UTC",
            }
        )

    try:
        tz = zoneinfo.ZoneInfo(timezone)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        return ToolResult(error=f"Invalid timezone: {timezone}")

    local = now.astimezone(tz)
    return ToolResult(
        data={
            "iso": local.isoformat(),
            "formatted": local.strftime("%A, %B %d, %Y %I:%M %p %Z"),
            "timezone": timezone,
            "utc": now.isoformat(),
        }
    )
