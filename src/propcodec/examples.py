r"""
Example report schedule, used by the demo and the tests.

Mirrors a typical scheduler settings file:

    period.start_at=2021-08-23T00\:00\:00Z
    period.end_at=2021-08-29T23\:59\:59.999999999Z
    interval.unit=week
    interval.count=1
    recipients[0].email=ops@example.com
    labels.team=platform
"""
import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from propcodec.scalars import EPOCH, Int64, UInt16
from propcodec.shapes import prop


@dataclass
class Period:
    start_at: datetime.datetime = prop("start_at", default=EPOCH)
    end_at: datetime.datetime = prop("end_at", default=EPOCH)


@dataclass
class Interval:
    unit: str = prop("unit", default="")
    count: Int64 = prop("count", default=0)


@dataclass
class Recipient:
    email: str = ""
    retries: UInt16 = prop("retries", default=0)


@dataclass
class Schedule:
    period: Period = prop("period", default_factory=Period)
    interval: Interval = prop("interval", default_factory=Interval)
    recipients: List[Recipient] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    owner: Optional[Recipient] = None
    enabled: bool = True


def build_example_schedule(weeks: int = 1, recipient_count: int = 2) -> Schedule:
    start = pd.Timestamp("2021-08-23T00:00:00Z")
    end = start + pd.Timedelta(weeks=weeks) - pd.Timedelta(nanoseconds=1)

    recipients = [
        Recipient(email=f"ops{i}@example.com", retries=i)
        for i in range(1, recipient_count + 1)
    ]

    return Schedule(
        period=Period(start_at=start, end_at=end),
        interval=Interval(unit="week", count=weeks),
        recipients=recipients,
        labels={"team": "platform", "tier": "gold"},
        owner=Recipient(email="owner@example.com"),
    )
