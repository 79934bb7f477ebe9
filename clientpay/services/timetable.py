# clientpay/services/timetable.py
"""
Calendar math for the weekly schedule grid.

The grid has one row per hour and one column per weekday. Sessions are
booked on a 30-minute grid, so a block's position inside its start row and
its height are expressed as percentages of one hour row.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

import pandas as pd

from clientpay.config import DAYS
from clientpay.models.clients import Client
from clientpay.models.lessons import LessonStatus
from clientpay.services.ledger import occurrence_status

logger = logging.getLogger(__name__)

# 48 slots for the start/end selects (30-min increments)
TIME_OPTIONS = [f"{h:02d}:{m:02d}" for h in range(24) for m in (0, 30)]
# 24 grid rows
HOUR_ROWS = list(range(24))


# -----------------------------
# Week window
# -----------------------------
def week_window(today: date, offset: int = 0) -> list[date]:
    """Monday..Sunday of the week `offset` weeks away from the week holding `today`."""
    # date.weekday(): Monday=0 .. Sunday=6, so a Sunday steps back 6 days
    monday = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    return [monday + timedelta(days=i) for i in range(7)]


def day_name(d: date) -> str:
    return DAYS[d.weekday()]


def short_date(d: date) -> str:
    return f"{d:%b} {d.day}"


def week_label(dates: list[date], offset: int) -> str:
    if offset == 0:
        return "This Week"
    return f"{short_date(dates[0])} - {short_date(dates[-1])}"


# -----------------------------
# Time parsing
# -----------------------------
def parse_time(s) -> int:
    """'09:30' or '09:30:00' -> minutes since midnight."""
    parts = str(s or "").strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Bad time: {s!r}")
    h, m = int(parts[0]), int(parts[1])
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"Bad time: {s!r}")
    return h * 60 + m


def _span(c: Client) -> Optional[tuple[int, int]]:
    try:
        return parse_time(c.start_time), parse_time(c.end_time)
    except ValueError:
        logger.warning("Client %s has malformed times %r-%r", c.id, c.start_time, c.end_time)
        return None


# -----------------------------
# Half-hour-precise projection
# -----------------------------
@dataclass(frozen=True)
class SlotBlock:
    client: Client
    top_pct: float               # offset inside the start row
    height_pct: float            # 100 == one hour row
    processed: bool = False      # taught or paid on the cell's date

    @property
    def label(self) -> str:
        return self.client.short_name


def project_client(c: Client) -> Optional[tuple[int, float, float]]:
    """(start hour row, top %, height %) for one client, or None if its times are unusable."""
    span = _span(c)
    if span is None:
        return None
    start, end = span
    # :00 starts at the row's midpoint line, :30 at the top of the next row
    top = 100.0 if start % 60 >= 30 else 50.0
    height = max(end - start, 0) / 60 * 100
    return start // 60, top, height


def project_cell(
    clients: Iterable[Client],
    day: str,
    hour: int,
    cell_date: Optional[date] = None,
    lessons=(),
) -> list[SlotBlock]:
    """Blocks starting in the (day, hour) cell. Overlapping sessions are all kept."""
    out = []
    for c in clients:
        if c.day != day:
            continue
        projected = project_client(c)
        if projected is None or projected[0] != hour:
            continue
        _, top, height = projected
        processed = False
        if cell_date is not None:
            processed = occurrence_status(c.id, cell_date, lessons) is not LessonStatus.SCHEDULED
        out.append(SlotBlock(client=c, top_pct=top, height_pct=height, processed=processed))
    return out


def project_week(clients, dates: list[date], lessons=()) -> dict:
    """{(day, hour): [SlotBlock, ...]} for every non-empty cell of the week."""
    clients = list(clients)
    grid = {}
    for day, d in zip(DAYS, dates):
        for hour in HOUR_ROWS:
            blocks = project_cell(clients, day, hour, cell_date=d, lessons=lessons)
            if blocks:
                grid[(day, hour)] = blocks
    return grid


# -----------------------------
# Hour-bucket projection
# -----------------------------
def hour_buckets(c: Client) -> list[int]:
    """Every hour row h with start_hour <= h < end_hour, end_hour rounded up."""
    span = _span(c)
    if span is None:
        return []
    # 09:00-09:30 still occupies row 9
    start_hour, end_hour = span[0] // 60, -(-span[1] // 60)
    return list(range(start_hour, end_hour))


def clients_in_bucket(clients: Iterable[Client], day: str, hour: int) -> list[Client]:
    return [c for c in clients if c.day == day and hour in hour_buckets(c)]


def bucket_grid(clients: Iterable[Client]) -> pd.DataFrame:
    """24 x 7 frame of comma-joined first names, for the compact view."""
    clients = list(clients)
    data = {
        day: [", ".join(c.short_name for c in clients_in_bucket(clients, day, h)) for h in HOUR_ROWS]
        for day in DAYS
    }
    return pd.DataFrame(data, index=[f"{h:02d}:00" for h in HOUR_ROWS])


# -----------------------------
# Overlaps (informational only)
# -----------------------------
def find_overlaps(clients: Iterable[Client], day: str) -> list[tuple[Client, Client]]:
    spans = []
    for c in clients:
        if c.day != day:
            continue
        span = _span(c)
        if span is not None and span[1] > span[0]:
            spans.append((span, c))
    spans.sort(key=lambda t: t[0])

    pairs = []
    for i, ((s1, e1), a) in enumerate(spans):
        for (s2, e2), b in spans[i + 1:]:
            if s2 >= e1:
                break
            pairs.append((a, b))
    return pairs
