from datetime import date
from html import escape

from clientpay.config import DAYS
from clientpay.services.timetable import HOUR_ROWS, SlotBlock

ROW_HEIGHT_PX = 60

_CSS = """
<style>
.cp-grid {border-collapse: collapse; width: 100%%; table-layout: fixed; font-size: 11px;}
.cp-grid th {background: #4f46e5; color: #fff; padding: 4px; text-align: center;}
.cp-grid th small {display: block; opacity: .7; font-weight: normal;}
.cp-grid td {border: 1px solid #f1f1f4; height: %(row)dpx; position: relative; padding: 0;}
.cp-grid td.cp-hour {background: #f9fafb; color: #312e81; font-weight: bold; text-align: center; width: 32px;}
.cp-grid td .cp-half {position: absolute; top: 50%%; width: 100%%; border-top: 1px dashed #e5e7eb;}
.cp-block {position: absolute; left: 2px; right: 2px; z-index: 2; border-radius: 4px;
           background: #6366f1; color: #fff; font-weight: 800; font-size: 8px; text-transform: uppercase;
           display: flex; align-items: center; justify-content: center; overflow: hidden;}
.cp-block.cp-done {background: #fbbf24; color: #451a03;}
</style>
""" % {"row": ROW_HEIGHT_PX}


def _block_html(b: SlotBlock) -> str:
    cls = "cp-block cp-done" if b.processed else "cp-block"
    title = f"{b.client.name} {b.client.start_time}-{b.client.end_time}"
    return (
        f'<div class="{cls}" title="{escape(title)}" '
        f'style="top:{b.top_pct:g}%;height:{b.height_pct:g}%">{escape(b.label)}</div>'
    )


def render_week_html(grid: dict, dates: list[date]) -> str:
    """HTML table for a week: header of day initials + day numbers, one row per hour."""
    head = "".join(
        f"<th>{day[0]}<small>{d.day}</small></th>" for day, d in zip(DAYS, dates)
    )
    rows = []
    for hour in HOUR_ROWS:
        cells = [f'<td class="cp-hour">{hour:02d}</td>']
        for day in DAYS:
            blocks = "".join(_block_html(b) for b in grid.get((day, hour), []))
            cells.append(f'<td><div class="cp-half"></div>{blocks}</td>')
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return f'{_CSS}<table class="cp-grid"><tr><th>Hr</th>{head}</tr>{"".join(rows)}</table>'
