"""Monthly completion series for HabitGrid charts.

Counts DONE entries per day across every activity id in the snapshot,
including activities that were deleted, so past counts never shrink.
Days after today are gaps (None), not zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator, NamedTuple

from habitgrid.days import days_in_month
from habitgrid.models import Status, StatusSnapshot

DEFAULT_CHART_MIN_Y = 4
CHART_BLOCKS = " ▁▂▃▄▅▆▇█"


class SeriesPoint(NamedTuple):
    label: str
    value: int | None


@dataclass(frozen=True)
class MonthlySeries:
    """Lazy, restartable per-day series for one month."""

    year: int
    month: int
    snapshot: StatusSnapshot
    today: date

    def __len__(self) -> int:
        return days_in_month(self.year, self.month)

    def __iter__(self) -> Iterator[SeriesPoint]:
        for dom in range(1, len(self) + 1):
            day = date(self.year, self.month, dom)
            if day > self.today:
                yield SeriesPoint(str(dom), None)
            else:
                yield SeriesPoint(str(dom), self.snapshot.count(day, Status.DONE))

    @property
    def labels(self) -> list[str]:
        return [p.label for p in self]

    @property
    def values(self) -> list[int | None]:
        return [p.value for p in self]


def build_series(year: int, month: int, snapshot: StatusSnapshot, today: date) -> MonthlySeries:
    return MonthlySeries(year=year, month=month, snapshot=snapshot, today=today)


def chart_max(values: list[int | None], floor: int = DEFAULT_CHART_MIN_Y) -> int:
    """Y-axis maximum: the true maximum, never below *floor*."""
    return max([floor] + [v for v in values if v is not None])


def sparse_labels(labels: list[str], every: int = 5) -> list[str]:
    """Keep every *every*-th day-of-month label, blank the rest."""
    return [label if int(label) % every == 0 else "" for label in labels]


def render_text_chart(series: MonthlySeries, floor: int = DEFAULT_CHART_MIN_Y) -> str:
    """Render a one-line block chart; gaps stay blank.

    Returns two lines: the bars and a sparse day-of-month ruler.
    """
    values = series.values
    top = chart_max(values, floor)
    steps = len(CHART_BLOCKS) - 1
    bars = []
    for v in values:
        if v is None:
            bars.append(" ")
        else:
            # Any nonzero count gets at least the lowest block.
            bars.append(CHART_BLOCKS[max(1, round(v / top * steps))] if v else "_")
    ruler = ["|" if label else "·" for label in sparse_labels(series.labels)]
    return "".join(bars) + f"  max {top}\n" + "".join(ruler)
