"""
routes/performance.py -- Service health (GET /performance)

How long the calculator service has been up, how much resident memory it
holds and how many threads it runs. START_TIME and PROCESS come from
fincalc.main.

  time    "HH:mm:ss.SSS" uptime; hours keep counting past a day
  memory  resident set size in MB as "XX.XX", no unit
  threads OS thread count
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter

from fincalc.models import PerformanceResponse

router = APIRouter()

_BYTES_PER_MB = 1024 * 1024


def uptime_text(uptime: timedelta) -> str:
    total_ms = max(0, uptime // timedelta(milliseconds=1))
    seconds, ms = divmod(total_ms, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{ms:03d}"


@router.get("/performance", response_model=PerformanceResponse)
def service_health() -> PerformanceResponse:
    # fincalc.main imports this module, so read its singletons at call time
    from fincalc import main

    process = main.PROCESS
    return PerformanceResponse(
        time=uptime_text(datetime.now(timezone.utc) - main.START_TIME),
        memory=f"{process.memory_info().rss / _BYTES_PER_MB:.2f}",
        threads=process.num_threads(),
    )
