"""
fincalc/main.py -- FastAPI application entry point.

START_TIME and PROCESS are set at module level (singleton pattern).
All routes registered under /fincalc/v1.
Server runs on port 5477.

The SGB gold price comes from app.state.gold_price_provider; it is None
by default, so calculations use the configured fallback price.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import psutil
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fincalc.models import UnknownInstrumentError
from routes import calculators as _calculators_route
from routes import corpus as _corpus_route
from routes import performance as _perf_route
from routes import tax as _tax_route

HOST = "0.0.0.0"
PORT = 5477

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Singleton performance tracking -- captured once at boot
START_TIME: datetime = datetime.now(timezone.utc)
PROCESS: psutil.Process = psutil.Process()

# FastAPI app
app = FastAPI(
    title="Indian Personal Finance Calculators API",
    version="1.0.0",
    description="Maturity, tax and inflation projections for Indian savings instruments.",
)
app.state.gold_price_provider = None

# ---------------------------------------------------------------------------
# Error handlers -- 400 for unusable request bodies, 404 for unknown instruments
# ---------------------------------------------------------------------------

MSG_BAD_REQUEST = "Request body could not be read"


def request_error_message(errors: list[dict]) -> str:
    """
    First problem in a request body. Messages raised by the request models
    ("Corpus is required") are returned as written; type and shape errors
    are prefixed with the field path ("selectedInstruments: ...").
    """
    if not errors:
        return MSG_BAD_REQUEST
    err = errors[0]
    msg = err.get("msg") or MSG_BAD_REQUEST
    if err.get("type") == "value_error":
        return msg[len("Value error, "):] if msg.startswith("Value error, ") else msg
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
    return f"{field}: {msg}" if field else msg


@app.exception_handler(RequestValidationError)
async def bad_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": request_error_message(exc.errors())})


@app.exception_handler(UnknownInstrumentError)
async def unknown_instrument_handler(request: Request, exc: UnknownInstrumentError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Register routes
# ---------------------------------------------------------------------------

BASE = "/fincalc/v1"

app.include_router(_calculators_route.router, prefix=BASE)
app.include_router(_tax_route.router, prefix=BASE)
app.include_router(_corpus_route.router, prefix=BASE)
app.include_router(_perf_route.router, prefix=BASE)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run("fincalc.main:app", host=HOST, port=PORT, reload=False)
