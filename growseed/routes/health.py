# growseed/routes/health.py
"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from growseed.routes.deps import get_runtime
from growseed.runtime import TrackerRuntime

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "growseed"}


@router.get("/readyz")
async def readyz(runtime: TrackerRuntime = Depends(get_runtime)):
    """Readiness check covering the state store and the tick loop."""
    checks = {}

    t0 = time.time()
    try:
        store_ok = await runtime.store.ping()
        checks["state_store"] = {
            "ok": bool(store_ok),
            "latency_ms": round((time.time() - t0) * 1000, 1),
            "backend": type(runtime.store).__name__,
        }
    except Exception as e:
        checks["state_store"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}

    checks["tick_loop"] = {
        "ok": runtime.driver.running,
        "ticks": runtime.driver.ticks,
        "failures": runtime.driver.failures,
    }

    overall_ok = all(check["ok"] for check in checks.values())
    return {"overall_ok": overall_ok, "checks": checks}
