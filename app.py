import logging

from fastapi import FastAPI, HTTPException

import cache
import config
from models import ProfileStats, StatsSummary

app = FastAPI(title="Clauth Usage Stats")


@app.on_event("startup")
async def startup():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@app.get("/api/summary", response_model=StatsSummary)
def summary():
    return cache.get_summary()


@app.get("/api/stats/{profile}", response_model=ProfileStats)
def profile_stats(profile: str, refresh: bool = False):
    result = cache.get_profile(profile, force=refresh)
    if result is None:
        raise HTTPException(404, f"Unknown profile: {profile}")
    return result


@app.get("/api/refresh", response_model=StatsSummary)
def refresh_all():
    return cache.refresh_all()

