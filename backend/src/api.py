import logging
import os
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import sentry_sdk
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sentry_sdk.integrations.aws_lambda import AwsLambdaIntegration

from analysis.abilities import default_catalog
from analysis.analyze import Analyzer, analyze
from analysis.errors import (
    DataUnavailableError,
    InvalidConfigError,
    InvalidLogError,
    LogNotFoundError,
)
from analysis.events import parse_events
from client import PrivateReport, TemporaryUnavailable, fetch_report
from report import Combatant, Encounter, Fight

SENTRY_DSN = os.environ.get("SENTRY_DSN")
SENTRY_ENABLED = os.environ.get("AWS_EXECUTION_ENV") is not None or bool(SENTRY_DSN)
if SENTRY_ENABLED:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        traces_sample_rate=0.05,
        attach_stacktrace=True,
        integrations=(
            [AwsLambdaIntegration()] if os.environ.get("AWS_EXECUTION_ENV") else []
        ),
    )
app = FastAPI()

CORS_ORIGINS = os.environ.get(
    "CORS_ORIGINS", "http://localhost:5173,https://www.warcraftlogs.com"
).split(",")


async def catch_exceptions_middleware(request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logging.exception(e)
        return Response("Internal server error", status_code=500)


# Add this middleware first so 500 errors have CORS headers
app.middleware("http")(catch_exceptions_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


class FightInfo(BaseModel):
    id: int = 0
    start_time: int
    end_time: int
    boss: int = 0
    name: Optional[str] = None


class CombatantInfo(BaseModel):
    id: int
    name: Optional[str] = None
    spec_id: Optional[int] = None
    talents: List[int] = Field(default_factory=list)
    auras: List[int] = Field(default_factory=list)
    pets: List[int] = Field(default_factory=list)


class AnalyzeEventsRequest(BaseModel):
    fight: FightInfo
    combatant: CombatantInfo
    events: List[Dict[str, Any]]


def error_response(response: Response, e: DataUnavailableError):
    """Maps an unavailable log to a status code and a message"""
    if isinstance(e, PrivateReport):
        response.status_code = 403
        return {"error": "Can not analyze private reports"}
    if isinstance(e, TemporaryUnavailable):
        response.status_code = 503
        return {"error": "Bad response from Warcraft Logs, try again"}
    if isinstance(e, LogNotFoundError):
        response.status_code = 404
        return {"error": str(e)}
    if isinstance(e, InvalidLogError):
        response.status_code = 422
        return {"error": str(e)}

    logging.warning(f"Unexpected data error: {e!r}")
    sentry_sdk.capture_exception(e)
    response.status_code = 503
    return {"error": str(e)}


def config_error_response(response: Response, e: InvalidConfigError):
    logging.exception("Analysis configuration is invalid")
    sentry_sdk.capture_exception(e)
    response.status_code = 500
    return {"error": "Analysis is misconfigured"}


@app.get("/analyze_fight")
async def analyze_fight(
    response: Response, report_id: str, fight_id: int, source_id: int
):
    if report_id == "compare":
        response.status_code = 400
        return {"error": "Can not analyze while using the 'Compare' feature"}

    try:
        report = await fetch_report(report_id, fight_id, source_id)
        events = analyze(report, fight_id)
    except DataUnavailableError as e:
        return error_response(response, e)
    except InvalidConfigError as e:
        return config_error_response(response, e)

    # don't cache reports that are less than a day old
    ended_ago = datetime.now() - datetime.fromtimestamp(report.end_time / 1000)
    if fight_id == -1 and ended_ago < timedelta(days=1):
        response.headers["Cache-Control"] = "no-cache"
    else:
        response.headers["Cache-Control"] = "max-age=86400"
    return {"data": events}


@app.post("/analyze_events")
async def analyze_events(response: Response, request: AnalyzeEventsRequest):
    combatant = Combatant(
        request.combatant.id,
        request.combatant.name,
        spec_id=request.combatant.spec_id,
        talents=request.combatant.talents,
        auras=request.combatant.auras,
        pets=request.combatant.pets,
    )

    try:
        fight = Fight(
            request.fight.id,
            request.fight.start_time,
            request.fight.end_time,
            Encounter(request.fight.boss, request.fight.name),
            combatant,
            [
                event
                for event in parse_events(request.events)
                if event.timestamp >= request.fight.start_time
            ],
        )
        events = Analyzer(fight, default_catalog()).analyze()
    except DataUnavailableError as e:
        return error_response(response, e)
    except InvalidConfigError as e:
        return config_error_response(response, e)

    response.headers["Cache-Control"] = "no-cache"
    return {"data": events}
