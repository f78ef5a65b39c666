import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .client import ContentApiClient, ContentApiError
from .config import get_api_settings
from .display import serialize_bucket
from .models import ContentItem
from .session import CalendarSession, CompletionSyncError
from .version import APP_VERSION

app = FastAPI(title="Weekly Content Calendar API")

logger = logging.getLogger(__name__)

# CORS for the Expo dev server; override with a comma separated list
cors_origins = [
    origin.strip()
    for origin in os.getenv("CALENDAR_CORS_ORIGINS", "http://localhost:8081").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

SETTINGS = get_api_settings()
logger.info("API base URL: %s (%s)", SETTINGS.base_url, SETTINGS.environment_label)


async def fetch_contents() -> List[ContentItem]:
    async with ContentApiClient(SETTINGS) as client:
        return await client.fetch_contents()


async def submit_homework(homework_id: str, submission_link: str, description: str) -> Dict[str, Any]:
    async with ContentApiClient(SETTINGS) as client:
        return await client.submit_homework(homework_id, submission_link, description)


def _log_marked_done(item_id: str) -> None:
    logger.info("Completion toggled for item %s", item_id)


SESSION = CalendarSession(fetch_contents, on_item_marked_done=_log_marked_done)


class HomeworkSubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submissionLink: str = Field(
        "",
        validation_alias=AliasChoices("submissionLink", "submission_link"),
    )
    description: str = ""


class CalendarItemModel(BaseModel):
    id: str
    title: str
    kind: Optional[str] = None
    icon: str
    color: str
    actionLabel: str
    subject: str
    primaryDate: Optional[str] = None
    deadline: Optional[str] = None
    overdue: bool
    done: bool
    fileUrl: Optional[str] = None


class CalendarWeekModel(BaseModel):
    key: str
    weekStart: str
    weekEnd: str
    label: str
    count: int
    expanded: bool
    items: List[CalendarItemModel]


class CalendarResponse(BaseModel):
    weeks: List[CalendarWeekModel]
    total: int
    unscheduled: int
    completed: List[str]


def _calendar_payload() -> Dict[str, Any]:
    state = SESSION.state
    now = datetime.now(timezone.utc)
    weeks = [
        serialize_bucket(bucket, state, now, base_url=SETTINGS.base_url)
        for bucket in SESSION.buckets
    ]
    response = CalendarResponse(
        weeks=[CalendarWeekModel.model_validate(week) for week in weeks],
        total=len(SESSION.items),
        unscheduled=SESSION.unscheduled,
        completed=sorted(state.done_ids),
    )
    return response.model_dump()


async def _refresh() -> None:
    try:
        result = await SESSION.refresh()
    except ContentApiError as exc:
        logger.warning("Loading content failed: %s", exc)
        raise HTTPException(status_code=502, detail="Loading content failed") from exc
    if result.stale:
        logger.debug("Load #%d was superseded", result.sequence)


def _require_item(item_id: str) -> ContentItem:
    item = SESSION.find_item(item_id)
    if item is None:
        raise HTTPException(404, "Not found")
    return item


@app.get("/api/calendar/weeks", response_model=CalendarResponse)
async def get_calendar_weeks() -> Dict[str, Any]:
    if not SESSION.loaded:
        await _refresh()
    return _calendar_payload()


@app.post("/api/calendar/refresh", response_model=CalendarResponse)
async def refresh_calendar() -> Dict[str, Any]:
    await _refresh()
    return _calendar_payload()


@app.post("/api/calendar/weeks/{key}/toggle")
def toggle_calendar_week(key: str) -> Dict[str, Any]:
    state = SESSION.toggle_week(key)
    return {"key": key, "expanded": state.is_expanded(key)}


@app.post("/api/calendar/items/{item_id}/toggle")
def toggle_calendar_item(item_id: str) -> Dict[str, Any]:
    _require_item(item_id)
    action = SESSION.toggle_done(item_id)
    return {"id": item_id, "done": action.done}


@app.post("/api/calendar/homework/{item_id}/submission")
async def submit_calendar_homework(
    item_id: str,
    payload: HomeworkSubmissionRequest = Body(...),
) -> Dict[str, Any]:
    item = _require_item(item_id)
    if item.kind != "Homework":
        raise HTTPException(400, "Only homework can be submitted")
    link = payload.submissionLink.strip()
    if not link:
        raise HTTPException(400, "Please provide a submission link")

    async def persist(homework_id: str) -> Dict[str, Any]:
        return await submit_homework(homework_id, link, payload.description)

    if SESSION.state.is_done(item_id):
        # Resubmission; toggling here would mark the homework as open again
        try:
            await persist(item_id)
        except ContentApiError as exc:
            logger.warning("Homework resubmission failed: %s", exc)
            raise HTTPException(status_code=502, detail="Failed to submit homework") from exc
        return {"id": item_id, "done": True}

    try:
        action = await SESSION.mark_done(item_id, persist)
    except CompletionSyncError as exc:
        raise HTTPException(status_code=502, detail="Failed to submit homework") from exc
    return {"id": item_id, "done": action.done}


@app.get("/api/system/version")
def api_get_version() -> Dict[str, str]:
    return {"version": APP_VERSION}
