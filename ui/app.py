from __future__ import annotations

import os
import secrets
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from daybook import (
    DaybookError,
    EmptyCandidatesError,
    NotFoundError,
    PersistenceError,
    RecordFilter,
    Services,
    ValidationError,
    build_services,
    load_settings,
    setup_logging,
)
from daybook.analytics import average_per_day, history_span, monthly_counts, streak_runs
from daybook.randomizer import pick, spin_wheel
from ui.presentation import category_style, describe_kinds


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging(load_settings().log_level)
    yield


app = FastAPI(title="Daybook API", version="0.1.0", lifespan=lifespan)

security = HTTPBasic(auto_error=False)


# ── Auth ──────────────────────────────────────────────────────


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("DAYBOOK_USERNAME", "")
    expected_password = os.environ.get("DAYBOOK_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_services() -> Services:
    return build_services()


# ── Error mapping ─────────────────────────────────────────────

_ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    EmptyCandidatesError: 409,
    PersistenceError: 503,
}


@app.exception_handler(DaybookError)
async def daybook_error_handler(_request: Request, exc: DaybookError) -> JSONResponse:
    code = next((c for cls, c in _ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    return JSONResponse(status_code=code, content={"ok": False, "detail": str(exc)})


# ── Helpers ───────────────────────────────────────────────────


def _record_out(services: Services, kind_name: str, record) -> dict[str, Any] | None:
    if record is None:
        return None
    kind = services.store(kind_name).kind
    d = record.to_dict()
    d["style"] = category_style(kind, record.category)
    if record.tools:
        d["toolsProgress"] = record.tools_progress().to_dict()
    if record.steps:
        d["stepsProgress"] = record.steps_progress().to_dict()
    return d


def _filter_from_params(
    q: str,
    category: list[str] | None,
    favorites: bool,
    archived: str,
    period: str,
    start: date | None,
    end: date | None,
) -> RecordFilter:
    if archived not in ("active", "all", "only"):
        raise ValidationError(f"Invalid archived selector: {archived}")
    return RecordFilter(
        categories=frozenset(category or ()),
        favorites_only=favorites,
        include_archived=archived == "all",
        archived_only=archived == "only",
        text_query=q,
        period=period,
        start=start,
        end=end,
    )


# ── Endpoints ─────────────────────────────────────────────────


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/kinds")
def api_list_kinds(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"kinds": describe_kinds()}


@app.get("/api/{kind}/records")
def api_list_records(
    kind: str,
    q: str = "",
    category: list[str] | None = Query(default=None),
    favorites: bool = False,
    archived: str = "active",
    period: str = "all",
    start: date | None = None,
    end: date | None = None,
    sort: str = "alphabetical",
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Filtered, sorted record list."""
    model = services.model(kind)
    model.set_filters(**vars(_filter_from_params(q, category, favorites, archived, period, start, end)))
    model.set_sort(sort)
    records = model.items
    return {
        "records": [_record_out(services, kind, r) for r in records],
        "count": len(records),
        "filtersActive": model.filters.is_active(),
    }


@app.post("/api/{kind}/records")
def api_create_record(
    kind: str,
    payload: dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Create a record (or update the one already on that day)."""
    record = services.store(kind).add(payload)
    return {"ok": True, "record": _record_out(services, kind, record)}


@app.get("/api/{kind}/records/{record_id}")
def api_get_record(
    kind: str,
    record_id: str,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    record = services.store(kind).get(record_id)
    if record is None:
        raise NotFoundError(record_id)
    return {"record": _record_out(services, kind, record)}


@app.put("/api/{kind}/records/{record_id}")
def api_update_record(
    kind: str,
    record_id: str,
    payload: dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    record = services.store(kind).update(record_id, payload)
    return {"ok": True, "record": _record_out(services, kind, record)}


@app.delete("/api/{kind}/records/{record_id}")
def api_delete_record(
    kind: str,
    record_id: str,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Delete a record. Deleting an absent record succeeds with removed=false."""
    removed = services.store(kind).remove(record_id)
    return {"ok": True, "removed": removed, "record_id": record_id}


@app.post("/api/{kind}/records/{record_id}/favorite")
def api_toggle_favorite(
    kind: str,
    record_id: str,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    record = services.store(kind).toggle_favorite(record_id)
    return {"ok": True, "record": _record_out(services, kind, record)}


@app.post("/api/{kind}/records/{record_id}/archive")
def api_toggle_archive(
    kind: str,
    record_id: str,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    record = services.store(kind).toggle_archive(record_id)
    return {"ok": True, "record": _record_out(services, kind, record)}


@app.post("/api/{kind}/records/{record_id}/checklist")
def api_toggle_checklist(
    kind: str,
    record_id: str,
    payload: dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Flip one checklist entry: {"checklist": "tools" | "steps", "index": n}."""
    try:
        index = int(payload.get("index", -1))
    except (TypeError, ValueError) as e:
        raise ValidationError("index must be an integer") from e
    record = services.store(kind).toggle_checklist_item(record_id, str(payload.get("checklist", "")), index)
    return {"ok": True, "record": _record_out(services, kind, record)}


@app.post("/api/{kind}/bulk")
def api_bulk(
    kind: str,
    payload: dict[str, Any] = Body(...),
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Bulk archive/restore/remove: {"action": ..., "ids": [...]}."""
    store = services.store(kind)
    actions = {"archive": store.archive_many, "restore": store.restore_many, "remove": store.remove_many}
    action = actions.get(str(payload.get("action", "")))
    if action is None:
        raise ValidationError(f"Invalid bulk action: {payload.get('action')}")
    changed = action([str(i) for i in (payload.get("ids") or [])])
    return {"ok": True, "changed": changed}


@app.get("/api/{kind}/day/{day}")
def api_record_for_day(
    kind: str,
    day: date,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    record = services.store(kind).find_by_date(day)
    return {"day": day.isoformat(), "record": _record_out(services, kind, record)}


@app.get("/api/{kind}/stats")
def api_stats(
    kind: str,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Statistics snapshot plus history views."""
    model = services.model(kind)
    records = model.store.all()
    out = model.statistics.to_dict()
    out["streakRuns"] = [run.to_dict() for run in streak_runs(records)]
    out["monthlyCounts"] = [{"month": label, "count": n} for label, n in monthly_counts(records)]
    out["averagePerDay"] = average_per_day(records, model.today)
    out.update(history_span(records, model.today))
    return out


@app.get("/api/{kind}/random")
def api_random_record(
    kind: str,
    previous: str | None = None,
    favorites_weight: float | None = None,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """A random active record, avoiding *previous* when possible."""
    candidates = services.model(kind).items
    prev = next((r for r in candidates if r.id == previous), None)
    weights = None
    if favorites_weight is not None:
        weights = [favorites_weight if r.is_favorite else 1.0 for r in candidates]
    record = pick(candidates, previous=prev, rng=services.rng, weights=weights)
    return {"record": _record_out(services, kind, record)}


@app.post("/api/{kind}/wheel")
def api_spin_wheel(
    kind: str,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    candidates = services.model(kind).items
    settings = services.settings
    result = spin_wheel(candidates, rng=services.rng, min_turns=settings.wheel_min_turns, max_turns=settings.wheel_max_turns)
    out = result.to_dict()
    out["segments"] = len(candidates)
    return out


@app.post("/api/{kind}/export")
def api_export(
    kind: str,
    period: str = "all",
    start: date | None = None,
    end: date | None = None,
    services: Services = Depends(get_services),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    flt = RecordFilter(include_archived=True, period=period, start=start, end=end)
    path = services.export(kind, flt)
    return {"ok": True, "path": str(path), "filename": path.name}
