from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from practice_builder import catalog, practices
from practice_builder.db import Practice, SessionLocal, get_db
from practice_builder.drafts import Draft, DraftStore, summarize_draft
from practice_builder.errors import (
    NotFound,
    PracticeBuilderError,
    ReferentialError,
    TransientIO,
    Unauthenticated,
    ValidationError,
)
from practice_builder.plan_commit import commit_draft
from practice_builder.redis_client import create_redis_client
from practice_builder.schemas.builder import (
    AddDrillPayload,
    DraftMetaPayload,
    DrillFields,
    MovePayload,
)

app = FastAPI(title="Practice Builder")

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (Unauthenticated, 401),
    (NotFound, 404),
    (ReferentialError, 409),
    (TransientIO, 503),
)


@app.exception_handler(PracticeBuilderError)
async def _practice_builder_error(_request: Request, exc: PracticeBuilderError) -> JSONResponse:
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 500)
    return JSONResponse(status_code=status, content={"detail": exc.user_message, "code": exc.code})


@app.exception_handler(RequestValidationError)
async def _request_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(
        "invalid_request",
        "The request has invalid fields.",
        errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()],
    )
    return await _practice_builder_error(_request, error)


def get_redis() -> Optional[Redis]:
    return create_redis_client()


def get_session_factory() -> Callable[[], Session]:
    return SessionLocal


_memory_stores: Dict[int, DraftStore] = {}


async def get_draft_store(
    user_id: Optional[int] = Query(None, description="Coach user ID"),
    redis: Optional[Redis] = Depends(get_redis),
) -> DraftStore:
    if user_id is None:
        raise Unauthenticated()
    if redis is not None:
        store = DraftStore(user_id, redis)
        await store.load()
        return store

    # Without Redis the process holds the only copy of each draft.
    store = _memory_stores.get(user_id)
    if store is None:
        store = DraftStore(user_id, None)
        await store.load()
        _memory_stores[user_id] = store
    elif (await store.current()).practice_date < store.clock():
        await store.reset()
    return store


def _draft_payload(draft: Draft) -> Dict[str, Any]:
    summary = summarize_draft(draft)
    return {
        "title": draft.title,
        "practice_date": draft.practice_date.isoformat(),
        "drills": [instance.to_dict() for instance in draft.instances],
        "total_minutes": summary.total_minutes,
        "item_count": summary.item_count,
        "long_session": summary.long_session,
    }


def _practice_payload(practice: Practice, with_items: bool = False) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": practice.id,
        "title": practice.title,
        "practice_date": practice.practice_date.isoformat(),
        "notes": practice.notes,
    }
    if with_items:
        payload["items"] = [
            {
                "drill_id": item.drill_id,
                "sort_order": item.sort_order,
                "title": item.drill.title if item.drill else None,
                "duration_minutes": item.drill.duration_minutes if item.drill else None,
            }
            for item in practice.items
        ]
    return payload


# -------------------- CATALOG --------------------
@app.get("/drills")
def list_drills(
    q: Optional[str] = Query(None, description="Match title or description"),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    return [drill.to_dict() for drill in catalog.list_drills(db, q)]


@app.post("/drills", status_code=201)
def create_drill(
    payload: DrillFields,
    user_id: Optional[int] = Query(None, description="Coach user ID"),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return catalog.create_drill(db, user_id, payload).to_dict()


# -------------------- BUILDER --------------------
@app.get("/builder")
async def get_builder(store: DraftStore = Depends(get_draft_store)) -> Dict[str, Any]:
    return _draft_payload(store.snapshot())


@app.post("/builder/drills", status_code=201)
async def add_builder_drill(
    payload: AddDrillPayload,
    store: DraftStore = Depends(get_draft_store),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    drill = catalog.get_drill(db, payload.drill_id)
    instance = await store.add_drill(drill)
    response = _draft_payload(store.snapshot())
    response["instance_id"] = instance.instance_id
    return response


@app.delete("/builder/drills/{instance_id}")
async def remove_builder_drill(instance_id: str, store: DraftStore = Depends(get_draft_store)) -> Dict[str, Any]:
    return _draft_payload(await store.remove_instance(instance_id))


@app.post("/builder/move")
async def move_builder_drill(payload: MovePayload, store: DraftStore = Depends(get_draft_store)) -> Dict[str, Any]:
    return _draft_payload(await store.move_instance(payload.from_instance_id, payload.to_instance_id))


@app.patch("/builder")
async def update_builder(payload: DraftMetaPayload, store: DraftStore = Depends(get_draft_store)) -> Dict[str, Any]:
    if payload.title is not None:
        await store.set_title(payload.title)
    if payload.practice_date is not None:
        await store.set_date(payload.practice_date)
    return _draft_payload(store.snapshot())


@app.delete("/builder")
async def reset_builder(store: DraftStore = Depends(get_draft_store)) -> Dict[str, Any]:
    return _draft_payload(await store.reset())


@app.post("/builder/save", status_code=201)
async def save_builder(
    store: DraftStore = Depends(get_draft_store),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> Dict[str, Any]:
    result = await commit_draft(store, session_factory)
    return {
        "practice_id": result.practice_id,
        "item_count": result.item_count,
        "total_minutes": result.total_minutes,
        "long_session": result.long_session,
        "message": "Practice saved successfully! Builder cleared.",
    }


# -------------------- PRACTICES --------------------
@app.get("/practices")
def list_practices(
    user_id: Optional[int] = Query(None, description="Coach user ID"),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    return [_practice_payload(practice) for practice in practices.list_practices(db, user_id)]


@app.get("/practices/{practice_id}")
def get_practice(practice_id: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    return _practice_payload(practices.get_practice_with_items(db, practice_id), with_items=True)
