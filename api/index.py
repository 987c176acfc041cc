import asyncio
import logging
import os
from pathlib import Path
import sys
import uuid
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Ensure local src package is importable in serverless runtime.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from sheet_cleaner.config import CleanerConfig  # noqa: E402
from sheet_cleaner.exceptions import (  # noqa: E402
    ColumnNotFoundError,
    DictionaryError,
    EmptySheetError,
    InvalidTransitionError,
    PromotionError,
    RowNotFoundError,
    SelectionError,
    SheetCleanerError,
    UnsupportedModeError,
)
from sheet_cleaner.reconcile import ReconciliationController  # noqa: E402
from sheet_cleaner.schema import (  # noqa: E402
    CleaningMode,
    ParsedRow,
    PromotionResult,
    RowFilter,
    SheetData,
)
from sheet_cleaner.search import ProductNameSearch  # noqa: E402
from sheet_cleaner.session import CleaningSession  # noqa: E402
from sheet_cleaner.stores import build_alias_store  # noqa: E402

app = FastAPI(title="sheet-cleaner API", version="1.0.0")
logger = logging.getLogger(__name__)
T = TypeVar("T")
CONFIG = CleanerConfig.from_env()
STORE = build_alias_store(CONFIG)

raw_origins = os.getenv("FRONTEND_ORIGINS", "*")
allow_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class SessionHandle:
    session: CleaningSession
    controller: ReconciliationController
    search: ProductNameSearch
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


# Actions on one session run one at a time under its lock.
SESSIONS: dict[str, SessionHandle] = {}


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


class ColumnRequest(BaseModel):
    column: str


class EditRequest(BaseModel):
    mode: CleaningMode
    value: str | None = None


class GroupEditRequest(BaseModel):
    targetText: str
    value: str | None = None


class SelectionRequest(BaseModel):
    mode: CleaningMode
    text: str


class PromoteRequest(BaseModel):
    mode: CleaningMode


class SizeLabelRequest(BaseModel):
    label: str


class NoticeResponse(BaseModel):
    level: str
    code: str
    message: str


class StatsResponse(BaseModel):
    total: int
    matched: int
    unknown: int
    new: int
    review: int


class SessionResponse(BaseModel):
    sessionId: str
    state: str
    activeMode: str
    fileName: str | None = None
    headers: list[str] = Field(default_factory=list)
    rowCount: int = 0
    columns: dict[str, str] = Field(default_factory=dict)
    notices: list[NoticeResponse] = Field(default_factory=list)


class RowResponse(BaseModel):
    id: str
    targetText: str
    extractedValue: str | None = None
    status: str
    manualOverride: bool = False
    selectionSource: str | None = None


class GroupResponse(BaseModel):
    targetText: str
    rowIds: list[str]
    count: int
    extractedValue: str | None = None
    status: str
    manualOverride: bool = False


class RowsResponse(BaseModel):
    mode: str
    filter: str
    stats: StatsResponse
    rows: list[RowResponse] = Field(default_factory=list)
    groups: list[GroupResponse] = Field(default_factory=list)


class PromoteResponse(BaseModel):
    label: str | None = None
    aliasText: str | None = None
    addedMatchers: list[str] = Field(default_factory=list)
    updatedRowIds: list[str] = Field(default_factory=list)
    persisted: bool = False
    notices: list[NoticeResponse] = Field(default_factory=list)


class KnownSizeResponse(BaseModel):
    label: str
    matchers: list[str] = Field(default_factory=list)
    count: int = 0


class UpdatedRowsResponse(BaseModel):
    updatedRowIds: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: str
    results: list[str] = Field(default_factory=list)
    superseded: bool = False


class ExportResponse(BaseModel):
    headers: list[str]
    rows: list[dict[str, str]]


def _handle(session_id: str) -> SessionHandle:
    handle = SESSIONS.get(session_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="session not found")
    return handle


def _http_error(exc: SheetCleanerError) -> HTTPException:
    if isinstance(exc, RowNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(
        exc,
        (
            EmptySheetError,
            ColumnNotFoundError,
            SelectionError,
            PromotionError,
            UnsupportedModeError,
            DictionaryError,
        ),
    ):
        return HTTPException(status_code=400, detail=str(exc))
    logger.exception("session operation failed")
    return HTTPException(status_code=500, detail="internal_error")


def _notices(session: CleaningSession) -> list[NoticeResponse]:
    return [NoticeResponse(**notice.model_dump()) for notice in session.drain_notices()]


def _session_response(session_id: str, session: CleaningSession) -> SessionResponse:
    sheet = session.sheet
    return SessionResponse(
        sessionId=session_id,
        state=session.state,
        activeMode=session.active_mode,
        fileName=sheet.file_name if sheet else None,
        headers=list(sheet.headers) if sheet else [],
        rowCount=len(sheet.rows) if sheet else 0,
        columns=dict(session.columns),
        notices=_notices(session),
    )


def _row_response(row: ParsedRow, mode: CleaningMode) -> RowResponse:
    result = row.result(mode)
    return RowResponse(
        id=row.id,
        targetText=result.target_text,
        extractedValue=result.extracted_value,
        status=result.status,
        manualOverride=result.manual_override,
        selectionSource=result.selection_source,
    )


def _stats_response(session: CleaningSession, mode: CleaningMode) -> StatsResponse:
    stats = session.stats(mode)
    return StatsResponse(**stats.model_dump(), review=stats.review)


async def _locked(handle: SessionHandle, action: Callable[[], T], *, offload: bool = False) -> T:
    """Run ``action`` while holding the session lock.

    ``offload`` runs it in a worker thread; actions that may write to the
    alias store use it so a slow store does not block the event loop.
    """
    async with handle.lock:
        try:
            if offload:
                return await asyncio.to_thread(action)
            return action()
        except SheetCleanerError as exc:
            raise _http_error(exc) from exc


def _rows_response(session: CleaningSession, mode: CleaningMode, row_filter: RowFilter) -> RowsResponse:
    groups = []
    if mode == "NAME":
        groups = [
            GroupResponse(
                targetText=group.target_text,
                rowIds=group.row_ids,
                count=group.count,
                extractedValue=group.extracted_value,
                status=group.status,
                manualOverride=group.manual_override,
            )
            for group in session.groups(mode, row_filter)
        ]
    return RowsResponse(
        mode=mode,
        filter=row_filter,
        stats=_stats_response(session, mode),
        rows=[_row_response(row, mode) for row in session.rows_for(mode, row_filter)],
        groups=groups,
    )


def _promote_response(result: PromotionResult, session: CleaningSession) -> PromoteResponse:
    return PromoteResponse(
        label=result.label,
        aliasText=result.alias_text,
        addedMatchers=result.added_matchers,
        updatedRowIds=result.updated_row_ids,
        persisted=result.persisted,
        notices=_notices(session),
    )


@app.post("/sessions", response_model=SessionResponse)
async def create_session(sheet: SheetData) -> SessionResponse:
    session = CleaningSession(STORE)
    try:
        session.load_sheet(sheet)
    except SheetCleanerError as exc:
        raise _http_error(exc) from exc
    await asyncio.to_thread(session.load_dictionaries)

    session_id = str(uuid.uuid4())
    SESSIONS[session_id] = SessionHandle(
        session=session,
        controller=ReconciliationController(session),
        search=ProductNameSearch(STORE, debounce_sec=CONFIG.search_debounce_sec),
    )
    return _session_response(session_id, session)


@app.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    handle = _handle(session_id)
    return await _locked(handle, lambda: _session_response(session_id, handle.session))


@app.delete("/sessions/{session_id}")
async def discard_session(session_id: str) -> dict[str, bool]:
    _handle(session_id)
    del SESSIONS[session_id]
    return {"ok": True}


@app.put("/sessions/{session_id}/columns/{mode}", response_model=RowsResponse)
async def assign_column(session_id: str, mode: CleaningMode, body: ColumnRequest) -> RowsResponse:
    handle = _handle(session_id)

    def assign() -> RowsResponse:
        handle.session.assign_column(body.column, mode)
        return _rows_response(handle.session, mode, "ALL")

    return await _locked(handle, assign)


@app.delete("/sessions/{session_id}/columns/{mode}", response_model=SessionResponse)
async def clear_column(session_id: str, mode: CleaningMode) -> SessionResponse:
    handle = _handle(session_id)

    def clear() -> SessionResponse:
        handle.session.clear_column(mode)
        return _session_response(session_id, handle.session)

    return await _locked(handle, clear)


@app.post("/sessions/{session_id}/mode/{mode}", response_model=SessionResponse)
async def switch_mode(session_id: str, mode: CleaningMode) -> SessionResponse:
    handle = _handle(session_id)

    def switch() -> SessionResponse:
        handle.session.switch_mode(mode)
        return _session_response(session_id, handle.session)

    return await _locked(handle, switch)


@app.get("/sessions/{session_id}/rows", response_model=RowsResponse)
async def list_rows(
    session_id: str,
    mode: CleaningMode = Query(default="SIZE"),
    row_filter: RowFilter = Query(default="ALL", alias="filter"),
) -> RowsResponse:
    handle = _handle(session_id)
    return await _locked(handle, lambda: _rows_response(handle.session, mode, row_filter))


@app.post("/sessions/{session_id}/rows/{row_id}/edit", response_model=RowResponse)
async def edit_row(session_id: str, row_id: str, body: EditRequest) -> RowResponse:
    handle = _handle(session_id)
    return await _locked(
        handle,
        lambda: _row_response(handle.controller.edit(body.mode, row_id, body.value), body.mode),
    )


@app.post("/sessions/{session_id}/groups/{mode}/edit", response_model=UpdatedRowsResponse)
async def edit_group(session_id: str, mode: CleaningMode, body: GroupEditRequest) -> UpdatedRowsResponse:
    handle = _handle(session_id)
    updated = await _locked(handle, lambda: handle.controller.edit_group(mode, body.targetText, body.value))
    return UpdatedRowsResponse(updatedRowIds=updated)


@app.post("/sessions/{session_id}/rows/{row_id}/selection", response_model=RowResponse)
async def select_span(session_id: str, row_id: str, body: SelectionRequest) -> RowResponse:
    handle = _handle(session_id)
    return await _locked(
        handle,
        lambda: _row_response(handle.controller.select_span(body.mode, row_id, body.text), body.mode),
    )


@app.post("/sessions/{session_id}/rows/{row_id}/promote", response_model=PromoteResponse)
async def promote_row(session_id: str, row_id: str, body: PromoteRequest) -> PromoteResponse:
    handle = _handle(session_id)
    return await _locked(
        handle,
        lambda: _promote_response(handle.controller.promote(body.mode, row_id), handle.session),
        offload=True,
    )


@app.get("/sessions/{session_id}/known-sizes", response_model=list[KnownSizeResponse])
async def known_sizes(session_id: str) -> list[KnownSizeResponse]:
    handle = _handle(session_id)
    values = await _locked(handle, lambda: handle.session.dictionaries.size.values)
    return [
        KnownSizeResponse(label=known.label, matchers=list(known.matchers), count=known.count)
        for known in values
    ]


@app.post("/sessions/{session_id}/known-sizes", response_model=PromoteResponse)
async def add_known_size(session_id: str, body: SizeLabelRequest) -> PromoteResponse:
    handle = _handle(session_id)
    return await _locked(
        handle,
        lambda: _promote_response(handle.controller.add_size(body.label), handle.session),
        offload=True,
    )


@app.patch("/sessions/{session_id}/known-sizes/{label}", response_model=UpdatedRowsResponse)
async def rename_known_size(session_id: str, label: str, body: SizeLabelRequest) -> UpdatedRowsResponse:
    handle = _handle(session_id)
    updated = await _locked(handle, lambda: handle.controller.rename_size(label, body.label))
    return UpdatedRowsResponse(updatedRowIds=updated)


@app.delete("/sessions/{session_id}/known-sizes/{label}", response_model=UpdatedRowsResponse)
async def remove_known_size(session_id: str, label: str) -> UpdatedRowsResponse:
    handle = _handle(session_id)
    updated = await _locked(handle, lambda: handle.controller.remove_size(label))
    return UpdatedRowsResponse(updatedRowIds=updated)


@app.get("/sessions/{session_id}/products/search", response_model=SearchResponse)
async def search_products(session_id: str, q: str = Query(default="")) -> SearchResponse:
    handle = _handle(session_id)
    results = await handle.search.search(q)
    if results is None:
        return SearchResponse(query=q, superseded=True)
    return SearchResponse(query=q, results=results)


@app.post("/sessions/{session_id}/export", response_model=ExportResponse)
async def export_session(session_id: str) -> ExportResponse:
    handle = _handle(session_id)

    def export() -> ExportResponse:
        sheet = handle.session.sheet
        rows = handle.session.export()
        return ExportResponse(headers=list(sheet.headers) if sheet else [], rows=rows)

    return await _locked(handle, export)


@app.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str) -> SessionResponse:
    handle = _handle(session_id)

    def reset() -> SessionResponse:
        handle.session.reset()
        handle.search.clear()
        return _session_response(session_id, handle.session)

    return await _locked(handle, reset)


@app.post("/sessions/{session_id}/upload", response_model=SessionResponse)
async def upload_again(session_id: str, sheet: SheetData) -> SessionResponse:
    handle = _handle(session_id)

    def upload() -> SessionResponse:
        handle.session.load_sheet(sheet)
        return _session_response(session_id, handle.session)

    return await _locked(handle, upload)
