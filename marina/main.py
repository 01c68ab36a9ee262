"""FastAPI application: entry point for the marina manager."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from marina.config import Settings, build_store, load_settings
from marina.domain.bus import EventBus
from marina.domain.errors import (
    ConflictError,
    RecordNotFound,
    StoreError,
    SubmissionInProgress,
    ValidationError,
)
from marina.domain.handlers import HandlerRegistry
from marina.domain.models import (
    DOCK_LABELS,
    ActivityEntry,
    BookingForm,
    CandidateInterval,
    ConflictCheckRequest,
    ConflictCheckResponse,
    Reservation,
    TodoCreateRequest,
    TodoItem,
    WaitlistEntry,
    WaitlistForm,
    WaitlistStatusRequest,
    WaitlistType,
    same_id,
)
from marina.observability.correlation import (
    REQUEST_ID_HEADER,
    generate_request_id,
    reset_request_id,
    set_request_id,
)
from marina.observability.logging import configure_logging, get_logger
from marina.repos.collections import (
    ReservationRepository,
    TodoRepository,
    WaitlistRepository,
)
from marina.repos.memory import ActivityRepository
from marina.repos.store import RESERVATIONS, RecordStore
from marina.services.booking import BookingController
from marina.services.conflicts import find_conflict
from marina.services.dock_calendar import (
    CalendarMonth,
    MonthGrid,
    build_month_grid,
    select_cell,
)
from marina.services.navigation import (
    LANDING_SECTIONS,
    Section,
    decode_view,
    encode_view,
    view_adapter,
)
from marina.services.todos import TodoService
from marina.services.waitlist import WaitlistService

logger = get_logger(__name__)


class MarinaContext:
    """Everything a request handler needs, built once per application."""

    def __init__(
        self,
        store: RecordStore,
        today: Callable[[], date] = date.today,
        write_timeout: float = 10,
    ) -> None:
        self.store = store
        self.today = today
        self.write_timeout = write_timeout
        self._reservation_lock = threading.Lock()
        self.bus = EventBus()
        self.activity_repo = ActivityRepository()
        self.reservations = ReservationRepository(store)
        self.todos = TodoRepository(store)
        self.waitlist = WaitlistRepository(store)
        self.handler_registry = HandlerRegistry(
            bus=self.bus, activity_repo=self.activity_repo
        )

    def booking_controller(self) -> BookingController:
        return BookingController(self.reservations, self.bus, today=self.today)

    @contextmanager
    def reservation_write(self) -> Iterator[BookingController]:
        """Hold the reservation write lock for snapshot, check and persist.

        Writes from concurrent requests run one after another, so each one
        checks against a snapshot that includes the previous write. A write
        that cannot get the lock within *write_timeout* seconds is refused
        with SubmissionInProgress.
        """
        if not self._reservation_lock.acquire(timeout=self.write_timeout):
            raise SubmissionInProgress()
        try:
            yield self.booking_controller()
        finally:
            self._reservation_lock.release()

    def todo_service(self) -> TodoService:
        return TodoService(self.todos, self.bus)

    def waitlist_service(self, waitlist_type: WaitlistType) -> WaitlistService:
        return WaitlistService(self.waitlist, self.bus, waitlist_type)


def get_context(request: Request) -> MarinaContext:
    return request.app.state.marina


# ── Response bodies ───────────────────────────────────────────────────


class LandingResponse(BaseModel):
    title: str
    sections: list[Section]


class ViewResponse(BaseModel):
    key: str
    view: dict


class ReservationWriteResponse(BaseModel):
    reservation: Reservation
    reservations: list[Reservation]


class CellSelection(BaseModel):
    day: date
    dock_id: str


class CellSelectionResponse(BaseModel):
    mode: str
    reservation_id: int | str | None = None
    form: BookingForm


# ── Error translation ─────────────────────────────────────────────────


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422, content={"detail": str(exc), "field": exc.field}
        )

    @app.exception_handler(ConflictError)
    async def _conflict(request: Request, exc: ConflictError) -> JSONResponse:
        conflict = exc.conflict
        return JSONResponse(
            status_code=409,
            content={
                "detail": str(exc),
                "conflict_day": conflict.conflict_day.isoformat(),
                "reservation_id": conflict.reservation_id,
                "guest_name": conflict.guest_name,
                "message": conflict.message,
            },
        )

    @app.exception_handler(StoreError)
    async def _store(request: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(RecordNotFound)
    async def _not_found(request: Request, exc: RecordNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SubmissionInProgress)
    async def _busy(request: Request, exc: SubmissionInProgress) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})


# ── Application factory ───────────────────────────────────────────────


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    """Build the API around an explicit record store.

    When *store* is omitted one is created from *settings* (or from the
    environment when *settings* is omitted too).
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    context = MarinaContext(store if store is not None else build_store(settings), today)

    app = FastAPI(title="Marina Manager")
    app.state.marina = context
    _install_error_handlers(app)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)

    # ── Navigation ────────────────────────────────────────────────────

    @app.get("/", response_model=LandingResponse)
    def landing() -> LandingResponse:
        """The hub: every section and the view each tile opens."""
        return LandingResponse(title="Marina Management Hub", sections=LANDING_SECTIONS)

    @app.get("/views/{key}", response_model=ViewResponse)
    def view(key: str) -> ViewResponse:
        decoded = decode_view(key)
        return ViewResponse(
            key=encode_view(decoded),
            view=view_adapter.dump_python(decoded, mode="json"),
        )

    # ── Reservations ──────────────────────────────────────────────────

    @app.get("/docks", response_model=list[str])
    def list_docks() -> list[str]:
        return list(DOCK_LABELS)

    @app.get("/reservations", response_model=list[Reservation])
    def list_reservations(ctx: MarinaContext = Depends(get_context)) -> list[Reservation]:
        return ctx.reservations.list_all()

    @app.post(
        "/reservations", response_model=ReservationWriteResponse, status_code=201
    )
    def create_reservation(
        form: BookingForm, ctx: MarinaContext = Depends(get_context)
    ) -> ReservationWriteResponse:
        """Book a dock. Rejected with 409 when the stay overlaps another."""
        with ctx.reservation_write() as controller:
            controller.begin_new_booking(ctx.today(), form.dock_id or "")
            saved = controller.submit(form)
        return ReservationWriteResponse(
            reservation=saved, reservations=ctx.reservations.list_all()
        )

    @app.put("/reservations/{reservation_id}", response_model=ReservationWriteResponse)
    def update_reservation(
        reservation_id: str,
        form: BookingForm,
        ctx: MarinaContext = Depends(get_context),
    ) -> ReservationWriteResponse:
        """Replace a reservation's fields; the dock stays the same."""
        with ctx.reservation_write() as controller:
            existing = next(
                (r for r in ctx.reservations.list_all() if same_id(r.id, reservation_id)),
                None,
            )
            if existing is None:
                raise RecordNotFound(RESERVATIONS, reservation_id)
            controller.begin_edit(existing)
            saved = controller.submit(form)
        return ReservationWriteResponse(
            reservation=saved, reservations=ctx.reservations.list_all()
        )

    @app.delete("/reservations/{reservation_id}", response_model=list[Reservation])
    def cancel_reservation(
        reservation_id: str,
        confirm: bool = False,
        ctx: MarinaContext = Depends(get_context),
    ) -> list[Reservation]:
        """Permanently remove a reservation. Requires ``?confirm=true``."""
        with ctx.reservation_write() as controller:
            if not any(same_id(r.id, reservation_id) for r in ctx.reservations.list_all()):
                raise RecordNotFound(RESERVATIONS, reservation_id)
            if not controller.cancel(reservation_id, confirmed=confirm):
                raise HTTPException(
                    status_code=400, detail="Cancellation must be confirmed."
                )
        return ctx.reservations.list_all()

    @app.post("/conflicts/check", response_model=ConflictCheckResponse)
    def check_conflict(
        body: ConflictCheckRequest, ctx: MarinaContext = Depends(get_context)
    ) -> ConflictCheckResponse:
        """Preview whether a stay would be rejected, without saving anything."""
        conflict = find_conflict(
            CandidateInterval(**body.model_dump()), ctx.reservations.list_all()
        )
        if conflict is None:
            return ConflictCheckResponse(conflict=False)
        return ConflictCheckResponse(
            conflict=True,
            conflict_day=conflict.conflict_day,
            reservation_id=conflict.reservation_id,
            guest_name=conflict.guest_name,
            message=conflict.message,
        )

    # ── Calendar ──────────────────────────────────────────────────────

    @app.get("/calendar", response_model=MonthGrid)
    def current_month_grid(ctx: MarinaContext = Depends(get_context)) -> MonthGrid:
        """The month containing today, where the calendar opens."""
        return build_month_grid(
            CalendarMonth.containing(ctx.today()), ctx.reservations.list_all()
        )

    @app.get("/calendar/{year}/{month}", response_model=MonthGrid)
    def month_grid(
        year: int, month: int, ctx: MarinaContext = Depends(get_context)
    ) -> MonthGrid:
        if not 1 <= month <= 12 or not 1 <= year <= 9999:
            raise HTTPException(status_code=422, detail="No such month.")
        return build_month_grid(
            CalendarMonth(year=year, month=month), ctx.reservations.list_all()
        )

    @app.post("/calendar/select", response_model=CellSelectionResponse)
    def select(
        body: CellSelection, ctx: MarinaContext = Depends(get_context)
    ) -> CellSelectionResponse:
        """Open the booking dialog a calendar cell would open."""
        controller = ctx.booking_controller()
        form = select_cell(controller, body.day, body.dock_id, ctx.reservations.list_all())
        return CellSelectionResponse(
            mode=controller.mode.value,
            reservation_id=controller.editing.id if controller.editing else None,
            form=form,
        )

    # ── To-do list ────────────────────────────────────────────────────

    @app.get("/todos", response_model=list[TodoItem])
    def list_todos(ctx: MarinaContext = Depends(get_context)) -> list[TodoItem]:
        return ctx.todo_service().list_todos()

    @app.post("/todos", response_model=list[TodoItem], status_code=201)
    def add_todo(
        body: TodoCreateRequest, ctx: MarinaContext = Depends(get_context)
    ) -> list[TodoItem]:
        return ctx.todo_service().add(body.task)

    @app.post("/todos/{todo_id}/toggle", response_model=list[TodoItem])
    def toggle_todo(todo_id: str, ctx: MarinaContext = Depends(get_context)) -> list[TodoItem]:
        return ctx.todo_service().toggle(todo_id)

    @app.delete("/todos/{todo_id}", response_model=list[TodoItem])
    def delete_todo(todo_id: str, ctx: MarinaContext = Depends(get_context)) -> list[TodoItem]:
        return ctx.todo_service().delete(todo_id)

    # ── Waitlists ─────────────────────────────────────────────────────

    @app.get("/waitlists/{waitlist_type}", response_model=list[WaitlistEntry])
    def list_waitlist(
        waitlist_type: WaitlistType, ctx: MarinaContext = Depends(get_context)
    ) -> list[WaitlistEntry]:
        return ctx.waitlist_service(waitlist_type).list_entries()

    @app.post(
        "/waitlists/{waitlist_type}", response_model=list[WaitlistEntry], status_code=201
    )
    def add_waitlist_entry(
        waitlist_type: WaitlistType,
        form: WaitlistForm,
        ctx: MarinaContext = Depends(get_context),
    ) -> list[WaitlistEntry]:
        return ctx.waitlist_service(waitlist_type).add(form)

    @app.patch(
        "/waitlists/{waitlist_type}/{entry_id}/status",
        response_model=list[WaitlistEntry],
    )
    def update_waitlist_status(
        waitlist_type: WaitlistType,
        entry_id: str,
        body: WaitlistStatusRequest,
        ctx: MarinaContext = Depends(get_context),
    ) -> list[WaitlistEntry]:
        return ctx.waitlist_service(waitlist_type).update_status(entry_id, body.status)

    @app.put("/waitlists/{waitlist_type}/{entry_id}", response_model=list[WaitlistEntry])
    def update_waitlist_details(
        waitlist_type: WaitlistType,
        entry_id: str,
        form: WaitlistForm,
        ctx: MarinaContext = Depends(get_context),
    ) -> list[WaitlistEntry]:
        return ctx.waitlist_service(waitlist_type).update_details(entry_id, form)

    @app.delete("/waitlists/{waitlist_type}/{entry_id}", response_model=list[WaitlistEntry])
    def delete_waitlist_entry(
        waitlist_type: WaitlistType,
        entry_id: str,
        ctx: MarinaContext = Depends(get_context),
    ) -> list[WaitlistEntry]:
        return ctx.waitlist_service(waitlist_type).delete(entry_id)

    # ── Activity ──────────────────────────────────────────────────────

    @app.get("/activity", response_model=list[ActivityEntry])
    def activity(ctx: MarinaContext = Depends(get_context)) -> list[ActivityEntry]:
        return ctx.activity_repo.list_all()

    logger.info(
        "marina app created",
        extra={"extra_fields": {"store": type(context.store).__name__}},
    )
    return app
