"""FastAPI application for the classroom gradebook notifier."""

import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gradebook.config import Settings, load_settings
from gradebook.errors import GradebookError
from gradebook.models import (
    GradeEvent,
    GradeUpdateRequest,
    NotificationIntent,
    ReminderRequest,
    RosterResponse,
    StudentCreateRequest,
    ThresholdUpdateRequest,
)
from gradebook.notifier import LogNotifier, Notifier
from gradebook.reports import band_summary, roster_csv, roster_frame
from gradebook.service import GradebookSession
from gradebook.store import InMemoryRecordStore, RecordStore
from gradebook.thresholds import ThresholdRegistry

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    notifier: Optional[Notifier] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """Build the app around one teacher session; the roster is fetched on startup."""
    settings = settings or load_settings()
    session = GradebookSession(
        store=store or InMemoryRecordStore(),
        notifier=notifier or LogNotifier(),
        registry=ThresholdRegistry(settings.thresholds),
        sound=settings.notification_sound,
        reminder_hour=settings.reminder_hour,
        clock=clock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        students = await session.load()
        logger.info("Gradebook ready with %d students", len(students))
        yield

    app = FastAPI(title="Gradebook Notifier", version="1.0.0", lifespan=lifespan)
    app.state.session = session
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Specific handlers first; the catch-all only sees what they don't.
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(GradebookError)
    async def gradebook_exception_handler(request: Request, exc: GradebookError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        error_detail = str(exc)
        if settings.debug:
            error_detail = f"{exc}\n\n{traceback.format_exc()}"
        return JSONResponse(
            status_code=500,
            content={
                "detail": f"Internal server error: {error_detail}",
                "type": type(exc).__name__,
            },
        )

    def roster_response() -> RosterResponse:
        students = list(session.roster.students)
        frame = roster_frame(students, session.thresholds())
        return RosterResponse(
            students=students,
            class_average=session.class_average(),
            summary=band_summary(frame),
        )

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "students": len(session.roster)}

    @app.get("/thresholds")
    async def get_thresholds():
        return session.thresholds().model_dump(by_alias=True)

    @app.put("/thresholds/{band}")
    async def set_threshold(band: str, request: ThresholdUpdateRequest):
        """Set one cut-off from free-text input; bad input leaves it unchanged."""
        return session.set_threshold(band, request.value).model_dump(by_alias=True)

    @app.get("/students", response_model=RosterResponse)
    async def list_students():
        return roster_response()

    @app.post("/students", response_model=GradeEvent, status_code=201)
    async def add_student(request: StudentCreateRequest):
        return await session.add_student(request.name, request.grade)

    @app.put("/students/{student_id}/grade", response_model=GradeEvent)
    async def update_grade(student_id: str, request: GradeUpdateRequest):
        return await session.update_grade(student_id, request.grade)

    @app.post("/roster/reload", response_model=RosterResponse)
    async def reload_roster():
        """Re-fetch the store; the class average baseline starts over."""
        await session.load()
        return roster_response()

    @app.post("/reminders", response_model=NotificationIntent, status_code=201)
    async def schedule_reminder(request: ReminderRequest):
        return await session.schedule_reminder(request.due_date)

    @app.get("/download.csv")
    async def download_csv():
        """Download the roster with each student's band as CSV."""
        frame = roster_frame(list(session.roster.students), session.thresholds())
        stamp = datetime.now().strftime("%Y-%m-%d")
        return StreamingResponse(
            iter([roster_csv(frame)]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename=gradebook_roster_{stamp}.csv"
            },
        )

    return app


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)
