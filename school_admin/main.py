import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_admin.api.v1.attendance.router import router as attendance_router
from school_admin.api.v1.classes.router import router as classes_router
from school_admin.api.v1.course_assignments.router import router as course_assignments_router
from school_admin.api.v1.courses.router import router as courses_router
from school_admin.api.v1.students.router import router as students_router
from school_admin.api.v1.teachers.router import router as teachers_router
from school_admin.api.v1.timetables.router import router as timetables_router
from school_admin.core.config import settings
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse, ErrorResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"success": false, "message": ...}."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        return _error(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="School Administration Backend")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/api/health", response_model=ApiResponse[dict], tags=["health"])
    async def health():
        return ApiResponse(data={"status": "ok"})

    # Routers
    app.include_router(classes_router)
    app.include_router(courses_router)
    app.include_router(students_router)
    app.include_router(teachers_router)
    app.include_router(course_assignments_router)
    app.include_router(timetables_router)
    app.include_router(attendance_router)

    return app


app = create_app()
