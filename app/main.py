from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.errors import DevEventError
from .core.logging import configure_logging
from .database.dynamodb import get_db_connection
from .routers import bookings, events

configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Event listing and booking API",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router)
app.include_router(bookings.router)


@app.exception_handler(DevEventError)
async def devevent_error_handler(request: Request, exc: DevEventError):
    """Errors raised outside a route body, e.g. while acquiring the store"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": {
                "message": "Request Failed",
                "error": str(exc),
                "cause": exc.cause,
            }
        },
    )


@app.get("/")
def read_root():
    return {"message": settings.APP_NAME, "status": "running"}


@app.get("/health")
def health():
    get_db_connection()
    return {"status": "ok"}
