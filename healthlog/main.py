"""
Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from healthlog.config import settings
from healthlog.database.connection import init_database
from healthlog.routes import (
    admin,
    auth,
    daily,
    exercise,
    finance,
    health,
    health_info,
    medication_lookup,
    medications,
    memos,
    periods,
    sex,
    stool,
    weight,
)


# Create FastAPI app
app = FastAPI(
    title="HealthLog Backend API",
    description="Backend API for personal health, habit and finance tracking",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are client errors: 400 instead of 422"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return JSONResponse(
        status_code=400,
        content={"detail": detail, "errors": jsonable_encoder(errors)},
    )


# Initialize database
init_database()

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, tags=["Auth"])
app.include_router(medications.router, tags=["Medications"])
app.include_router(stool.router, tags=["Stool"])
app.include_router(daily.router, tags=["Daily"])
app.include_router(exercise.router, tags=["Exercise"])
app.include_router(finance.router, tags=["Finance"])
app.include_router(memos.router, tags=["Memos"])
app.include_router(periods.router, tags=["Periods"])
app.include_router(sex.router, tags=["Sex"])
app.include_router(weight.router, tags=["Weight"])
app.include_router(admin.router, tags=["Admin"])
app.include_router(health_info.router, tags=["Health info"])
app.include_router(medication_lookup.router, tags=["Medication lookup"])
