from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from terms_analyzer.api.errors import validation_exception_handler
from terms_analyzer.api.routes_analyze import router as analyze_router
from terms_analyzer.api.routes_cache import router as cache_router
from terms_analyzer.api.routes_extension import router as extension_router

app = FastAPI(
    title="Terms Analyzer",
    version="1.0.0",
    description="Risk assessment of terms of service and privacy policies",
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.include_router(analyze_router)
app.include_router(extension_router)
app.include_router(cache_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
