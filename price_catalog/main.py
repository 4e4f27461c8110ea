from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from price_catalog.core.config import settings
from price_catalog.core.errors import CatalogError
from price_catalog.core.logger import setup_logger
from price_catalog.database.connection import init_db
from price_catalog.middleware.metrics import MetricsMiddleware, new_metrics
from price_catalog.routes import system
from price_catalog.routes.auth import router as auth_router
from price_catalog.routes.products import router as product_router

logger = setup_logger("main")

app = FastAPI(
    title="Price Catalog API",
    description="Item/brand price catalog with previous-price tracking",
    version="1.0.0",
)

app.add_middleware(MetricsMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(product_router)
app.include_router(system.router)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # echoed inputs may hold NaN / Infinity, which a JSON response cannot encode
    errors = [
        {key: value for key, value in err.items() if key not in ("input", "ctx")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


@app.on_event("startup")
async def startup_event():
    init_db()
    app.state.start_time = datetime.utcnow()
    app.state.metrics = new_metrics()
    logger.info("Price catalog started")
