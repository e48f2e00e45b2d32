import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
import database
import models  # noqa: F401  registers the tables on SQLModel.metadata
from config import settings
from errors import register_exception_handlers
from logging_config import setup_logging
from schemas.common_schema import ErrorResponse
from routers.auth import router as auth_router
from routers.reports import router as reports_router
from routers.comments import router as comments_router
from routers.customers import router as customers_router
from routers.sales_persons import router as sales_persons_router

logger = logging.getLogger(__name__)


# Create tables
def create_db_and_tables():
    SQLModel.metadata.create_all(database.engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    settings.check()
    create_db_and_tables()
    logger.info("Daily Report API started (%s)", settings.ENVIRONMENT)
    yield


app = FastAPI(
    title="Daily Report API",
    description="Backend API for sales daily reports, customer visits and manager feedback",
    version="0.1.0",
    lifespan=lifespan,
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 500)},
)

register_exception_handlers(app)


# Root endpoint (no authentication required)
@app.get("/")
def root():
    return JSONResponse(content={"message": "Welcome to the Daily Report API. For documentation, please refer to /docs."})


@app.get("/api/health")
def health():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(reports_router)
app.include_router(comments_router)
app.include_router(customers_router)
app.include_router(sales_persons_router)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=False)
