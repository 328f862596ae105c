import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from invoicedesk.api.endpoints import departments, documents, employees
from invoicedesk.core.config import settings
from invoicedesk.db.session import init_db

# Set up logging
logger = logging.getLogger("invoicedesk")
logger.setLevel(settings.LOG_LEVEL)
if not logger.handlers:
    ch = logging.StreamHandler()
    ch.setLevel(settings.LOG_LEVEL)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    ch.setFormatter(formatter)
    logger.addHandler(ch)


# Dependency to log each request
def log_request(request: Request):
    logger.info(f"Handling request: {request.method} {request.url.path}")
    return logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Invoice, department and employee administration API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
app.include_router(departments.router, prefix="/api/departments", tags=["departments"])
app.include_router(employees.router, prefix="/api/employees", tags=["employees"])

# Stored files, resolved by StorageService.public_url
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.FILES_PATH, StaticFiles(directory=settings.UPLOAD_DIR), name="files")


@app.get("/")
async def root(logger: logging.Logger = Depends(log_request)):
    logger.info("Root endpoint hit.")
    return {
        "message": "Invoice Desk API",
        "version": settings.VERSION,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check(logger: logging.Logger = Depends(log_request)):
    logger.info("Health check endpoint hit.")
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
