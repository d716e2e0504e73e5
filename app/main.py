from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from dotenv import load_dotenv
import logging

from app.core.config import settings
from app.api.v1.api import api_router
from app.core.database import Base, engine
from app.services.update_tracker import UpdateTracker
from app import models  # noqa: F401  (register tables on Base.metadata)

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Configure audit logger (JSON lines)
audit_logger = logging.getLogger("audit")
if not audit_logger.handlers:
    handler = logging.StreamHandler()
    # Keep raw JSON line without extra prefixes
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
audit_logger.setLevel(logging.INFO)
# Do not propagate to root to avoid duplication
audit_logger.propagate = False

api_description = """
## Budgets API

Spending limits per expense category and period, with spend, health status
and portfolio totals recomputed from recorded transactions on every read.

- `GET /budgets/` - budgets with spend and status
- `GET /budgets/summary` - totals and status counts for one period type
- `POST /budgets/validate` - derived window or the reason it is rejected
"""

app = FastAPI(
    title="Budgets API",
    description=api_description,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Per-user change counters for polling clients
app.state.update_tracker = UpdateTracker()

# GZip compression for large JSON responses
app.add_middleware(GZipMiddleware, minimum_size=500)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def create_tables_on_startup():
    # Idempotent; Alembic owns schema changes in deployed environments
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


@app.get("/")
async def root():
    return {"message": "Budgets API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
