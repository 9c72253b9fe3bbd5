from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

# Import all route modules
from api.routes import analytics, participants
from utils.logger import get_logger
from core.config import settings
from core.database import initialize_database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting governance-analytics-backend")
    settings.validate()

    # Initialize database
    initialize_database()

    yield
    logger.info("Shutting down governance-analytics-backend")


app = FastAPI(
    title="Governance Analytics Backend",
    description="Participation, consensus, diversity and treasury analytics for governance dashboards",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics.router, prefix="/api", tags=["analytics"])
app.include_router(participants.router, prefix="/api", tags=["participants"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "governance-analytics-backend"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
