from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.routers import search, listings
from app.core.config import settings
from app.core.database import Base, engine
import logging

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Asset Management API",
    description="API for managing and searching an organisation's rental property assets",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(search.router, prefix="/api/v1/search", tags=["search"])
app.include_router(listings.router, prefix="/api/v1/listings", tags=["listings"])

@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Application startup completed successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}")
        raise

@app.get("/")
async def root():
    return {"message": "Asset Management API"}

@app.get("/health")
async def health_check():
    """Health check endpoint that verifies the database"""
    health_status = {
        "status": "healthy",
        "services": {}
    }
    
    try:
        with engine.connect() as connection:
            connection.exec_driver_sql("SELECT 1")
        health_status["services"]["database"] = "healthy"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["services"]["database"] = "unhealthy"
        health_status["error"] = str(e)
    
    return health_status
