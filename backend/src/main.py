# main.py
# Entry point for the backend service.
# - Initializes FastAPI app and logging
# - Registers API routes (repositories)
# - Provides root health-check endpoint
# - Run with: uvicorn main:app --reload (from backend/src)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from config.config_manager import get_config
from api.repository_routes import router as repository_router

config = get_config()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Repository Contributions API",
    description="Per-author contribution statistics and folder trees for git repositories",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def root():
    return {"status":"healthy", "message":"Backend API is running"}

@app.get("/health")
def health_check():
    return {"status":"ok"}


# Register API routes
app.include_router(repository_router)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
