from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from config import get_settings
from core.session_manager import SessionManager
from api import sessions


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 依設定調整 log level
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    yield
    # Shutdown: 清掉記憶體內的 Session
    SessionManager.clear()


app = FastAPI(
    title="Gear Recipe Game API",
    description="Round engine for the gear recipe matching minigame",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sessions.router)


@app.get("/")
def root():
    return {"message": "Gear Recipe Game API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy", "sessions": SessionManager.session_count()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
