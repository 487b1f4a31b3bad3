"""
IdeaHub API server
Run with: uvicorn app.main:app --reload
"""
import os
import logging
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routes import v1_users, v1_ideas, v1_activities

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="IdeaHub API", version="1.0.0")

cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_users.router)
app.include_router(v1_ideas.router)
app.include_router(v1_activities.router)

logger.info(f"IdeaHub API initialized, CORS origins: {cors_origins}")


@app.get("/health")
def health():
    return {"status": "ok"}
