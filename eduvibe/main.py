# eduvibe/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eduvibe.config import settings
from eduvibe.database import Base, engine
from eduvibe.api import admin, auth, mentor, notification, recommendation, review, session, users

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="EduVibe API", debug=settings.DEBUG)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)            # /auth/*
app.include_router(users.router)           # /users/*
app.include_router(mentor.router)          # /mentors/*
app.include_router(session.router)         # /sessions/*
app.include_router(review.router)          # /reviews/*
app.include_router(notification.router)    # /notifications/*
app.include_router(recommendation.router)  # /recommendations/*
app.include_router(admin.router)           # /admin/*

logger.info("EduVibe API started (env=%s)", settings.APP_ENV)


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "EduVibe API is running",
        "version": "1.0.0",
    }
