import logging
from fastapi import FastAPI
from .config import LOG_LEVEL
from .database import engine
from .models import Base
from .routes import sessions, schedule, templates
from .scheduling import __version__

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="Quiet Hours API",
    description="Session scheduling with conflict resolution, recurrence and slot suggestions",
    version=__version__
)

# Include routers
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
app.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
app.include_router(templates.router, prefix="/templates", tags=["templates"])

@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Quiet Hours API",
        "version": __version__,
        "endpoints": {
            "sessions": "POST /sessions/ - Schedule a session (409 on conflict)",
            "batch": "POST /sessions/batch - Schedule several sessions independently",
            "status": "POST /sessions/{id}/status - Start, complete or cancel a session",
            "snooze": "POST /sessions/{id}/snooze - Remind again in a few minutes",
            "export": "GET /sessions/export, POST /sessions/import - Versioned JSON backup",
            "optimal_time": "POST /schedule/optimal-time - First free preferred hour on a day",
            "suggestions": "POST /schedule/suggestions - Ranked slots for the coming week",
            "report": "GET /schedule/report - Productivity report",
            "templates": "PUT|GET /templates/{name} - Session templates"
        },
        "swagger_ui": "/docs - Interactive API documentation",
        "redoc": "/redoc - Alternative API documentation"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# This allows running the app directly with: python -m quiet_hours.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quiet_hours.main:app", host="0.0.0.0", port=8000, reload=True)
