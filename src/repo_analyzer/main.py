"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn repo_analyzer.main:app --reload --port 5000

    # Production
    uvicorn repo_analyzer.main:app --host 0.0.0.0 --port $PORT
"""

from repo_analyzer.factory import create_app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from repo_analyzer.core.config import get_settings

    settings = get_settings()

    uvicorn.run(
        "repo_analyzer.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )
