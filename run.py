import multiprocessing

import uvicorn

from techassist.core.config import settings

if __name__ == "__main__":
    # One worker with reload in development, several in production
    development = settings.environment == "development"
    workers = 1 if development else max(1, multiprocessing.cpu_count() - 1)
    print(f"Using {workers} workers")

    uvicorn.run(
        "techassist.main:app",
        host=settings.host,
        port=settings.port,
        workers=None if development else workers,
        reload=development,
        log_level="info" if development else "warning",
    )
