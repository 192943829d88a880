"""
Run the catalog server under uvicorn.

Usage:
    python -m foodchain.scripts.dev_server
    PORT=5000 DB_PATH=/tmp/db.json python -m foodchain.scripts.dev_server
"""

import uvicorn

from foodchain.services.logs import get_logger
from foodchain.services.settings import Settings


def main():
    settings = Settings.from_env()
    get_logger("foodchain").info(f"backend starting on port {settings.port}")
    uvicorn.run(
        "foodchain.web.app:create_web_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
