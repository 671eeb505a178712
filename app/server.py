from __future__ import annotations

import asyncio

import uvicorn

from app.core.config import settings
from app.db.session import create_schema


def main() -> None:
    if settings.app_env == "dev":
        asyncio.run(create_schema())
    uvicorn.run("app.main:app", host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
