"""CLI entrypoint to run the betbridge FastAPI server."""

from __future__ import annotations

import logging
import os

import uvicorn

from betbridge.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", "3001"))
    uvicorn.run("betbridge.api.server:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":  # pragma: no cover
    main()
