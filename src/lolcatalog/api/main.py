"""Main entry point for running the FastAPI server."""

import uvicorn

from ..config import CatalogConfig
from .app import create_app


def main(config: CatalogConfig | None = None) -> None:
    """Run the FastAPI application with Uvicorn."""
    config = config or CatalogConfig.from_env()
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        # Each worker process keeps its own dataset cache
        workers=1,
        access_log=True,
        loop="uvloop",
        http="h11",
    )


if __name__ == "__main__":
    main()
