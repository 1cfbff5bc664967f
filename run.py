"""Entry point for the Bakery Reservation API.

Serves the FastAPI application with Uvicorn.  The daily sales rollup
scheduler is started by the application itself, so this single process
runs both the API and the scheduled job.

Configuration such as DATABASE_URL, SECRET_KEY and the SALES_ROLLUP_*
settings is read from the environment.  Host and port are read from
``API_HOST`` and ``API_PORT`` (defaults ``0.0.0.0`` and ``8000``).

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from bakery_reservation_api.app.main import app


async def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    logging.getLogger(__name__).info("Serving on %s:%s", host, port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
