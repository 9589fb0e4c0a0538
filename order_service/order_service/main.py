"""Main entry point for the Order Service."""

import os

import uvicorn

from order_service.server import app


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    run()
