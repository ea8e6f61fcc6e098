import os

import uvicorn

from budget_buddy.app import app
from budget_buddy.logger import get_logging_config

__all__ = ["app", "run"]


def run() -> None:
    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    run()
