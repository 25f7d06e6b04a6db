"""Run the API with uvicorn: `python -m task_intake`."""

import uvicorn

from task_intake.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "task_intake.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
