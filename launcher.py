"""Application launcher for the analytics recorder."""
from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Optional

import uvicorn

from pageviews.infra.config.settings import settings
from pageviews.shared.logging import get_logger, setup_logging


logger = get_logger(__name__)


def run_app(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """
    Головна точка входу для запуску сервера.

    1. Налаштовує єдиний логгер.
    2. Запускає FastAPI-фабрику (pageviews.api.http.server:create_app) через uvicorn.
    """
    setup_logging()

    logger.info("Starting analytics server on %s:%d", host, port)
    uvicorn_kwargs = {
        "app": "pageviews.api.http.server:create_app",
        "factory": True,
        "host": host,
        "port": port,
        # Використовуємо наше глобальне налаштування logging,
        # uvicorn не перестворює власні хендлери/форматери
        "log_config": None,
        "timeout_keep_alive": 5,
        # Час на фінальний flush під час зупинки
        "timeout_graceful_shutdown": 10,
    }

    if reload:
        uvicorn_kwargs.update(
            {
                "reload": True,
                "reload_dirs": [os.path.join(os.getcwd(), "pageviews")],
                "reload_excludes": [".venv", "venv", ".git", "__pycache__", "data"],
            }
        )

    uvicorn.run(**uvicorn_kwargs)


def show_config() -> None:
    """Print the resolved analytics configuration with secrets masked."""
    config = settings.analytics_config()
    print(json.dumps(config.describe(), indent=2, ensure_ascii=False))


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the launcher CLI."""
    parser = argparse.ArgumentParser(
        description="Запуск сервера аналітики переглядів сторінок.",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("APP_HOST", "0.0.0.0"),
        help="Хост для HTTP-сервера (за замовчуванням APP_HOST або 0.0.0.0).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("APP_PORT", os.getenv("PORT", "8000"))),
        help="Порт для HTTP-сервера (APP_PORT, PORT або 8000).",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("APP_RELOAD", "false").lower() == "true",
        help="Увімкнути авто-перезапуск uvicorn (тільки для девелопмента).",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Вивести конфігурацію аналітики (без секретів) і вийти.",
    )

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.show_config:
        show_config()
        return
    run_app(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
