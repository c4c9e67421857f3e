from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.routes import router
from backend.state import BotState
from riddler.config import Settings, load_settings
from riddler.delivery import Messenger, TelegramBot

load_dotenv(Path(__file__).parent.parent / ".env")


def create_app(settings: Settings | None = None, messenger: Messenger | None = None) -> FastAPI:
    settings = settings or load_settings()
    if messenger is None:
        messenger = TelegramBot(
            settings.bot_token,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
        )

    app = FastAPI(title="Riddler")
    app.state.riddler = BotState(settings=settings, messenger=messenger)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (reads settings from the environment)
app = create_app()
