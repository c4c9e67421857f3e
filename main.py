"""Riddler — launcher. Serves the webhook app, or long-polls Telegram."""

import argparse
import asyncio
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13015")


def main():
    parser = argparse.ArgumentParser(description="Riddler Telegram bot")
    parser.add_argument("--poll", action="store_true",
                        help="Fetch updates with long polling instead of serving a webhook")
    parser.add_argument("--host", default=HOST, help=f"Webhook bind host (default: {HOST})")
    parser.add_argument("--port", type=int, default=int(PORT),
                        help=f"Webhook bind port (default: {PORT})")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"),
                        help="Logging level (default: INFO)")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from riddler.config import load_settings
    settings = load_settings()

    if args.poll:
        from backend.polling import run_polling
        from backend.state import BotState
        from riddler.delivery import TelegramBot

        bot = TelegramBot(settings.bot_token, api_url=settings.api_url,
                          timeout=settings.request_timeout)
        state = BotState(settings=settings, messenger=bot)
        print("Polling Telegram for updates (Ctrl+C to stop) ...")
        try:
            asyncio.run(run_polling(state, bot))
        except KeyboardInterrupt:
            print("\nShutting down...")
        return

    import uvicorn
    from backend.app import create_app

    print(f"Starting webhook server on http://{args.host}:{args.port} ...")
    uvicorn.run(create_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
