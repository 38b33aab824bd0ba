import logging
import sys

from telegram.ext import Application

from flatwatch.bot.telegram_bot import attach_handlers, schedule_jobs
from flatwatch.core.storage import Storage
from flatwatch.models import SourceConfig
from flatwatch.suppliers import flatfox
from runner.config import (BLACKLIST, CHECK_INTERVAL_SECONDS, DATA_DIR,
                           FLATFOX_BATCH_DELAY, FLATFOX_ENABLED, FLATFOX_URL,
                           LOG_LEVEL, TELEGRAM_TOKEN)

logger = logging.getLogger("flatwatch")


def build_suppliers():
    return [
        flatfox.init(
            SourceConfig(enabled=FLATFOX_ENABLED, url=FLATFOX_URL),
            BLACKLIST,
            batch_delay=FLATFOX_BATCH_DELAY,
        ),
    ]


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every Telegram long-poll request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if not TELEGRAM_TOKEN:
        raise RuntimeError("TELEGRAM_TOKEN not found in .env")

    # 1) Register suppliers here
    suppliers = build_suppliers()
    for sp in suppliers:
        logger.info(f"Supplier {sp.meta.name} ({sp.name}): {'enabled' if sp.enabled else 'disabled'}")

    # 2) Build bot
    application = Application.builder().token(TELEGRAM_TOKEN).build()

    # 3) Handlers
    attach_handlers(application, Storage(DATA_DIR))

    # 4) Schedule job(s)
    schedule_jobs(application, suppliers, interval_seconds=CHECK_INTERVAL_SECONDS)

    logger.info("Bot running. Ctrl+C to stop.")
    application.run_polling(close_loop=False)


if __name__ == "__main__":
    main()
