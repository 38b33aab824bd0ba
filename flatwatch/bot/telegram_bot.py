import logging
from typing import Sequence

from telegram import Bot, Update
from telegram.error import BadRequest, TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes

from flatwatch.core.storage import Storage, make_seen_key
from flatwatch.models import Listing
from flatwatch.suppliers.base import Supplier
from flatwatch.utils.formatting import build_keyboard, format_caption

logger = logging.getLogger(__name__)


def _storage(context: ContextTypes.DEFAULT_TYPE) -> Storage:
    return context.bot_data["storage"]


# Handlers
async def start(update: Update, _: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(
        "Hi! I’ll send new flats as they appear.\n\n"
        "/subscribe — start\n"
        "/unsubscribe — stop\n"
        "/status — show stats"
    )


async def subscribe(update: Update, context: ContextTypes.DEFAULT_TYPE):
    storage = _storage(context)
    subs = storage.load_subscribers()
    subs.add(str(update.effective_chat.id))
    storage.save_subscribers(subs)
    await update.message.reply_text("Subscribed ✅")


async def unsubscribe(update: Update, context: ContextTypes.DEFAULT_TYPE):
    storage = _storage(context)
    subs = storage.load_subscribers()
    cid = str(update.effective_chat.id)
    if cid in subs:
        subs.remove(cid)
        storage.save_subscribers(subs)
        await update.message.reply_text("Unsubscribed 👋")
    else:
        await update.message.reply_text("You are not subscribed.")


async def status(update: Update, context: ContextTypes.DEFAULT_TYPE):
    storage = _storage(context)
    chat_id = str(update.effective_chat.id)
    await update.message.reply_text(
        f"Subscribers: {len(storage.load_subscribers())}\n"
        f"Your seen: {len(storage.load_seen_for(chat_id))}"
    )


# Polling job
async def collect_listings(suppliers: Sequence[Supplier]) -> list[tuple[str, Listing]]:
    """Run enabled suppliers one after another; a failing supplier is skipped."""
    batch: list[tuple[str, Listing]] = []
    for sp in suppliers:
        if not sp.enabled:
            continue
        try:
            listings = await sp.fetch()
        except Exception as e:
            logger.error(f"[Supplier {sp.name}] fetch error: {e}", exc_info=True)
            continue
        logger.info(f"[Supplier {sp.name}] {len(listings)} listings")
        batch.extend((sp.name, li) for li in listings)
    return batch


async def send_listing(bot: Bot, chat_id: int, li: Listing) -> None:
    caption = format_caption(li)
    kb = build_keyboard(li)
    if li.image:
        try:
            await bot.send_photo(
                chat_id=chat_id,
                photo=li.image,
                caption=caption,
                parse_mode="HTML",
                reply_markup=kb,
            )
            return
        except BadRequest as e:
            # Telegram couldn't fetch a real image from that URL, fall back to text
            logger.warning(f"Photo rejected for {chat_id}, sending text: {e}")

    await bot.send_message(
        chat_id=chat_id,
        text=caption,
        parse_mode="HTML",
        reply_markup=kb,
        disable_web_page_preview=True,
    )


async def poll_and_notify(context: ContextTypes.DEFAULT_TYPE, suppliers: Sequence[Supplier]):
    storage = _storage(context)
    subs = storage.load_subscribers()
    if not subs:
        return

    batch = await collect_listings(suppliers)
    if not batch:
        return

    # For each subscriber, send only items they haven't seen yet
    for chat_id in subs:
        seen = storage.load_seen_for(chat_id)
        to_send = [(src, li) for src, li in batch if make_seen_key(src, li.id) not in seen]
        if not to_send:
            continue

        for src, li in to_send:
            try:
                await send_listing(context.bot, int(chat_id), li)
            except TelegramError as e:
                logger.error(f"Send failed to {chat_id}: {e}")
                continue
            seen.add(make_seen_key(src, li.id))

        storage.save_seen_for(chat_id, seen)


def attach_handlers(app: Application, storage: Storage):
    app.bot_data["storage"] = storage
    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("subscribe", subscribe))
    app.add_handler(CommandHandler("unsubscribe", unsubscribe))
    app.add_handler(CommandHandler("status", status))


def schedule_jobs(app: Application, suppliers: Sequence[Supplier], interval_seconds: int):
    # Use PTB JobQueue (install: pip install "python-telegram-bot[job-queue]")
    async def job_callback(context: ContextTypes.DEFAULT_TYPE):
        await poll_and_notify(context, suppliers)

    app.job_queue.run_repeating(
        job_callback, interval=interval_seconds, first=0)
