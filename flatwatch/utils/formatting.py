from html import escape
from urllib.parse import quote_plus

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from flatwatch.models import Listing

CAPTION_DESCRIPTION_LIMIT = 300


def format_caption(li: Listing) -> str:
    # Bold title, then price/size, address and a short description; empty parts dropped
    details = " · ".join(p for p in (li.price, li.size) if p)
    lines = [f"<b>{escape(li.title)}</b>"]
    if details:
        lines += ["", f"💰 {escape(details)}"]
    if li.address:
        lines.append(f"📍 {escape(li.address)}")
    if li.description:
        lines += ["", escape(li.description[:CAPTION_DESCRIPTION_LIMIT])]
    return "\n".join(lines)


def build_keyboard(li: Listing, site_name: str = "Flatfox") -> InlineKeyboardMarkup:
    buttons = [InlineKeyboardButton(f"🏢 Open on {site_name}", url=li.link)]
    if li.address:
        maps_url = f"https://www.google.com/maps/search/?api=1&query={quote_plus(li.address)}"
        buttons.append(InlineKeyboardButton("🗺️ Open in Maps", url=maps_url))
    return InlineKeyboardMarkup([buttons])
