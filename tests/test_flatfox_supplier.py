import asyncio
import dataclasses

import requests

from flatwatch.models import SourceConfig
from flatwatch.suppliers import flatfox
from flatwatch.suppliers.flatfox_api import LISTING_URL, PIN_URL
from flatwatch.suppliers.flatfox_mapping import map_record
from flatwatch.utils.hashing import build_hash

SEARCH_URL = "https://flatfox.ch/en/search/?east=7.53&west=7.31&north=47.02&south=46.90&min_price=1000&max_price=2000"


def _supplier(session, blacklist=(), url=SEARCH_URL):
    return flatfox.init({"enabled": True, "url": url}, blacklist, session=session, batch_delay=0)


def test_end_to_end_drops_invalid_and_keeps_valid(fake_session, make_handler, make_raw):
    valid = make_raw(101, price_display=1200, number_of_rooms=2)
    broken = make_raw(102)
    del broken["url"]
    session = fake_session(make_handler([101, 102], {"101": valid, "102": broken}))

    listings = asyncio.run(_supplier(session).get_listings())

    assert len(listings) == 1
    assert listings[0].id == "101"
    assert listings[0].price == "1’200 CHF"
    assert [pks for pks in session.calls_to(LISTING_URL)] == [
        [("expand", "cover_image"), ("limit", "0"), ("pk", "101"), ("pk", "102")]
    ]


def test_client_side_filter_overrides_pin_results(fake_session, make_handler, make_raw):
    records = {"1": make_raw(1, price_display=900), "2": make_raw(2, price_display=1800)}
    session = fake_session(make_handler([1, 2], records))

    listings = asyncio.run(_supplier(session).get_listings())

    assert [li.id for li in listings] == ["2"]


def test_explicit_url_argument_wins(fake_session, make_handler):
    session = fake_session(make_handler([]))
    asyncio.run(_supplier(session, url="").get_listings("https://flatfox.ch/en/search/?east=8"))
    assert session.calls_to(PIN_URL) == [{"east": "8", "max_count": "400"}]


def test_no_pins_skips_detail_request(fake_session, make_handler):
    session = fake_session(make_handler([]))
    assert asyncio.run(_supplier(session).get_listings()) == []
    assert session.calls_to(LISTING_URL) == []


def test_invalid_url_gives_empty_result(fake_session, make_handler):
    session = fake_session(make_handler([1]))
    assert asyncio.run(_supplier(session, url="not a url").get_listings()) == []
    assert session.calls == []


def test_pin_error_gives_empty_result(fake_session, fake_response):
    session = fake_session(lambda url, params: fake_response(500))
    assert asyncio.run(_supplier(session).get_listings()) == []


def test_network_error_gives_empty_result(fake_session):
    def handler(url, params):
        raise requests.ConnectionError("boom")

    assert asyncio.run(_supplier(fake_session(handler)).get_listings()) == []


def test_normalize_hashes_pk_and_price(make_raw):
    supplier = flatfox.init({"enabled": True, "url": SEARCH_URL})
    li = map_record(make_raw(101, price_display=1200))

    normalized = supplier.normalize(li)

    assert normalized.id == build_hash("101", "1’200 CHF")
    assert normalized.title == li.title
    assert li.id == "101"


def test_blacklist_on_title_and_description(make_raw):
    supplier = flatfox.init({"enabled": True, "url": SEARCH_URL}, ["Untermiete"])
    li = map_record(make_raw(1))

    assert supplier.filter(li)
    assert not supplier.filter(dataclasses.replace(li, title="Untermiete 3 Monate"))
    assert not supplier.filter(dataclasses.replace(li, description="Befristete untermiete"))


def test_empty_blacklist_keeps_everything(make_raw):
    supplier = flatfox.init({"enabled": True, "url": SEARCH_URL}, [])
    assert supplier.filter(map_record(make_raw(1, short_title="WG Zimmer")))


def test_listing_without_title_is_always_removed(make_raw):
    supplier = flatfox.init({"enabled": True, "url": SEARCH_URL})
    li = dataclasses.replace(map_record(make_raw(1)), title=None)
    assert not supplier.filter(li)


def test_fetch_normalizes_and_filters(fake_session, make_handler, make_raw):
    records = {"1": make_raw(1), "2": make_raw(2, short_title="Untermiete")}
    session = fake_session(make_handler([1, 2], records))

    listings = asyncio.run(_supplier(session, blacklist=["untermiete"]).fetch())

    assert [li.id for li in listings] == [build_hash("1", "1’500 CHF")]


def test_init_stores_config_and_meta():
    supplier = flatfox.init(SourceConfig(enabled=False, url=SEARCH_URL), ("wg",))

    assert supplier.enabled is False
    assert supplier.url == SEARCH_URL
    assert supplier.blacklist == ("wg",)
    assert supplier.name == "flatfox"
    assert supplier.meta.name == "Flatfox"
    assert supplier.meta.base_url == "https://flatfox.ch/"


def test_suppliers_do_not_share_blacklists():
    a = flatfox.init({"enabled": True, "url": SEARCH_URL}, ["wg"])
    b = flatfox.init({"enabled": True, "url": SEARCH_URL})
    assert a.blacklist == ("wg",)
    assert b.blacklist == ()


def test_badly_typed_record_is_dropped_alone(fake_session, make_handler, make_raw):
    records = {
        "1": make_raw(1),
        "2": make_raw(2, cover_image={"url_listing_search": 123}),
        "3": make_raw(3, url=12345),
    }
    session = fake_session(make_handler([1, 2, 3], records))

    listings = asyncio.run(_supplier(session).get_listings())

    assert [li.id for li in listings] == ["1"]
