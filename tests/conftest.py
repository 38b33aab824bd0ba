import pytest

from flatwatch.suppliers.flatfox_api import LISTING_URL, PIN_URL


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; routes GETs to a handler function."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params))
        return self.handler(url, params)

    def calls_to(self, url):
        return [params for called, params in self.calls if called == url]


def detail_pks(params):
    return [value for key, value in params if key == "pk"]


def raw_record(pk, **overrides):
    record = {
        "pk": pk,
        "url": f"/en/flat/bern/{pk}/",
        "short_title": f"Flat {pk}",
        "pitch_title": f"Lovely flat {pk}",
        "description_title": "",
        "description": "Bright flat close to the station.",
        "public_address": "Bahnhofplatz 1, 3011 Bern",
        "price_display": 1500,
        "number_of_rooms": "3.5",
        "surface_living": 72,
        "cover_image": {"url_listing_search": f"/thumb/{pk}.jpg"},
    }
    record.update(overrides)
    return record


def flatfox_handler(pins, records_by_pk=None, fail_batches=()):
    """Pin endpoint returns `pins`; detail batches are answered from `records_by_pk`.

    Batches whose 1-based index is in `fail_batches` answer with HTTP 500.
    """
    records_by_pk = records_by_pk or {}
    state = {"batch": 0}

    def handler(url, params):
        if url == PIN_URL:
            return FakeResponse(200, [{"pk": pk} for pk in pins])
        if url == LISTING_URL:
            state["batch"] += 1
            if state["batch"] in fail_batches:
                return FakeResponse(500)
            pks = detail_pks(params)
            return FakeResponse(200, [records_by_pk[pk] for pk in pks if pk in records_by_pk])
        return FakeResponse(404)

    return handler


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def make_raw():
    return raw_record


@pytest.fixture
def make_handler():
    return flatfox_handler
