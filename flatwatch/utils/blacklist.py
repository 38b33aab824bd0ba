import re
from typing import Iterable, Optional


def parse_terms(raw: str) -> tuple[str, ...]:
    """'wg, Untermiete ,,' -> ('wg', 'Untermiete')"""
    return tuple(t.strip() for t in (raw or "").split(",") if t.strip())


def is_one_of(text: Optional[str], terms: Iterable[str]) -> bool:
    terms = [t for t in terms if t]
    if not text or not terms:
        return False
    pattern = re.compile("|".join(re.escape(t) for t in terms), re.IGNORECASE)
    return pattern.search(text) is not None
