import hashlib
from typing import Any, Optional


def build_hash(*inputs: Any) -> Optional[str]:
    # sha256 over the non-empty inputs, so (pk, price) is stable across runs
    parts = [str(i) for i in inputs if i is not None and str(i) != ""]
    if not parts:
        return None
    return hashlib.sha256(",".join(parts).encode("utf-8")).hexdigest()
