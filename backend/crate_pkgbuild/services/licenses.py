import re
from typing import Iterable, List, Optional

# Identifiers accepted verbatim in a PKGBUILD ``license`` array.
# Anything else is passed through as ``custom:<raw>``.
KNOWN_LICENSES = frozenset(
    {
        "0BSD",
        "AGPL-3.0",
        "AGPL-3.0-only",
        "AGPL-3.0-or-later",
        "Apache-2.0",
        "Artistic-2.0",
        "BSD-2-Clause",
        "BSD-3-Clause",
        "BSL-1.0",
        "CC0-1.0",
        "GPL-2.0",
        "GPL-2.0-only",
        "GPL-2.0-or-later",
        "GPL-3.0",
        "GPL-3.0-only",
        "GPL-3.0-or-later",
        "ISC",
        "LGPL-2.1",
        "LGPL-2.1-only",
        "LGPL-2.1-or-later",
        "LGPL-3.0",
        "LGPL-3.0-only",
        "LGPL-3.0-or-later",
        "MIT",
        "MPL-2.0",
        "Unicode-DFS-2016",
        "Unlicense",
        "WTFPL",
        "Zlib",
    }
)

CUSTOM_PREFIX = "custom:"

_OR_SPLIT = re.compile(r"\s+or\s+", re.IGNORECASE)


def _split_known(parts: List[str], known: Iterable[str]) -> Optional[List[str]]:
    if all(part in known for part in parts):
        return parts
    return None


def normalize(raw: Optional[str], extra: Iterable[str] = ()) -> List[str]:
    if not raw:
        return []
    known = KNOWN_LICENSES.union(extra)

    disjunction = _split_known(_OR_SPLIT.split(raw), known)
    if disjunction is not None:
        return disjunction

    # legacy crates.io syntax for dual licensing, e.g. "MIT/Apache-2.0"
    dual = _split_known(raw.split("/"), known)
    if dual is not None:
        return dual

    if raw in known:
        return [raw]
    return [CUSTOM_PREFIX + raw]
