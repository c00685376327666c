"""Content fingerprints for draft deduplication.

Two saves are considered identical when their canonical JSON matches, so
the canonical form must not depend on dict insertion order and must survive
a JSON round-trip through the database unchanged.
"""

import hashlib
import json
from typing import Any


def canonical_json(value: Any) -> str:
    """Serialize ``value`` with sorted object keys and no whitespace.

    Arrays keep their order; primitives are emitted exactly as ``json.dumps``
    renders them.
    """
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def content_fingerprint(
    payload: Any,
    editor_state: Any = None,
    background_image: str | None = None,
    is_draft: bool = True,
) -> str:
    document = {
        "payload": payload,
        "editorState": editor_state,
        "backgroundImage": background_image,
        "isDraft": is_draft,
    }
    return hashlib.sha256(canonical_json(document).encode("utf-8")).hexdigest()
