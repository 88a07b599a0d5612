"""Request fingerprints for caching and coalescing."""

import hashlib

_SEPARATOR = "\x1f"


def fingerprint(instance_key: str, step_id: str, url: str, body: str = "") -> str:
    """Deterministic key for one (instance+target, step, resolved request).

    The readable ``{instance_key}_{step_id}_`` prefix lets callers evict
    every entry of an instance by prefix.

    Args:
        instance_key: Instance id plus target suffix, e.g. ``btc.1``
        step_id: Step identifier
        url: Resolved URL
        body: Resolved body

    Returns:
        ``"{instance_key}_{step_id}_{sha256 hex}"``
    """
    digest = hashlib.sha256(
        _SEPARATOR.join((instance_key, step_id, url, body)).encode("utf-8")
    ).hexdigest()
    return f"{instance_key}_{step_id}_{digest}"
