"""
Default configuration values.
"""

from __future__ import annotations

DEFAULTS: dict[str, object] = {
    "resample": {"filter": "box"},
    "batch": {"max_workers": 4, "recursive": True},
    "logging": {"level": "info"},
}
