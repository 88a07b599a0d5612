"""Transform rule types."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TransformRule:
    """One post-extraction transformation.

    ``source`` names the context key to read; it defaults to ``var``.
    A source containing ``{{`` is resolved as a template instead.
    """

    var: str  # Context key written by the rule
    function: str  # Registry name, e.g. "number", "map"
    source: str = ""
    args: dict[str, Any] = field(default_factory=dict)
