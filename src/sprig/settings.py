"""Resolution policies and loading them from the environment."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

__all__ = ["AmbiguityPolicy", "DuplicatePolicy", "ContextSettings"]


class AmbiguityPolicy(Enum):
    """What to do when several components satisfy one unqualified dependency type."""

    REJECT = "reject"
    FIRST_DISCOVERED = "first_discovered"


class DuplicatePolicy(Enum):
    """What to do when two components derive the same bean name."""

    REJECT = "reject"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class ContextSettings:
    """Policies applied while resolving a candidate set.

    Attributes:
        ambiguity: Reject ambiguous graphs, or inject the first discovered candidate.
        duplicates: Reject colliding bean names, or let the later component win.
    """

    ambiguity: AmbiguityPolicy = AmbiguityPolicy.REJECT
    duplicates: DuplicatePolicy = DuplicatePolicy.REJECT

    @classmethod
    def from_env(
        cls, prefix: str = "SPRIG_", environ: Optional[Mapping[str, str]] = None
    ) -> "ContextSettings":
        """Load settings from ``{prefix}AMBIGUITY`` and ``{prefix}DUPLICATES``.

        Unset variables keep their defaults. Values are case-insensitive.

        Raises:
            ValueError: If a variable holds a value that names no policy.
        """
        environ = os.environ if environ is None else environ
        return cls(
            ambiguity=_policy_from(environ, f"{prefix}AMBIGUITY", AmbiguityPolicy, cls.ambiguity),
            duplicates=_policy_from(environ, f"{prefix}DUPLICATES", DuplicatePolicy, cls.duplicates),
        )


def _policy_from(environ, variable, policy_type, default):
    raw = environ.get(variable)
    if raw is None or not raw.strip():
        return default
    try:
        return policy_type(raw.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in policy_type)
        raise ValueError(f"{variable}={raw!r} is not one of: {choices}") from None
