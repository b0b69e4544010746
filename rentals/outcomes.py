"""Result of a form interaction: the entity was written, or the user backed out."""
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Submitted:
    entity: Any


@dataclass(frozen=True)
class Cancelled:
    pass
