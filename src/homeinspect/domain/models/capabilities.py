"""Model capability table - which sampling parameters each model family accepts"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from homeinspect.domain.errors import ConfigValidationError

CAPABILITY_TABLE_VERSION = "2025-08"


class ModelFamily(str, Enum):
    """Partition of models sharing identical parameter restrictions"""

    RESTRICTED = "restricted"  # o-series reasoning models
    NO_TOP_P = "no_top_p"  # gpt-5 series
    STANDARD = "standard"


@dataclass(frozen=True)
class CapabilityEntry:
    """Sampling parameters a model family accepts

    Attributes:
        family: Model family this entry describes
        supports_top_p: Whether top_p may be sent at all
        fixed_temperature: Only accepted temperature (None = any value in range)
        fixed_top_p: Only accepted top_p (None = any value in range)
        description: Human readable restriction summary
    """

    family: ModelFamily
    supports_top_p: bool = True
    fixed_temperature: Optional[float] = None
    fixed_top_p: Optional[float] = None
    description: str = "Full parameter support"

    @property
    def is_restricted(self) -> bool:
        return self.fixed_temperature is not None or not self.supports_top_p


CAPABILITIES: Dict[ModelFamily, CapabilityEntry] = {
    ModelFamily.RESTRICTED: CapabilityEntry(
        family=ModelFamily.RESTRICTED,
        supports_top_p=True,
        fixed_temperature=1.0,
        fixed_top_p=1.0,
        description="This model only supports temperature=1 and topP=1",
    ),
    ModelFamily.NO_TOP_P: CapabilityEntry(
        family=ModelFamily.NO_TOP_P,
        supports_top_p=False,
        fixed_temperature=1.0,
        description="This model only supports temperature=1 and does not support topP",
    ),
    ModelFamily.STANDARD: CapabilityEntry(family=ModelFamily.STANDARD),
}

# Prefix -> family. Longest matching prefix wins, so adding a family is a table change.
MODEL_PREFIXES: Tuple[Tuple[str, ModelFamily], ...] = (
    ("o1", ModelFamily.RESTRICTED),
    ("o1-preview", ModelFamily.RESTRICTED),
    ("o1-mini", ModelFamily.RESTRICTED),
    ("o3", ModelFamily.RESTRICTED),
    ("o3-mini", ModelFamily.RESTRICTED),
    ("o3-pro", ModelFamily.RESTRICTED),
    ("o4-mini", ModelFamily.RESTRICTED),
    ("gpt-5", ModelFamily.NO_TOP_P),
)

# Models known to accept image input, suggested when a model rejects images
VISION_CAPABLE_MODELS: Tuple[str, ...] = (
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4.1",
    "gpt-4.1-mini",
    "gpt-4-turbo",
)


def _normalize(model_name: str) -> str:
    name = model_name.strip().lower()
    # "openai/o3-mini" style identifiers carry a provider namespace
    if "/" in name:
        name = name.rsplit("/", 1)[1]
    return name


def resolve_family(model_name: str) -> ModelFamily:
    """Resolve model family by case-insensitive prefix match

    Args:
        model_name: Model identifier (e.g. "gpt-4o-mini", "o3-mini")

    Returns:
        Matching model family (STANDARD if no prefix matches)
    """
    name = _normalize(model_name)
    best: Optional[Tuple[str, ModelFamily]] = None
    for prefix, family in MODEL_PREFIXES:
        if name.startswith(prefix):
            if best is None or len(prefix) > len(best[0]):
                best = (prefix, family)
    return best[1] if best else ModelFamily.STANDARD


def capability_for(model_name: str) -> CapabilityEntry:
    """Get capability entry for a model identifier"""
    return CAPABILITIES[resolve_family(model_name)]


def enforce_capabilities(values: Dict[str, Any], proposed: Iterable[str]) -> Dict[str, Any]:
    """Apply the capability entry of ``values["model_name"]`` to a candidate.

    Explicitly proposed values that the family cannot accept are rejected;
    values the caller did not propose are forced to what the family requires.

    Args:
        values: Candidate configuration (attribute names, already range-checked)
        proposed: Attribute names the caller explicitly set

    Returns:
        Adjusted copy of ``values``

    Raises:
        ConfigValidationError: If an explicit value violates the family's restrictions
    """
    proposed = set(proposed)
    model_name = values["model_name"]
    entry = capability_for(model_name)
    result = dict(values)
    errors: List[str] = []

    if entry.fixed_temperature is not None:
        if "temperature" in proposed and result.get("temperature") != entry.fixed_temperature:
            errors.append(
                f"temperature: model '{model_name}' only supports temperature={entry.fixed_temperature:g}"
            )
        result["temperature"] = entry.fixed_temperature

    if not entry.supports_top_p:
        result["top_p"] = None
    elif entry.fixed_top_p is not None:
        if "top_p" in proposed and result.get("top_p") is not None and result["top_p"] != entry.fixed_top_p:
            errors.append(f"topP: model '{model_name}' only supports topP={entry.fixed_top_p:g}")
        result["top_p"] = entry.fixed_top_p

    if errors:
        raise ConfigValidationError("; ".join(errors), errors)
    return result
