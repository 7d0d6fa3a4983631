"""Parsing and rendering of the ``X-Amzn-Trace-Id`` header value."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

__all__ = [
    "ROOT_PREFIX",
    "PARENT_PREFIX",
    "SAMPLED_PREFIX",
    "SELF_PREFIX",
    "SamplingDecision",
    "Header",
]

ROOT_PREFIX = "Root="
PARENT_PREFIX = "Parent="
SAMPLED_PREFIX = "Sampled="
SELF_PREFIX = "Self="


class SamplingDecision(str, enum.Enum):
    """Whether the current segment has been sampled."""

    SAMPLED = "Sampled=1"
    NOT_SAMPLED = "Sampled=0"
    REQUESTED = "Sampled=?"
    UNKNOWN = ""

    @classmethod
    def parse(cls, part: str) -> SamplingDecision:
        """Return the decision spelled by ``part``, or UNKNOWN."""
        try:
            return cls(part)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class Header:
    """The value of an ``X-Amzn-Trace-Id`` header."""

    trace_id: str = ""
    parent_id: str = ""
    sampling_decision: SamplingDecision = SamplingDecision.UNKNOWN
    additional_data: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_string(cls, value: str) -> Header:
        """Parse a header value into its parts."""
        header = cls()
        for raw in value.split(";"):
            part = raw.strip()
            key, sep, item = part.partition("=")
            if not sep:
                continue
            if part.startswith(ROOT_PREFIX):
                header.trace_id = item
            elif part.startswith(PARENT_PREFIX):
                header.parent_id = item
            elif part.startswith(SAMPLED_PREFIX):
                header.sampling_decision = SamplingDecision.parse(part)
            elif not part.startswith(SELF_PREFIX):
                header.additional_data[key] = item
        return header

    def __str__(self) -> str:
        parts = []
        if self.trace_id:
            parts.append(ROOT_PREFIX + self.trace_id)
        if self.parent_id:
            parts.append(PARENT_PREFIX + self.parent_id)
        parts.append(self.sampling_decision.value)
        parts.extend(f"{key}={item}" for key, item in self.additional_data.items())
        return ";".join(parts)