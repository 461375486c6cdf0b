"""
ConfidenceScore Value Object
AI self-reported confidence in a drafted application (0-100)
"""
import re
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ConfidenceScore:
    """Confidence score value object - immutable"""

    value: int = 0

    HIGH_THRESHOLD = 80
    MEDIUM_THRESHOLD = 60

    def __post_init__(self):
        """Validate confidence range"""
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError("Confidence score must be an integer")

        if not 0 <= self.value <= 100:
            raise ValueError("Confidence score must be between 0 and 100")

    @classmethod
    def from_raw(cls, raw: Any) -> "ConfidenceScore":
        """
        Build a score from loosely-typed AI output.

        Accepts ints, floats and strings such as "85", "85%" or "85/100".
        Values are clamped into range; anything unparsable becomes 0.
        """
        if raw is None or isinstance(raw, bool):
            return cls(0)

        if isinstance(raw, (int, float)):
            number = float(raw)
        else:
            match = re.search(r"-?\d+(?:\.\d+)?", str(raw))
            if not match:
                return cls(0)
            number = float(match.group())

        if number != number:  # NaN
            return cls(0)
        return cls(int(round(max(0.0, min(100.0, number)))))

    @property
    def level(self) -> str:
        if self.value >= self.HIGH_THRESHOLD:
            return "High"
        if self.value >= self.MEDIUM_THRESHOLD:
            return "Medium"
        return "Low"

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value}%"

    def __repr__(self) -> str:
        return f"ConfidenceScore({self.value})"
