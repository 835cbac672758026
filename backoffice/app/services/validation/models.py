"""Validation models."""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Pattern, Sequence, Union

FieldType = Literal["string", "number", "boolean", "array", "object"]


@dataclass(frozen=True)
class ValidationRule:
    """Declarative rule for a single payload field.

    ``name`` is the display name used in error messages. ``pattern`` may be
    given as a string and is compiled once on construction.
    """
    name: str
    required: bool = False
    type: Optional[FieldType] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[Union[str, Pattern[str]]] = None
    enum: Optional[Sequence[str]] = None
    sanitize: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))


RuleSet = Dict[str, ValidationRule]


@dataclass
class ValidationResult:
    """Outcome of validating a payload against a rule set."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    sanitized: Dict[str, Any] = field(default_factory=dict)
    malicious_fields: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return ", ".join(self.errors)
