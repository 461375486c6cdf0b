"""
Question Domain Entity
One detected field of an application form
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..enums import QuestionType


@dataclass
class Question:
    """A typed form question with its (possibly pending) answer"""

    question_text: str
    type: QuestionType
    page_index: int = 0
    options: List[str] = field(default_factory=list)
    is_required: bool = False
    answer: str = ""
    is_pre_filled: bool = False
    pre_filled_value: Optional[str] = None
    # Adapter-owned locator; never interpreted outside the adapter
    field_ref: Optional[str] = None
    max_length: Optional[int] = None
    id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def needs_answer(self) -> bool:
        """True when this question takes part in AI drafting and fill-time writes"""
        return not self.is_pre_filled and self.type != QuestionType.UNKNOWN

    @property
    def is_answered(self) -> bool:
        return bool(self.answer and self.answer.strip())

    @property
    def should_fill(self) -> bool:
        return self.needs_answer and self.is_answered

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question_text": self.question_text,
            "type": self.type.value,
            "page_index": self.page_index,
            "options": list(self.options),
            "is_required": self.is_required,
            "answer": self.answer,
            "is_pre_filled": self.is_pre_filled,
            "pre_filled_value": self.pre_filled_value,
            "max_length": self.max_length,
        }
