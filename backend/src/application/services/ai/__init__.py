"""
Application AI Service Interface
Drafts application messages and answers screening questions
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List

from domain.entities import Question
from domain.value_objects import ConfidenceScore


@dataclass
class ApplicationMessageResult:
    """Drafted application message with the AI's own assessment"""
    message: str = ""
    matching_skills: List[str] = field(default_factory=list)
    addressed_requirements: List[str] = field(default_factory=list)
    confidence: ConfidenceScore = field(default_factory=ConfidenceScore)


class IApplicationAIService(ABC):
    """AI collaborator interface"""

    @abstractmethod
    async def generate_application_message(
        self,
        job_description: str,
        job_title: str,
        company: str,
        user_profile: str,
    ) -> ApplicationMessageResult:
        """
        Draft a tailored application message

        Raises:
            AIServiceException: call failed or output could not be parsed
        """
        pass

    @abstractmethod
    async def generate_question_answers(
        self,
        questions: List[Question],
        user_profile: str,
        job_description: str,
    ) -> Dict[str, str]:
        """
        Answer screening questions

        Returns:
            Mapping from exact question text to answer

        Raises:
            AIServiceException: call failed or output could not be parsed
        """
        pass
