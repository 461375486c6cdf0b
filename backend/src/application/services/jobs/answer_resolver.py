"""
Answer Resolver
Best-effort AI drafting of the application message and question answers
"""
from typing import Dict, List, Optional

from loguru import logger

from domain.entities import ApplicationSession, Question
from domain.enums import ActionType
from application.services.ai import IApplicationAIService


class AnswerResolver:
    """
    Fills a ReadyForReview session with AI drafts.

    Both AI calls are best-effort: a failed message call leaves the message
    empty with confidence 0, a failed answers call leaves the questions
    unanswered. Neither failure stops the session from reaching review.
    """

    def __init__(self, ai_service: IApplicationAIService):
        self.ai_service = ai_service

    @staticmethod
    def target_questions(session: ApplicationSession) -> List[Question]:
        """Questions without an answer that the AI may answer"""
        return [q for q in session.questions if q.needs_answer and not q.is_answered]

    async def resolve(
        self,
        session: ApplicationSession,
        user_profile: str,
        job_description: str = "",
    ) -> ApplicationSession:
        await self._resolve_message(session, user_profile, job_description)
        await self._resolve_answers(session, user_profile, job_description)
        return session

    async def _resolve_message(self, session: ApplicationSession, user_profile: str, job_description: str) -> None:
        try:
            result = await self.ai_service.generate_application_message(
                job_description=job_description,
                job_title=session.job_title,
                company=session.company,
                user_profile=user_profile,
            )
        except Exception as e:
            logger.warning(f"AI message generation failed for session {session.session_id}: {e}")
            session.set_message("")
            session.apply_ai_metadata(confidence_score=0)
            session.log_action(ActionType.AI_MESSAGE, "Application message generation failed", success=False, details=str(e))
            return

        session.set_message(result.message)
        session.apply_ai_metadata(
            matching_skills=result.matching_skills,
            addressed_requirements=result.addressed_requirements,
            confidence_score=result.confidence.value,
        )
        session.log_action(
            ActionType.AI_MESSAGE,
            f"Application message drafted ({len(result.message)} chars)",
            details=f"confidence={result.confidence.value}",
        )

    async def _resolve_answers(self, session: ApplicationSession, user_profile: str, job_description: str) -> None:
        targets = self.target_questions(session)
        if not targets:
            return

        try:
            answers = await self.ai_service.generate_question_answers(
                questions=targets,
                user_profile=user_profile,
                job_description=job_description,
            )
        except Exception as e:
            logger.warning(f"AI answer generation failed for session {session.session_id}: {e}")
            session.log_action(ActionType.AI_ANSWERS, "Question answer generation failed", success=False, details=str(e))
            return

        applied = self.merge_answers(targets, answers)
        session.log_action(ActionType.AI_ANSWERS, f"AI answered {applied} of {len(targets)} question(s)")

    @staticmethod
    def merge_answers(questions: List[Question], answers: Optional[Dict[str, str]]) -> int:
        """
        Apply answers whose key equals a question's text exactly.

        Pre-filled questions are never touched; answers longer than a
        question's max length are truncated.
        """
        applied = 0
        for question in questions:
            if question.is_pre_filled:
                continue
            answer = (answers or {}).get(question.question_text)
            if answer is None:
                continue
            answer = str(answer)
            if question.max_length:
                answer = answer[:question.max_length]
            question.answer = answer
            applied += 1
        return applied
