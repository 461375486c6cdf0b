"""
OpenRouter Application AI Service
Drafts application messages and screening answers via OpenRouter chat completions
"""
import json
import re
from typing import Any, Dict, List, Optional

import httpx

from application.services.ai import ApplicationMessageResult, IApplicationAIService
from core.config import settings
from core.exceptions import AIServiceException
from core.logging_config import logger
from domain.entities import Question
from domain.value_objects import ConfidenceScore


APPLICATION_MESSAGE_PROMPT = """You are a professional job application assistant. Generate a personalized, concise application message.

CANDIDATE PROFILE:
{profile}

JOB DETAILS:
- Title: {job_title}
- Company: {company}
- Description: {job_description}

INSTRUCTIONS:
1. Write a professional, concise message (150-200 words maximum)
2. Address 2-3 specific requirements mentioned in the job description
3. Highlight relevant experience from the candidate's profile that matches
4. Be genuine and enthusiastic, avoid generic cliches
5. Do NOT include greetings like 'Dear Hiring Manager' - start directly with content
6. Do NOT include sign-offs - end with the last substantive sentence

Respond with JSON only:
```json
{{
  "message": "The application message text...",
  "addressedRequirements": ["requirement 1 from job", "requirement 2 from job"],
  "matchingSkills": ["skill1", "skill2"],
  "confidenceScore": 85
}}
```"""

QUESTION_ANSWER_PROMPT = """You are helping a job candidate answer application questions based on their profile.

CANDIDATE PROFILE:
{profile}

JOB CONTEXT:
{job_description}

QUESTIONS TO ANSWER:
{questions}

INSTRUCTIONS:
1. Answer each question concisely and professionally
2. Use information from the candidate's profile when available
3. For experience-related questions, extract years/details from the profile
4. For yes/no questions, answer definitively based on profile
5. When options are listed, answer with one of the options exactly
6. If information is not in the profile, provide a reasonable professional answer
7. Keep answers brief but complete

Respond with JSON only, using each question text exactly as given as the key:
```json
{{
  "answers": {{
    "Question text 1": "Answer 1",
    "Question text 2": "Answer 2"
  }}
}}
```"""

SYSTEM_PROMPT = "You are a professional career assistant helping with job applications. Be concise, professional, and positive."

MAX_DESCRIPTION_CHARS = 4000


def extract_json(text: str) -> Optional[Dict[str, Any]]:
    """
    Pull a JSON object out of an LLM reply.

    Tries a fenced ```json block, then the span between the first '{' and
    the last '}', then the whole string.
    """
    if not text or not text.strip():
        return None

    candidates = []
    fenced = re.search(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", text, re.IGNORECASE)
    if fenced:
        candidates.append(fenced.group(1))
    start, end = text.find("{"), text.rfind("}")
    if start >= 0 and end > start:
        candidates.append(text[start:end + 1])
    candidates.append(text.strip())

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def _first_key(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


class OpenRouterApplicationAIService(IApplicationAIService):
    """Application AI service backed by OpenRouter"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize OpenRouter application AI service"""
        self.api_key = api_key if api_key is not None else getattr(settings, 'OPENROUTER_API_KEY', None)
        self.api_url = api_url or settings.AI_API_URL
        self.model = model or settings.AI_MODEL
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        if not self.api_key:
            logger.warning("OPENROUTER_API_KEY not set - AI drafting will fail")

    async def _call_llm(self, prompt: str) -> str:
        """
        Call OpenRouter chat completions

        Raises:
            AIServiceException: missing key, HTTP/transport failure, empty reply
        """
        if not self.api_key:
            raise AIServiceException("OpenRouter API key not configured")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json"
                    },
                    json={
                        "model": self.model,
                        "messages": [
                            {"role": "system", "content": SYSTEM_PROMPT},
                            {"role": "user", "content": prompt}
                        ],
                        "temperature": settings.AI_TEMPERATURE,
                        "max_tokens": settings.AI_MAX_TOKENS,
                        "response_format": {"type": "json_object"}
                    },
                    timeout=self.timeout
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise AIServiceException(f"OpenRouter returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AIServiceException(f"OpenRouter request failed: {e}") from e
        except ValueError as e:
            raise AIServiceException("OpenRouter returned a non-JSON body") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceException("OpenRouter reply has no message content") from e
        if not content or not str(content).strip():
            raise AIServiceException("OpenRouter returned an empty reply")
        return str(content)

    async def generate_application_message(
        self,
        job_description: str,
        job_title: str,
        company: str,
        user_profile: str,
    ) -> ApplicationMessageResult:
        prompt = APPLICATION_MESSAGE_PROMPT.format(
            profile=user_profile or "(no profile provided)",
            job_title=job_title,
            company=company,
            job_description=(job_description or "")[:MAX_DESCRIPTION_CHARS],
        )
        raw = await self._call_llm(prompt)

        data = extract_json(raw)
        if data is None:
            logger.warning(f"Unparsable application message reply: {raw[:200]}")
            raise AIServiceException("Could not parse application message reply")

        message = _first_key(data, "message", "Message", default="") or ""
        result = ApplicationMessageResult(
            message=str(message).strip(),
            matching_skills=_string_list(_first_key(data, "matchingSkills", "matching_skills")),
            addressed_requirements=_string_list(_first_key(data, "addressedRequirements", "addressed_requirements")),
            confidence=ConfidenceScore.from_raw(_first_key(data, "confidenceScore", "confidence_score", "confidence")),
        )
        logger.debug(f"Drafted application message for {job_title} at {company} (confidence {result.confidence})")
        return result

    async def generate_question_answers(
        self,
        questions: List[Question],
        user_profile: str,
        job_description: str,
    ) -> Dict[str, str]:
        if not questions:
            return {}

        prompt = QUESTION_ANSWER_PROMPT.format(
            profile=user_profile or "(no profile provided)",
            job_description=(job_description or "")[:MAX_DESCRIPTION_CHARS],
            questions=self._format_questions(questions),
        )
        raw = await self._call_llm(prompt)

        data = extract_json(raw)
        if data is None:
            logger.warning(f"Unparsable question answer reply: {raw[:200]}")
            raise AIServiceException("Could not parse question answer reply")

        answers = data.get("answers", data)
        if not isinstance(answers, dict):
            raise AIServiceException("Question answer reply has no answers object")

        result = {
            str(text): str(answer)
            for text, answer in answers.items()
            if answer is not None and not isinstance(answer, (dict, list))
        }
        logger.info(f"AI answered {len(result)}/{len(questions)} questions")
        return result

    @staticmethod
    def _format_questions(questions: List[Question]) -> str:
        lines = []
        for index, question in enumerate(questions, 1):
            hints = [question.type.value]
            if question.options:
                hints.append("options: " + " | ".join(question.options))
            if question.is_required:
                hints.append("required")
            if question.max_length:
                hints.append(f"max {question.max_length} chars")
            lines.append(f"{index}. {question.question_text} [{'; '.join(hints)}]")
        return "\n".join(lines)
