"""
Form Inspector
Turn field-group snapshots into typed questions and walk multi-page forms
"""
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional

from loguru import logger

from core.config import settings
from domain.entities import Question
from domain.enums import NavigationControl, QuestionType
from application.services.platforms.surface import (
    ControlSnapshot,
    FieldGroupSnapshot,
    IApplicationSurface,
)
from .cancellation import CancellationToken
from .pacing_governor import PacingGovernor


AFFIRMATIVE = {"yes", "y", "true"}
NEGATIVE = {"no", "n", "false"}

PLACEHOLDER_OPTIONS = {"select an option", "select", "choose", "choose an option", "--", ""}

TEXT_INPUT_TYPES = {
    "": QuestionType.TEXT,
    "text": QuestionType.TEXT,
    "search": QuestionType.TEXT,
    "url": QuestionType.TEXT,
    "tel": QuestionType.PHONE,
    "email": QuestionType.EMAIL,
    "number": QuestionType.NUMBER,
    "date": QuestionType.DATE,
}


def is_affirmative(text: str) -> bool:
    return (text or "").strip().lower() in AFFIRMATIVE


def is_negative(text: str) -> bool:
    return (text or "").strip().lower() in NEGATIVE


def classify_navigation(button_texts: Iterable[str]) -> NavigationControl:
    """
    Pick the page's navigation control from visible button texts / aria labels.

    Submit wins over Review, Review wins over Next.
    """
    lowered = [(t or "").strip().lower() for t in button_texts]
    if any("submit" in t for t in lowered):
        return NavigationControl.SUBMIT
    if any("review" in t for t in lowered):
        return NavigationControl.REVIEW
    if any(t.startswith("next") or "continue to next" in t or t == "continue" for t in lowered):
        return NavigationControl.NEXT
    return NavigationControl.NONE


@dataclass
class InspectionResult:
    """Questions of every page plus the control the traversal stopped on"""
    questions: List[Question] = field(default_factory=list)
    total_pages: int = 0
    final_control: NavigationControl = NavigationControl.NONE
    hit_page_cap: bool = False


PageCallback = Callable[[int, List[Question], NavigationControl], Awaitable[None]]


class FormInspector:
    """
    Classify form fields and walk a form page by page.

    Each field group resolves to exactly one question type by probing its
    controls in a fixed order: single-line text, multi-line text, dropdown,
    radio group, checkbox group, file upload, otherwise UNKNOWN.
    """

    def __init__(self, min_label_length: Optional[int] = None, max_pages: Optional[int] = None):
        self.min_label_length = settings.MIN_LABEL_LENGTH if min_label_length is None else min_label_length
        self.max_pages = settings.MAX_FORM_PAGES if max_pages is None else max_pages
        if self.min_label_length < 0:
            raise ValueError("min_label_length must be >= 0")
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")

    # --------------------------------------------------------- classification

    def inspect_page(self, groups: List[FieldGroupSnapshot], page_index: int) -> List[Question]:
        questions: List[Question] = []
        seen_labels = set()
        for group in groups:
            question = self.classify_group(group, page_index)
            if question is None:
                continue
            key = question.question_text.lower()
            if key in seen_labels:
                continue
            seen_labels.add(key)
            questions.append(question)
        return questions

    def classify_group(self, group: FieldGroupSnapshot, page_index: int) -> Optional[Question]:
        if group.is_message_field:
            return None

        raw_label = (group.label or "").strip()
        label = " ".join(raw_label.replace("*", " ").split())
        if not label or len(label) < self.min_label_length:
            return None

        question = Question(
            question_text=label,
            type=QuestionType.UNKNOWN,
            page_index=page_index,
            field_ref=group.ref,
        )
        question.is_required = raw_label.endswith("*") or any(
            c.required or c.aria_required for c in group.controls
        )

        for probe in (
            self._probe_text_input,
            self._probe_textarea,
            self._probe_select,
            self._probe_radio,
            self._probe_checkbox,
            self._probe_file,
        ):
            if probe(group, question):
                break
        else:
            logger.debug(f"Unrecognized field shape for '{label}'")

        return question

    def _probe_text_input(self, group: FieldGroupSnapshot, question: Question) -> bool:
        control = self._first(group.controls, "input", TEXT_INPUT_TYPES.keys())
        if control is None:
            return False
        question.type = TEXT_INPUT_TYPES[control.input_type.lower()]
        question.max_length = control.max_length
        self._mark_pre_filled(question, control.value)
        return True

    def _probe_textarea(self, group: FieldGroupSnapshot, question: Question) -> bool:
        control = self._first(group.controls, "textarea")
        if control is None:
            return False
        question.type = QuestionType.TEXTAREA
        question.max_length = control.max_length
        self._mark_pre_filled(question, control.value)
        return True

    def _probe_select(self, group: FieldGroupSnapshot, question: Question) -> bool:
        control = self._first(group.controls, "select")
        if control is None:
            return False
        question.type = QuestionType.SELECT
        question.options = [
            o.strip() for o in control.options
            if o.strip().lower() not in PLACEHOLDER_OPTIONS
        ]
        selected = control.selected_text.strip()
        if selected.lower() not in PLACEHOLDER_OPTIONS:
            self._mark_pre_filled(question, selected)
        return True

    def _probe_radio(self, group: FieldGroupSnapshot, question: Question) -> bool:
        radios = [c for c in group.controls if c.tag == "input" and c.input_type == "radio"]
        if not radios:
            return False
        question.options = [r.option_label.strip() for r in radios if r.option_label.strip()]
        question.type = QuestionType.RADIO
        if len(question.options) == 2 and (
            (is_affirmative(question.options[0]) and is_negative(question.options[1]))
            or (is_negative(question.options[0]) and is_affirmative(question.options[1]))
        ):
            question.type = QuestionType.YES_NO
        checked = next((r for r in radios if r.checked), None)
        if checked is not None:
            self._mark_pre_filled(question, checked.option_label.strip() or "checked")
        return True

    def _probe_checkbox(self, group: FieldGroupSnapshot, question: Question) -> bool:
        boxes = [c for c in group.controls if c.tag == "input" and c.input_type == "checkbox"]
        if not boxes:
            return False
        question.type = QuestionType.CHECKBOX
        question.options = [b.option_label.strip() for b in boxes if b.option_label.strip()]
        checked = [b.option_label.strip() or "checked" for b in boxes if b.checked]
        if checked:
            self._mark_pre_filled(question, ", ".join(checked))
        return True

    def _probe_file(self, group: FieldGroupSnapshot, question: Question) -> bool:
        if self._first(group.controls, "input", ("file",)) is None:
            return False
        question.type = QuestionType.FILE_UPLOAD
        if group.has_attached_file:
            self._mark_pre_filled(question, "attached")
        return True

    @staticmethod
    def _first(controls: List[ControlSnapshot], tag: str, input_types: Optional[Iterable[str]] = None) -> Optional[ControlSnapshot]:
        allowed = set(input_types) if input_types is not None else None
        for control in controls:
            if control.tag != tag:
                continue
            if allowed is None or control.input_type.lower() in allowed:
                return control
        return None

    @staticmethod
    def _mark_pre_filled(question: Question, value: str) -> None:
        if value and value.strip():
            question.is_pre_filled = True
            question.pre_filled_value = value.strip()

    # -------------------------------------------------------------- traversal

    async def traverse(
        self,
        surface: IApplicationSurface,
        governor: PacingGovernor,
        cancel: Optional[CancellationToken] = None,
        on_page: Optional[PageCallback] = None,
    ) -> InspectionResult:
        """
        Detect fields page by page without filling anything.

        Stops on a Submit control, on a page without navigation, when a
        click fails, or at the page cap.
        """
        result = InspectionResult()
        page_index = 0

        while True:
            if cancel is not None:
                cancel.raise_if_cancelled()

            groups = await surface.collect_field_groups()
            page_questions = self.inspect_page(groups, page_index)
            result.questions.extend(page_questions)

            control = await surface.probe_navigation()
            result.final_control = control
            if on_page is not None:
                await on_page(page_index, page_questions, control)

            if not control.advances:
                break
            if page_index + 1 >= self.max_pages:
                result.hit_page_cap = True
                logger.warning(f"Form page cap reached ({self.max_pages}), stopping traversal")
                break

            await governor.pause(cancel, label="next page")
            if not await surface.click_navigation(control):
                logger.warning(f"Could not click {control.value} on page {page_index + 1}")
                break
            page_index += 1

        result.total_pages = page_index + 1
        return result
