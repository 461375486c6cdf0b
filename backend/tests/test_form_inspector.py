"""
Tests for FormInspector field classification and page traversal
"""
import pytest

from application.services.jobs.form_inspector import FormInspector, classify_navigation
from application.services.platforms.surface import ControlSnapshot, FieldGroupSnapshot
from domain.enums import NavigationControl, QuestionType

from conftest import FakeSurface, radio_group, select_group, text_group


def group(label, *controls, **kwargs):
    return FieldGroupSnapshot(label=label, ref="group:0", controls=list(controls), **kwargs)


class TestClassifyGroup:

    @pytest.fixture
    def inspector(self):
        return FormInspector(min_label_length=3, max_pages=10)

    @pytest.mark.parametrize("input_type,expected", [
        ("text", QuestionType.TEXT),
        ("", QuestionType.TEXT),
        ("tel", QuestionType.PHONE),
        ("email", QuestionType.EMAIL),
        ("number", QuestionType.NUMBER),
        ("date", QuestionType.DATE),
    ])
    def test_text_input_types(self, inspector, input_type, expected):
        question = inspector.classify_group(group("Some label", ControlSnapshot(tag="input", input_type=input_type)), 0)
        assert question.type == expected

    def test_textarea_with_max_length(self, inspector):
        question = inspector.classify_group(group("Cover note", ControlSnapshot(tag="textarea", max_length=500)), 0)
        assert question.type == QuestionType.TEXTAREA
        assert question.max_length == 500

    def test_select_drops_placeholder_options(self, inspector):
        question = inspector.classify_group(select_group("Years of experience", "group:0", ["1", "2"]), 0)
        assert question.type == QuestionType.SELECT
        assert question.options == ["1", "2"]
        assert not question.is_pre_filled

    def test_select_with_chosen_option_is_pre_filled(self, inspector):
        question = inspector.classify_group(select_group("Country", "group:0", ["US", "DE"], selected="DE"), 0)
        assert question.is_pre_filled
        assert question.pre_filled_value == "DE"

    def test_two_yes_no_radios_become_yes_no(self, inspector):
        question = inspector.classify_group(radio_group("Will you relocate?", "group:0", ["No", "Yes"]), 0)
        assert question.type == QuestionType.YES_NO
        assert question.options == ["No", "Yes"]

    def test_other_radios_stay_radio(self, inspector):
        question = inspector.classify_group(radio_group("Preferred shift", "group:0", ["Day", "Night"]), 0)
        assert question.type == QuestionType.RADIO

    def test_checked_radio_is_pre_filled(self, inspector):
        question = inspector.classify_group(radio_group("Preferred shift", "group:0", ["Day", "Night"], checked="Night"), 0)
        assert question.pre_filled_value == "Night"

    def test_checkbox_group(self, inspector):
        question = inspector.classify_group(group(
            "I agree to the terms",
            ControlSnapshot(tag="input", input_type="checkbox", option_label="I agree"),
        ), 0)
        assert question.type == QuestionType.CHECKBOX
        assert question.options == ["I agree"]

    def test_file_upload_with_attachment_is_pre_filled(self, inspector):
        question = inspector.classify_group(group(
            "Resume",
            ControlSnapshot(tag="input", input_type="file"),
            has_attached_file=True,
        ), 0)
        assert question.type == QuestionType.FILE_UPLOAD
        assert question.is_pre_filled

    def test_unrecognized_controls_are_unknown(self, inspector):
        question = inspector.classify_group(group("Mystery field", ControlSnapshot(tag="input", input_type="range")), 0)
        assert question.type == QuestionType.UNKNOWN
        assert not question.needs_answer

    def test_required_from_asterisk_or_attribute(self, inspector):
        starred = inspector.classify_group(text_group("Full name *", "group:0"), 0)
        attr = inspector.classify_group(text_group("Full name", "group:0", required=True), 0)
        plain = inspector.classify_group(text_group("Full name", "group:0"), 0)
        assert starred.is_required and attr.is_required and not plain.is_required
        assert starred.question_text == "Full name"

    def test_pre_filled_text_value(self, inspector):
        question = inspector.classify_group(text_group("Email address", "group:0", value="jane@example.com", input_type="email"), 0)
        assert question.is_pre_filled
        assert question.pre_filled_value == "jane@example.com"

    def test_short_labels_and_message_fields_are_skipped(self, inspector):
        assert inspector.classify_group(text_group("Hi", "group:0"), 0) is None
        assert inspector.classify_group(group(
            "Cover letter", ControlSnapshot(tag="textarea"), is_message_field=True,
        ), 0) is None

    def test_duplicate_labels_on_a_page_are_dropped(self, inspector):
        questions = inspector.inspect_page(
            [text_group("First name", "group:0"), text_group("first NAME", "group:1")],
            page_index=2,
        )
        assert len(questions) == 1
        assert questions[0].page_index == 2
        assert questions[0].field_ref == "group:0"

    def test_explicit_zero_label_length_is_honored(self):
        inspector = FormInspector(min_label_length=0, max_pages=1)
        assert inspector.min_label_length == 0
        assert inspector.max_pages == 1
        question = inspector.classify_group(group("Q", ControlSnapshot(tag="input")), 0)
        assert question.question_text == "Q"
        assert inspector.classify_group(group("  ", ControlSnapshot(tag="input")), 0) is None

    def test_zero_page_cap_is_rejected(self):
        with pytest.raises(ValueError):
            FormInspector(max_pages=0)


class TestClassifyNavigation:

    @pytest.mark.parametrize("texts,expected", [
        (["Back", "Submit application"], NavigationControl.SUBMIT),
        (["Review", "Submit"], NavigationControl.SUBMIT),
        (["Back", "Review"], NavigationControl.REVIEW),
        (["Next"], NavigationControl.NEXT),
        (["Continue to next step"], NavigationControl.NEXT),
        (["Back", "Cancel"], NavigationControl.NONE),
        ([], NavigationControl.NONE),
    ])
    def test_priority(self, texts, expected):
        assert classify_navigation(texts) == expected


class TestTraverse:

    @pytest.mark.asyncio
    async def test_two_page_form(self, inspector, governor, two_page_surface):
        result = await inspector.traverse(two_page_surface, governor)
        assert result.total_pages == 2
        assert result.final_control == NavigationControl.SUBMIT
        assert [q.page_index for q in result.questions] == [0, 0, 1, 1]
        assert [q.type for q in result.questions] == [
            QuestionType.TEXT, QuestionType.PHONE, QuestionType.YES_NO, QuestionType.SELECT,
        ]
        assert two_page_surface.clicks == [NavigationControl.NEXT]

    @pytest.mark.asyncio
    async def test_page_cap_stops_endless_next(self, governor):
        surface = FakeSurface(pages=[([text_group(f"Question {i}", "group:0")], NavigationControl.NEXT) for i in range(5)])
        inspector = FormInspector(min_label_length=3, max_pages=3)
        result = await inspector.traverse(surface, governor)
        assert result.hit_page_cap
        assert result.total_pages == 3
        assert len(surface.clicks) == 2

    @pytest.mark.asyncio
    async def test_page_without_navigation_ends_traversal(self, inspector, governor):
        surface = FakeSurface(pages=[([text_group("Only field", "group:0")], NavigationControl.NONE)])
        result = await inspector.traverse(surface, governor)
        assert result.total_pages == 1
        assert result.final_control == NavigationControl.NONE
        assert surface.clicks == []
