"""Unit tests for EventClassifier."""

import pytest

from services.realtime.errors import MalformedEvent
from services.realtime.event_classifier import EventClassifier, extract_item_transcript, extract_scope_id
from services.realtime.events import EventCategory, parse_raw_event


@pytest.fixture
def classifier():
    return EventClassifier()


class TestParseRawEvent:
    """Test decoding of channel messages."""

    def test_parses_json_object(self):
        assert parse_raw_event('{"type": "session.created"}') == {"type": "session.created"}

    @pytest.mark.parametrize("message", ["not json", "[1, 2]", '{"event_id": "e1"}', '{"type": 3}', ""])
    def test_rejects_malformed_payloads(self, message):
        with pytest.raises(MalformedEvent):
            parse_raw_event(message)


class TestScopeExtraction:
    """Test scope normalization across protocol revisions."""

    def test_item_id_wins(self):
        assert extract_scope_id({"item_id": "item_1", "response_id": "resp_1"}) == "item_1"

    def test_response_events_prefer_response_id(self):
        raw = {"type": "response.output_audio_transcript.delta", "item_id": "item_1", "response_id": "resp_1"}
        assert extract_scope_id(raw) == "resp_1"
        assert extract_scope_id({"type": "response.created", "response": {"id": "resp_1"}}) == "resp_1"

    def test_response_id(self):
        assert extract_scope_id({"response_id": "resp_1"}) == "resp_1"

    def test_nested_ids(self):
        assert extract_scope_id({"item": {"id": "item_2"}}) == "item_2"
        assert extract_scope_id({"response": {"id": "resp_2"}}) == "resp_2"

    def test_absent(self):
        assert extract_scope_id({"type": "x"}) is None

    def test_item_transcript_joins_content_blocks(self):
        raw = {"item": {"content": [{"type": "input_audio", "transcript": "Hello "}, {"transcript": "there"}]}}
        assert extract_item_transcript(raw) == "Hello there"

    def test_item_transcript_missing(self):
        assert extract_item_transcript({"item": {"content": [{"type": "input_audio", "transcript": None}]}}) is None


class TestCategories:
    """Test that every event lands in exactly one category."""

    @pytest.mark.parametrize(
        "event_type",
        ["session.created", "session.updated", "transcription_session.updated", "conversation.created"],
    )
    def test_lifecycle(self, classifier, event_type):
        event = classifier.classify({"type": event_type, "event_id": "e1"})
        assert event.category is EventCategory.LIFECYCLE
        assert event.loggable

    @pytest.mark.parametrize(
        "raw, trigger, scope",
        [
            ({"type": "input_audio_buffer.speech_started", "item_id": "item_1"}, "speech_started", "item_1"),
            ({"type": "input_audio_buffer.committed", "item_id": "item_1"}, "committed", "item_1"),
            ({"type": "response.created", "response": {"id": "resp_1"}}, "response_created", "resp_1"),
        ],
    )
    def test_boundary(self, classifier, raw, trigger, scope):
        event = classifier.classify(raw)
        assert event.category is EventCategory.BOUNDARY
        assert event.trigger == trigger
        assert event.scope_id == scope

    @pytest.mark.parametrize(
        "raw, scope",
        [
            ({"type": "conversation.item.input_audio_transcription.delta", "item_id": "item_1", "delta": "Hel"}, "item_1"),
            ({"type": "response.output_audio_transcript.delta", "response_id": "resp_1", "delta": "Hel"}, "resp_1"),
            ({"type": "response.audio_transcript.delta", "response_id": "resp_1", "delta": "Hel"}, "resp_1"),
            ({"type": "response.text.delta", "response_id": "resp_1", "delta": "Hel"}, "resp_1"),
        ],
    )
    def test_delta(self, classifier, raw, scope):
        event = classifier.classify(raw)
        assert event.category is EventCategory.DELTA
        assert event.scope_id == scope
        assert event.text == "Hel"

    def test_renamed_transcript_delta_matched_by_shape(self, classifier):
        event = classifier.classify({"type": "input_audio_buffer.transcript.delta", "item_id": "i", "delta": "x"})
        assert event.category is EventCategory.DELTA

    def test_delta_without_scope_uses_fallback(self, classifier):
        event = classifier.classify({"type": "response.text.delta", "delta": "x"}, fallback_scope="resp_9")
        assert event.scope_id == "resp_9"

    @pytest.mark.parametrize(
        "raw, text",
        [
            ({"type": "conversation.item.input_audio_transcription.completed", "item_id": "i", "transcript": "Hi"}, "Hi"),
            ({"type": "response.output_audio_transcript.done", "response_id": "r", "transcript": "Hi"}, "Hi"),
            ({"type": "response.output_text.done", "response_id": "r", "text": "Hi"}, "Hi"),
        ],
    )
    def test_completion(self, classifier, raw, text):
        event = classifier.classify(raw)
        assert event.category is EventCategory.COMPLETION
        assert event.trigger == "completion_event"
        assert event.text == text

    def test_completion_without_text(self, classifier):
        event = classifier.classify({"type": "response.output_audio_transcript.done", "response_id": "r"})
        assert event.category is EventCategory.COMPLETION
        assert event.text is None

    def test_conversation_item_with_transcript_is_completion(self, classifier):
        raw = {
            "type": "conversation.item.created",
            "item": {"id": "item_7", "content": [{"type": "input_audio", "transcript": "Good morning"}]},
        }
        event = classifier.classify(raw)
        assert event.category is EventCategory.COMPLETION
        assert event.trigger == "conversation_item"
        assert event.scope_id == "item_7"
        assert event.text == "Good morning"

    def test_conversation_item_without_transcript_is_dropped(self, classifier):
        raw = {"type": "conversation.item.added", "item": {"id": "item_7", "content": [{"type": "input_audio"}]}}
        event = classifier.classify(raw)
        assert event.category is EventCategory.PASS_THROUGH
        assert not event.loggable

    def test_unknown_type_with_transcript_for_live_scope(self, classifier):
        raw = {"type": "transcript.final", "item_id": "item_1", "transcript": "Done"}
        event = classifier.classify(raw, live_scopes=["item_1"])
        assert event.category is EventCategory.COMPLETION
        assert event.trigger == "payload_shape"

    def test_unknown_type_with_transcript_for_unknown_scope(self, classifier):
        raw = {"type": "transcript.final", "item_id": "item_2", "transcript": "Done"}
        event = classifier.classify(raw, live_scopes=["item_1"])
        assert event.category is EventCategory.PASS_THROUGH

    def test_known_operational_event_is_logged(self, classifier):
        event = classifier.classify({"type": "error", "error": {"message": "bad"}})
        assert event.category is EventCategory.PASS_THROUGH
        assert event.loggable

    def test_unknown_event_dropped_without_error(self, classifier):
        event = classifier.classify({"type": "brand.new.event.from.the.future"})
        assert event.category is EventCategory.PASS_THROUGH
        assert not event.loggable
