from types import SimpleNamespace

import pytest

from conftest import audio_chunk, make_result, make_session
from interview_ace.core.errors import RecordingError
from interview_ace.models.flows import AudioDataUri, SpeechToTextOutput
from interview_ace.services.navigation import Page, resolve_page
from interview_ace.services.recorder import AudioRecorder
from interview_ace.services.session_repository import InMemorySessionRepository, MongoSessionRepository


class TestInterviewSession:
    def test_results_kept_in_question_order(self):
        session = make_session(4)
        for index in (2, 0, 3):
            session = session.with_result(make_result(session, index))

        assert [r.question_index for r in session.results] == [0, 2, 3]
        assert session.answered_indices() == {0, 2, 3}
        assert not session.is_complete

        session = session.with_result(make_result(session, 1))
        assert session.is_complete

    def test_duplicate_result_rejected(self):
        session = make_session(2).with_result(make_result(make_session(2), 0))
        with pytest.raises(ValueError):
            session.with_result(make_result(session, 0))

    def test_out_of_range_result_rejected(self):
        session = make_session(2)
        bogus = make_result(make_session(5), 4)
        with pytest.raises(ValueError):
            session.with_result(bogus)

    def test_with_result_leaves_original_untouched(self):
        session = make_session(2)
        session.with_result(make_result(session, 0))
        assert session.results == []

    def test_average_score(self):
        session = make_session(3)
        session = session.with_result(make_result(session, 0, total=6))
        session = session.with_result(make_result(session, 1, total=9))
        assert session.average_score() == pytest.approx(7.5)
        assert make_session(3).average_score() == 0.0


class TestAudioDataUri:
    def test_parse_keeps_base_mime(self):
        uri = AudioDataUri.from_bytes(b"hello", "audio/webm;codecs=opus")
        audio = AudioDataUri.parse(uri)
        assert audio.mime_type == "audio/webm"
        assert audio.data == b"hello"

    @pytest.mark.parametrize("uri", ["", "hello", "data:audio/webm;base64,", "data:audio/webm;base64,@@@"])
    def test_parse_rejects_malformed(self, uri):
        with pytest.raises(ValueError):
            AudioDataUri.parse(uri)

    def test_stt_output_never_empty(self):
        assert SpeechToTextOutput().error == "Speech-to-text failed."
        assert SpeechToTextOutput(transcript="hi").error is None


class TestNavigation:
    def test_no_session_goes_to_intake(self):
        for page in Page:
            assert resolve_page(page, None) == Page.INTAKE

    def test_complete_session_skips_interview(self):
        session = make_session(1)
        session = session.with_result(make_result(session, 0))
        assert resolve_page(Page.INTERVIEW, session) == Page.RESULTS
        assert resolve_page(Page.RESULTS, session) == Page.RESULTS

    def test_incomplete_session_pages_allowed(self):
        session = make_session(2)
        assert resolve_page(Page.INSTRUCTIONS, session) == Page.INSTRUCTIONS
        assert resolve_page(Page.INTERVIEW, session) == Page.INTERVIEW


class TestInMemorySessionRepository:
    def test_round_trip(self):
        repository = InMemorySessionRepository()
        session = make_session(3)
        session = session.with_result(make_result(session, 1))

        repository.put("client-1", session)
        loaded = repository.get("client-1")

        assert loaded == session
        assert loaded is not session

    def test_missing_and_delete(self):
        repository = InMemorySessionRepository()
        assert repository.get("nobody") is None
        repository.put("client-1", make_session())
        assert repository.delete("client-1") is True
        assert repository.delete("client-1") is False
        assert repository.get("client-1") is None


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def find_one(self, query):
        return self.docs.get(query["client_key"])

    def replace_one(self, query, doc, upsert=False):
        assert upsert
        self.docs[query["client_key"]] = doc

    def delete_one(self, query):
        removed = self.docs.pop(query["client_key"], None)
        return SimpleNamespace(deleted_count=1 if removed else 0)


class TestMongoSessionRepository:
    def test_round_trip_through_json_document(self):
        collection = FakeCollection()
        repository = MongoSessionRepository(collection)
        session = make_session(2)
        session = session.with_result(make_result(session, 0))

        repository.put("client-1", session)

        assert collection.docs["client-1"]["session"]["user_details"]["interview_type"] == "Technical"
        assert repository.get("client-1") == session
        assert repository.delete("client-1") is True
        assert repository.get("client-1") is None


class TestAudioRecorder:
    def test_collects_chunks_into_data_uri(self):
        recorder = AudioRecorder()
        recorder.start("audio/webm")
        recorder.append(audio_chunk("hello "))
        recorder.append(audio_chunk("world"))

        audio = AudioDataUri.parse(recorder.stop())
        assert audio.data == b"hello world"
        assert not recorder.recording

    def test_nothing_recorded(self):
        recorder = AudioRecorder()
        recorder.start()
        assert recorder.stop() is None

    def test_rejects_non_media_format(self):
        with pytest.raises(RecordingError):
            AudioRecorder().start("text/plain")

    def test_rejects_double_start(self):
        recorder = AudioRecorder()
        recorder.start()
        with pytest.raises(RecordingError):
            recorder.start()

    def test_rejects_bad_chunk(self):
        recorder = AudioRecorder()
        recorder.start()
        with pytest.raises(RecordingError):
            recorder.append("not base64!")

    def test_chunks_ignored_when_stopped(self):
        recorder = AudioRecorder()
        recorder.append(audio_chunk("late"))
        assert recorder.chunks == []

    @pytest.mark.parametrize(
        "mime_type, expected",
        [("audio/ogg; codecs=opus", "audio/ogg"), ("video/webm;codecs=vp8,opus", "video/webm")],
    )
    def test_codec_parameters_dropped_from_clip(self, mime_type, expected):
        recorder = AudioRecorder()
        recorder.start(mime_type)
        recorder.append(audio_chunk("clip"))

        audio = AudioDataUri.parse(recorder.stop())
        assert audio.mime_type == expected
        assert audio.data == b"clip"
