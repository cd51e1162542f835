import pytest

from screening.moderation.domain.exceptions import ParseError
from screening.moderation.domain.results import PENDING_REVIEW
from screening.moderation.services.parser import ResponseParser, parse_keywords, parse_structured


@pytest.mark.unit
class TestResponseParser:
    def test_parses_structured_json(self):
        raw = '{"approved":false,"confidence":0.9,"reason":"x","categories":["y"]}'

        result = ResponseParser().parse(raw)

        assert result.approved is False
        assert result.confidence == 0.9
        assert result.reason == "x"
        assert result.categories == frozenset({"y"})
        assert result.raw_response == raw

    def test_extracts_json_wrapped_in_prose(self):
        raw = 'Claro! Aqui está:\n```json\n{"approved": true, "confidence": 0.97, "reason": "ok"}\n```'

        result = ResponseParser().parse(raw)

        assert result.approved is True
        assert result.confidence == 0.97
        assert result.categories == frozenset()

    def test_keyword_heuristic_rejects(self):
        result = ResponseParser().parse("This content is a clear violation — reject.")

        assert result.approved is False
        assert result.confidence == 0.8
        assert result.reason == "parsed from text response"

    def test_keyword_heuristic_approves_clean_text(self):
        result = ResponseParser().parse("Looks fine to me, nothing to flag.")

        assert result.approved is True
        assert result.confidence == 0.7

    def test_keywords_match_whole_words_only(self):
        assert parse_keywords("spammer-free zone, rejected nothing").approved is True
        assert parse_keywords("SPAM detected").approved is False

    def test_missing_fields_use_defaults(self):
        result = ResponseParser().parse('{"approved": "true"}')

        assert result.approved is True
        assert result.confidence == 0.5
        assert result.reason == "AI moderation result"

    def test_confidence_is_clamped(self):
        result = ResponseParser().parse('{"approved": true, "confidence": 7}')

        assert result.confidence == 1.0

    @pytest.mark.parametrize(
        "raw",
        [
            '{"approved": {"nested": true}}',
            '{"approved": true, "confidence": "very"}',
            '{"approved": true, "categories": 42}',
        ],
        ids=["bad_approved", "bad_confidence", "bad_categories"],
    )
    def test_invalid_fields_yield_pending_review(self, raw):
        result = ResponseParser().parse(raw)

        assert result.approved is False
        assert result.confidence == 0.5
        assert PENDING_REVIEW in result.categories
        assert result.reason == ResponseParser.FAILURE_REASON

    def test_non_string_input_yields_pending_review(self):
        result = ResponseParser().parse(None)

        assert result.needs_review

    def test_parse_structured_raises_on_bad_types(self):
        with pytest.raises(ParseError):
            parse_structured('{"approved": [1, 2]}')

    def test_parse_structured_ignores_objects_without_verdict(self):
        assert parse_structured('{"reason": "no verdict here"}') is None
        assert parse_structured("{not json}") is None
