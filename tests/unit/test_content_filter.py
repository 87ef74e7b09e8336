"""Unit tests for the banned-terminology filter"""
import copy
import pytest

from facescore.config import DEFAULT_BANNED_PHRASES, DEFAULT_BANNED_TERMS
from facescore.exceptions import ContentPolicyError
from facescore.safety.content_filter import ContentFilter, content_filter
from facescore.validators import parse_analysis_result


@pytest.fixture
def default_filter():
    return ContentFilter(DEFAULT_BANNED_TERMS, DEFAULT_BANNED_PHRASES)


class TestTermMatching:
    """Single tokens match on word boundaries only"""

    def test_hyphenated_term_flagged(self, default_filter):
        """Test that 'chad-like' matches the banned token 'chad'"""
        result = default_filter.scan("the jawline has a nice chad-like structure")

        assert result.flagged is True
        assert "chad" in result.matched_terms
        assert result.categories == ["banned term"]

    def test_substring_not_flagged(self, default_filter):
        """Test that 'cope' inside 'microscope' is not a match"""
        result = default_filter.scan("under a microscope")

        assert result.flagged is False
        assert result.matched_terms == []

    @pytest.mark.parametrize("text", [
        "a successful mogul",
        "european hair texture",
        "a scoped improvement plan",
        "beckoning smile",
    ])
    def test_words_containing_terms_not_flagged(self, default_filter, text):
        assert default_filter.scan(text).flagged is False

    def test_case_insensitive(self, default_filter):
        assert default_filter.scan("Total STACY energy").flagged is True

    def test_multiple_terms_reported(self, default_filter):
        result = default_filter.scan("cope and mog")

        assert set(result.matched_terms) == {"cope", "mog"}


class TestPhraseMatching:
    """Phrases match as contiguous runs of words"""

    def test_phrase_flagged(self, default_filter):
        result = default_filter.scan("you look like a beta male")

        assert result.flagged is True
        assert "beta male" in result.matched_terms
        assert result.categories == ["banned phrase"]

    @pytest.mark.parametrize("text", [
        "it's over for this look",
        "its over for this look",
        "it's   over",
        "it’s over for this look",
        "It’s Over",
    ])
    def test_apostrophe_optional(self, default_filter, text):
        assert default_filter.scan(text).flagged is True

    def test_scattered_words_not_flagged(self, default_filter):
        """Test that 'beta' and 'male' in separate places do not match"""
        result = default_filter.scan("the beta version shows a male subject")

        assert result.flagged is False

    def test_term_and_phrase_both_labelled(self, default_filter):
        result = default_filter.scan("alpha male incel talk")

        assert result.categories == ["banned term", "banned phrase"]


class TestCheckAnalysisResult:
    """Test suite for gating analysis results"""

    def test_clean_result_passes(self, default_filter, valid_analysis_dict):
        default_filter.check_analysis_result(parse_analysis_result(valid_analysis_dict))

    def test_banned_term_in_tip_raises(self, default_filter, valid_analysis_dict):
        """Test that banned terms anywhere in the serialized result are caught"""
        candidate = copy.deepcopy(valid_analysis_dict)
        candidate["tips"][2]["description"] = "Stop the cope and focus on a consistent skincare routine."

        with pytest.raises(ContentPolicyError) as exc_info:
            default_filter.check_analysis_result(parse_analysis_result(candidate))

        assert exc_info.value.matched_terms == ["cope"]
        assert exc_info.value.user_message == "Analysis temporarily unavailable, please retry."

    def test_typographic_apostrophe_in_result_raises(self, default_filter, valid_analysis_dict):
        candidate = copy.deepcopy(valid_analysis_dict)
        candidate["breakdown"]["hair"]["description"] = "Honestly it’s over for this hairline style."

        with pytest.raises(ContentPolicyError) as exc_info:
            default_filter.check_analysis_result(parse_analysis_result(candidate))

        assert exc_info.value.matched_terms == ["it's over"]

    def test_accepts_plain_dict(self, default_filter, valid_analysis_dict):
        candidate = copy.deepcopy(valid_analysis_dict)
        candidate["breakdown"]["eyes"]["description"] = "Classic Becky eye shape overall."

        with pytest.raises(ContentPolicyError):
            default_filter.check_analysis_result(candidate)

    def test_custom_lists(self):
        custom = ContentFilter(["glow"], ["soft girl"])

        assert custom.scan("a real glow up").flagged is True
        assert custom.scan("a soft  girl aesthetic").flagged is True
        assert custom.scan("chad").flagged is False

    def test_module_instance_uses_configured_lists(self):
        assert content_filter.scan("subhuman").flagged is True
