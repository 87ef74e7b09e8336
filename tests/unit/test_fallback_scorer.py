"""Unit tests for rule-based fallback scoring"""
import pytest

from facescore.models.analysis import (
    FEATURE_CATEGORIES,
    FaceMetrics,
    HeadAngles,
    ImageLikelihood,
    LandmarkPoint,
    Likelihood,
)
from facescore.scoring.fallback import (
    RETAKE_PHOTO_TIP,
    calculate_fallback_score,
    calculate_skin_score,
    round_score,
)
from facescore.validators import validate_analysis_result


def _metrics(blurred, under_exposed):
    return FaceMetrics(likelihood=ImageLikelihood(blurred=blurred, under_exposed=under_exposed))


class TestSkinScore:
    """Image-quality likelihoods drive the skin score"""

    def test_no_likelihood(self):
        assert calculate_skin_score(None) == 7.0

    def test_sharp_and_well_exposed(self):
        likelihood = ImageLikelihood(blurred=Likelihood.VERY_UNLIKELY, under_exposed=Likelihood.UNLIKELY)
        assert calculate_skin_score(likelihood) == 8.0

    def test_slightly_sharp(self):
        likelihood = ImageLikelihood(blurred=Likelihood.UNLIKELY, under_exposed=Likelihood.LIKELY)
        assert calculate_skin_score(likelihood) == 7.5

    def test_very_sharp_but_dark(self):
        """Test that VERY_UNLIKELY blur alone does not earn the top score"""
        likelihood = ImageLikelihood(blurred=Likelihood.VERY_UNLIKELY, under_exposed=Likelihood.VERY_UNLIKELY)
        assert calculate_skin_score(likelihood) == 7.0


class TestFallbackScore:
    """Test suite for calculate_fallback_score"""

    def test_no_metrics(self):
        """Test baseline: mean of 7,7,7,7,7.5,7.5,7,7 = 7.125 -> 7.1"""
        result = calculate_fallback_score()

        assert result.score == 7.1
        assert result.breakdown["skin"].score == 7.0
        assert result.breakdown["symmetry"].score == 7.5
        assert result.breakdown["eyes"].score == 7.5
        assert len(result.tips) == 5

    def test_half_up_rounding(self):
        """Test that 58 / 8 = 7.25 rounds up to 7.3"""
        result = calculate_fallback_score(_metrics(Likelihood.VERY_UNLIKELY, Likelihood.UNLIKELY))

        assert result.breakdown["skin"].score == 8.0
        assert result.score == 7.3

    def test_unlikely_blur(self):
        result = calculate_fallback_score(_metrics(Likelihood.UNLIKELY, Likelihood.VERY_UNLIKELY))

        assert result.breakdown["skin"].score == 7.5
        assert result.score == 7.2

    def test_breakdown_order(self):
        result = calculate_fallback_score()

        assert list(result.breakdown.keys()) == list(FEATURE_CATEGORIES)

    @pytest.mark.parametrize("blurred,under_exposed", [
        (Likelihood.LIKELY, Likelihood.UNLIKELY),
        (Likelihood.UNLIKELY, Likelihood.VERY_LIKELY),
        (Likelihood.POSSIBLE, Likelihood.POSSIBLE),
    ])
    def test_poor_photo_adds_retake_tip(self, blurred, under_exposed):
        result = calculate_fallback_score(_metrics(blurred, under_exposed))

        assert len(result.tips) == 6
        assert result.tips[-1] == RETAKE_PHOTO_TIP

    def test_landmarks_do_not_change_symmetry(self):
        metrics = FaceMetrics(
            landmarks={
                "left_eye": LandmarkPoint(x=100, y=120),
                "right_eye": LandmarkPoint(x=180, y=135, z=2.0),
            },
            head_angles=HeadAngles(roll=12.0, pan=-5.0, tilt=3.0),
            confidence=0.92,
        )

        assert calculate_fallback_score(metrics).breakdown["symmetry"].score == 7.5

    def test_deterministic(self):
        metrics = _metrics(Likelihood.UNLIKELY, Likelihood.UNLIKELY)

        assert calculate_fallback_score(metrics) == calculate_fallback_score(metrics)


class TestFallbackPassesValidation:
    """Fallback output must always satisfy the result contract"""

    @pytest.mark.parametrize("blurred", list(Likelihood))
    @pytest.mark.parametrize("under_exposed", list(Likelihood))
    def test_all_likelihood_combinations(self, blurred, under_exposed):
        result = calculate_fallback_score(_metrics(blurred, under_exposed))

        validate_analysis_result(result.model_dump())

    def test_without_metrics(self):
        validate_analysis_result(calculate_fallback_score().model_dump())


class TestRoundScore:

    def test_round_half_up(self):
        assert round_score(7.25) == 7.3
        assert round_score(7.125) == 7.1
        assert round_score(7.15) == 7.2
        assert round_score(6.04) == 6.0
