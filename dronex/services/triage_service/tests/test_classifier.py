"""Tests for EmergencyClassifier.

Covers the documented examples plus the properties callers rely on:
idempotence, monotonicity, and first-declared tie-breaking.
"""
import pytest

from dronex.shared.models import Severity
from dronex.services.triage_service.classifier import (
    GENERAL_CATEGORY,
    ClassificationResult,
    EmergencyClassifier,
    classify,
)
from dronex.services.triage_service.config import ClassifierConfig, SeverityThresholds
from dronex.services.triage_service.keyword_table import KeywordTable


@pytest.fixture
def classifier():
    """Classifier over the built-in keyword table."""
    return EmergencyClassifier()


@pytest.fixture
def fire_table():
    return KeywordTable.from_mapping({"fire": {"fire": 3, "smoke": 2}})


class TestNonEmergency:
    """Inputs with no configured keyword."""

    def test_lunch_question_is_general(self, classifier):
        result = classifier.classify("what's for lunch")

        assert result.category == GENERAL_CATEGORY
        assert result.severity == Severity.NONE
        assert result.confidence == 0.0
        assert result.is_emergency is False

    def test_empty_text(self, classifier):
        result = classifier.classify("")

        assert result.category == GENERAL_CATEGORY
        assert result.severity == Severity.NONE
        assert result.confidence == 0.0
        assert result.matched_keywords == frozenset()

    def test_none_is_coerced_to_empty(self, classifier):
        """Missing transcript should behave like empty text, not raise."""
        result = classifier.classify(None)

        assert result == classifier.classify("")

    @pytest.mark.parametrize("text", [
        "I had a good day at school today",
        "see you at dinner tonight",
        "   ",
    ])
    def test_everyday_messages(self, classifier, text):
        result = classifier.classify(text)

        assert result.category == GENERAL_CATEGORY
        assert result.severity == Severity.NONE

    def test_empty_table_degrades_to_general(self):
        result = EmergencyClassifier(table=KeywordTable([])).classify("help fire flood")

        assert result.category == GENERAL_CATEGORY
        assert result.severity == Severity.NONE
        assert result.confidence == 0.0


class TestEmergencyDetection:
    """Inputs that should be recognised as emergencies."""

    def test_fire_in_building(self, classifier):
        """6 words, one 'fire' (weight 3): 3 / 6 * 10 = 5.0."""
        result = classifier.classify("there's a fire in my building")

        assert result.category == "fire"
        assert result.confidence == pytest.approx(5.0)
        assert result.severity == Severity.MEDIUM
        assert "fire" in result.matched_keywords

    def test_fire_with_minimal_table(self, fire_table):
        result = classify("there's a fire in my building", table=fire_table)

        assert result.category == "fire"
        assert result.confidence > 0
        assert result.severity == Severity.MEDIUM

    def test_dense_distress_is_critical(self, classifier):
        result = classifier.classify("help emergency trapped")

        assert result.category == "distress"
        assert result.severity == Severity.CRITICAL
        assert result.confidence == 10.0
        assert result.matched_keywords == frozenset({"help", "emergency", "trapped"})

    def test_medical_critical(self, classifier):
        result = classifier.classify("HEART ATTACK unconscious")

        assert result.category == "medical"
        assert result.severity == Severity.CRITICAL

    def test_case_insensitive(self, fire_table):
        upper = classify("SMOKE everywhere", table=fire_table)
        lower = classify("smoke everywhere", table=fire_table)

        assert upper == lower
        assert upper.category == "fire"

    def test_substring_matching(self, classifier):
        """'wildfire' contains 'fire', so both keywords count."""
        result = classifier.classify("wildfire")

        assert result.category == "fire"
        assert result.matched_keywords == frozenset({"fire", "wildfire"})

    def test_matched_keywords_only_from_winning_category(self, classifier):
        result = classifier.classify("flood flood rising water help")

        assert result.category == "flood"
        assert "help" not in result.matched_keywords

    def test_confidence_is_clamped(self, fire_table):
        result = classify("fire fire smoke", table=fire_table)

        assert result.confidence == 10.0


class TestEmergencyThreshold:
    """The 0.5 threshold separates emergencies from general chat."""

    def test_score_at_threshold_is_general(self):
        table = KeywordTable.from_mapping({"fire": {"smoke": 1}})
        # 1 / 20 * 10 == 0.5, not above the threshold
        text = "smoke " + " ".join(["word"] * 19)

        result = classify(text, table=table)

        assert result.category == GENERAL_CATEGORY
        assert result.severity == Severity.NONE
        assert result.confidence == pytest.approx(0.5)
        assert result.matched_keywords == frozenset({"smoke"})

    def test_score_just_above_threshold_is_low(self):
        table = KeywordTable.from_mapping({"fire": {"smoke": 1}})
        text = "smoke " + " ".join(["word"] * 18)

        result = classify(text, table=table)

        assert result.category == "fire"
        assert result.severity == Severity.LOW


class TestSeverityBands:
    """Boundary values are inclusive at the top of each band."""

    @pytest.mark.parametrize("confidence,expected", [
        (0.0, Severity.NONE),
        (0.5, Severity.NONE),
        (0.51, Severity.LOW),
        (3.0, Severity.LOW),
        (3.01, Severity.MEDIUM),
        (5.0, Severity.MEDIUM),
        (5.01, Severity.HIGH),
        (7.0, Severity.HIGH),
        (7.01, Severity.CRITICAL),
        (10.0, Severity.CRITICAL),
    ])
    def test_default_bands(self, classifier, confidence, expected):
        assert classifier.severity_for(confidence) == expected

    def test_custom_thresholds(self, fire_table):
        thresholds = SeverityThresholds(EMERGENCY_MIN=1.0, LOW_MAX=2.0, MEDIUM_MAX=4.0, HIGH_MAX=4.5)
        classifier = EmergencyClassifier(table=fire_table, thresholds=thresholds)

        # 3 / 6 * 10 == 5.0, above HIGH_MAX
        result = classifier.classify("there's a fire in my building")

        assert result.severity == Severity.CRITICAL

    def test_non_monotonic_thresholds_rejected(self):
        with pytest.raises(ValueError):
            SeverityThresholds(LOW_MAX=6.0)

    def test_negative_emergency_threshold_rejected(self):
        with pytest.raises(ValueError):
            SeverityThresholds(EMERGENCY_MIN=-1.0)


class TestClassifierConfig:
    """Scoring configuration is validated on construction."""

    @pytest.mark.parametrize("max_confidence", [20.0, 10.01, 0.0, -1.0, float("nan")])
    def test_invalid_max_confidence_rejected(self, max_confidence):
        with pytest.raises(ValueError):
            ClassifierConfig(max_confidence=max_confidence)

    @pytest.mark.parametrize("scale", [0.0, -10.0, float("nan")])
    def test_invalid_confidence_scale_rejected(self, scale):
        with pytest.raises(ValueError):
            ClassifierConfig(confidence_scale=scale)

    def test_lower_clamp_caps_dense_match(self, fire_table):
        classifier = EmergencyClassifier(table=fire_table, config=ClassifierConfig(max_confidence=8.0))

        result = classifier.classify("fire")

        assert result.confidence == 8.0
        assert result.severity == Severity.CRITICAL

    def test_dense_match_at_full_scale_does_not_raise(self, fire_table):
        classifier = EmergencyClassifier(table=fire_table, config=ClassifierConfig(max_confidence=10.0))

        assert classifier.classify("fire fire fire").confidence == 10.0


class TestDeterminism:
    """Purity properties of classify()."""

    def test_idempotent(self, classifier):
        text = "there is smoke and flames near the river, people trapped"

        assert classifier.classify(text) == classifier.classify(text)

    def test_monotonic_in_keyword_occurrences(self, classifier):
        """Repeating a high-weight keyword never lowers its category's confidence."""
        base = "there's a fire in my building"
        previous = 0.0
        for extra in range(8):
            result = classifier.classify(base + " fire" * extra)
            assert result.category == "fire"
            assert result.confidence >= previous
            previous = result.confidence

    def test_tie_goes_to_first_declared_category(self):
        first = KeywordTable([("alpha", [("x", 1)]), ("beta", [("y", 1)])])
        second = KeywordTable([("beta", [("y", 1)]), ("alpha", [("x", 1)])])

        assert classify("x y", table=first).category == "alpha"
        assert classify("x y", table=second).category == "beta"

    def test_tie_is_stable_across_calls(self):
        table = KeywordTable([("alpha", [("x", 2)]), ("beta", [("y", 2)])])

        categories = {classify("y x", table=table).category for _ in range(20)}

        assert categories == {"alpha"}


class TestClassificationResult:
    """Tests for the result value object."""

    def test_confidence_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            ClassificationResult(category="fire", severity=Severity.HIGH, confidence=10.5)

    def test_result_is_immutable(self, classifier):
        result = classifier.classify("fire")

        with pytest.raises(Exception):  # FrozenInstanceError
            result.category = "flood"

    def test_to_dict(self, classifier):
        data = classifier.classify("help emergency trapped").to_dict()

        assert data["category"] == "distress"
        assert data["severity"] == "critical"
        assert data["confidence"] == 10.0
        assert data["matched_keywords"] == ["emergency", "help", "trapped"]
        assert data["is_emergency"] is True
