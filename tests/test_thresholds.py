from shelter_sim.economy.resources import ResourceType
from shelter_sim.economy.thresholds import LEVELS, ThresholdClassifier


def test_food_bands() -> None:
    classifier = ThresholdClassifier()

    assert classifier.classify("food", 0) == "emergency"
    assert classifier.classify("food", 2) == "emergency"
    assert classifier.classify("food", 3) == "critical"
    assert classifier.classify("food", 5) == "critical"
    assert classifier.classify("food", 10) == "warning"
    assert classifier.classify("food", 20) == "normal"
    assert classifier.classify("food", 21) == "abundant"


def test_classification_is_monotonic() -> None:
    classifier = ThresholdClassifier()
    for rt in ResourceType:
        previous = 0
        for value in range(0, 80):
            rank = LEVELS.index(classifier.classify(rt, value))
            assert rank >= previous
            previous = rank


def test_overrides_merge_over_defaults() -> None:
    classifier = ThresholdClassifier({"food": {"warning": 30}})

    assert classifier.warning_level("food") == 30
    assert classifier.bands("food")["critical"] == 5
    assert classifier.warning_level("fuel") == 5


def test_alert_level_only_for_low_bands() -> None:
    classifier = ThresholdClassifier()

    assert classifier.alert_level("cash", 4) == "emergency"
    assert classifier.alert_level("cash", 15) == "warning"
    assert classifier.alert_level("cash", 30) is None


def test_status_days_remaining_and_recommendations() -> None:
    classifier = ThresholdClassifier()

    status = classifier.status("food", 9, daily_consumption=4)
    assert status.level == "warning"
    assert status.days_remaining == 2
    assert status.recommendations

    idle = classifier.status("materials", 7, daily_consumption=0)
    assert idle.days_remaining == 7
