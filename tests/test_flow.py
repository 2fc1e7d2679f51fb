import random

import pytest

import services
from classification import MockClassifier
from errors import ClassifierError, FlowStateError, InvalidQuantity, ValidationError
from flow import FlowState, SubmissionFlow
from schemas import Prediction


class FixedClassifier:
    name = "fixed"

    def __init__(self, *predictions):
        self.predictions = [Prediction(label=label, confidence=conf) for label, conf in predictions]

    def classify(self, image):
        return list(self.predictions)


class FailingClassifier:
    name = "failing"

    def classify(self, image):
        raise ClassifierError("Image detection failed, please try again")


@pytest.fixture
def submitted():
    return []


def ai_flow(classifier, submitted):
    return SubmissionFlow(submit=submitted.append, classifier=classifier, rng=random.Random(0))


def test_ai_path_end_to_end(db):
    classifier = FixedClassifier(("plastic bottle", 0.8), ("water bottle", 0.9))
    flow = SubmissionFlow(
        submit=lambda payload: services.submit_entry(db, payload),
        classifier=classifier,
        rng=random.Random(0),
    )
    assert flow.state == FlowState.CAPTURE

    flow.supply_image(b"\x89PNG...")
    assert flow.state == FlowState.DETECTING

    draft = flow.detect()
    assert flow.state == FlowState.RESULTS
    assert draft.waste_type == "plastic"
    assert draft.quantity == 1.0
    assert draft.ai_confidence == 0.9
    assert flow.detected_label == "water bottle"
    assert draft.waste_name

    flow.review()
    flow.update(place="Park", quantity="2")
    entry, total = flow.submit()
    assert flow.state == FlowState.SUBMITTED
    assert entry.entry_type == "ai"
    assert entry.credits_earned == pytest.approx(0.30)
    assert total == pytest.approx(1250.30)
    assert [p.label for p in entry.ai_raw_predictions] == ["water bottle", "plastic bottle"]


def test_empty_image_stays_in_capture(submitted):
    flow = ai_flow(MockClassifier(seed=1), submitted)
    with pytest.raises(ValidationError):
        flow.supply_image(b"")
    assert flow.state == FlowState.CAPTURE


def test_classifier_failure_returns_to_capture(submitted):
    flow = ai_flow(FailingClassifier(), submitted)
    flow.supply_image(b"img")
    with pytest.raises(ClassifierError):
        flow.detect()
    assert flow.state == FlowState.CAPTURE
    assert flow.image is None
    assert submitted == []


def test_non_weighable_detection_has_no_quantity(submitted):
    flow = ai_flow(FixedClassifier(("wine bottle", 0.82)), submitted)
    flow.supply_image(b"img")
    draft = flow.detect()
    assert draft.waste_type == "glass"
    assert draft.quantity is None


def test_submit_is_gated(submitted):
    flow = SubmissionFlow(submit=submitted.append, manual=True)
    assert flow.state == FlowState.REVIEW

    flow.update(waste_name="Cardboard", waste_type="paper")
    with pytest.raises(ValidationError):
        flow.submit()  # no place

    flow.update(place="Home")
    with pytest.raises(InvalidQuantity):
        flow.submit()  # paper needs a quantity

    flow.update(quantity=0)
    with pytest.raises(InvalidQuantity):
        flow.submit()

    assert submitted == []
    flow.update(quantity=3)
    flow.submit()
    assert flow.state == FlowState.SUBMITTED
    assert submitted[0].waste_type == "paper"
    assert submitted[0].entry_type == "manual"


def test_wrong_state_transitions(submitted):
    flow = ai_flow(MockClassifier(seed=2), submitted)
    with pytest.raises(FlowStateError):
        flow.detect()
    with pytest.raises(FlowStateError):
        flow.review()
    with pytest.raises(FlowStateError):
        flow.submit()


def test_cancel_discards_partial_state(submitted):
    flow = ai_flow(MockClassifier(seed=2), submitted)
    flow.supply_image(b"img")
    flow.detect()
    flow.cancel()
    assert flow.state == FlowState.CAPTURE
    assert flow.image is None
    assert flow.draft.waste_type is None

    manual = SubmissionFlow(submit=submitted.append, manual=True)
    manual.update(waste_name="Shirt")
    manual.cancel()
    assert manual.state == FlowState.REVIEW
    assert manual.draft.waste_name is None


def test_update_rejects_unknown_fields(submitted):
    flow = SubmissionFlow(submit=submitted.append, manual=True)
    with pytest.raises(ValueError):
        flow.update(colour="green")


def test_ai_flow_requires_classifier():
    with pytest.raises(ValueError):
        SubmissionFlow(submit=lambda payload: None)
