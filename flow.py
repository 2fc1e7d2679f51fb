"""
Entry submission flow.

AI-assisted entries move through

    capture -> detecting -> results -> review -> submitted

while manual entries start directly in review. A failed detection drops the
image and returns to capture; cancel() discards everything gathered so far.
"""

import random
from enum import Enum
from typing import Any, Callable, Optional

from classification import Classifier, detect_waste, generate_waste_name, suggest_quantity
from credit_calculator import validate_submission
from errors import EcoWasteError, FlowStateError, ValidationError
from schemas import EntryCreate


class FlowState(str, Enum):
    CAPTURE = "capture"
    DETECTING = "detecting"
    RESULTS = "results"
    REVIEW = "review"
    SUBMITTED = "submitted"


class SubmissionFlow:
    def __init__(
        self,
        submit: Callable[[EntryCreate], Any],
        classifier: Optional[Classifier] = None,
        manual: bool = False,
        rng: Optional[random.Random] = None,
    ):
        if not manual and classifier is None:
            raise ValueError("An AI-assisted flow needs a classifier")
        self._submit = submit
        self.classifier = classifier
        self.manual = manual
        self.rng = rng
        self.result = None
        self._start()

    def _start(self):
        self.image: Optional[bytes] = None
        self.detected_label: Optional[str] = None
        if self.manual:
            self.draft = EntryCreate(entry_type="manual")
            self.state = FlowState.REVIEW
        else:
            self.draft = EntryCreate(entry_type="ai")
            self.state = FlowState.CAPTURE

    def _expect(self, state: FlowState):
        if self.state != state:
            raise FlowStateError(f"Cannot do that in state {self.state.value!r}, expected {state.value!r}")

    def supply_image(self, image: bytes):
        self._expect(FlowState.CAPTURE)
        if not image:
            raise ValidationError("An image is required")
        self.image = image
        self.state = FlowState.DETECTING

    def detect(self) -> EntryCreate:
        self._expect(FlowState.DETECTING)
        try:
            detection = detect_waste(self.classifier, self.image)
        except EcoWasteError:
            # The user has to capture a new image to retry
            self._start()
            raise

        category = detection.category
        self.detected_label = detection.top.label
        self.draft = EntryCreate(
            entry_type="ai",
            waste_name=generate_waste_name(category.value, self.rng),
            waste_type=category.value,
            quantity=suggest_quantity(category),
            ai_confidence=detection.top.confidence,
            ai_raw_predictions=detection.predictions,
        )
        self.state = FlowState.RESULTS
        return self.draft

    def review(self) -> EntryCreate:
        self._expect(FlowState.RESULTS)
        self.state = FlowState.REVIEW
        return self.draft

    def update(self, **fields) -> EntryCreate:
        self._expect(FlowState.REVIEW)
        unknown = set(fields) - set(EntryCreate.model_fields)
        if unknown:
            raise ValueError(f"Unknown entry fields: {', '.join(sorted(unknown))}")
        self.draft = self.draft.model_copy(update=fields)
        return self.draft

    def submit(self):
        self._expect(FlowState.REVIEW)
        validate_submission(self.draft)
        self.result = self._submit(self.draft)
        self.state = FlowState.SUBMITTED
        return self.result

    def cancel(self):
        if self.state == FlowState.SUBMITTED:
            raise FlowStateError("Entry already submitted")
        self._start()
