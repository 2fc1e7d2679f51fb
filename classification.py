import io
import logging
import random
from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from errors import ClassifierError, ValidationError
from schemas import Prediction
from waste_types import WasteCategory, get_category

logger = logging.getLogger(__name__)

# Label keyword -> category. Scanned in order and the first keyword found in
# the label wins, so phrases sit above the single words they contain
# ("wine bottle" before "bottle").
CLASSIFICATION_TO_WASTE_MAP: Tuple[Tuple[str, str], ...] = (
    # Phrases
    ("cardboard box", "paper"),
    ("paper bag", "paper"),
    ("plastic bag", "plastic"),
    ("plastic bottle", "plastic"),
    ("water bottle", "plastic"),
    ("soda can", "metal"),
    ("beer can", "metal"),
    ("aluminum foil", "metal"),
    ("metal container", "metal"),
    ("wine bottle", "glass"),
    ("beer bottle", "glass"),
    ("glass bottle", "glass"),
    ("glass jar", "glass"),
    # Paper
    ("book", "paper"),
    ("notebook", "paper"),
    ("envelope", "paper"),
    ("newspaper", "paper"),
    ("magazine", "paper"),
    ("tissue", "paper"),
    # Plastic
    ("bottle", "plastic"),
    ("container", "plastic"),
    ("cup", "plastic"),
    ("plate", "plastic"),
    ("toy", "plastic"),
    ("packaging", "plastic"),
    # Metal
    ("can", "metal"),
    ("tin", "metal"),
    ("cutlery", "metal"),
    ("knife", "metal"),
    ("fork", "metal"),
    ("spoon", "metal"),
    # Glass
    ("jar", "glass"),
    ("glass", "glass"),
    ("mirror", "glass"),
    ("window", "glass"),
    # E-waste
    ("laptop", "e-waste"),
    ("computer", "e-waste"),
    ("phone", "e-waste"),
    ("tablet", "e-waste"),
    ("keyboard", "e-waste"),
    ("mouse", "e-waste"),
    ("monitor", "e-waste"),
    ("television", "e-waste"),
    ("radio", "e-waste"),
    ("battery", "e-waste"),
    ("cable", "e-waste"),
    ("charger", "e-waste"),
    # Textile
    ("shirt", "textile"),
    ("pants", "textile"),
    ("dress", "textile"),
    ("jacket", "textile"),
    ("shoe", "textile"),
    ("sock", "textile"),
    ("hat", "textile"),
    ("bag", "textile"),
    # Organic
    ("apple", "organic"),
    ("banana", "organic"),
    ("orange", "organic"),
    ("vegetable", "organic"),
    ("fruit", "organic"),
    ("food", "organic"),
    ("bread", "organic"),
    ("meat", "organic"),
)

# Broader checks applied only when no keyword above matched
FALLBACK_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("bottle",), "plastic"),
    (("can",), "metal"),
    (("paper", "book"), "paper"),
    (("phone", "electronic"), "e-waste"),
    (("clothes", "fabric"), "textile"),
    (("food", "fruit"), "organic"),
    (("glass", "jar"), "glass"),
)

DEFAULT_CATEGORY = "plastic"

WASTE_NAMES = {
    "paper": ["Old newspapers", "Cardboard box", "Office paper", "Magazine", "Book pages"],
    "plastic": ["Plastic bottle", "Food container", "Plastic bag", "Disposable cup", "Packaging material"],
    "metal": ["Aluminum can", "Tin can", "Metal container", "Food can", "Beverage can"],
    "glass": ["Glass bottle", "Glass jar", "Broken glass", "Wine bottle", "Food jar"],
    "e-waste": ["Old smartphone", "Laptop", "Computer parts", "Electronic device", "Battery"],
    "textile": ["Old clothing", "Fabric scraps", "Used textile", "Clothing item", "Fabric waste"],
    "organic": ["Food waste", "Fruit peels", "Vegetable scraps", "Organic matter", "Compostable waste"],
    "hazardous": ["Chemical container", "Paint can", "Battery", "Hazardous material", "Toxic waste"],
}


def map_label_to_category(label: Optional[str]) -> WasteCategory:
    """
    Map a free-text classifier label to a waste category.

    Never raises: labels that match nothing get DEFAULT_CATEGORY.
    """
    text = (label or "").lower()

    for keyword, value in CLASSIFICATION_TO_WASTE_MAP:
        if keyword in text:
            return get_category(value)

    for keywords, value in FALLBACK_RULES:
        if any(keyword in text for keyword in keywords):
            return get_category(value)

    return get_category(DEFAULT_CATEGORY)


def generate_waste_name(waste_type: str, rng: Optional[random.Random] = None) -> str:
    names = WASTE_NAMES.get(waste_type, ["Unknown waste item"])
    return (rng or random).choice(names)


def suggest_quantity(category: WasteCategory) -> Optional[float]:
    # Pre-fill 1 kg for weighable categories; others take no quantity
    return 1.0 if category.weighable else None


# ---- classifiers ----

class Classifier(ABC):
    """Produces ranked (label, confidence) guesses for an image."""

    name = "classifier"

    @abstractmethod
    def classify(self, image: bytes) -> List[Prediction]:
        ...


# Canned prediction sets the mock classifier picks from
MOCK_SCENARIOS: Tuple[Tuple[Tuple[str, float], ...], ...] = (
    (("plastic bottle", 0.89), ("water bottle", 0.84), ("container", 0.71), ("bottle", 0.68), ("plastic bag", 0.34)),
    (("aluminum can", 0.92), ("soda can", 0.88), ("beer can", 0.76), ("metal container", 0.65), ("tin", 0.43)),
    (("newspaper", 0.85), ("paper", 0.81), ("magazine", 0.72), ("cardboard box", 0.69), ("book", 0.48)),
    (("glass bottle", 0.87), ("wine bottle", 0.82), ("jar", 0.74), ("glass", 0.68), ("beer bottle", 0.55)),
    (("smartphone", 0.91), ("phone", 0.86), ("electronic device", 0.78), ("tablet", 0.62), ("computer", 0.44)),
    (("apple", 0.88), ("fruit", 0.83), ("food", 0.76), ("organic matter", 0.71), ("vegetable", 0.52)),
)


class MockClassifier(Classifier):
    """Ignores the image and returns one of MOCK_SCENARIOS at random."""

    name = "mock"

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def classify(self, image: bytes) -> List[Prediction]:
        scenario = self.rng.choice(MOCK_SCENARIOS)
        return [Prediction(label=label, confidence=conf) for label, conf in scenario]


class HeuristicClassifier(Classifier):
    """
    Very lightweight demo classifier: guesses from the average color and
    brightness of the image. Avoids heavy ML dependencies while keeping the
    upload -> predictions -> category flow realistic.
    """

    name = "heuristic"

    def classify(self, image: bytes) -> List[Prediction]:
        try:
            img = Image.open(io.BytesIO(image))
            img_resized = img.convert("RGB").resize((64, 64))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
            raise ValidationError("Invalid image file")

        arr = np.array(img_resized) / 255.0
        r, g, b = arr.mean(axis=(0, 1))  # mean [r, g, b]
        brightness = arr.mean()
        spread = float(max(r, g, b) - min(r, g, b))

        candidates = []

        # Heuristic rules
        if r > g + 0.1 and r > b + 0.1:
            candidates.append(("soda can", 0.55))
            candidates.append(("apple", 0.45))
        if g > r + 0.1 and g > b + 0.05:
            candidates.append(("glass bottle", 0.5))
            candidates.append(("vegetable", 0.4))
        if b > r + 0.05 and b > g + 0.05:
            candidates.append(("water bottle", 0.6))
            candidates.append(("plastic bag", 0.3))
        if spread < 0.08:
            if brightness > 0.7:
                candidates.append(("newspaper", 0.5))
                candidates.append(("cardboard box", 0.3))
            elif brightness < 0.3:
                candidates.append(("phone", 0.45))
                candidates.append(("electronic device", 0.35))
            else:
                candidates.append(("aluminum foil", 0.4))
                candidates.append(("tin", 0.3))

        # Fallback guess so a readable image always gets a prediction
        if not candidates:
            candidates.append(("container", 0.25))

        # Deduplicate by highest confidence
        best = {}
        for label, conf in candidates:
            if label not in best or conf > best[label]:
                best[label] = conf

        return [Prediction(label=label, confidence=conf) for label, conf in best.items()]


class DetectionResult(NamedTuple):
    predictions: List[Prediction]
    top: Prediction
    category: WasteCategory


def detect_waste(classifier: Classifier, image: bytes) -> DetectionResult:
    """Run the classifier and map its best label to a category."""
    try:
        predictions = classifier.classify(image)
    except (ClassifierError, ValidationError):
        raise
    except Exception as e:
        logger.warning("Classifier %s failed: %s", classifier.name, e)
        raise ClassifierError("Image detection failed, please try again")

    if not predictions:
        raise ClassifierError("No predictions returned")

    ranked = sorted(predictions, key=lambda p: p.confidence, reverse=True)
    top = ranked[0]
    return DetectionResult(predictions=ranked, top=top, category=map_label_to_category(top.label))


def get_classifier(name: str, seed: Optional[int] = None) -> Classifier:
    name = (name or "").strip().lower()
    if name == MockClassifier.name:
        return MockClassifier(seed=seed)
    if name == HeuristicClassifier.name:
        return HeuristicClassifier()
    raise ValueError(f"Unknown classifier: {name!r}")
