from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import FrozenSet, Optional, Protocol, Tuple

TOPIC_OTHER = "Other"

POSITIVE = "Positive"
NEUTRAL = "Neutral"
NEGATIVE = "Negative"
SENTIMENTS = (POSITIVE, NEUTRAL, NEGATIVE)

# Evaluated in order; the first topic with any substring hit wins.
TOPIC_RULES: Tuple[Tuple[str, FrozenSet[str]], ...] = (
    ("Academic", frozenset({"class", "professor", "study", "grade"})),
    ("Campus Safety", frozenset({"safety", "security", "emergency"})),
    ("Dining", frozenset({"food", "dining", "cafeteria", "meal"})),
    ("Housing", frozenset({"dorm", "housing", "room", "residence"})),
    ("IT/Technology", frozenset({"wifi", "internet", "computer", "technology"})),
    ("Mental Health", frozenset({"stress", "anxiety", "mental", "counseling"})),
    ("Transportation", frozenset({"parking", "bus", "transport", "traffic"})),
)

TOPICS = tuple(topic for topic, _ in TOPIC_RULES) + (TOPIC_OTHER,)

POSITIVE_WORDS: FrozenSet[str] = frozenset({
    "good", "great", "excellent", "amazing", "helpful",
    "love", "like", "happy", "satisfied", "thank",
})
NEGATIVE_WORDS: FrozenSet[str] = frozenset({
    "bad", "terrible", "awful", "hate", "dislike", "frustrated",
    "angry", "disappointed", "problem", "issue", "broken", "slow",
})


@dataclass(frozen=True)
class Analysis:
    topic: str
    sentiment: str

    def to_dict(self) -> dict:
        return asdict(self)


class Classifier(Protocol):
    def classify(self, text: str, category: Optional[str] = None) -> Analysis: ...


class KeywordClassifier:
    """
    Substring keyword matcher. Deterministic for a given rule set; swap in
    anything with a classify(text, category) method to replace it.
    """

    def __init__(
        self,
        topic_rules: Tuple[Tuple[str, FrozenSet[str]], ...] = TOPIC_RULES,
        positive_words: FrozenSet[str] = POSITIVE_WORDS,
        negative_words: FrozenSet[str] = NEGATIVE_WORDS,
        default_topic: str = TOPIC_OTHER,
    ):
        self.topic_rules = topic_rules
        self.positive_words = positive_words
        self.negative_words = negative_words
        self.default_topic = default_topic

    def detect_topic(self, lowered: str) -> str:
        for topic, keywords in self.topic_rules:
            if any(k in lowered for k in keywords):
                return topic
        return self.default_topic

    def detect_sentiment(self, lowered: str) -> str:
        positive = negative = 0
        for word in lowered.split():
            # A word may score on both sides ("unlikely" vs "dislike")
            if any(p in word for p in self.positive_words):
                positive += 1
            if any(n in word for n in self.negative_words):
                negative += 1
        if positive > negative:
            return POSITIVE
        if negative > positive:
            return NEGATIVE
        return NEUTRAL

    def classify(self, text: str, category: Optional[str] = None) -> Analysis:
        lowered = (text or "").lower()
        # An explicit category is trusted verbatim, known or not
        topic = category if category else self.detect_topic(lowered)
        return Analysis(topic=topic, sentiment=self.detect_sentiment(lowered))


default_classifier = KeywordClassifier()


def analyze_text(text: str, category: Optional[str] = None) -> Analysis:
    return default_classifier.classify(text, category)
