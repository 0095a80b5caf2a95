"""Lexicon-weighted Sentiment Scoring.

Each whitespace token is checked against three tiers of positive and
negative words. A token that contains any word of a tier adds that tier's
weight once. The score is the clamped sum over all tokens.

There is no negation handling or smoothing: "not good" scores as positive.
This is a known limitation of the heuristic.
"""

from typing import Dict, List, Tuple


ENHANCED_LEXICON: Dict[str, Dict[str, List[str]]] = {
    'positive': {
        'strong': ['excellent', 'outstanding', 'breakthrough', 'revolutionary', 'amazing', 'fantastic'],
        'medium': ['good', 'great', 'positive', 'success', 'improvement', 'growth', 'beneficial'],
        'weak': ['nice', 'okay', 'fine', 'decent', 'acceptable'],
    },
    'negative': {
        'strong': ['terrible', 'awful', 'catastrophic', 'devastating', 'critical', 'severe'],
        'medium': ['bad', 'negative', 'failure', 'crisis', 'problem', 'issue', 'concern'],
        'weak': ['minor', 'slight', 'small', 'limited'],
    },
}

BASELINE_LEXICON: Dict[str, Dict[str, List[str]]] = {
    'positive': {
        'weak': ['good', 'great', 'excellent', 'positive', 'success', 'breakthrough', 'improvement', 'growth'],
    },
    'negative': {
        'weak': ['bad', 'terrible', 'negative', 'failure', 'crisis', 'vulnerability', 'breach', 'attack', 'decline'],
    },
}

TIER_WEIGHTS = {'strong': 0.3, 'medium': 0.2, 'weak': 0.1}


class SentimentScorer:
    """Score text sentiment in the range [-1, 1]."""

    def __init__(self, lexicon: Dict[str, Dict[str, List[str]]] = None, weights: Dict[str, float] = None):
        """Initialize the scorer.

        Args:
            lexicon: {'positive'|'negative': {tier: [words]}}
            weights: Weight per tier
        """
        self.lexicon = lexicon or ENHANCED_LEXICON
        self.weights = weights or TIER_WEIGHTS
        self._tiers = self._build_tiers()

    @classmethod
    def baseline(cls) -> 'SentimentScorer':
        """Scorer with the flat baseline lexicon (+/-0.1 per word)."""
        return cls(lexicon=BASELINE_LEXICON)

    def _build_tiers(self) -> List[Tuple[List[str], float]]:
        tiers = []
        for polarity, sign in (('positive', 1.0), ('negative', -1.0)):
            for tier, words in self.lexicon.get(polarity, {}).items():
                tiers.append((words, sign * self.weights[tier]))
        return tiers

    def score_token(self, token: str) -> float:
        score = 0.0
        for words, weight in self._tiers:
            if any(word in token for word in words):
                score += weight
        return score

    def analyze_sentiment(self, text: str) -> float:
        """Analyze text sentiment.

        Args:
            text: Input text

        Returns:
            Sentiment score clamped to [-1, 1]; 0.0 for empty text
        """
        if not isinstance(text, str):
            return 0.0

        score = sum(self.score_token(token) for token in text.lower().split())

        return max(-1.0, min(1.0, score))
