"""Language Detection by common-word frequency.

Guesses the language of a text from how many of its tokens are stop words
of each supported language.
"""

from typing import Dict, List, Set

from .models import LanguageDetection


class LanguageDetector:
    """Detect the language of a text blob."""

    LANGUAGE_PATTERNS: Dict[str, Set[str]] = {
        'en': {'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by'},
        'es': {'el', 'la', 'y', 'o', 'pero', 'en', 'con', 'por', 'para', 'de', 'que', 'es'},
        'fr': {'le', 'la', 'et', 'ou', 'mais', 'dans', 'sur', 'à', 'pour', 'de', 'avec', 'par'},
        'de': {'der', 'die', 'das', 'und', 'oder', 'aber', 'in', 'auf', 'zu', 'für', 'von', 'mit'},
        'it': {'il', 'la', 'e', 'o', 'ma', 'in', 'su', 'a', 'per', 'di', 'con', 'da'},
        'pt': {'o', 'a', 'e', 'ou', 'mas', 'em', 'sobre', 'para', 'de', 'com', 'por'},
        'ru': {'и', 'или', 'но', 'в', 'на', 'к', 'для', 'от', 'с', 'по'},
        'zh': {'的', '和', '或', '但', '在', '上', '到', '为', '从', '与', '由'},
        'ja': {'の', 'と', 'か', 'が', 'に', 'で', 'を', 'は', 'も', 'から'},
        'ar': {'في', 'على', 'إلى', 'من', 'مع', 'عن', 'كان', 'هذا', 'التي', 'أن'},
    }

    def __init__(
        self,
        fallback_language: str = 'en',
        min_confidence: float = 0.1,
        num_alternatives: int = 3
    ):
        """Initialize the detector.

        Args:
            fallback_language: Language returned when nothing scores above
                min_confidence
            min_confidence: Confidence the top language must exceed
            num_alternatives: Number of runner-up languages to report
        """
        self.fallback_language = fallback_language
        self.min_confidence = min_confidence
        self.num_alternatives = num_alternatives

    def tokenize(self, text: str) -> List[str]:
        if not isinstance(text, str):
            return []
        return text.lower().split()

    def score_languages(self, text: str) -> List[Dict[str, float]]:
        """Rank every known language by stop-word confidence.

        Args:
            text: Input text

        Returns:
            List of {'language', 'confidence'} dicts, best first. Languages
            with equal confidence keep their declaration order.
        """
        words = self.tokenize(text)
        total = len(words)

        scores = []
        for language, patterns in self.LANGUAGE_PATTERNS.items():
            matches = sum(1 for word in words if word in patterns)
            scores.append({
                'language': language,
                'confidence': matches / total if total > 0 else 0.0
            })

        scores.sort(key=lambda s: s['confidence'], reverse=True)
        return scores

    def detect_language(self, text: str) -> LanguageDetection:
        """Detect the language of a text.

        Args:
            text: Input text

        Returns:
            LanguageDetection with the top language (or the fallback when its
            confidence is too low) and the runners-up
        """
        ranked = self.score_languages(text)
        top = ranked[0]

        language = top['language'] if top['confidence'] > self.min_confidence else self.fallback_language

        return LanguageDetection(
            language=language,
            confidence=top['confidence'],
            alternatives=ranked[1:1 + self.num_alternatives]
        )
