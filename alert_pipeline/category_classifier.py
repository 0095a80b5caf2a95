"""Weighted-keyword Category Classification.

Scores every category by the summed weight of its keywords found in the
text, normalized by the size of the category's keyword list.
"""

from dataclasses import dataclass
from typing import Dict, List

from .models import CategoryMatch


@dataclass
class Category:
    """Alert category."""
    id: int
    name: str
    description: str
    color: str


DEFAULT_CATEGORIES = [
    Category(1, 'Technology', 'Tech news and updates', '#3B82F6'),
    Category(2, 'Security', 'Security alerts and vulnerabilities', '#EF4444'),
    Category(3, 'Business', 'Business and market news', '#10B981'),
    Category(4, 'Health', 'Health and medical updates', '#F59E0B'),
    Category(5, 'Environment', 'Environmental news and alerts', '#22C55E'),
]

ENHANCED_KEYWORDS: Dict[int, Dict[str, List]] = {
    1: {
        'keywords': ['ai', 'artificial intelligence', 'machine learning', 'blockchain', 'cryptocurrency',
                     'software', 'algorithm', 'data science', 'cloud computing', 'automation'],
        'weights': [3, 3, 3, 2, 2, 1, 2, 2, 2, 2],
    },
    2: {
        'keywords': ['vulnerability', 'breach', 'malware', 'phishing', 'cybersecurity',
                     'hack', 'ransomware', 'data leak', 'security flaw', 'cyber attack'],
        'weights': [5, 5, 4, 3, 3, 4, 4, 4, 4, 4],
    },
    3: {
        'keywords': ['market', 'business', 'economy', 'finance', 'stock',
                     'ipo', 'merger', 'acquisition', 'revenue', 'profit'],
        'weights': [2, 2, 2, 2, 2, 2, 2, 2, 2, 2],
    },
    4: {
        'keywords': ['health', 'medical', 'vaccine', 'pandemic', 'disease',
                     'treatment', 'clinical trial', 'drug', 'hospital', 'patient'],
        'weights': [2, 3, 3, 5, 4, 2, 3, 2, 2, 2],
    },
    5: {
        'keywords': ['climate change', 'environment', 'pollution', 'renewable energy', 'sustainability',
                     'carbon', 'emissions', 'global warming', 'conservation', 'ecosystem'],
        'weights': [3, 2, 2, 2, 2, 2, 2, 3, 2, 2],
    },
}

BASELINE_KEYWORDS: Dict[int, Dict[str, List]] = {
    1: {
        'keywords': ['ai', 'artificial intelligence', 'machine learning', 'blockchain', 'tech', 'software', 'algorithm'],
        'weights': [3, 3, 3, 2, 1, 1, 2],
    },
    2: {
        'keywords': ['vulnerability', 'breach', 'malware', 'phishing', 'security', 'hack', 'cyber'],
        'weights': [5, 5, 4, 3, 2, 4, 3],
    },
    3: {
        'keywords': ['market', 'business', 'economy', 'finance', 'stock', 'ipo', 'merger'],
        'weights': [2, 2, 2, 2, 2, 2, 2],
    },
    4: {
        'keywords': ['health', 'medical', 'vaccine', 'pandemic', 'disease', 'treatment'],
        'weights': [2, 3, 3, 5, 4, 2],
    },
    5: {
        'keywords': ['climate', 'environment', 'pollution', 'renewable', 'sustainability'],
        'weights': [3, 2, 2, 2, 2],
    },
}


class CategoryClassifier:
    """Classify text into one of a fixed set of categories."""

    def __init__(self, category_keywords: Dict[int, Dict[str, List]] = None, num_alternatives: int = 2):
        """Initialize the classifier.

        Args:
            category_keywords: {category_id: {'keywords': [...], 'weights': [...]}}
                in declaration order
            num_alternatives: Number of runner-up categories reported
        """
        self.category_keywords = category_keywords or ENHANCED_KEYWORDS
        self.num_alternatives = num_alternatives

        for category_id, entry in self.category_keywords.items():
            if len(entry['keywords']) != len(entry['weights']):
                raise ValueError(f"Category {category_id} has mismatched keywords and weights")

    @classmethod
    def baseline(cls) -> 'CategoryClassifier':
        return cls(category_keywords=BASELINE_KEYWORDS)

    def score_categories(self, text: str) -> List[Dict]:
        """Score every category against the text.

        Confidence is the summed weight of matched keywords divided by the
        number of keywords the category declares, not the number matched.

        Args:
            text: Input text

        Returns:
            List of {'category_id', 'matched_keywords', 'confidence'} dicts,
            best first; ties keep declaration order
        """
        text_lower = text.lower() if isinstance(text, str) else ''
        scores = []

        for category_id, entry in self.category_keywords.items():
            matches = []
            total_weight = 0

            for keyword, weight in zip(entry['keywords'], entry['weights']):
                if keyword in text_lower:
                    matches.append(keyword)
                    total_weight += weight

            keywords = entry['keywords']
            scores.append({
                'category_id': category_id,
                'matched_keywords': matches,
                'confidence': total_weight / len(keywords) if keywords else 0.0
            })

        scores.sort(key=lambda s: s['confidence'], reverse=True)
        return scores

    def find_best_category(self, text: str) -> CategoryMatch:
        """Find the best matching category.

        Args:
            text: Input text

        Returns:
            CategoryMatch for the best category with the next ones as
            alternatives
        """
        scores = self.score_categories(text)
        best = scores[0]

        return CategoryMatch(
            category_id=best['category_id'],
            matched_keywords=best['matched_keywords'],
            confidence=best['confidence'],
            alternative_categories=[
                {'category_id': s['category_id'], 'confidence': s['confidence']}
                for s in scores[1:1 + self.num_alternatives]
            ]
        )
