"""Duplicate Detection using Jaccard Similarity.

Identifies similar or duplicate content and builds cheap content
fingerprints for pre-filtering.
"""

from typing import List, Set, Tuple
import numpy as np

from .models import DuplicateResult


class DuplicateDetector:
    """Detect duplicate or similar documents."""

    def __init__(
        self,
        similarity_threshold: float = 0.7,
        fingerprint_words: int = 10,
        fingerprint_separator: str = '-'
    ):
        """Initialize duplicate detector.

        Args:
            similarity_threshold: Similarity a text must exceed to count as
                a duplicate (0-1)
            fingerprint_words: Number of significant words kept in a
                fingerprint
            fingerprint_separator: String used to join fingerprint words
        """
        self.similarity_threshold = similarity_threshold
        self.fingerprint_words = fingerprint_words
        self.fingerprint_separator = fingerprint_separator

    def tokenize(self, text: str) -> List[str]:
        """Lower-case and whitespace-split text."""
        if not isinstance(text, str):
            return []
        return text.lower().split()

    def word_set(self, text: str) -> Set[str]:
        return set(self.tokenize(text))

    def calculate_similarity(self, text1: str, text2: str) -> float:
        """Calculate Jaccard similarity between two texts.

        Args:
            text1: First text
            text2: Second text

        Returns:
            Intersection size over union size of the word sets (0-1);
            0.0 when both texts are empty
        """
        words1 = self.word_set(text1)
        words2 = self.word_set(text2)

        union = words1 | words2
        if not union:
            return 0.0

        return len(words1 & words2) / len(union)

    def check_for_duplicates(self, new_content: str, existing_content: List[str]) -> DuplicateResult:
        """Check new content against previously seen content.

        Args:
            new_content: Text to check
            existing_content: Texts seen so far

        Returns:
            DuplicateResult with the best similarity; the matched text is
            only reported when it exceeds the threshold
        """
        max_similarity = 0.0
        matched_content = None

        for existing in existing_content:
            similarity = self.calculate_similarity(new_content, existing)
            if similarity > max_similarity:
                max_similarity = similarity
                matched_content = existing

        is_duplicate = max_similarity > self.similarity_threshold

        return DuplicateResult(
            is_duplicate=is_duplicate,
            similarity=max_similarity,
            matched_content=matched_content if is_duplicate else None
        )

    def generate_fingerprint(self, content: str) -> str:
        """Generate an order-insensitive fingerprint of significant words.

        Args:
            content: Input text

        Returns:
            The first significant words (longer than 3 characters), sorted
            and joined with the separator
        """
        significant = [w for w in self.tokenize(content) if len(w) > 3]
        return self.fingerprint_separator.join(sorted(significant[:self.fingerprint_words]))

    def build_similarity_matrix(self, texts: List[str]) -> np.ndarray:
        """Build full similarity matrix for texts.

        Args:
            texts: List of texts

        Returns:
            NxN symmetric similarity matrix
        """
        n = len(texts)
        matrix = np.zeros((n, n))

        for i in range(n):
            for j in range(i + 1, n):
                similarity = self.calculate_similarity(texts[i], texts[j])
                matrix[i][j] = similarity
                matrix[j][i] = similarity

        # Self-similarity, except for empty texts which stay at 0
        for i, text in enumerate(texts):
            if self.word_set(text):
                matrix[i][i] = 1.0

        return matrix

    def find_duplicates(
        self,
        documents: List[Tuple[int, str]],
        threshold: float = None
    ) -> List[Tuple[int, int, float]]:
        """Find duplicate document pairs.

        Args:
            documents: List of (id, text) tuples
            threshold: Similarity threshold (uses default if not provided)

        Returns:
            List of (id1, id2, similarity) tuples above the threshold,
            most similar first
        """
        if threshold is None:
            threshold = self.similarity_threshold

        doc_ids = [doc_id for doc_id, _ in documents]
        matrix = self.build_similarity_matrix([text for _, text in documents])

        rows, cols = np.triu_indices(len(documents), k=1)
        duplicates = [
            (doc_ids[i], doc_ids[j], float(matrix[i][j]))
            for i, j in zip(rows, cols)
            if matrix[i][j] > threshold
        ]

        duplicates.sort(key=lambda x: x[2], reverse=True)

        return duplicates
