"""Extractive Summarization using positional sentence scoring.

Provides key sentence extraction, key point extraction and reading time.
"""

import re
import math
from typing import List
import numpy as np

from .models import SummaryResult


class ContentSummarizer:
    """Extract key sentences and key points from text."""

    BULLET_PATTERN = re.compile(r'^[ \t]*[•\-*][ \t]*(\S[^\n]*)$', re.MULTILINE)
    NUMBERED_PATTERN = re.compile(r'^[ \t]*\d+[.)][ \t]*(\S[^\n]*)$', re.MULTILINE)

    def __init__(
        self,
        words_per_minute: int = 200,
        min_sentence_length: int = 10,
        max_key_points: int = 5
    ):
        """Initialize the summarizer.

        Args:
            words_per_minute: Reading speed used for reading time
            min_sentence_length: Sentences with this many characters or fewer
                are discarded
            max_key_points: Maximum number of key points returned
        """
        self.words_per_minute = words_per_minute
        self.min_sentence_length = min_sentence_length
        self.max_key_points = max_key_points

    def split_sentences(self, text: str) -> List[str]:
        """Split text into sentences.

        Args:
            text: Input text

        Returns:
            List of trimmed sentences longer than min_sentence_length
        """
        if not isinstance(text, str):
            return []

        # Split on sentence boundaries
        sentences = re.split(r'[.!?]+', text)

        return [s.strip() for s in sentences if len(s.strip()) > self.min_sentence_length]

    def score_sentences(self, sentences: List[str]) -> np.ndarray:
        """Score sentences by length, position, digits and capitals.

        Args:
            sentences: List of sentences in reading order

        Returns:
            Array of sentence scores
        """
        n = len(sentences)
        scores = np.zeros(n)

        for index, sentence in enumerate(sentences):
            words = sentence.split()

            # Longer sentences score higher, up to 20 words
            score = min(len(words) / 20, 1.0)

            # Earlier sentences get a linear boost
            score += ((n - index) / n) * 0.3

            if re.search(r'\d', sentence):
                score += 0.2
            if re.search(r'[A-Z]{2,}', sentence):
                score += 0.1

            scores[index] = score

        return scores

    def extract_key_sentences(self, text: str, max_sentences: int = 3) -> List[str]:
        """Extract the most important sentences.

        Selection is by score; the result keeps the original reading order.

        Args:
            text: Input text
            max_sentences: Number of sentences to extract

        Returns:
            List of key sentences
        """
        sentences = self.split_sentences(text)

        if len(sentences) <= max_sentences:
            return sentences

        scores = self.score_sentences(sentences)

        # Stable sort keeps earlier sentences first on equal scores
        ranked_indices = np.argsort(-scores, kind='stable')
        top_indices = sorted(ranked_indices[:max_sentences])

        return [sentences[i] for i in top_indices]

    def extract_key_points(self, text: str) -> List[str]:
        """Extract key points from bullet or numbered lists.

        Falls back to the top key sentences when the text has no list.

        Args:
            text: Input text

        Returns:
            Up to max_key_points key points
        """
        if not isinstance(text, str):
            return []

        key_points = [m.strip() for m in self.BULLET_PATTERN.findall(text)]
        key_points.extend(m.strip() for m in self.NUMBERED_PATTERN.findall(text))

        if not key_points:
            key_points = self.extract_key_sentences(text, self.max_key_points)

        return key_points[:self.max_key_points]

    @staticmethod
    def count_words(text: str) -> int:
        if not isinstance(text, str):
            return 0
        return len(text.split())

    def calculate_reading_time(self, text: str) -> int:
        """Reading time in whole minutes, never less than one."""
        return max(1, math.ceil(self.count_words(text) / self.words_per_minute))

    def generate_summary(self, text: str) -> SummaryResult:
        """Generate a full summary record.

        Args:
            text: Input text

        Returns:
            SummaryResult with summary text, key points, reading time and
            word count
        """
        key_sentences = self.extract_key_sentences(text, 3)
        summary = '. '.join(key_sentences) + '.' if key_sentences else ''

        return SummaryResult(
            summary=summary,
            key_points=self.extract_key_points(text),
            reading_time=self.calculate_reading_time(text),
            word_count=self.count_words(text)
        )
