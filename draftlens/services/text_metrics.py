"""
Text Metrics

Tokenizes text into sentence, word and syllable counts.

Pure and stateless: the same text always yields the same metrics.
Letter classification is ASCII only (a-z after lowercasing), so accented
letters do not contribute syllables.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple


SENTENCE_SPLIT = re.compile(r'[.!?]+')
SENTENCE_WITH_TERMINATOR = re.compile(r'([^.!?]*)([.!?]*)')
NON_LETTERS = re.compile(r'[^a-z]')
WHITESPACE = re.compile(r'\s')

VOWELS = frozenset("aeiouy")


@dataclass(frozen=True)
class TextMetrics:
    """Counts derived from a single text snapshot."""
    sentence_count: int
    word_count: int
    syllable_count: int
    char_count: int
    whitespace_count: int

    @property
    def non_whitespace_count(self) -> int:
        return self.char_count - self.whitespace_count


def split_sentences(text: str) -> List[str]:
    """Split on runs of . ! ? and drop blank segments (trimmed)."""
    return [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]


def split_sentences_with_terminators(text: str) -> List[Tuple[str, str]]:
    """
    Like split_sentences, but keep the punctuation run that closed each one.

    The terminator is "" for a trailing sentence with no closing punctuation.
    Segments are the same ones split_sentences returns, in the same order.
    """
    pairs = []
    for match in SENTENCE_WITH_TERMINATOR.finditer(text):
        body, terminator = match.group(1), match.group(2)
        if body.strip():
            pairs.append((body.strip(), terminator))
    return pairs


def split_words(text: str) -> List[str]:
    return text.split()


def count_word_syllables(word: str) -> int:
    """
    Count syllables as vowel groups.

    Non-letters are stripped first; a trailing 'e' is treated as silent when
    the word has more than one group. Every word with at least one letter
    counts as one syllable minimum.
    """
    clean = NON_LETTERS.sub('', word.lower())
    if not clean:
        return 0

    count = 0
    previous_was_vowel = False
    for char in clean:
        is_vowel = char in VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    if clean.endswith('e') and count > 1:
        count -= 1

    return max(1, count)


def count_syllables(text: str) -> int:
    return sum(count_word_syllables(word) for word in split_words(text))


def compute_metrics(text: str) -> TextMetrics:
    """Compute all counts for a text snapshot."""
    return TextMetrics(
        sentence_count=len(split_sentences(text)),
        word_count=len(split_words(text)),
        syllable_count=count_syllables(text),
        char_count=len(text),
        whitespace_count=len(WHITESPACE.findall(text)),
    )
