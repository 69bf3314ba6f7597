"""Character n-gram Markov chains for inventing words from a table's entries."""

import random
import re
from dataclasses import dataclass


START_MARK = "^"
END_MARK = "$"
WEIGHT_SUFFIX = re.compile(r'\s*\^[\d.]+\s*$')


@dataclass(frozen=True)
class MarkovOptions:
    """Generation settings for generate_markov()."""
    order: int = 2
    min_length: int = 3
    max_length: int = 12
    attempts: int = 100


class SigilMarkov:
    """Character-level Markov chain trained on a list of words."""

    def __init__(self, order: int = 2, rng: random.Random | None = None):
        self.order = max(1, order)
        self.rng = rng or random.Random()
        self.chain: dict[str, list[str]] = {}
        self.start_tokens: list[str] = []

    def train(self, words: list[str]) -> None:
        """Replace the chain with one trained on words (shorter than order are skipped)."""
        self.chain = {}
        self.start_tokens = []
        for word in words:
            if not word or len(word) < self.order:
                continue
            self._train_word(word)

    def _train_word(self, word: str) -> None:
        padded = START_MARK * self.order + word.lower() + END_MARK

        start = padded[:self.order]
        if start not in self.start_tokens:
            self.start_tokens.append(start)

        for i in range(len(padded) - self.order):
            ngram = padded[i:i + self.order]
            self.chain.setdefault(ngram, []).append(padded[i + self.order])

    def generate(self, options: MarkovOptions | None = None) -> str:
        """
        Generate a new capitalized word.

        Args:
            options: Length limits and attempt budget

        Returns:
            A word within the length limits, or "" if the chain is untrained
            or no attempt produced one
        """
        options = options or MarkovOptions()
        if not self.start_tokens:
            return ""

        for _ in range(options.attempts):
            word = self._attempt(options.min_length, options.max_length)
            if word and options.min_length <= len(word) <= options.max_length:
                return word
        return ""

    def _attempt(self, min_length: int, max_length: int) -> str:
        current = self.rng.choice(self.start_tokens)
        result = ""

        for _ in range(max_length + self.order):
            next_chars = self.chain.get(current)
            if not next_chars:
                break

            next_char = self.rng.choice(next_chars)
            if next_char == END_MARK:
                if len(result) >= min_length:
                    return result[:1].upper() + result[1:]
                break

            if next_char != START_MARK:
                result += next_char
            current = current[1:] + next_char

        return ""

    def get_stats(self) -> dict[str, int]:
        """Chain size figures, for debugging."""
        return {
            "ngram_count": len(self.chain),
            "start_tokens": len(self.start_tokens),
            "total_transitions": sum(len(chars) for chars in self.chain.values()),
        }


def generate_markov(
    words: list[str],
    options: MarkovOptions | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Train a chain on words and generate one new word.

    Weight suffixes ("name ^3") are stripped before training.

    Args:
        words: Candidate list (typically a table after exclusions)
        options: Generation settings
        rng: Random source

    Returns:
        The generated word; a random cleaned input word if generation fails;
        "[empty-list]" for no input and "[no-valid-words]" if nothing usable
        remains after cleaning
    """
    if not words:
        return "[empty-list]"

    clean_words = [WEIGHT_SUFFIX.sub("", str(word).strip()) for word in words if word is not None]
    clean_words = [word for word in clean_words if word]
    if not clean_words:
        return "[no-valid-words]"

    options = options or MarkovOptions()
    rng = rng or random.Random()
    markov = SigilMarkov(order=options.order, rng=rng)
    markov.train(clean_words)

    return markov.generate(options) or rng.choice(clean_words)
