"""Bottom-up evaluation of parsed SIGIL templates."""

import logging
import random
import re
from dataclasses import dataclass, field, replace
from typing import Any

from markov_generator import generate_markov
from modifiers import Modifier, apply_modifiers
from table_store import resolve_list
from template_parser import (
    And,
    Group,
    IndefiniteArticle,
    Mixed,
    Node,
    NumberRange,
    Or,
    RepetitionRange,
    TableRef,
    Text,
    is_quoted_literal,
    parse_template,
)
from weighted import choose_weighted, parse_weighted_list


logger = logging.getLogger(__name__)

ARTICLE_PLACEHOLDER = "{a}"
REPETITION_SEPARATOR = ", "

_ARTICLE_PATTERN = re.compile(r'\{a\}(\s+)(\w)')


@dataclass
class EvaluationSession:
    """
    Per-generate state: the random source and the re-parse depth.

    depth counts nested "selected value is itself a template" steps that are
    in flight; it is bounded by max_depth. Never share a session between
    concurrent generate calls.
    """
    rng: random.Random = field(default_factory=random.Random)
    max_depth: int = 10
    depth: int = 0


class Evaluator:
    """Resolves AST nodes against a table store."""

    def __init__(self, store: Any, debug: bool = False):
        """
        Args:
            store: Nested mapping of tables; never mutated
            debug: Log resolution steps and warnings
        """
        self.store = store
        self.debug = debug

    def _log(self, level: int, message: str, *args) -> None:
        if self.debug:
            logger.log(level, message, *args)

    def evaluate(self, node: Node, session: EvaluationSession) -> str:
        """
        Resolve a node to text.

        Raises:
            TypeError: If node is not a parser node (a programming error)
        """
        if isinstance(node, Text):
            return node.value
        if isinstance(node, TableRef):
            return self._evaluate_table(node, session)
        if isinstance(node, And):
            return "".join(self.evaluate(self._force_required(child), session) for child in node.children)
        if isinstance(node, Or):
            if not node.children:
                return ""
            return self.evaluate(session.rng.choice(node.children), session)
        if isinstance(node, Group):
            return self.evaluate(node.child, session)
        if isinstance(node, NumberRange):
            low, high = sorted((node.min, node.max))
            return str(session.rng.randint(low, high))
        if isinstance(node, IndefiniteArticle):
            return ARTICLE_PLACEHOLDER
        if isinstance(node, Mixed):
            return "".join(self.evaluate(child, session) for child in node.children)
        raise TypeError(f"Unknown template node: {node!r}")

    @staticmethod
    def _force_required(node: Node) -> Node:
        # AND means "all of these, always": direct table operands lose their ?
        if isinstance(node, TableRef) and node.is_optional:
            return replace(node, is_optional=False)
        return node

    def resolve_value(self, raw: str, session: EvaluationSession) -> str:
        """
        Treat a selected table value as a template and resolve it.

        A value wrapped in matching quotes is returned without the quotes
        and is not parsed. At the depth bound the value is returned
        unresolved, which is what stops mutually referencing tables.
        """
        if is_quoted_literal(raw):
            return raw[1:-1]

        if session.depth >= session.max_depth:
            self._log(logging.WARNING, "Max depth %d reached, leaving %r unresolved", session.max_depth, raw)
            return raw

        session.depth += 1
        try:
            return self.evaluate(parse_template(raw), session)
        finally:
            session.depth -= 1

    def candidates(self, node: TableRef) -> list[str] | None:
        """
        Look up a reference's table and drop excluded entries.

        Exclusions match case-insensitively against entry text without its
        weight suffix.

        Returns:
            Remaining raw entries, or None if the path is not a list
        """
        table = resolve_list(self.store, node.path)
        if table is None:
            self._log(logging.WARNING, "Table not found or not a list: %s", node.path)
            return None

        entries = [str(item) for item in table if item is not None]
        if node.exclusions:
            excluded = [term.lower() for term in node.exclusions]
            kept = []
            for entry, parsed in zip(entries, parse_weighted_list(entries)):
                text = parsed.value.lower()
                if not any(term in text for term in excluded):
                    kept.append(entry)
            entries = kept
        return entries

    def _repetition_count(self, node: TableRef, session: EvaluationSession) -> int:
        if isinstance(node.repetition, RepetitionRange):
            low, high = sorted((node.repetition.min, node.repetition.max))
            return session.rng.randint(low, high)
        return node.repetition

    def _evaluate_table(self, node: TableRef, session: EvaluationSession) -> str:
        if node.is_optional and session.rng.random() < 0.5:
            return ""

        count = self._repetition_count(node, session)
        use_markov = Modifier.MARKOV in node.modifiers
        modifiers = tuple(m for m in node.modifiers if m is not Modifier.MARKOV)

        results = []
        for _ in range(count):
            entries = self.candidates(node)
            if entries is None:
                continue
            if not entries:
                self._log(logging.WARNING, "No entries left in %s after exclusions %s", node.path, node.exclusions)
                continue

            if use_markov:
                value = generate_markov(entries, rng=session.rng)
            else:
                selected = choose_weighted(parse_weighted_list(entries), session.rng)
                self._log(logging.DEBUG, "[%s] selected %r at depth %d", node.path, selected, session.depth)
                value = self.resolve_value(selected, session)

            value = apply_modifiers(value, modifiers)
            if value:
                results.append(value)

        return REPETITION_SEPARATOR.join(results)


def _article_for(match: re.Match) -> str:
    word_start = match.group(2)
    article = "an" if word_start.lower() in "aeiou" else "a"
    return f"{article}{match.group(1)}{word_start}"


def resolve_indefinite_articles(text: str) -> str:
    """
    Replace each "{a} word" placeholder with "a word" or "an word".

    The article is chosen after everything else has resolved, since the
    following word is often the output of a table reference. A placeholder
    with no following word becomes a plain "a".
    """
    text = _ARTICLE_PATTERN.sub(_article_for, text)
    return text.replace(ARTICLE_PLACEHOLDER, "a")
