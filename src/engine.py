"""
SIGIL engine: generates text from templates and loaded list data.

Example:
    data = load_sigil_data([Path("fantasy.yaml")])
    engine = SigilEngine.from_data(data, EngineConfig(seed="demo"))
    engine.generate("{a} [weapon.melee] of [materials.capitalize]")
"""

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from config import EngineConfig
from evaluator import EvaluationSession, Evaluator, resolve_indefinite_articles
from modifiers import Modifier
from table_store import resolve_path
from template_parser import (
    RepetitionRange,
    TableRef,
    find_syntax_errors,
    is_quoted_literal,
    parse_table_reference,
    parse_template,
    scan_table_references,
)
from weighted import choose_weighted, parse_weighted_list, strip_weight
from yaml_loader import LoadedData, load_sigil_data


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenDescriptor:
    """A table reference found in a template, with its source span."""
    path: str
    modifiers: tuple[Modifier, ...]
    is_optional: bool
    exclusions: tuple[str, ...]
    repetition: int | RepetitionRange
    raw: str
    start: int
    end: int


@dataclass
class ValidationResult:
    """Outcome of validate_template()."""
    valid: bool
    errors: list[str] = field(default_factory=list)


class SigilEngine:
    """Facade over the parser and evaluator for one set of list data."""

    def __init__(
        self,
        lists: dict[str, Any],
        templates: dict[str, list[str]] | None = None,
        config: EngineConfig | None = None,
    ):
        """
        Args:
            lists: Nested table store; treated as read-only
            templates: Named templates (name -> candidate template strings)
            config: Depth bound, debug logging and seed
        """
        self.lists = lists
        self.templates = templates or {}
        self.config = config or EngineConfig()
        self.rng = random.Random(self.config.seed)
        self.evaluator = Evaluator(self.lists, debug=self.config.debug)

    @classmethod
    def from_data(cls, data: LoadedData, config: EngineConfig | None = None) -> "SigilEngine":
        return cls(data.lists, templates=data.templates, config=config)

    @classmethod
    def from_files(cls, paths: list[Path], config: EngineConfig | None = None) -> "SigilEngine":
        """Load and merge YAML files, then build an engine over them."""
        return cls.from_data(load_sigil_data(paths), config=config)

    def new_session(self) -> EvaluationSession:
        return EvaluationSession(rng=self.rng, max_depth=self.config.max_depth)

    def generate(self, template: str) -> str:
        """
        Expand a template into text.

        Never raises for malformed templates or missing data: missing tables
        contribute nothing, malformed syntax is kept as literal text, and
        quoted templates ('...' or "...") are returned without their quotes
        and without any sigil processing.

        Args:
            template: Template source

        Returns:
            Generated text
        """
        if is_quoted_literal(template):
            return template[1:-1]
        if not template.strip():
            return template

        session = self.new_session()
        try:
            text = self.evaluator.evaluate(parse_template(template), session)
        except RecursionError:
            if self.config.debug:
                logger.warning("Template too deeply nested to evaluate, returning it unchanged")
            return template
        return resolve_indefinite_articles(text)

    def generate_many(self, template: str, count: int) -> list[str]:
        return [self.generate(template) for _ in range(count)]

    def template_names(self) -> list[str]:
        return sorted(self.templates)

    def generate_template(self, name: str) -> str:
        """
        Generate from a named template, picking one of its entries by weight.

        Raises:
            KeyError: If no template has that name
        """
        entries = self.templates[name]
        chosen = choose_weighted(parse_weighted_list(entries), self.rng)
        return self.generate(chosen)

    def validate_template(self, template: str) -> ValidationResult:
        """Check template structure without evaluating anything."""
        if is_quoted_literal(template):
            return ValidationResult(valid=True)
        errors = find_syntax_errors(template)
        return ValidationResult(valid=not errors, errors=errors)

    def parse_tokens(self, template: str) -> list[TokenDescriptor]:
        """
        List the table references in a template, for editors and inspectors.

        Nothing is generated. Quoted templates contain no tokens.
        """
        if is_quoted_literal(template):
            return []
        return [
            TokenDescriptor(
                path=node.path,
                modifiers=node.modifiers,
                is_optional=node.is_optional,
                exclusions=node.exclusions,
                repetition=node.repetition,
                raw=template[start:end],
                start=start,
                end=end,
            )
            for start, end, node in scan_table_references(template)
        ]

    def _reference(self, target: "str | TokenDescriptor") -> TableRef | None:
        if isinstance(target, TokenDescriptor):
            return TableRef(path=target.path, modifiers=target.modifiers, exclusions=target.exclusions)

        text = target.strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        node = parse_table_reference(text)
        return node if isinstance(node, TableRef) else None

    def resolve_raw(self, target: "str | TokenDescriptor") -> Any:
        """
        Return the stored value for a path, bracketed reference or descriptor.

        Returns:
            The raw list, mapping or scalar at the path, or None if missing
        """
        node = self._reference(target)
        if node is None:
            return None
        return resolve_path(self.lists, node.path)

    def resolve_selected(self, target: "str | TokenDescriptor") -> str | None:
        """
        Pick one entry from a table without evaluating it.

        Exclusions on the reference are honoured and the weight suffix is
        stripped; the entry is not re-parsed and modifiers are not applied.
        A scalar string stored at the path is returned as is.

        Returns:
            The selected entry, or None if nothing can be selected
        """
        node = self._reference(target)
        if node is None:
            return None

        entries = self.evaluator.candidates(node)
        if entries is None:
            value = resolve_path(self.lists, node.path)
            return strip_weight(value) if isinstance(value, str) else None
        if not entries:
            return None
        return choose_weighted(parse_weighted_list(entries), self.rng)

    def render_raw_if_single_token(self, template: str) -> str:
        """
        Sample the table directly when the template is exactly one reference.

        Any other template (or a single reference that selects nothing) is
        generated normally.
        """
        stripped = template.strip()
        references = scan_table_references(stripped)
        if len(references) == 1:
            start, end, node = references[0]
            if start == 0 and end == len(stripped):
                selected = self.resolve_selected(stripped)
                if selected is not None:
                    return selected
        return self.generate(template)
