"""
SIGIL template parser.

Turns a template string into a tree of immutable nodes that the evaluator
resolves bottom-up:

    "A {[weapons]&[materials]} {a} [creature?] appears"
    -> Mixed(Text("A "), And(TableRef(weapons), TableRef(materials)),
             Text(" "), IndefiniteArticle(), Text(" "),
             TableRef(creature, optional), Text(" appears"))

Two sigil regions exist:

    [...]  table reference: path, .modifiers, !exclusions, *repetition, ?optional
    {...}  inline expression: & (AND), | (OR), (group), N-M range, {a}

Parsing never raises for any input string. Unbalanced brackets and malformed
clauses degrade to literal text.
"""

import logging
import re
from bisect import bisect_left
from dataclasses import dataclass, field, replace

from modifiers import Modifier, parse_modifier


logger = logging.getLogger(__name__)

# Characters that end the path part of a table reference
CONTROL_CHARS = "!?*^"
OPENERS = "[{("
CLOSERS = "]})"

NUMBER_RANGE_PATTERN = re.compile(r'^(\d+)-(\d+)$')
REPETITION_PATTERN = re.compile(r'\{\s*(\d+)\s*(?:-\s*(\d+)\s*)?\}|(\d+)')
REFERENCE_WEIGHT_PATTERN = re.compile(r'[\d.]*')
QUOTE_CHARS = "\"'"


# ----------------------------------------------------------------------------
# AST nodes
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class Text:
    """Literal passthrough content."""
    value: str


@dataclass(frozen=True)
class RepetitionRange:
    """A *{min-max} repetition, drawn once per evaluation."""
    min: int
    max: int


@dataclass(frozen=True)
class TableRef:
    """A single [...] table reference with its trailing decorations."""
    path: str
    modifiers: tuple[Modifier, ...] = ()
    is_optional: bool = False
    exclusions: tuple[str, ...] = ()
    repetition: int | RepetitionRange = 1


@dataclass(frozen=True)
class And:
    """{A&B&...}: every child, concatenated."""
    children: tuple["Node", ...]


@dataclass(frozen=True)
class Or:
    """{A|B|...}: exactly one child, chosen uniformly."""
    children: tuple["Node", ...]


@dataclass(frozen=True)
class Group:
    """(...) inside an inline expression; only affects precedence."""
    child: "Node"


@dataclass(frozen=True)
class NumberRange:
    """{N-M}: a uniform integer in [min, max]."""
    min: int
    max: int


@dataclass(frozen=True)
class IndefiniteArticle:
    """{a}: resolved to a/an after the whole template is assembled."""


@dataclass(frozen=True)
class Mixed:
    """Text interleaved with sigil regions, concatenated in order."""
    children: tuple["Node", ...] = field(default_factory=tuple)


Node = Text | TableRef | And | Or | Group | NumberRange | IndefiniteArticle | Mixed


# ----------------------------------------------------------------------------
# Literals and numbers
# ----------------------------------------------------------------------------

def is_quoted_literal(text: str) -> bool:
    """True if text is wrapped in matching single or double quotes."""
    return len(text) >= 2 and text[0] in QUOTE_CHARS and text[0] == text[-1]


def _to_int(digits: str) -> int | None:
    # int() refuses digit runs longer than sys.get_int_max_str_digits()
    try:
        return int(digits)
    except ValueError:
        return None


# ----------------------------------------------------------------------------
# Bracket matching
# ----------------------------------------------------------------------------

def bracket_pairs(text: str, open_char: str, close_char: str) -> dict[int, int]:
    """
    Match every opener with its closer, honouring nesting.

    Unmatched openers and stray closers are left out of the result.

    Returns:
        Mapping of opener index to closer index
    """
    pairs = {}
    stack = []
    for i, ch in enumerate(text):
        if ch == open_char:
            stack.append(i)
        elif ch == close_char and stack:
            pairs[stack.pop()] = i
    return pairs


def find_balanced(text: str, open_char: str, close_char: str, start: int = 0) -> tuple[int, int] | None:
    """
    Find the first balanced region at or after start.

    Returns:
        (start, end) with end exclusive, or None if there is no balanced region
    """
    return _RegionIndex(text, kinds=((open_char, close_char),)).next_region(start, only=open_char)


def _is_wrapped(text: str, open_char: str, close_char: str) -> bool:
    """True if text is one balanced region from its first to its last character."""
    if not text.startswith(open_char):
        return False
    return bracket_pairs(text, open_char, close_char).get(0) == len(text) - 1


class _RegionIndex:
    """Balanced [...] and {...} regions of one string, searchable by position."""

    def __init__(self, text: str, kinds=(("[", "]"), ("{", "}"))):
        self._pairs = {}
        self._starts = {}
        for open_char, close_char in kinds:
            pairs = bracket_pairs(text, open_char, close_char)
            self._pairs[open_char] = pairs
            self._starts[open_char] = sorted(pairs)

    def _first(self, kind: str, pos: int) -> int | None:
        starts = self._starts[kind]
        i = bisect_left(starts, pos)
        return starts[i] if i < len(starts) else None

    def next_region(self, pos: int, only: str | None = None):
        """
        Return the earliest balanced region starting at or after pos.

        Returns:
            (start, end) when only is given, else (start, end, kind); None if none left
        """
        best = None
        for kind in self._starts:
            if only is not None and kind != only:
                continue
            start = self._first(kind, pos)
            if start is not None and (best is None or start < best[0]):
                best = (start, self._pairs[kind][start] + 1, kind)
        if best is None:
            return None
        return best[:2] if only is not None else best


def split_top_level(text: str, separator: str) -> list[str]:
    """
    Split on separator, ignoring occurrences nested in [], {} or ().

    Parts are stripped and empty parts are dropped, so "[a]&" yields ["[a]"].
    """
    parts = []
    depth = 0
    last = 0
    for i, ch in enumerate(text):
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            parts.append(text[last:i])
            last = i + 1
    parts.append(text[last:])
    return [part.strip() for part in parts if part.strip()]


def _raw_split_top_level(text: str, separator: str) -> list[str]:
    """split_top_level without dropping empty parts (used for validation)."""
    parts = []
    depth = 0
    last = 0
    for i, ch in enumerate(text):
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            parts.append(text[last:i].strip())
            last = i + 1
    parts.append(text[last:].strip())
    return parts


# ----------------------------------------------------------------------------
# Table references
# ----------------------------------------------------------------------------

def _peel_modifiers(text: str) -> tuple[str, list[Modifier]]:
    """
    Peel known modifier names off the end of a dotted name.

    "nested.list.lowercase.capitalize" -> ("nested.list", [LOWERCASE, CAPITALIZE])
    Modifiers are peeled from the right and reversed, so they are returned in
    the order they were written (and will be applied).
    """
    parts = text.split(".")
    peeled = []
    while len(parts) > 1:
        modifier = parse_modifier(parts[-1].strip())
        if modifier is None:
            break
        peeled.append(modifier)
        parts.pop()
    peeled.reverse()
    return ".".join(parts).strip(), peeled


def _clause_end(text: str, start: int) -> int:
    for i in range(start, len(text)):
        if text[i] in CONTROL_CHARS:
            return i
    return len(text)


def _read_reference(content: str) -> tuple[TableRef | None, list[str]]:
    """
    Read the inside of a [...] region.

    Returns:
        (node, problems): node is None when there is no usable table path;
        problems describes malformed clauses for validation
    """
    problems = []
    content = content.strip()
    cut = _clause_end(content, 0)
    path, modifiers = _peel_modifiers(content[:cut])

    if not path:
        problems.append(f"Missing table path in '[{content}]'")
        return None, problems
    if "[" in path or "]" in path:
        problems.append(f"Nested table reference in '[{content}]' is treated as a literal path")

    clauses = content[cut:]
    exclusions = []
    repetition: int | RepetitionRange = 1
    optional = False

    i = 0
    while i < len(clauses):
        ch = clauses[i]
        if ch == "?":
            optional = True
            i += 1
        elif ch == "!":
            end = _clause_end(clauses, i + 1)
            term, extra = _peel_modifiers(clauses[i + 1:end])
            if term:
                exclusions.append(term)
            else:
                problems.append(f"Empty exclusion in '[{content}]'")
            modifiers.extend(extra)
            i = end
        elif ch == "*":
            match = REPETITION_PATTERN.match(clauses, i + 1)
            if match is None:
                problems.append(f"Invalid repetition in '[{content}]'")
                i += 1
                continue
            i = match.end()
            low, high, fixed = match.groups()
            if high is None:
                count = _to_int(fixed if fixed is not None else low)
                if count is None:
                    problems.append(f"Repetition in '[{content}]' is too large")
                else:
                    repetition = count
                continue
            low, high = _to_int(low), _to_int(high)
            if low is None or high is None:
                problems.append(f"Repetition in '[{content}]' is too large")
                continue
            if low > high:
                problems.append(f"Repetition range in '[{content}]' has min greater than max")
                low, high = high, low
            repetition = RepetitionRange(low, high)
        elif ch == "^":
            # Weights belong to list items; a reference-level weight is ignored
            i = REFERENCE_WEIGHT_PATTERN.match(clauses, i + 1).end()
        else:
            problems.append(f"Unexpected '{ch}' in '[{content}]'")
            i += 1

    node = TableRef(
        path=path,
        modifiers=tuple(modifiers),
        is_optional=optional,
        exclusions=tuple(exclusions),
        repetition=repetition,
    )
    return node, problems


def parse_table_reference(content: str, raw: str | None = None) -> Node:
    """
    Parse the content of a [...] region.

    Examples:
        "weapons"                 -> TableRef("weapons")
        "weapon.melee.capitalize" -> TableRef("weapon.melee", modifiers=(CAPITALIZE,))
        "item!bad!ugly*{1-3}?"    -> TableRef("item", exclusions=("bad", "ugly"),
                                             repetition=RepetitionRange(1, 3),
                                             is_optional=True)

    Args:
        content: Text between the brackets
        raw: The full bracketed source, returned as Text if there is no path

    Returns:
        TableRef, or Text(raw) for references without a path such as "[]"
    """
    node, _ = _read_reference(content)
    if node is None:
        return Text(raw if raw is not None else f"[{content}]")
    return node


# ----------------------------------------------------------------------------
# Inline expressions and full templates
# ----------------------------------------------------------------------------

def _parse_expression(expression: str) -> Node:
    text = expression.strip()
    if _is_wrapped(text, "{", "}"):
        text = text[1:-1].strip()

    # & binds before |: {a&b|c} is AND(a, OR(b, c))
    for separator, node_type in (("&", And), ("|", Or)):
        parts = split_top_level(text, separator)
        if len(parts) > 1:
            return node_type(tuple(_parse_expression(part) for part in parts))
        if len(parts) == 1:
            text = parts[0]

    if text.startswith("["):
        close = bracket_pairs(text, "[", "]").get(0)
        if close is not None:
            trailing = text[close + 1:].strip()
            if not trailing.strip("?"):
                node = parse_table_reference(text[1:close], raw=text[:close + 1])
                if trailing and isinstance(node, TableRef):
                    node = replace(node, is_optional=True)
                return node

    if _is_wrapped(text, "(", ")"):
        return Group(_parse_expression(text[1:-1]))

    match = NUMBER_RANGE_PATTERN.match(text)
    if match:
        low, high = _to_int(match.group(1)), _to_int(match.group(2))
        if low is not None and high is not None:
            return NumberRange(low, high)

    if text == "a":
        return IndefiniteArticle()

    # Plain text, or text with embedded sigils such as "{The [a] of [b]}"
    return _parse_template(text)


def _parse_template(template: str) -> Node:
    nodes = []
    index = _RegionIndex(template)
    pos = 0

    while pos < len(template):
        region = index.next_region(pos)
        if region is None:
            nodes.append(Text(template[pos:]))
            break

        start, end, kind = region
        if start > pos:
            nodes.append(Text(template[pos:start]))

        source = template[start:end]
        if kind == "[":
            nodes.append(parse_table_reference(source[1:-1], raw=source))
        else:
            nodes.append(_parse_expression(source))
        pos = end

    if not nodes:
        return Text(template)
    if len(nodes) == 1:
        return nodes[0]
    return Mixed(tuple(nodes))


def parse_expression(expression: str) -> Node:
    """
    Parse an inline expression, with or without its surrounding braces.

    Precedence, highest first: top-level & split, top-level | split, a single
    table reference, a (group), an N-M number range, the article marker "a",
    and finally text (which may itself contain sigil regions).

    Example:
        "{[a*2]&{[b]|[c?]}}" -> And(TableRef(a, repetition=2),
                                    Or(TableRef(b), TableRef(c, optional)))
    """
    try:
        return _parse_expression(expression)
    except RecursionError:
        logger.debug("Expression nested too deeply to parse, treating as text")
        return Text(expression)


def parse_template(template: str) -> Node:
    """
    Parse a complete template that may mix text and sigil regions.

    Scans left to right for the next balanced [...] or {...} region. Text
    between regions becomes Text nodes. A single resulting node is returned
    directly, several are wrapped in Mixed.

    Never raises: input nested too deeply for the interpreter stack is
    returned as a single Text node.

    Args:
        template: Template source

    Returns:
        Root node of the parsed tree
    """
    try:
        return _parse_template(template)
    except RecursionError:
        logger.debug("Template nested too deeply to parse, treating as text")
        return Text(template)


# ----------------------------------------------------------------------------
# Inspection helpers
# ----------------------------------------------------------------------------

def scan_table_references(template: str) -> list[tuple[int, int, TableRef]]:
    """
    Find every outermost [...] table reference, including those inside {...}.

    Returns:
        (start, end, node) triples in source order, end exclusive
    """
    found = []
    index = _RegionIndex(template, kinds=(("[", "]"),))
    pos = 0
    while True:
        region = index.next_region(pos, only="[")
        if region is None:
            break
        start, end = region
        node = parse_table_reference(template[start + 1:end - 1])
        if isinstance(node, TableRef):
            found.append((start, end, node))
        pos = end
    return found


def _unbalanced(text: str, open_char: str, close_char: str) -> list[str]:
    errors = []
    stack = []
    for i, ch in enumerate(text):
        if ch == open_char:
            stack.append(i)
        elif ch == close_char:
            if stack:
                stack.pop()
            else:
                errors.append(f"Unexpected '{close_char}' at position {i}")
    errors.extend(f"Unclosed '{open_char}' at position {i}" for i in stack)
    return errors


def _check_regions(text: str, errors: list[str]) -> None:
    index = _RegionIndex(text)
    pos = 0
    while True:
        region = index.next_region(pos)
        if region is None:
            return
        start, end, kind = region
        inner = text[start + 1:end - 1]
        if kind == "[":
            _, problems = _read_reference(inner)
            errors.extend(problems)
        else:
            _check_inline(inner, errors)
        pos = end


def _check_inline(inner: str, errors: list[str]) -> None:
    if not inner.strip():
        errors.append("Empty inline expression '{}'")
        return

    for separator in "&|":
        parts = _raw_split_top_level(inner, separator)
        if len(parts) > 1 and not all(parts):
            errors.append(f"Empty operand for '{separator}' in '{{{inner}}}'")

    match = NUMBER_RANGE_PATTERN.match(inner.strip())
    if match:
        low, high = _to_int(match.group(1)), _to_int(match.group(2))
        if low is None or high is None:
            errors.append(f"Number range '{{{inner}}}' is too large")
        elif low > high:
            errors.append(f"Number range '{{{inner}}}' has min greater than max")

    _check_regions(inner, errors)


def find_syntax_errors(template: str) -> list[str]:
    """
    Describe structural problems in a template without evaluating it.

    Reports unbalanced [] and {}, empty & / | operands, empty or path-less
    references, malformed exclusion and repetition clauses, inverted number
    ranges, and numbers too long to convert.

    Returns:
        Human-readable problem descriptions (empty if the template is well formed)
    """
    errors = _unbalanced(template, "[", "]") + _unbalanced(template, "{", "}")
    try:
        _check_regions(template, errors)
    except RecursionError:
        errors.append("Template is nested too deeply")
    return errors
