"""
Emmet notation codec (chain/sibling grammar <-> canonical tree).

Grammar:
    node   := chain ('+' chain)*
    chain  := term ('>' term)*
    term   := group | ident ['*' number] ['{' text '}'] ['>' term]
    group  := '(' node ')'
    ident  := [A-Za-z0-9_-]+

Syntax Notes:
    - '>' nests, '+' adds a sibling, '*N' repeats, '{text}' is a leaf value
    - '>' and '+' are read in one left-to-right pass over the node; a '+'
      between chains merges at the attachment point, not at the root
    - A sibling attaches at the "attachment point": starting from the chain
      root, descend while the current mapping has one entry whose value is
      itself a one-entry mapping. So ul>li{a}+li{b} puts both li under ul.
    - The walk never descends into a value produced by a group, so
      a>(b{1})+c{2} keeps c beside a. The encoder relies on this to
      round-trip a structured entry that is followed by siblings.

Examples:
    li*3                  -> {li: [{}, {}, {}]}
    ul>(li{One}+li{Two})  -> {ul: {li: ["One", "Two"]}}
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from cdim.errors import EncodeError, GrammarError
from cdim.model import (
    Mapping,
    Scalar,
    Sequence,
    Value,
    clone,
    coerce_number,
    is_empty_mapping,
    merge_entry,
)

_IDENT_RE = re.compile(r"[A-Za-z0-9_-]+")
_COUNT_RE = re.compile(r"\d+")

# A key path from the chain root; a path in the sealed set marks a value
# produced by a group.
Path = Tuple[str, ...]


@dataclass
class EmmetTerm:
    """
    Parsed term, lowered into a Mapping as soon as it is complete.

    Properties:
        identifier: Tag name (None for a group)
        repeat_count: N from '*N', if present
        leaf_text: Raw text from '{text}', if present
        child: Term after '>' inside this term, if present
        group: Lowered contents of '( ... )' for a group term
    """

    identifier: Optional[str] = None
    repeat_count: Optional[int] = None
    leaf_text: Optional[str] = None
    child: Optional["EmmetTerm"] = None
    group: Optional[Mapping] = None


# =========================================================================
# ENCODE
# =========================================================================


def _has_top_level(text: str, operator: str) -> bool:
    """True if operator occurs outside every (...) group and {...} leaf."""
    depth = 0
    in_text = False
    for ch in text:
        if in_text:
            if ch == "}":
                in_text = False
        elif ch == "{":
            in_text = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == operator and depth == 0:
            return True
    return False


def _check_key(key: str) -> str:
    if not _IDENT_RE.fullmatch(key):
        raise EncodeError("emmet", f"key {key!r} is not a valid identifier")
    return key


def _leaf(value: Scalar) -> str:
    text = value.text
    if "}" in text:
        raise EncodeError("emmet", f"leaf text {text!r} contains '}}'")
    return "{" + text + "}"


def _structured_part(key: str, value: Value, followed: bool) -> str:
    child = _walk(value)
    if followed or _has_top_level(child, "+"):
        child = f"({child})"
    return f"{key}>{child}"


def _sequence_parts(key: str, items: Sequence) -> List[Tuple[str, Value]]:
    parts: List[Tuple[str, Value]] = []
    for item in items:
        if isinstance(item, Sequence):
            parts.extend(_sequence_parts(key, item))
        else:
            parts.append((key, item))
    return parts


def _walk_mapping(mapping: Mapping) -> str:
    pairs: List[Tuple[str, Value]] = []
    for key, value in mapping.entries:
        _check_key(key)
        if isinstance(value, Sequence):
            if len(value) == 0:
                pairs.append((key, Mapping()))
            else:
                pairs.extend(_sequence_parts(key, value))
        else:
            pairs.append((key, value))

    rendered = []
    for i, (key, value) in enumerate(pairs):
        followed = i < len(pairs) - 1
        if isinstance(value, Scalar):
            rendered.append(key + _leaf(value))
        elif is_empty_mapping(value):
            rendered.append(key)
        elif isinstance(value, (Mapping, Sequence)):
            rendered.append(_structured_part(key, value, followed))
        else:
            raise TypeError(f"Unsupported Value type: {type(value)}")
    return "+".join(rendered)


def _walk(value: Value) -> str:
    if isinstance(value, Mapping):
        return _walk_mapping(value)
    if isinstance(value, Sequence):
        rendered = []
        for i, item in enumerate(value.items):
            text = _walk(item)
            if i < len(value.items) - 1 and _has_top_level(text, ">"):
                text = f"({text})"
            rendered.append(text)
        return "+".join(rendered)
    if isinstance(value, Scalar):
        return _leaf(value)
    raise TypeError(f"Unsupported Value type: {type(value)}")


def encode_emmet(value: Value) -> str:
    """
    Serialize a canonical tree as Emmet notation.

    Mapping entries become 'key' (empty mapping), 'key{text}' (scalar)
    or 'key>child' (structured). Sequence values repeat the key once
    per element. Siblings are joined with '+'.

    Raises:
        EncodeError: If a key is not an identifier or a leaf contains '}'
    """
    return _walk(value)


# =========================================================================
# DECODE
# =========================================================================


def _peek(text: str, pos: int) -> str:
    return text[pos] if pos < len(text) else ""


def _parse_term(text: str, pos: int) -> Tuple[EmmetTerm, int]:
    """Parse term: group, or ident ['*' N] ['{' text '}'] ['>' term]."""
    if _peek(text, pos) == "(":
        group, pos = _parse_node(text, pos + 1)
        if _peek(text, pos) != ")":
            raise GrammarError("Expected ')'", pos)
        return EmmetTerm(group=group), pos + 1

    match = _IDENT_RE.match(text, pos)
    if not match:
        raise GrammarError("Expected identifier", pos)
    term = EmmetTerm(identifier=match.group())
    pos = match.end()

    if _peek(text, pos) == "*":
        match = _COUNT_RE.match(text, pos + 1)
        if not match:
            raise GrammarError("Expected repeat count", pos + 1)
        term.repeat_count = int(match.group())
        pos = match.end()

    if _peek(text, pos) == "{":
        end = text.find("}", pos + 1)
        if end == -1:
            raise GrammarError("Unterminated '{'", pos)
        term.leaf_text = text[pos + 1:end]
        pos = end + 1

    if _peek(text, pos) == ">":
        term.child, pos = _parse_term(text, pos + 1)

    return term, pos


def _lower_term(term: EmmetTerm) -> Tuple[Mapping, Set[Path]]:
    """Turn a term into a one-entry Mapping plus its sealed paths."""
    if term.group is not None:
        return term.group, {()}

    sealed: Set[Path] = set()
    if term.child is not None:
        value, child_sealed = _lower_term(term.child)
        sealed = {(term.identifier,) + path for path in child_sealed}
    elif term.leaf_text is not None:
        value = Scalar(coerce_number(term.leaf_text))
    else:
        value = Mapping()

    if term.repeat_count is not None:
        value = Sequence([clone(value) for _ in range(term.repeat_count)])
        sealed = set()

    return Mapping([(term.identifier, value)]), sealed


def _attachment_path(tree: Mapping, sealed: Set[Path]) -> Path:
    path: Path = ()
    node = tree
    while path not in sealed and len(node) == 1:
        key, value = node.entries[0]
        if not isinstance(value, Mapping) or len(value) != 1 or path + (key,) in sealed:
            break
        path = path + (key,)
        node = value
    return path


def _resolve(tree: Mapping, path: Path) -> Mapping:
    node = tree
    for key in path:
        node = node.get(key)
    return node


def _parse_node(text: str, pos: int) -> Tuple[Mapping, int]:
    """
    Parse node: term (('>' | '+') term)*, the chains of a node in one pass.

    '>' grafts the next term under the first entry of the attachment
    point; '+' merges it into the attachment point as a sibling.
    """
    term, pos = _parse_term(text, pos)
    tree, sealed = _lower_term(term)

    while _peek(text, pos) in (">", "+"):
        operator = _peek(text, pos)
        term_pos = pos + 1
        term, pos = _parse_term(text, term_pos)
        piece, piece_sealed = _lower_term(term)

        path = _attachment_path(tree, sealed)
        target = _resolve(tree, path)

        if operator == ">":
            key, holder = target.entries[0]
            if not isinstance(holder, Mapping):
                raise GrammarError(f"Cannot nest under leaf {key!r}", term_pos)
            for k, v in piece.entries:
                merge_entry(holder, k, v)
            sealed |= {path + (key,) + p for p in piece_sealed}
        else:
            new_keys = {k for k, _ in piece.entries if k not in target}
            for k, v in piece.entries:
                merge_entry(target, k, v)
            for p in piece_sealed:
                if not p:
                    sealed.add(path)
                elif p[0] in new_keys:
                    sealed.add(path + p)

    return tree, pos


def decode_emmet(text: str) -> Mapping:
    """
    Parse Emmet notation into a canonical tree.

    Args:
        text: Emmet expression (surrounding whitespace is ignored)

    Returns:
        Mapping built from the expression

    Raises:
        GrammarError: On any grammar violation, with the cursor position
    """
    source = text.strip()
    tree, pos = _parse_node(source, 0)
    if pos != len(source):
        raise GrammarError("Unexpected trailing input", pos)
    return tree


__all__ = ["EmmetTerm", "encode_emmet", "decode_emmet"]
