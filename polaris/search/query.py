"""Boolean query parsing and match highlighting.

Query syntax:
    "exact phrase"   must appear literally (case-insensitive)
    +term, AND term  required
    -term, NOT term  excluded
    term, OR term    optional; at least one optional term must match

Parsing never raises: an unterminated quote is read as plain text and stray
operators are dropped.
"""

import logging
import re
from typing import List, Tuple

from polaris.types import BooleanQuery

logger = logging.getLogger(__name__)

OPERATORS = frozenset({"AND", "OR", "NOT"})


def extract_phrases(query: str) -> Tuple[List[str], str]:
    """Split out ``"..."`` phrases.

    Returns:
        (phrases, remainder) where remainder is the query text outside
        the quotes. An unmatched quote character is dropped and the text
        after it stays in the remainder.
    """
    phrases: List[str] = []
    remainder: List[str] = []
    pos = 0
    while True:
        start = query.find('"', pos)
        if start < 0:
            remainder.append(query[pos:])
            break
        end = query.find('"', start + 1)
        if end < 0:
            remainder.append(query[pos:start])
            remainder.append(" ")
            remainder.append(query[start + 1 :])
            break
        remainder.append(query[pos:start])
        remainder.append(" ")
        phrase = query[start + 1 : end]
        if phrase.strip():
            phrases.append(phrase)
        pos = end + 1
    return phrases, "".join(remainder)


def parse_boolean_query(query: str) -> BooleanQuery:
    """Decompose *query* into required / optional / excluded / exact terms."""
    result = BooleanQuery()
    if not query or not query.strip():
        return result

    result.exact, remainder = extract_phrases(query)
    tokens = remainder.split()

    for i, token in enumerate(tokens):
        if token in OPERATORS:
            continue
        previous = tokens[i - 1] if i > 0 else None

        if previous == "NOT" or token.startswith("-"):
            term = token[1:] if token.startswith("-") else token
            bucket = result.excluded
        elif previous == "AND" or token.startswith("+"):
            term = token[1:] if token.startswith("+") else token
            bucket = result.required
        else:
            term = token
            bucket = result.optional

        term = term.lower()
        if term:
            bucket.append(term)

    return result


def compile_term_pattern(term: str) -> "re.Pattern[str] | None":
    """Compile a case-insensitive literal pattern for *term*, or None if unusable."""
    if not term:
        return None
    try:
        return re.compile(re.escape(term), re.IGNORECASE)
    except re.error as e:
        logger.debug("Skipping highlight term %r: %s", term, e)
        return None


def highlight_text(
    text: str,
    query: str,
    open_tag: str = "<mark>",
    close_tag: str = "</mark>",
) -> str:
    """Wrap every occurrence of the query's positive terms in *open_tag*/*close_tag*.

    Longer terms are applied first so a phrase is not split by one of its
    own words; already-highlighted spans are left alone.
    """
    if not query or not query.strip():
        return text

    terms = sorted(set(parse_boolean_query(query).terms()), key=len, reverse=True)
    spans: List[Tuple[int, int]] = []
    for term in terms:
        pattern = compile_term_pattern(term)
        if pattern is None:
            continue
        for match in pattern.finditer(text):
            start, end = match.span()
            if start == end:
                continue
            if any(start < s_end and end > s_start for s_start, s_end in spans):
                continue
            spans.append((start, end))

    if not spans:
        return text

    out: List[str] = []
    cursor = 0
    for start, end in sorted(spans):
        out.append(text[cursor:start])
        out.append(open_tag)
        out.append(text[start:end])
        out.append(close_tag)
        cursor = end
    out.append(text[cursor:])
    return "".join(out)
