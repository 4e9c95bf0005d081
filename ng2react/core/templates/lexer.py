"""Markup lexer, regex-assisted and hand-written.

Splits template markup into start tags, end tags, text runs and ICU
expansion forms. Comments and ``<!DOCTYPE>`` are dropped, CDATA sections
become text, and the content of raw-text elements (script, style,
textarea, title) is never tokenized as markup.

Offsets are character offsets into the template string. Problems are
collected as (message, offset) pairs rather than raised, so the tree
builder can report every diagnostic of a template at once.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..constants import RAW_TEXT_ELEMENTS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_TAG_NAME_RE = re.compile(r"[A-Za-z][^\s/>]*")
_END_TAG_RE = re.compile(r"</\s*([A-Za-z][^\s/>]*)\s*>")
_ATTR_NAME_RE = re.compile(r"[^\s\"'>/=]+")
# Unquoted values end at whitespace or at the end of the tag ("/>" or ">").
_UNQUOTED_VALUE_RE = re.compile(r"[^\s>]+?(?=\s|/?>|$)", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s*")

# {count, plural, =0 {none} other {many}}
_ICU_START_RE = re.compile(r"\{\s*[^{}<>]+?,\s*(?:plural|select|selectordinal)\s*,")


@dataclass
class LexAttribute:
    name: str
    value: str
    start: int
    end: int
    value_start: int  # offset of the first value character, -1 without value


@dataclass
class StartTag:
    name: str
    attributes: List[LexAttribute]
    self_closing: bool
    start: int
    end: int


@dataclass
class EndTag:
    name: str
    start: int
    end: int


@dataclass
class TextToken:
    value: str
    start: int
    end: int


@dataclass
class ExpansionToken:
    source: str
    start: int
    end: int


@dataclass
class LexResult:
    tokens: List[object] = field(default_factory=list)
    errors: List[Tuple[str, int]] = field(default_factory=list)


class MarkupLexer:
    """Tokenizer for one template string."""

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)
        self.result = LexResult()

    def tokenize(self) -> LexResult:
        text = self.text
        i = 0
        while i < self.length:
            if text.startswith("<!--", i):
                i = self._skip_comment(i)
            elif text.startswith("<![CDATA[", i):
                i = self._read_cdata(i)
            elif text.startswith("<!", i):
                end = text.find(">", i)
                i = self.length if end == -1 else end + 1
            elif text.startswith("</", i):
                i = self._read_end_tag(i)
            elif text[i] == "<" and _TAG_NAME_RE.match(text, i + 1):
                i = self._read_start_tag(i)
            elif text[i] == "{" and _ICU_START_RE.match(text, i):
                i = self._read_expansion(i)
            else:
                i = self._read_text(i)
        return self.result

    def _error(self, message: str, offset: int) -> None:
        self.result.errors.append((message, offset))

    def _add_text(self, value: str, start: int, end: int) -> None:
        tokens = self.result.tokens
        if tokens and isinstance(tokens[-1], TextToken) and tokens[-1].end == start:
            tokens[-1].value += value
            tokens[-1].end = end
        else:
            tokens.append(TextToken(value, start, end))

    # ── Comments, CDATA ───────────────────────────────────────────

    def _skip_comment(self, i: int) -> int:
        end = self.text.find("-->", i + 4)
        if end == -1:
            self._error("Unterminated comment", i)
            return self.length
        return end + 3

    def _read_cdata(self, i: int) -> int:
        start = i + len("<![CDATA[")
        end = self.text.find("]]>", start)
        if end == -1:
            self._error("Unterminated CDATA section", i)
            self._add_text(self.text[start:], i, self.length)
            return self.length
        self._add_text(self.text[start:end], i, end + 3)
        return end + 3

    # ── Tags ──────────────────────────────────────────────────────

    def _read_end_tag(self, i: int) -> int:
        m = _END_TAG_RE.match(self.text, i)
        if m is None:
            self._error("Malformed end tag", i)
            end = self.text.find(">", i)
            return self.length if end == -1 else end + 1
        self.result.tokens.append(EndTag(m.group(1), i, m.end()))
        return m.end()

    def _read_start_tag(self, i: int) -> int:
        text = self.text
        name_match = _TAG_NAME_RE.match(text, i + 1)
        name = name_match.group(0)
        j = name_match.end()
        attributes: List[LexAttribute] = []
        self_closing = False
        closed = False

        while j < self.length:
            j = _WHITESPACE_RE.match(text, j).end()
            if j >= self.length:
                break
            if text.startswith("/>", j):
                self_closing = True
                closed = True
                j += 2
                break
            if text[j] == ">":
                closed = True
                j += 1
                break
            attr_match = _ATTR_NAME_RE.match(text, j)
            if attr_match is None:
                self._error(f'Unexpected character "{text[j]}" in tag <{name}>', j)
                j += 1
                continue
            attr, j = self._read_attribute(attr_match, name)
            attributes.append(attr)

        if not closed:
            self._error(f'Unexpected end of input in tag <{name}>', i)
            j = self.length

        self.result.tokens.append(StartTag(name, attributes, self_closing, i, j))
        if not self_closing and name.lower() in RAW_TEXT_ELEMENTS:
            j = self._read_raw_text(name, j)
        return j

    def _read_attribute(self, name_match: "re.Match", tag_name: str) -> Tuple[LexAttribute, int]:
        text = self.text
        attr_name = name_match.group(0)
        start = name_match.start()
        j = _WHITESPACE_RE.match(text, name_match.end()).end()
        if j >= self.length or text[j] != "=":
            return LexAttribute(attr_name, "", start, name_match.end(), -1), name_match.end()

        j = _WHITESPACE_RE.match(text, j + 1).end()
        if j < self.length and text[j] in ("'", '"'):
            quote = text[j]
            close = text.find(quote, j + 1)
            if close == -1:
                self._error(f'Unterminated attribute value "{attr_name}" in tag <{tag_name}>', j)
                return LexAttribute(attr_name, text[j + 1:], start, self.length, j + 1), self.length
            return LexAttribute(attr_name, text[j + 1:close], start, close + 1, j + 1), close + 1

        value_match = _UNQUOTED_VALUE_RE.match(text, j)
        if value_match is None:
            return LexAttribute(attr_name, "", start, j, j), j
        return LexAttribute(attr_name, value_match.group(0), start, value_match.end(), j), value_match.end()

    def _read_raw_text(self, name: str, i: int) -> int:
        closing = re.compile(r"</\s*" + re.escape(name) + r"\s*>", re.IGNORECASE)
        m = closing.search(self.text, i)
        end = m.start() if m is not None else self.length
        if end > i:
            self._add_text(self.text[i:end], i, end)
        return end

    # ── Text, ICU ─────────────────────────────────────────────────

    def _read_expansion(self, i: int) -> int:
        end = _matching_brace(self.text, i)
        if end is None:
            self._error("Unterminated ICU expansion", i)
            end = self.length
        self.result.tokens.append(ExpansionToken(self.text[i:end], i, end))
        return end

    def _read_text(self, i: int) -> int:
        text = self.text
        j = i
        while j < self.length:
            if text.startswith("{{", j):
                close = _find_interpolation_end(text, j + 2)
                if close != -1:
                    j = close + 2
                    continue
            ch = text[j]
            if j > i and ch == "<" and j + 1 < self.length:
                nxt = text[j + 1]
                if nxt.isalpha() or nxt in "/!":
                    break
            if j > i and ch == "{" and _ICU_START_RE.match(text, j):
                break
            j += 1
        self._add_text(text[i:j], i, j)
        return j


def _find_interpolation_end(text: str, start: int) -> int:
    """Offset of the ``}}`` closing an interpolation, skipping quoted text."""
    quote: Optional[str] = None
    j = start
    while j < len(text):
        ch = text[j]
        if quote is not None:
            if ch == "\\":
                j += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif text.startswith("}}", j):
            return j
        j += 1
    return -1


def _matching_brace(text: str, start: int) -> Optional[int]:
    depth = 0
    for j in range(start, len(text)):
        if text[j] == "{":
            depth += 1
        elif text[j] == "}":
            depth -= 1
            if depth == 0:
                return j + 1
    return None


def tokenize(text: str) -> LexResult:
    return MarkupLexer(text).tokenize()
