# readaloud/cleaning.py
import re

from readaloud.config import TRUNCATE_AT_WORD

_NEWLINES_RE = re.compile(r"\n+")
_WHITESPACE_RE = re.compile(r"\s+")
# word boundaries count ASCII letters only, like JavaScript regexes
_TAIL_RE = re.compile(rf"\b{re.escape(TRUNCATE_AT_WORD)}\b.*$", re.DOTALL | re.ASCII)


def clean_text(text: str) -> str:
    """
    Flatten extracted PDF text into one line for reading aloud.
    - newlines and whitespace runs become single spaces
    - everything from the first standalone "References" onwards is dropped
    """
    cleaned = _NEWLINES_RE.sub(" ", text or "")
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()

    cleaned = _TAIL_RE.sub("", cleaned).strip()
    return cleaned
