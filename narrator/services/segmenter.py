"""
Split long scripts into provider-sized segments along sentence boundaries.
"""
import re
from typing import List

from narrator.config import MAX_SEGMENT_LENGTH

# A unit ends with a run of terminal punctuation; a trailing fragment without
# one is its own unit.
_SENTENCE_RE = re.compile(r'[^.!?]*[.!?]+|[^.!?]+$')


def split_sentences(text: str) -> List[str]:
    """Return stripped, non-empty sentence-like units in order."""
    units = (match.strip() for match in _SENTENCE_RE.findall(text))
    return [unit for unit in units if unit]


def segment_text(text: str, max_length: int = MAX_SEGMENT_LENGTH) -> List[str]:
    """
    Greedily pack sentences into segments of at most ``max_length`` characters.

    A sentence longer than ``max_length`` becomes its own oversized segment.
    Always returns at least one segment: input without any sentence yields
    ``[text.strip()]``.
    """
    if max_length < 1:
        raise ValueError(f'max_length must be positive, got {max_length}')

    sentences = split_sentences(text)
    if not sentences:
        return [text.strip()]

    segments = []
    buffer = ''
    for sentence in sentences:
        candidate = f'{buffer} {sentence}' if buffer else sentence
        if buffer and len(candidate) > max_length:
            segments.append(buffer)
            buffer = sentence
        else:
            buffer = candidate

    if buffer:
        segments.append(buffer)

    return segments
