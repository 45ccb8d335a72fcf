"""Splitting narration text for length-limited synthesis backends."""

import re

_SENTENCE_END = re.compile(r"(?<=[.!?;:…])\s+")


def chunk_text(text: str, limit: int) -> list[str]:
    """Split text into ordered chunks of at most ``limit`` characters.

    Sentence boundaries are preferred, then word boundaries; a single word
    longer than the limit is cut into fixed-size slices. Whitespace between
    chunks is dropped, everything else is kept in order.

    Args:
        text: Text to split
        limit: Maximum chunk length in characters

    Returns:
        List of non-empty chunks (empty list for blank text)

    Raises:
        ValueError: If limit is not positive
    """
    if limit <= 0:
        raise ValueError(f"Chunk limit must be positive, got {limit}")

    text = text.strip()
    if not text:
        return []
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""

    for piece in _pieces(text, limit):
        if not current:
            current = piece
        elif len(current) + 1 + len(piece) <= limit:
            current = f"{current} {piece}"
        else:
            chunks.append(current)
            current = piece

    if current:
        chunks.append(current)
    return chunks


def _pieces(text: str, limit: int):
    """Yield sentence-sized pieces, none longer than ``limit``."""
    for sentence in _SENTENCE_END.split(text):
        sentence = sentence.strip()
        if not sentence:
            continue
        if len(sentence) <= limit:
            yield sentence
            continue
        for word in sentence.split():
            while len(word) > limit:
                yield word[:limit]
                word = word[limit:]
            if word:
                yield word
