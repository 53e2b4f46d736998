"""Split long replies into transport-sized chunks."""

from __future__ import annotations

# Telegram rejects messages over 4096 characters, counted in UTF-16 code units
DEFAULT_CHUNK_LENGTH = 4000

SENTENCE_BREAK = ". "
WORD_BREAK = " "


def _pieces(text: str, separator: str) -> list[str]:
    """Split on separator, keeping it attached to the left piece so pieces concatenate back to text."""
    parts = text.split(separator)
    return [part + separator for part in parts[:-1]] + [parts[-1]]


def text_length(text: str) -> int:
    """Length in UTF-16 code units; emoji outside the BMP count twice."""
    return len(text.encode("utf-16-le")) // 2


def _fits(candidate: str, max_length: int) -> bool:
    return text_length(candidate.strip()) <= max_length


def _flush(chunks: list[str], current: str) -> None:
    chunk = current.strip()
    if chunk:
        chunks.append(chunk)


def split_message(text: str, max_length: int = DEFAULT_CHUNK_LENGTH) -> list[str]:
    """
    Split text into chunks of at most max_length UTF-16 code units.

    Sentences (ending in ". ") are packed greedily. A sentence too long on its
    own is packed word by word, and a word too long on its own becomes a chunk
    by itself even though it exceeds max_length. Chunks keep the source order
    and are stripped of surrounding whitespace; text that already fits is
    returned untouched. Empty chunks are never emitted, so text that is only
    whitespace and longer than max_length yields an empty list.

    Example:
        >>> split_message("One. Two. Three.", max_length=10)
        ['One. Two.', 'Three.']
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if text_length(text) <= max_length:
        return [text]

    chunks: list[str] = []
    current = ""
    for sentence in _pieces(text, SENTENCE_BREAK):
        if _fits(current + sentence, max_length):
            current += sentence
            continue
        _flush(chunks, current)
        current = ""
        if _fits(sentence, max_length):
            current = sentence
            continue
        for word in _pieces(sentence, WORD_BREAK):
            if _fits(current + word, max_length):
                current += word
                continue
            _flush(chunks, current)
            current = word
            if not _fits(word, max_length):
                _flush(chunks, word)
                current = ""
    _flush(chunks, current)
    return chunks
