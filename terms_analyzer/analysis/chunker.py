from __future__ import annotations

DEFAULT_CHUNK_SIZE = 8000
DEFAULT_OVERLAP = 500


def _break_point(content: str, start: int, end: int, chunk_size: int) -> int:
    """Pick where a non-final window ends: paragraph, then sentence, then raw offset."""
    floor = start + chunk_size // 2

    paragraph = content.rfind("\n\n", start, end)
    if paragraph > floor:
        return paragraph

    sentence = content.rfind(". ", start, end)
    if sentence > floor:
        return sentence + 1

    return end


def chunk_document(
    content: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[str]:
    """Split ``content`` into overlapping, boundary-aware windows.

    Each window after the first starts exactly ``overlap`` characters before
    the previous one ended, so dropping the first ``overlap`` characters of
    every later chunk and concatenating reproduces the input.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap * 2 >= chunk_size:
        raise ValueError("overlap must be non-negative and less than half of chunk_size")

    if len(content) <= chunk_size:
        return [content]

    chunks: list[str] = []
    start = 0
    while True:
        end = start + chunk_size
        if end >= len(content):
            chunks.append(content[start:])
            return chunks

        end = _break_point(content, start, end, chunk_size)
        chunks.append(content[start:end])
        # end > start + chunk_size // 2 > start + overlap, so start always advances
        start = end - overlap
