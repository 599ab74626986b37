"""
Text chunking using RecursiveCharacterTextSplitter.

Splits raw feedback text into overlapping chunks along natural boundaries
(paragraphs, lines, sentences, clauses, words) before embedding. Chunks are
trimmed, and fragments made only of separators are dropped so they are never
embedded as records.

Dependencies: langchain_text_splitters
System role: First stage of document ingestion
"""

import string

from langchain_text_splitters import RecursiveCharacterTextSplitter

DEFAULT_SEPARATORS = ["\n\n", "\n", ".", "!", "?", ",", " ", ""]


class TextChunker:
    """Split text into bounded, overlapping chunks."""

    def __init__(
        self,
        chunk_size: int = 500,
        chunk_overlap: int = 100,
        separators: list[str] | None = None,
    ) -> None:
        """
        Initialize chunker with splitter configuration.

        Separators stay at the start of the following piece, so every chunk
        is a substring of the input once surrounding whitespace is trimmed.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Maximum overlap between consecutive chunks
            separators: Split boundaries, highest priority first

        Raises:
            ValueError: When chunk_overlap is not smaller than chunk_size
        """
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")

        separators = separators or DEFAULT_SEPARATORS
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._filler = string.whitespace + "".join(set("".join(separators)))
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=separators,
            keep_separator="start",
            length_function=len,
        )

    def split(self, text: str) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Raw document text

        Returns:
            list[str]: Ordered chunks, each with content beyond separators;
            empty when the text has no content
        """
        if not text or not text.strip():
            return []
        return [chunk for chunk in self._splitter.split_text(text) if chunk.strip(self._filler)]
