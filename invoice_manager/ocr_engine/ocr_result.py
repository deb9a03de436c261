"""
OCR Result Data Classes.

This module defines data structures for OCR output.

Classes:
    OCRWord: Individual recognized word with its position
    OCRResult: Complete OCR output for one or more page images

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple


@dataclass
class OCRWord:
    """
    Represents a single word/token extracted by OCR.

    Attributes:
        text: The recognized text content
        bbox: Bounding box as (x1, y1, x2, y2) in pixels
        confidence: OCR confidence score (0-100)
        line_key: (page, block, paragraph, line) the word belongs to

    Example:
        >>> word = OCRWord(text="Factura", bbox=(100, 50, 200, 80), confidence=95.5)
    """
    text: str
    bbox: Tuple[int, int, int, int]
    confidence: float = 0.0
    line_key: Tuple[int, int, int, int] = (0, 0, 0, 0)

    @property
    def page(self) -> int:
        return self.line_key[0]

    def __repr__(self) -> str:
        return f"OCRWord('{self.text}', bbox={self.bbox}, conf={self.confidence:.1f})"


@dataclass
class OCRResult:
    """
    Complete OCR output.

    Words keep Tesseract's reading order; ``text`` rebuilds lines from
    their ``line_key`` and separates pages with a blank line.

    Attributes:
        words: Recognized words in reading order
        language: Tesseract language used
        engine: Name of the backend
        processing_time: Seconds spent recognizing
        page_count: Number of page images recognized
    """
    words: List[OCRWord] = field(default_factory=list)
    language: str = ""
    engine: str = "tesseract"
    processing_time: float = 0.0
    page_count: int = 1

    @property
    def text(self) -> str:
        pages: List[str] = []
        lines: List[str] = []
        current_line: List[str] = []
        current_key = None

        for word in self.words:
            if current_key is not None and word.line_key != current_key:
                lines.append(' '.join(current_line))
                current_line = []
                if word.page != current_key[0]:
                    pages.append('\n'.join(lines))
                    lines = []
            current_line.append(word.text)
            current_key = word.line_key

        if current_line:
            lines.append(' '.join(current_line))
        if lines:
            pages.append('\n'.join(lines))

        return '\n\n'.join(pages)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def average_confidence(self) -> float:
        if not self.words:
            return 0.0
        return sum(word.confidence for word in self.words) / len(self.words)

    def is_empty(self) -> bool:
        return not self.text.strip()

    @classmethod
    def combine(cls, results: Sequence['OCRResult']) -> 'OCRResult':
        """
        Merge per-page results into one, renumbering pages in order.

        Args:
            results: One result per page image.

        Returns:
            Combined OCRResult.
        """
        words: List[OCRWord] = []
        for page, result in enumerate(results):
            for word in result.words:
                words.append(OCRWord(
                    text=word.text,
                    bbox=word.bbox,
                    confidence=word.confidence,
                    line_key=(page,) + tuple(word.line_key[1:]),
                ))

        return cls(
            words=words,
            language=results[0].language if results else "",
            engine=results[0].engine if results else "tesseract",
            processing_time=sum(result.processing_time for result in results),
            page_count=len(results),
        )
