import pytest
import pytesseract
from pdf2image.exceptions import PDFPopplerTimeoutError
from PIL import Image

from invoice_manager.input_handler import ImageProcessor, InputHandler, PDFProcessor
from invoice_manager.input_handler import pdf_processor
from invoice_manager.ocr_engine import OCRResult, OCRWord, TesseractBackend
from invoice_manager.ocr_engine.tesseract_backend import parse_tesseract_data
from invoice_manager.utils.exceptions import (
    CorruptedFileError,
    InputFileNotFoundError,
    OCREngineNotAvailableError,
    RecognitionError,
    UnsupportedFileTypeError,
)


TESSERACT_DATA = {
    'text': ['', 'FACTURA', 'No.', '', 'Total:', '1,160.00'],
    'left': [0, 10, 120, 0, 10, 90],
    'top': [0, 10, 10, 0, 50, 50],
    'width': [500, 100, 40, 0, 70, 80],
    'height': [700, 20, 20, 0, 20, 20],
    'conf': [-1, 96, 90, -1, 88, 70],
    'block_num': [0, 1, 1, 1, 1, 1],
    'par_num': [0, 1, 1, 1, 1, 1],
    'line_num': [0, 1, 1, 1, 2, 2],
}


def test_parse_tesseract_data_groups_lines():
    words = parse_tesseract_data(TESSERACT_DATA)

    assert [word.text for word in words] == ['FACTURA', 'No.', 'Total:', '1,160.00']
    assert words[0].bbox == (10, 10, 110, 30)
    assert words[0].line_key == (0, 1, 1, 1)

    result = OCRResult(words=words)
    assert result.text == "FACTURA No.\nTotal: 1,160.00"
    assert result.average_confidence == pytest.approx(86.0)


def test_combine_separates_pages():
    page = OCRResult(words=[OCRWord("Hoja", (0, 0, 1, 1), 90.0)], processing_time=0.5)

    combined = OCRResult.combine([page, page])

    assert combined.page_count == 2
    assert combined.processing_time == 1.0
    assert combined.text == "Hoja\n\nHoja"


def test_empty_result():
    result = OCRResult()
    assert result.is_empty()
    assert result.average_confidence == 0.0


def test_backend_reports_missing_tesseract(monkeypatch):
    def not_found():
        raise pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "get_tesseract_version", not_found)
    with pytest.raises(OCREngineNotAvailableError):
        TesseractBackend("spa")


def test_backend_extract(monkeypatch):
    monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
    monkeypatch.setattr(pytesseract, "image_to_data", lambda *args, **kwargs: TESSERACT_DATA)

    result = TesseractBackend("spa").extract(Image.new('L', (50, 50), 255))

    assert result.language == "spa"
    assert result.word_count == 4


def test_backend_failure_is_recognition_error(monkeypatch):
    def broken(*args, **kwargs):
        raise pytesseract.TesseractError(1, "Failed loading language 'spa'")

    monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
    monkeypatch.setattr(pytesseract, "image_to_data", broken)

    with pytest.raises(RecognitionError):
        TesseractBackend("spa").extract(Image.new('RGB', (50, 50)), source="scan.png")


def test_image_processor_flattens_and_downscales():
    processor = ImageProcessor()
    processor.max_width, processor.max_height = 100, 100

    image = processor.prepare(Image.new('RGBA', (400, 200), (0, 0, 0, 0)))

    assert image.mode == 'RGB'
    assert image.size == (100, 50)
    assert image.getpixel((0, 0)) == (255, 255, 255)


def test_image_processor_rejects_corrupt_file(tmp_path):
    path = tmp_path / "roto.png"
    path.write_bytes(b"not an image")

    with pytest.raises(CorruptedFileError):
        ImageProcessor().process(path)


class FakeOCREngine:
    def __init__(self):
        self.calls = []

    def extract_text(self, images, source="document"):
        self.calls.append((len(images), source))
        return "FACTURA 123"


def test_validate_file_errors(tmp_path):
    handler = InputHandler(ocr_engine=FakeOCREngine())

    with pytest.raises(InputFileNotFoundError):
        handler.validate_file(tmp_path / "missing.png")

    unsupported = tmp_path / "notes.txt"
    unsupported.write_text("hola")
    with pytest.raises(UnsupportedFileTypeError):
        handler.validate_file(unsupported)

    empty = tmp_path / "empty.png"
    empty.touch()
    with pytest.raises(CorruptedFileError):
        handler.validate_file(empty)


def test_extract_text_from_image_uses_ocr(tmp_path):
    path = tmp_path / "factura.png"
    Image.new('RGB', (60, 40), (255, 255, 255)).save(path)
    engine = FakeOCREngine()

    document = InputHandler(ocr_engine=engine).extract_text(path)

    assert document.text == "FACTURA 123"
    assert document.method == 'ocr'
    assert document.file_type == 'image'
    assert engine.calls == [(1, str(path))]


def test_collect_files(tmp_path):
    for name in ("b.pdf", "a.png", "c.txt"):
        (tmp_path / name).write_bytes(b"x")

    files = InputHandler(ocr_engine=FakeOCREngine()).collect_files(tmp_path)

    assert [path.name for path in files] == ["a.png", "b.pdf"]


def test_pdf_rasterize_timeout_is_corrupted_file(tmp_path, monkeypatch):
    def slow_convert(*args, **kwargs):
        raise PDFPopplerTimeoutError("Run poppler command timed out.")

    monkeypatch.setattr(pdf_processor, "convert_from_path", slow_convert)

    with pytest.raises(CorruptedFileError):
        PDFProcessor().to_images(tmp_path / "scan.pdf")
