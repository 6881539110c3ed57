"""Plain-text extraction for document files.

Supports PDF, DOCX, HTML and plain text. Any file whose extension is not
claimed by a structured format is read as text, so corpora of
extensionless or ``.eml`` files can be loaded directly.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path


class DocumentParser(ABC):
    """Abstract base class for document text extractors.

    Subclasses implement ``parse``, which returns the document's text with
    pages or paragraphs separated by blank lines.
    """

    supported_extensions: tuple[str, ...] = ()

    def can_handle(self, path: Path) -> bool:
        """Check if this parser can handle the given file."""
        return path.suffix.lower() in self.supported_extensions

    @abstractmethod
    def parse(self, path: Path) -> str:
        """Extract the text of a document file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        ...

    @staticmethod
    def _validate_path(path: Path) -> None:
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")


class TextParser(DocumentParser):
    """Reads a file as UTF-8 text, replacing undecodable bytes."""

    supported_extensions = (".txt", ".text", ".md", "")

    def parse(self, path: Path) -> str:
        self._validate_path(path)
        return path.read_text(encoding="utf-8", errors="replace")


class PDFParser(DocumentParser):
    """Parser for PDF documents using pdfplumber."""

    supported_extensions = (".pdf",)

    def parse(self, path: Path) -> str:
        """Extract the text of every page.

        Raises:
            ImportError: If pdfplumber is not installed.
        """
        self._validate_path(path)

        try:
            import pdfplumber
        except ImportError as exc:
            raise ImportError(
                "pdfplumber is required for PDF parsing. Install it with: pip install pdfplumber"
            ) from exc

        with pdfplumber.open(str(path)) as pdf:
            pages = [(page.extract_text() or "").strip() for page in pdf.pages]

        return "\n\n".join(p for p in pages if p)


class DOCXParser(DocumentParser):
    """Parser for Microsoft Word DOCX files using python-docx."""

    supported_extensions = (".docx",)

    def parse(self, path: Path) -> str:
        """Extract the non-empty paragraphs.

        Raises:
            ImportError: If python-docx is not installed.
        """
        self._validate_path(path)

        try:
            from docx import Document
        except ImportError as exc:
            raise ImportError(
                "python-docx is required for DOCX parsing. Install it with: pip install python-docx"
            ) from exc

        doc = Document(str(path))
        return "\n\n".join(p.text for p in doc.paragraphs if p.text.strip())


class HTMLParser(DocumentParser):
    """Strips tags from HTML documents using the built-in html.parser."""

    supported_extensions = (".html", ".htm")

    def parse(self, path: Path) -> str:
        self._validate_path(path)
        raw_html = path.read_text(encoding="utf-8", errors="replace")
        return self._strip_html(raw_html).strip()

    @staticmethod
    def _strip_html(html: str) -> str:
        """Remove HTML tags and decode entities to produce plain text."""
        import html as html_module
        from html.parser import HTMLParser as StdHTMLParser

        class _TextExtractor(StdHTMLParser):
            def __init__(self) -> None:
                super().__init__()
                self.parts: list[str] = []
                self._skip = False

            def handle_starttag(self, tag: str, attrs: list) -> None:
                if tag in ("script", "style", "head"):
                    self._skip = True

            def handle_endtag(self, tag: str) -> None:
                if tag in ("script", "style", "head"):
                    self._skip = False
                if tag in ("p", "div", "br", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr"):
                    self.parts.append("\n")

            def handle_data(self, data: str) -> None:
                if not self._skip:
                    self.parts.append(data)

        extractor = _TextExtractor()
        extractor.feed(html)
        text = html_module.unescape("".join(extractor.parts))
        return re.sub(r"\n{3,}", "\n\n", text)


_STRUCTURED_PARSERS: tuple[DocumentParser, ...] = (PDFParser(), DOCXParser(), HTMLParser())


def get_parser(path: Path) -> DocumentParser:
    """Pick the parser for a file by extension, defaulting to plain text."""
    for parser in _STRUCTURED_PARSERS:
        if parser.can_handle(path):
            return parser
    return TextParser()


def extract_text(path: str | Path) -> str:
    """Extract the plain text of a document file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    return get_parser(path).parse(path)
