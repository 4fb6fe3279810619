# text_extract.py
# Document text from DOCX / PDF uploads.

import io

DOCX_OK = False
PDFPLUMBER_OK = False

try:
    from docx import Document  # python-docx
    DOCX_OK = True
except ImportError:
    DOCX_OK = False

try:
    import pdfplumber
    PDFPLUMBER_OK = True
except ImportError:
    PDFPLUMBER_OK = False


def extract_docx_text(file_bytes: bytes) -> str:
    if not DOCX_OK:
        raise RuntimeError("python-docx is not installed.")
    doc = Document(io.BytesIO(file_bytes))

    parts = []
    for p in doc.paragraphs:
        t = (p.text or "").strip()
        if t:
            parts.append(t)

    # Tables (sometimes references end up in tables)
    for tbl in doc.tables:
        for row in tbl.rows:
            for cell in row.cells:
                t = (cell.text or "").strip()
                if t:
                    parts.append(t)

    return "\n".join(parts)


def extract_pdf_text(file_bytes: bytes) -> str:
    if not PDFPLUMBER_OK:
        raise RuntimeError("pdfplumber is not installed.")
    out = []
    with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
        for page in pdf.pages:
            t = (page.extract_text() or "").strip()
            if t:
                out.append(t)
    return "\n".join(out)


def extract_upload_text(filename: str, file_bytes: bytes) -> str:
    name = (filename or "").lower()
    if name.endswith(".docx"):
        return extract_docx_text(file_bytes)
    if name.endswith(".pdf"):
        return extract_pdf_text(file_bytes)
    if name.endswith(".txt"):
        return file_bytes.decode("utf-8", errors="replace")
    raise ValueError(f"Unsupported file type: {filename}")
