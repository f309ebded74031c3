"""Extraction Agent - turns an uploaded resume document into plain text."""

import io
from typing import Type

from pydantic import Field

from ..models.base import AgentContext, AgentResult, HirePathBaseModel
from ..models.enums import AgentType
from ...observability.logger import get_logger
from .base import BaseAgent

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class ResumeDocument(HirePathBaseModel):
    """Input for the Extraction Agent."""

    candidate_id: str = Field(..., description="Candidate identifier")
    content: bytes = Field(b"", description="Raw document bytes")
    content_type: str = Field(PDF_CONTENT_TYPE, description="MIME type of the document")
    filename: str | None = Field(None, description="Original file name")


class ExtractedText(HirePathBaseModel):
    """Plain text pulled out of a resume document."""

    text: str = Field("", description="Extracted text, empty when extraction failed")
    library: str = Field("none", description="Library that produced the text")
    pages: int = Field(0, ge=0, description="Pages seen in the document")


class ResumeExtractionAgent(BaseAgent[ResumeDocument, ExtractedText]):
    """Extracts text with pdfplumber, falling back to PyPDF2.

    Failures are logged and produce empty text; parsing downstream degrades
    to defaults instead of aborting the workflow.
    """

    @property
    def agent_type(self) -> AgentType:
        return AgentType.EXTRACTION

    @property
    def output_schema(self) -> Type[ExtractedText]:
        return ExtractedText

    async def process(self, input_data: ResumeDocument, context: AgentContext) -> AgentResult[ExtractedText]:
        if input_data.content_type.startswith("text/"):
            text = input_data.content.decode("utf-8", errors="replace")
            return AgentResult(success=True, data=ExtractedText(text=text, library="utf-8", pages=1))

        extracted = self._extract_pdf_text(input_data.content, input_data.candidate_id)
        if not extracted.text.strip():
            logger.warning(
                "resume_extraction_empty",
                candidate_id=input_data.candidate_id,
                library=extracted.library,
            )
        return AgentResult(
            success=True,
            data=extracted,
            confidence=1.0 if extracted.text.strip() else 0.0,
        )

    def _extract_pdf_text(self, content: bytes, candidate_id: str) -> ExtractedText:
        if not content:
            return ExtractedText()

        try:
            import pdfplumber

            with pdfplumber.open(io.BytesIO(content)) as pdf:
                parts = [page.extract_text() or "" for page in pdf.pages]
                text = "\n".join(p for p in parts if p)
                if text.strip():
                    logger.info(
                        "pdf_extracted_pdfplumber",
                        candidate_id=candidate_id,
                        text_length=len(text),
                        pages=len(pdf.pages),
                    )
                    return ExtractedText(text=text, library="pdfplumber", pages=len(pdf.pages))
        except Exception as e:
            logger.warning("pdfplumber_failed", candidate_id=candidate_id, error=str(e))

        try:
            import PyPDF2

            reader = PyPDF2.PdfReader(io.BytesIO(content))
            parts = [page.extract_text() or "" for page in reader.pages]
            text = "\n".join(p for p in parts if p)
            logger.info(
                "pdf_extracted_pypdf2",
                candidate_id=candidate_id,
                text_length=len(text),
                pages=len(reader.pages),
            )
            return ExtractedText(text=text, library="pypdf2", pages=len(reader.pages))
        except Exception as e:
            logger.error("pypdf2_failed", candidate_id=candidate_id, error=str(e))
            return ExtractedText(library="error")
