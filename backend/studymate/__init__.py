"""StudyMate backend: study assistant API with an OCR + LLM question solver."""

__version__ = "1.0.0"
