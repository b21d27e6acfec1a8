"""Pipeline stages (chunking, scraping, editing) and their orchestration live here."""

from .chunking import chunk_text_by_lines
from .pipeline import PipelineOrchestrator
