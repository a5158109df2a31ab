"""
External text sources (vision transcription, summary).
"""

from .base import VisionTextSource, SummaryTextSource, extract_json
from .openai_source import OpenAICompatibleSource
