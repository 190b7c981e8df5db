from .classifier import classify
from .fallback import extract_price_near_provider, fallback_extract
from .llm_client import CompletionOptions, OpenAICompletion
from .pipeline import OfferExtractionPipeline
from .prompts import EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt

__all__ = [
    "CompletionOptions",
    "EXTRACTION_SYSTEM_PROMPT",
    "OfferExtractionPipeline",
    "OpenAICompletion",
    "build_extraction_prompt",
    "classify",
    "extract_price_near_provider",
    "fallback_extract",
]
