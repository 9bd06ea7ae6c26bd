"""scouter.evaluator: LLM-based relevance rating of links and pages."""

from .openai_evaluator import OpenAIEvaluator

__all__ = ["OpenAIEvaluator"]
