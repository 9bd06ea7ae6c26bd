"""Prompt texts for the LLM evaluator."""
from __future__ import annotations

from typing import Dict, List

LINK_SYSTEM_PROMPT = """\
You are a link evaluator that determines the relevance of URLs and their associated texts to user queries.

Step 1: Understand the user's query:
- What is the user looking for?
- What level of detail or specificity might they need?

Step 2: Evaluate links based on:
1. URL credibility: Is the domain trustworthy, and does the URL suggest relevant content?
2. Link text relevance: Does the text directly relate to the query?
3. Query-specific content: Is the link likely to contain detailed, useful information?

Step 3: Adjust for irrelevant links:
- Lower priority for terms of service, privacy policies, language-switching links, or generic forms.
- Focus on links that provide clear, query-relevant value.
"""

CONTENT_SYSTEM_PROMPT = """\
You are a content evaluator that analyzes webpage content to determine its relevance to user queries.
Focus on:
1. Direct answers to the query
2. Content depth and comprehensiveness
3. Information accuracy and specificity
"""


def link_prompt(targets: Dict[str, List[str]], query: str) -> str:
    listing = "\n\n".join(
        f"[{i}] URL: {url}\nTexts: {' | '.join(texts)}"
        for i, (url, texts) in enumerate(targets.items(), start=1)
    )
    return f"""\
Search Query: {query}

Goal: Evaluate which of these linked pages are most likely to contain relevant information about the query.
Rate each link's potential relevance:

1 = Unlikely to contain query-related info: legal pages, language switches, help pages,
    advertising, unrelated social media, login or sign-up pages.
2 = May have some related background info but is not directly relevant.
3 = Likely contains relevant information about the query.
4 = Very likely has important query-specific content that addresses key aspects of the query.
5 = Appears to directly address the query comprehensively and with high specificity.

Links to evaluate:
{listing}

Respond with a JSON object of the form
{{"links": [{{"url": "<url exactly as listed>", "priority": <1-5>}}]}}
"""


def content_prompt(content: str, query: str, max_chars: int) -> str:
    return f"""\
Search Query: {query}
Content to evaluate: {content[:max_chars]}

Evaluate how well this content answers or relates to the search query.
Rate from 1-5:
1 = Contains minimal query-relevant information
2 = Has some background or tangential information
3 = Contains directly relevant information
4 = Provides detailed query-specific content
5 = Comprehensively addresses the query

Respond with a JSON object of the form {{"priority": <1-5>}}
"""
