"""Prompts for candidate ranking and catalog-wide fallback matching."""

RANK_PROMPT: str = """
You are ranking function matches for a user query.

User Query: "{query}"

Potential Matches:
{candidates}

Select the BEST match by returning just the number (1, 2, 3, etc.) or "none" if no good match.
Consider:
- Semantic similarity to user intent
- Function relevance
- Vector certainty score

Return just the number:
"""

FALLBACK_PROMPT: str = """
You are an expert function router for a sales dashboard AI system.

User Query: "{query}"

Available Functions:
{functions}

Your task:
1. Find the best matching function for the user's query
2. Return the function name and a confidence score (0-1)
3. If no good match exists, return null

Return a JSON object with this format:
{{
  "functionName": "exactFunctionName",
  "confidence": 0.85,
  "reasoning": "brief explanation"
}}

If no match found, return: {{"functionName": null}}
"""
