"""Prompt for parameter extraction."""

EXTRACT_PROMPT: str = """
Extract parameters for function "{function_name}" from user query: "{query}"

Function parameters:
{parameters}

Examples:
- "top 5 products" → {{"limit": 5}}
- "sales in January 2024" → {{"startDate": "2024-01-01", "endDate": "2024-01-31"}}
- "companies from USA" → {{"country": "USA"}}

Return only a JSON object with the extracted parameters. Use null for missing required parameters.
For dates, use YYYY-MM-DD format. For text, extract exactly as mentioned.

JSON:
"""
