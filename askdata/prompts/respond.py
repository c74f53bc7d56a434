"""Prompts for turning results (or misses) into prose."""

FORMAT_PROMPT: str = """
User asked: "{query}"
Function used: {function_name}
Function parameters: {parameters}

Raw data result:
{preview}

Create a natural, conversational response that:
1. Directly answers the user's question
2. Presents the key information clearly
3. Uses tables or lists for multiple items
4. Includes relevant numbers and insights
5. Stays concise but informative

If the data is empty or null, explain that no results were found for their query.
Format numbers nicely (e.g., $1,234.56 for currency, 1,234 for counts).
Use markdown formatting for better readability.
"""

APOLOGY_PROMPT: str = """
The user asked: "{query}"

I couldn't find a specific function to handle this query. Available data categories include: {categories}.

Generate a helpful response that:
1. Acknowledges I couldn't process their specific request
2. Suggests similar queries I can handle
3. Lists 2-3 example questions for each relevant category

Keep it friendly and concise.
"""

APOLOGY_FALLBACK: str = (
    "I'm sorry, I couldn't understand your request: \"{query}\". "
    "Try asking about {categories}. For example: "
    "\"What are the top selling products?\" or \"Show me recent transactions.\""
)

MISSING_PARAMETERS_REPLY: str = (
    "I need a bit more information to answer that. "
    "Please tell me the {missing} you're interested in."
)

EMPTY_RESULT_REPLY: str = "No results were found for your query about {function_name}."

MISSING_RESULT_REPLY: str = "I found the function but couldn't retrieve the data."

GENERIC_ERROR_REPLY: str = (
    "Sorry, I ran into a problem while processing your request. Please try again in a moment."
)
