"""Prompt templates for privacy-policy analysis.

The system prompt is fixed; the user's selected text is sent verbatim as
the only user message.
"""

SYSTEM_PROMPT = (
    "You are a privacy policy analyst. Break down privacy agreements into "
    "clear pros, cons, and red flags using bullet points or headers. Be "
    "detailed and unbiased."
)


def build_messages(selected_text: str) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": selected_text},
    ]
