"""
Prompt and tool schema shared by the LLM adapters (Gemini, GPT, Claude).

Each adapter wraps the same rubric in its provider's request format; the
structured reply is validated against `LLMVerdict` on the way back.
"""

TOOL_NAME = "detect_ai_content"
TOOL_DESCRIPTION = "Analyze text and return AI detection probability"

SYSTEM_PROMPT = """You are an advanced AI content detector. Analyze the given text and determine the probability that it was AI-generated.

Focus on these AI indicators:
- Uniform sentence lengths and structure
- Overuse of formal transition words (furthermore, moreover, additionally, consequently, therefore, nevertheless, subsequently, specifically, particularly, essentially, ultimately)
- Perfect grammar with no natural human imperfections
- Lack of contractions or colloquial language
- Predictable word patterns and phrases
- Absence of personal anecdotes or unique perspectives
- Overly balanced paragraph structures
- Use of em-dashes in a formulaic way

Provide a probability score from 0-100, where:
- 0-30: Likely human-written
- 31-70: Mixed or uncertain
- 71-100: Likely AI-generated

Split the text into three shares that add up to exactly 100:
- ai_generated: portion that reads as produced by an AI model
- mixed: portion that reads as human writing edited or polished by AI
- human: portion that reads as written by a person

Also provide your confidence level (0-100) in this assessment and brief reasoning."""

_PERCENT = {"type": "number", "minimum": 0, "maximum": 100}

TOOL_PARAMETERS = {
    "type": "object",
    "properties": {
        "ai_probability": {**_PERCENT, "description": "Probability the text is AI-generated (0-100)"},
        "confidence": {**_PERCENT, "description": "Confidence in this assessment (0-100)"},
        "reasoning": {"type": "string", "description": "Brief explanation of the assessment"},
        "breakdown": {
            "type": "object",
            "description": "Shares of the text, summing to 100",
            "properties": {
                "ai_generated": _PERCENT,
                "mixed": _PERCENT,
                "human": _PERCENT,
            },
            "required": ["ai_generated", "mixed", "human"],
            "additionalProperties": False,
        },
    },
    "required": ["ai_probability", "confidence", "reasoning", "breakdown"],
    "additionalProperties": False,
}


def build_user_message(text: str) -> str:
    return f"Analyze this text for AI generation:\n\n{text}"
