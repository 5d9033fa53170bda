"""Prompt text sent to the model backends."""

import json

from core.models import ProblemInfo


SYSTEM_PROMPT = """You are an on-screen assistant that helps with whatever the user is looking at, not only programming tasks.
For every input, work out what the situation is, state the problem clearly, give the relevant context and suggest several responses or next steps the user could take, as a numbered list.
Explain your reasoning step by step.

When the input is a coding or technical problem, prefer a code solution. Use Python unless another language is clearly required.
Code must be complete and runnable: include imports, keep indentation consistent and comment the non-obvious parts.
Keep answers to non-technical questions short and actionable."""

EXTRACT_PROBLEM_PROMPT = """Analyze these images and extract the following information as a JSON object:
{
    "problem_statement": "What the user needs help with",
    "context": "Relevant surrounding context",
    "suggested_responses": ["Possible response or next step"],
    "reasoning": "Why these suggestions fit"
}
Return ONLY the JSON object."""

SOLUTION_PROMPT_TEMPLATE = """Given this problem:
{problem}

Respond with a JSON object of this form:
{{
    "solution": {{
        "code": "Complete solution code",
        "problem_statement": "Restated problem",
        "context": "Relevant context",
        "suggested_responses": ["Possible response or next step"],
        "reasoning": "Step-by-step reasoning"
    }}
}}
Return ONLY the JSON object."""

DEBUG_PROMPT_TEMPLATE = """You are given:
1. Problem: {problem}
2. Current code:
{code}
3. Screenshots showing the result of running it (attached)

Review the code against what the screenshots show and respond with a JSON object:
{{
    "new_code": "Corrected code, or the current code if it is already right",
    "thoughts": ["Observation about the screenshots or the code"],
    "time_complexity": "Big-O time of new_code",
    "space_complexity": "Big-O space of new_code",
    "feedback": "Summary of what was wrong and what changed"
}}
Return ONLY the JSON object."""

DESCRIBE_AUDIO_PROMPT = "Describe this audio clip concisely and suggest possible actions."

DESCRIBE_IMAGE_PROMPT = "Describe this image concisely and suggest possible actions."

PROBE_PROMPT = "Hello"


def with_system_prompt(prompt: str) -> str:
    """Prefix a task prompt with the assistant system prompt."""
    return f"{SYSTEM_PROMPT}\n\n{prompt}"


def solution_prompt(problem: ProblemInfo) -> str:
    return SOLUTION_PROMPT_TEMPLATE.format(problem=json.dumps(problem.to_dict(), indent=2))


def debug_prompt(problem: ProblemInfo, code: str) -> str:
    return DEBUG_PROMPT_TEMPLATE.format(
        problem=json.dumps(problem.to_dict(), indent=2),
        code=code,
    )
