"""Parsing of structured (JSON) model responses into the data model.

Every parser raises ParseError when the response is not a JSON object or
lacks the keys its pipeline requires. Nothing here retries.
"""

from typing import Any, Dict, List
import json
import logging

from core.errors import ParseError
from core.models import DebugResult, ProblemInfo, Solution
from utils.string_utils import strip_code_fences, truncate

logger = logging.getLogger(__name__)


_PROBLEM_FIELDS = (
    "problem_statement",
    "input_format",
    "output_format",
    "constraints",
    "test_cases",
    "complexity",
    "validation_type",
    "difficulty",
)


def parse_json_object(response_text: str) -> Dict[str, Any]:
    """Parse a model response that must contain a single JSON object.

    Handles responses wrapped in markdown code blocks.

    Args:
        response_text: Raw response text from the model.

    Returns:
        The decoded JSON object.

    Raises:
        ParseError: If the text is not JSON or not a JSON object.
    """
    text = strip_code_fences(response_text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse model response as JSON: {e}")
        logger.debug(f"Response text: {truncate(response_text, 500)}")
        raise ParseError(f"Model response is not valid JSON: {e}", raw_response=response_text)

    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_response=response_text,
        )

    return data


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        return [str(value)]
    return [str(item) for item in value]


def parse_problem_info(response_text: str) -> ProblemInfo:
    """Parse a problem-extraction response.

    Args:
        response_text: Raw response text from the model.

    Returns:
        ProblemInfo with known fields mapped and the rest kept as metadata.

    Raises:
        ParseError: If the response is malformed or has no problem_statement.
    """
    data = parse_json_object(response_text)

    statement = data.get("problem_statement")
    if not isinstance(statement, str) or not statement.strip():
        raise ParseError("Response is missing 'problem_statement'", raw_response=response_text)

    input_format = data.get("input_format")
    output_format = data.get("output_format")
    constraints = data.get("constraints")
    test_cases = data.get("test_cases")
    complexity = data.get("complexity")

    return ProblemInfo(
        problem_statement=statement,
        input_format=input_format if isinstance(input_format, dict) else {},
        output_format=output_format if isinstance(output_format, dict) else {},
        constraints=constraints if isinstance(constraints, list) else [],
        test_cases=test_cases if isinstance(test_cases, list) else [],
        complexity=complexity if isinstance(complexity, dict) else None,
        validation_type=data.get("validation_type"),
        difficulty=data.get("difficulty"),
        metadata={k: v for k, v in data.items() if k not in _PROBLEM_FIELDS},
    )


def parse_solution(response_text: str) -> Solution:
    """Parse a solution-generation response of the form {"solution": {...}}.

    Raises:
        ParseError: If the response is malformed or solution.code is empty.
    """
    data = parse_json_object(response_text)

    solution = data.get("solution")
    if not isinstance(solution, dict):
        raise ParseError("Response is missing the 'solution' object", raw_response=response_text)

    code = solution.get("code")
    if not isinstance(code, str) or not code.strip():
        raise ParseError("Solution has no code", raw_response=response_text)

    return Solution(
        code=code,
        problem_statement=str(solution.get("problem_statement", "")),
        context=str(solution.get("context", "")),
        suggested_responses=_string_list(solution.get("suggested_responses")),
        reasoning=str(solution.get("reasoning", "")),
    )


def parse_debug_result(response_text: str) -> DebugResult:
    """Parse a debug-analysis response.

    Only a JSON object is required; missing keys default to empty values and
    the whole object is kept in DebugResult.raw.

    Raises:
        ParseError: If the response is not a JSON object.
    """
    data = parse_json_object(response_text)

    new_code = data.get("new_code") or data.get("code") or ""

    return DebugResult(
        new_code=str(new_code),
        thoughts=_string_list(data.get("thoughts")),
        time_complexity=str(data.get("time_complexity", "")),
        space_complexity=str(data.get("space_complexity", "")),
        feedback=str(data.get("feedback", "")),
        raw=data,
    )
