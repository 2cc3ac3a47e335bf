from __future__ import annotations

"""
Offline code review used whenever no live reviewer answers.

Scoring rules:
	- Gibberish (no code-like tokens) scores 0
	- Under 20 characters scores 1, under 50 scores 2
	- Declarations present: 4, +1 over 5 lines, +1 comments, +1 error handling,
	  +0.5 when there is no console.log
	- Anything else stays at 3
	- Cap per difficulty: beginner 8, intermediate 7, advanced 6

Sub-scores subtract a fixed offset from the raw score and floor at 1.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List

from mentor.common.utils import round_half_up

HEURISTIC_MODEL = "fallback-analyzed"
REVIEW_VERSION = 1

DIFFICULTY_CAPS = {"beginner": 8, "intermediate": 7}
DEFAULT_CAP = 6

QUALITY_OFFSETS = {
    "readability": 1.0,
    "structure": 0.5,
    "efficiency": 1.5,
    "best_practices": 1.0,
}

_KEYWORDS = re.compile(
    r"\b(function|const|let|var|if|else|for|while|return|class|import|export|console|document|window)\b",
    re.IGNORECASE | re.ASCII,
)
_BRACKETS = re.compile(r"[(){}\[\]]")
_NON_ASCII = re.compile(r"[^\x00-\x7F]")
_REPEATED = re.compile(r"(.{3,})\1{3,}")

STANDARD_RESOURCES: List[Dict[str, str]] = [
    {
        "title": "Clean Code Principles",
        "url": "https://blog.cleancoder.com/uncle-bob/2012/08/13/the-clean-architecture.html",
        "type": "article",
    },
    {
        "title": "JavaScript Best Practices",
        "url": "https://developer.mozilla.org/en-US/docs/Web/JavaScript/Guide",
        "type": "documentation",
    },
]


@dataclass(frozen=True)
class CodeSignals:
    length: int
    has_basic_structure: bool
    has_comments: bool
    has_error_handling: bool
    has_console_log: bool
    lines: int
    has_code_keywords: bool
    has_brackets: bool
    has_semicolons: bool
    has_assignments: bool
    non_latin_ratio: float
    has_repeated_patterns: bool

    @property
    def is_gibberish(self) -> bool:
        bare = not self.has_code_keywords and not self.has_brackets
        if bare and not self.has_semicolons and (self.non_latin_ratio > 0.8 or self.has_repeated_patterns):
            return True
        return self.length > 100 and bare and not self.has_assignments


def analyse_code(code: str) -> CodeSignals:
    code = code or ""
    length = len(code.strip())
    non_ascii = len(_NON_ASCII.findall(code))
    return CodeSignals(
        length=length,
        has_basic_structure=any(token in code for token in ("function", "const", "let", "var")),
        has_comments="//" in code or "/*" in code,
        has_error_handling=any(token in code for token in ("try", "catch", "throw")),
        has_console_log="console.log" in code,
        lines=sum(1 for line in code.split("\n") if line.strip()),
        has_code_keywords=bool(_KEYWORDS.search(code)),
        has_brackets=bool(_BRACKETS.search(code)),
        has_semicolons=";" in code,
        has_assignments="=" in code,
        non_latin_ratio=(non_ascii / length) if length else 0.0,
        has_repeated_patterns=bool(_REPEATED.search(code)),
    )


def raw_score(difficulty: str, signals: CodeSignals) -> float:
    if signals.is_gibberish:
        score = 0.0
    elif signals.length < 20:
        score = 1.0
    elif signals.length < 50:
        score = 2.0
    elif signals.has_basic_structure:
        score = 4.0
        if signals.lines > 5:
            score += 1
        if signals.has_comments:
            score += 1
        if signals.has_error_handling:
            score += 1
        if not signals.has_console_log:
            score += 0.5
    else:
        score = 3.0
    return min(score, DIFFICULTY_CAPS.get(difficulty, DEFAULT_CAP))


def _feedback(signals: CodeSignals) -> Dict[str, List[str]]:
    strengths: List[str] = []
    improvements: List[str] = []
    bugs: List[str] = []
    gibberish = signals.is_gibberish

    if gibberish:
        improvements.append("The submitted text appears to be non-code or gibberish - please provide actual code")
        improvements.append("Make sure to submit valid programming code that addresses the challenge")
        bugs.append("Invalid or non-code submission detected")
    elif signals.length < 20:
        improvements.append("Code submission is too short - please provide a complete solution")
        improvements.append("Include proper variable declarations and function definitions")
        bugs.append("Incomplete or missing implementation")
    else:
        if signals.has_basic_structure:
            strengths.append("Code includes basic JavaScript structure")
        if signals.has_comments:
            strengths.append("Good use of comments for code documentation")
        if signals.has_error_handling:
            strengths.append("Includes error handling - excellent practice")
        if not signals.has_comments and signals.lines > 10:
            improvements.append("Add comments to explain complex logic")
        if not signals.has_error_handling:
            improvements.append("Consider adding error handling for edge cases")
        if signals.has_console_log:
            improvements.append("Remove console.log statements before production")

    if not strengths:
        strengths.append("Thank you for your submission" if gibberish else "Thank you for submitting your code")
    if not improvements:
        improvements.append("Consider refactoring for better readability")

    return {
        "strengths": strengths,
        "improvements": improvements,
        "bugs": bugs,
        "suggestions": [
            "Please submit actual code that attempts to solve the challenge"
            if gibberish
            else "Practice writing more complete solutions",
            "Focus on code structure and organization",
            "Add proper variable naming and comments",
        ],
    }


def score_submission(difficulty: str, code: str) -> Dict[str, Any]:
    """Review ``code`` without any provider; same input always gives the same review."""
    signals = analyse_code(code)
    score = raw_score(difficulty, signals)
    gibberish = signals.is_gibberish
    return {
        "overall_score": round_half_up(score),
        "feedback": _feedback(signals),
        "code_quality": {
            name: max(1, round_half_up(score - offset)) for name, offset in QUALITY_OFFSETS.items()
        },
        "career_tips": [
            "Focus on writing clean, readable code - this is highly valued by employers",
            "Practice explaining your code to others to improve communication skills",
            "Always submit valid code that demonstrates your programming skills"
            if gibberish
            else "Always provide complete, working solutions to demonstrate your skills",
        ],
        "next_steps": [
            "Practice writing more complete code solutions"
            if signals.length < 50 or gibberish
            else "Continue practicing at this difficulty level",
            "Focus on code organization and structure",
            "Learn about testing and debugging techniques",
        ],
        "resources": [dict(resource) for resource in STANDARD_RESOURCES],
        "ai_model": HEURISTIC_MODEL,
        "review_version": REVIEW_VERSION,
    }


__all__ = ["CodeSignals", "analyse_code", "raw_score", "score_submission"]
