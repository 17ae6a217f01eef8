"""Code-review verdict — the structured result the review command asks for."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .structured.schema import Schema

MAX_CODE_CHARS = 12000


class ReviewIssue(BaseModel):
    line: int = 0
    severity: Literal["low", "medium", "high"]
    type: Literal["security", "performance", "style", "bug"]
    message: str


class ReviewAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    grade: Literal["A", "B", "C", "D", "F"]
    coverage: float = Field(ge=0, le=100)
    tests_present: bool = Field(alias="testsPresent")
    value: Literal["high", "medium", "low"]
    state: Literal["pass", "warning", "fail"]
    issues: list[ReviewIssue] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    summary: str


REVIEW_SCHEMA = Schema.from_model(ReviewAnalysis)

REVIEW_SYSTEM_PROMPT = (
    "You must respond with valid JSON that matches the required schema. "
    "Do not include any other text or formatting. For coverage field, provide "
    'a number between 0-100 (not a string like "75%"). For testsPresent field, '
    "provide true or false (not a string)."
)


def build_review_prompt(code: str, path: str | None = None) -> str:
    """Task prompt for reviewing one file; the JSON instructions are added later."""
    if len(code) > MAX_CODE_CHARS:
        code = code[:MAX_CODE_CHARS] + "\n... (truncated)"
    where = f" `{path}`" if path else ""
    return f"""Review the following code{where} as a senior engineer.

Grade it A-F, estimate test coverage as a percentage (0-100), say whether
tests are present, rate its business value (high/medium/low) and give an
overall state (pass/warning/fail). List concrete issues with their line
number, severity and type (security, performance, style or bug), then
suggestions and a short summary.

```
{code}
```"""


def format_review(review: ReviewAnalysis) -> str:
    lines = [
        f"Grade: {review.grade}  State: {review.state}  Value: {review.value}",
        f"Coverage: {review.coverage:g}%  Tests present: {'yes' if review.tests_present else 'no'}",
        "",
        review.summary,
    ]
    if review.issues:
        lines += ["", "Issues:"]
        for issue in review.issues:
            lines.append(
                f"  L{issue.line} [{issue.severity}/{issue.type}] {issue.message}"
            )
    if review.suggestions:
        lines += ["", "Suggestions:"]
        lines += [f"  - {s}" for s in review.suggestions]
    return "\n".join(lines)
