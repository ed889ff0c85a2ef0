"""Prompt templates for the review model.

The review prompt asks for a strict JSON document only, declares the output
schema inline, and restricts inline-comment locations to new-file line
numbers (the ``+++`` side of the diff).
"""

REVIEW_SYSTEM_PROMPT = (
    "You are a strict code reviewer. You answer with a single JSON object "
    "and nothing else."
)

REVIEW_OUTPUT_SCHEMA = """{
  "inlineComments": [
    { "file": string, "line": number, "comment": string, "severity": "blocker" | "warning" | "nit", "code": string }
  ],
  "generalComments": [string]
}"""

REVIEW_PROMPT = """You are a strict code reviewer. Use the provided CONTEXT (read-only) to understand the project.
Review ONLY the DIFF and produce ONLY valid JSON. No text outside JSON. No markdown. No comments.
Pay attention to typos, bugs, security, performance, architecture, best practices, and style.
Add a summary of all changed code to "generalComments".

<schema>
{schema}
</schema>

<guidelines>
- "line" MUST be the line number in the NEW file (the "+++" side of the diff). Lines of the old file are not valid locations.
- Keep comments concise and actionable.
- Use "blocker" only for correctness, security or build issues; "warning" for risky patterns; "nit" for style.
- In "code", quote exactly the code the comment refers to.
- If there is nothing to report, return empty arrays.
</guidelines>

CONTEXT:
{context}

DIFF:
{diff}

Return JSON now:"""


def get_review_prompt(context: str, diff: str) -> str:
    """Fill the review template with the context buffer and the diff."""
    return REVIEW_PROMPT.format(
        schema=REVIEW_OUTPUT_SCHEMA,
        context=context,
        diff=diff,
    ).strip()
