SYSTEM_PROMPT = "You are a senior software engineer doing a careful, strict code review."


def _join(lines: list[str]) -> str:
    """Join prompt lines, dropping the empty ones."""
    return "\n".join(line for line in lines if line)


def build_summary_prompt(
    language: str,
    files_summary: str,
    diff_text: str,
    extra_instructions: str = "",
) -> str:
    """Build the single prompt used to review a whole pull request."""
    return _join([
        "You are a senior software engineer doing a pull request code review.",
        f"Reply in {language}.",
        "Be concise but specific. Prefer bullet points.",
        "Focus on: bugs, security, correctness, performance, DX, and test gaps.",
        "If you suggest changes, show small code snippets or exact lines (file:line if possible).",
        f"Extra instructions: {extra_instructions}" if extra_instructions else "",
        "",
        "Files in PR (with additions/deletions):",
        files_summary,
        "",
        "Unified diff (may be truncated):",
        diff_text,
    ])


def build_file_prompt(
    language: str,
    filename: str,
    diff_chunk: str,
    chunk_info: str | None = None,
    extra_instructions: str = "",
) -> str:
    """Build the prompt for one chunk of one file's diff."""
    chunk_note = f"\n(This is {chunk_info})" if chunk_info else ""
    return _join([
        f"Review the following file diff.{chunk_note}",
        "",
        f"File: {filename}",
        "",
        "Focus on:",
        "- Bugs",
        "- Security issues",
        "- Incorrect logic",
        "- Performance problems",
        "- Missing edge cases",
        "- Concrete improvement suggestions",
        "",
        "If possible, suggest small code snippets or exact fixes.",
        f"Reply in {language}.",
        "Be concise. Prefer bullet points.",
        "Do NOT repeat the diff.",
        f"\nExtra instructions: {extra_instructions}" if extra_instructions else "",
        "",
        "Diff:",
        diff_chunk,
    ])
