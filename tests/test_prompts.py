from ai_pr_review.review.prompts import SYSTEM_PROMPT, build_file_prompt, build_summary_prompt


def test_system_prompt_mentions_code_review():
    assert "code review" in SYSTEM_PROMPT.lower()


def test_build_summary_prompt_contains_all_parts():
    prompt = build_summary_prompt(
        language="English",
        files_summary="- file1.js (+10/-5)\n- file2.js (+3/-1)",
        diff_text="+added line\n-removed line",
    )

    assert "Reply in English." in prompt
    assert "file1.js (+10/-5)" in prompt
    assert "+added line\n-removed line" in prompt
    assert "security" in prompt
    assert "Extra instructions" not in prompt


def test_build_summary_prompt_extra_instructions():
    prompt = build_summary_prompt("English", "- a.py (+1/-0)", "+x", extra_instructions="Focus on security vulnerabilities")
    assert "Extra instructions: Focus on security vulnerabilities" in prompt


def test_build_file_prompt_single_chunk():
    prompt = build_file_prompt(language="Turkish", filename="src/app.py", diff_chunk="+print(1)")

    assert prompt.startswith("Review the following file diff.\n")
    assert "File: src/app.py" in prompt
    assert "Reply in Turkish." in prompt
    assert "(This is" not in prompt
    assert prompt.endswith("Diff:\n+print(1)")


def test_build_file_prompt_chunk_info():
    prompt = build_file_prompt("English", "a.py", "+x", chunk_info="part 2/3", extra_instructions="Be brief")

    assert "(This is part 2/3)" in prompt
    assert "Extra instructions: Be brief" in prompt
