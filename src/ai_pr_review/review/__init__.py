from .prompts import build_file_prompt, build_summary_prompt
from .engine import ReviewEngine, ReviewOptions, ReviewOutcome

__all__ = ["build_file_prompt", "build_summary_prompt", "ReviewEngine", "ReviewOptions", "ReviewOutcome"]
