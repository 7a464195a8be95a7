"""
Purpose: Guardrails for inputs headed into prompts.
Content: early, predictable failures; prevent oversized requests.
"""

from ..errors import ValidationError

MAX_INPUT_CHARS = 8000
MAX_JD_CHARS = 4000


class DefaultSecurity:
    def __init__(
        self,
        *,
        max_input_chars: int = MAX_INPUT_CHARS,
        max_jd_chars: int = MAX_JD_CHARS,
    ):
        self.max_input_chars = max_input_chars
        self.max_jd_chars = max_jd_chars

    def validate_user_input(self, text: str) -> None:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Answers are required")
        if len(text) > self.max_input_chars:
            raise ValidationError(
                "Your answers are too long. Please shorten them and submit again."
            )

    def clip_job_description(self, text: str) -> str:
        if len(text) > self.max_jd_chars:
            text = text[: self.max_jd_chars]
        return text

    def sanitize_for_prompt(self, text: str) -> str:
        return (text or "").replace("\x00", "").strip()
