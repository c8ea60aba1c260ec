"""Model-backed MultiversX contract generator.

Sends the generation / repair / test prompts to an OpenAI chat model and
returns only the extracted code payload. Structural validation failures
raise ``GenerationValidationError``; transport failures raise
``GenerationError``. Nothing is retried here: the healing loop decides what
a failed call means.
"""

from __future__ import annotations

from typing import Optional

from openai import AsyncOpenAI

from healing.stream import SessionProgress

from .code_extraction import ensure_required_markers, extract_code_block, require_text, validate_code
from .llm_utils import call_chat_completion
from .prompts import (
    FIX_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    TESTS_SYSTEM_PROMPT,
    build_fix_prompt,
    build_generation_prompt,
    build_tests_prompt,
)


class OpenAIContractGenerator:
    """Generate and repair contract code with an OpenAI chat model"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        fix_temperature: float = 0.1,
        max_attempts: int = 3,
        timeout: float = 120,
        client: Optional[AsyncOpenAI] = None,
        verbose: bool = False,
    ):
        if client is None and not api_key:
            raise RuntimeError(
                "OpenAI API key not found. Set OPENAI_API_KEY or API_KEY in your environment/.env."
            )
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.fix_temperature = fix_temperature
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.verbose = verbose

    async def generate(
        self,
        description: str,
        category: str,
        progress: Optional[SessionProgress] = None,
    ) -> str:
        require_text("description", description)
        require_text("category", category)

        if progress:
            progress.status("Generating contract code with AI...", 10)
            progress.terminal("> Starting AI code generation...\n")
        if self.verbose:
            print(f"  🤖 Generating contract for: {description[:50]}...")

        text = await self._complete(SYSTEM_PROMPT, build_generation_prompt(description, category), self.temperature)
        code = ensure_required_markers(extract_code_block(text))

        if progress:
            for issue in validate_code(code):
                progress.terminal(f"⚠ {issue}\n")
            progress.status("Code generated successfully", 30)
        if self.verbose:
            print(f"  ✓ Code generated ({len(code)} bytes)")
        return code

    async def fix(self, source_text: str, error_text: str, attempt_number: int) -> str:
        prompt = build_fix_prompt(source_text, error_text, attempt_number, self.max_attempts)
        text = await self._complete(FIX_SYSTEM_PROMPT, prompt, self.fix_temperature)
        code = ensure_required_markers(extract_code_block(text))
        if self.verbose:
            print(f"  🔧 Fix generated for attempt {attempt_number}")
        return code

    async def generate_tests(self, source_text: str) -> str:
        text = await self._complete(TESTS_SYSTEM_PROMPT, build_tests_prompt(source_text), self.temperature)
        return extract_code_block(text)

    async def _complete(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        return await call_chat_completion(
            self.client,
            self.model,
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            timeout=self.timeout,
            debug=self.verbose,
            temperature=temperature,
        )
