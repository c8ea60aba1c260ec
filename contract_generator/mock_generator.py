"""Deterministic stand-in for the model-backed generator.

Used when no API key is configured (GENERATOR_BACKEND=mock) and in tests.
It walks through the same status milestones as a real generation and
returns a fixed, structurally valid contract for the requested category.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from healing.stream import SessionProgress

from .code_extraction import require_text

MOCK_STEPS = (
    ("Analyzing requirements...", 10),
    ("Generating contract structure...", 30),
    ("Writing smart contract code...", 50),
    ("Code generation complete!", 100),
)

MOCK_CONTRACT_TEMPLATE = """#![no_std]

multiversx_sc::imports!();
multiversx_sc::derive_imports!();

/// {description}
#[multiversx_sc::contract]
pub trait {trait_name} {{
    #[init]
    fn init(&self) {{
        self.counter().set(0u64);
    }}

    #[upgrade]
    fn upgrade(&self) {{}}

    #[endpoint]
    fn increment(&self) {{
        self.counter().update(|value| *value += 1);
    }}

    #[view(getCounter)]
    #[storage_mapper("counter")]
    fn counter(&self) -> SingleValueMapper<u64>;
}}
"""

MOCK_TESTS_TEMPLATE = """use multiversx_sc_scenario::*;

#[test]
fn {test_name}_deploys() {{
    let mut world = ScenarioWorld::new();
    world.start_trace();
}}
"""


def _trait_name(category: str) -> str:
    words = [w for w in "".join(c if c.isalnum() else " " for c in category).split() if w]
    base = "".join(w[:1].upper() + w[1:] for w in words) or "Generated"
    if base[0].isdigit():
        base = "C" + base
    return f"{base}Contract"


class MockCodeGenerator:
    """Offline generator: fixed template, scripted progress, no network"""

    def __init__(self, delays: Sequence[float] = (1.0, 0.8, 1.0, 0.5), verbose: bool = False):
        self.delays = tuple(delays)
        self.verbose = verbose
        self.fix_calls = 0

    async def generate(
        self,
        description: str,
        category: str,
        progress: Optional[SessionProgress] = None,
    ) -> str:
        require_text("description", description)
        require_text("category", category)

        if progress:
            progress.terminal("🎭 MOCK MODE ENABLED - Simulating generation...\n")

        for index, (message, percent) in enumerate(MOCK_STEPS):
            delay = self.delays[index] if index < len(self.delays) else 0
            if delay:
                await asyncio.sleep(delay)
            if progress:
                progress.status(message, percent)
                progress.terminal(f"> {message}\n")

        code = MOCK_CONTRACT_TEMPLATE.format(
            description=" ".join(description.split()),
            trait_name=_trait_name(category),
        )
        if self.verbose:
            print(f"  🎭 Mock contract generated for category '{category}'")
        return code

    async def fix(self, source_text: str, error_text: str, attempt_number: int) -> str:
        self.fix_calls += 1
        # Always differs from the input so each attempt compiles new text
        return f"{source_text.rstrip()}\n// mock fix attempt {attempt_number}\n"

    async def generate_tests(self, source_text: str) -> str:
        return MOCK_TESTS_TEMPLATE.format(test_name="contract")
