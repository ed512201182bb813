"""
Generation with count enforcement.

    Attempt(n) -> Validate -> Success
                           -> Attempt(n + 1)        (n < max_attempts)
                           -> ExhaustedFallback     (n == max_attempts)

Every attempt's output goes through the normalizer before validation, so even
the exhausted fallback is structurally sound (possibly short on counts).
A RateLimitError from the generator is not an attempt failure: it leaves the
loop immediately.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field

from examprep.core.logger import get_logger
from examprep.services.content_extraction import Part, TextPart
from examprep.services.llm.base import GenerativeClient
from examprep.services.llm.prompts import CORRECTIVE_TEMPLATE, build_corrective_instruction
from examprep.services.normalizer import GeneratedContent, NormalizeOptions, normalize_generated_content

logger = get_logger(__name__)


class GenerationState(str, enum.Enum):
    SUCCESS = "success"
    EXHAUSTED_FALLBACK = "exhausted_fallback"


@dataclass(frozen=True)
class GenerationPolicy:
    max_attempts: int = 3
    corrective_template: str = CORRECTIVE_TEMPLATE


@dataclass
class GenerationOutcome:
    content: GeneratedContent
    state: GenerationState
    attempts: int
    failures: list[list[str]] = field(default_factory=list)

    @property
    def compliant(self) -> bool:
        return self.state is GenerationState.SUCCESS


def validate_content(content: GeneratedContent, opts: NormalizeOptions) -> list[str]:
    """Returns the list of violated rules. Empty list = pass."""
    problems: list[str] = []
    n_questions = len(content.questions)
    if not (opts.min_questions <= n_questions <= opts.max_questions):
        problems.append(f"questions={n_questions} not in [{opts.min_questions}, {opts.max_questions}]")
    if len(content.flashcards) != opts.expected_flashcards:
        problems.append(f"flashcards={len(content.flashcards)} != {opts.expected_flashcards}")
    if not content.summary.strip():
        problems.append("summary is empty")
    return problems


def _attempt_parts(
    base_parts: Sequence[Part], attempt: int, opts: NormalizeOptions, policy: GenerationPolicy
) -> list[Part]:
    if attempt == 1:
        return list(base_parts)
    corrective = build_corrective_instruction(
        policy.corrective_template,
        max_questions=opts.max_questions,
        most_likely=opts.expected_most_likely,
        flashcards=opts.expected_flashcards,
    )
    return [*base_parts, TextPart(corrective)]


def generate_with_count_enforcement(
    generator: GenerativeClient,
    base_parts: Sequence[Part],
    opts: NormalizeOptions,
    policy: GenerationPolicy | None = None,
) -> GenerationOutcome:
    policy = policy or GenerationPolicy()
    max_attempts = max(1, policy.max_attempts)

    last = GeneratedContent()
    failures: list[list[str]] = []

    for attempt in range(1, max_attempts + 1):
        raw = generator.generate_json(_attempt_parts(base_parts, attempt, opts, policy))
        last = normalize_generated_content(raw, opts)

        problems = validate_content(last, opts)
        if not problems:
            logger.info(f"Generation compliant on attempt {attempt}/{max_attempts}")
            return GenerationOutcome(last, GenerationState.SUCCESS, attempt, failures)

        failures.append(problems)
        logger.warning(f"Attempt {attempt}/{max_attempts} not compliant: {'; '.join(problems)}")

    logger.warning(f"All {max_attempts} attempts non-compliant; keeping last normalized result")
    return GenerationOutcome(last, GenerationState.EXHAUSTED_FALLBACK, max_attempts, failures)
