"""Heuristic performance checks for the active document."""

import re
from typing import Callable, List, NamedTuple, Optional

from agent_pro.capabilities.base import (
    Capability,
    CapabilityName,
    CapabilityOutput,
    InvocationContext,
    InvocationOptions,
)

MAP_FILTER_PATTERN = re.compile(r"\.map\(.*\)\.filter\(.*\)")
RANGE_LEN_PATTERN = re.compile(r"\brange\(\s*len\(")

JS_LANGUAGES = frozenset({"javascript", "typescript", "javascriptreact", "typescriptreact"})

GENERAL_RECOMMENDATIONS = (
    "General Recommendations:\n"
    "- Profile with appropriate tools before optimizing\n"
    "- Focus on algorithmic improvements first\n"
    "- Consider caching for expensive operations\n"
    "- Minimize I/O operations in hot paths"
)


class PerformanceCheck(NamedTuple):
    languages: Optional[frozenset]  # None applies to every language
    matches: Callable[[str], bool]
    message: str


CHECKS: List[PerformanceCheck] = [
    PerformanceCheck(
        None,
        lambda text: "for (" in text and ".push(" in text,
        "⚠️ Detected array push in loop - consider pre-allocation",
    ),
    PerformanceCheck(
        None,
        lambda text: MAP_FILTER_PATTERN.search(text) is not None,
        "⚠️ Chained map+filter detected - consider single reduce for performance",
    ),
    PerformanceCheck(
        JS_LANGUAGES,
        lambda text: "JSON.parse(JSON.stringify(" in text,
        "⚠️ Deep clone via JSON detected - consider structured clone or library",
    ),
    PerformanceCheck(
        frozenset({"python"}),
        lambda text: "pandas" in text,
        "ℹ️ Pandas detected - ensure vectorized operations over loops",
    ),
    PerformanceCheck(
        frozenset({"python"}),
        lambda text: RANGE_LEN_PATTERN.search(text) is not None,
        "ℹ️ range(len(...)) iteration detected - consider enumerate() or direct iteration",
    ),
]


def run_checks(text: str, language_id: str) -> List[str]:
    return [
        check.message
        for check in CHECKS
        if (check.languages is None or language_id in check.languages)
        and check.matches(text)
    ]


class PerformanceProfiler(Capability):
    name = CapabilityName.PERFORMANCE_PROFILER
    display_name = "Performance Profiler"
    description = "Provides performance insights and optimization suggestions"
    error_prefix = "Error profiling performance"

    async def run(
        self, options: InvocationOptions, context: InvocationContext
    ) -> CapabilityOutput:
        document = context.require_editor().document
        findings = run_checks(document.text, document.language_id)
        summary = (
            "\n".join(findings) if findings else "✓ No obvious performance issues detected"
        )

        result = (
            "Performance Analysis:\n"
            f"File: {document.base_name}\n"
            f"Language: {document.language_id}\n"
            "\n"
            f"{summary}\n"
            "\n"
            f"{GENERAL_RECOMMENDATIONS}"
        )
        return CapabilityOutput(
            text=result,
            metadata={"language": document.language_id, "findings": len(findings)},
        )
