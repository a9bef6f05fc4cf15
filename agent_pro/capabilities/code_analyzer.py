"""Line-level metrics for the active document."""

from agent_pro.capabilities.base import (
    Capability,
    CapabilityName,
    CapabilityOutput,
    InvocationContext,
    InvocationOptions,
)

COMMENT_PREFIXES = ("//", "#", "/*")


class CodeAnalyzer(Capability):
    name = CapabilityName.CODE_ANALYZER
    display_name = "Code Analyzer"
    description = "Analyzes code complexity, patterns, and potential improvements"
    error_prefix = "Error analyzing code"

    async def run(
        self, options: InvocationOptions, context: InvocationContext
    ) -> CapabilityOutput:
        document = context.require_editor().document
        text = document.text

        lines = text.split("\n")
        code_lines = [line for line in lines if line.strip()]
        comment_lines = [
            line for line in lines if line.strip().startswith(COMMENT_PREFIXES)
        ]
        average_line_length = round(len(text) / len(lines))
        comment_ratio = (
            len(comment_lines) / len(code_lines) * 100 if code_lines else 0.0
        )

        result = (
            f"Code Analysis for {document.base_name}:\n"
            f"- Language: {document.language_id}\n"
            f"- Total Lines: {len(lines)}\n"
            f"- Code Lines: {len(code_lines)}\n"
            f"- Comment Lines: {len(comment_lines)}\n"
            f"- Average Line Length: {average_line_length} characters\n"
            f"- Comment Ratio: {comment_ratio:.1f}%"
        )
        return CapabilityOutput(
            text=result,
            metadata={
                "language": document.language_id,
                "total_lines": len(lines),
                "code_lines": len(code_lines),
                "comment_lines": len(comment_lines),
            },
        )
