"""Documentation format guidance for the active document."""

from agent_pro.capabilities.base import (
    Capability,
    CapabilityName,
    CapabilityOutput,
    InvocationContext,
    InvocationOptions,
)

DOC_FORMATS = {
    "javascript": "JSDoc",
    "typescript": "TSDoc",
    "python": "docstring (Google/NumPy style)",
    "java": "JavaDoc",
    "go": "GoDoc",
    "rust": "RustDoc",
}
DEFAULT_DOC_FORMAT = "inline comments"


class DocumentationBuilder(Capability):
    name = CapabilityName.DOCUMENTATION_BUILDER
    display_name = "Documentation Builder"
    description = "Generates documentation templates and suggestions"
    error_prefix = "Error building documentation"

    async def run(
        self, options: InvocationOptions, context: InvocationContext
    ) -> CapabilityOutput:
        document = context.require_editor().document
        doc_format = DOC_FORMATS.get(document.language_id, DEFAULT_DOC_FORMAT)

        template = (
            f"Documentation Guide for {document.language_id}:\n"
            f"- Recommended format: {doc_format}\n"
            f"- File: {document.base_name}\n"
            "\n"
            "Documentation should include:\n"
            "- Function/method purpose and behavior\n"
            "- Parameter descriptions and types\n"
            "- Return value description\n"
            "- Usage examples\n"
            "- Exceptions/errors thrown\n"
            "- Related functions/methods"
        )
        return CapabilityOutput(
            text=template,
            metadata={"language": document.language_id, "format": doc_format},
        )
