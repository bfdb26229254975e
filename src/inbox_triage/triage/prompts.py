"""
Prompt text for message classification and unsubscribe-link extraction.
"""

from inbox_triage.models.entries import Message

CLASSIFY_SYSTEM_PROMPT = """\
Classify the email into one of these categories:

1. Promotional: Marketing emails such as newsletters or event invitations, usually not personalized.
2. Transactional: Automated messages triggered by an action, such as order confirmations or account updates, with specific details.
3. Personal: Direct messages from individuals that often need a reply, such as personal notes, direct requests, or important information from contacts.

Watch for emails that look like one category but belong to another, such as promotional emails dressed up as personal ones.

Read the email and state the category with a short reason for your choice."""

CLASSIFY_PARSE_SYSTEM_PROMPT = (
    "Parse the following message for a category classification. Only output "
    "either `promotional`, `transactional`, or `personal`."
)

EXTRACT_SYSTEM_PROMPT = """\
**Task**: Identify the unsubscribe link in the email text.

**Context**: Links in the email text appear as `[link text][index]`. For example, "unsubscribe [here][0]".

**Instructions**:
1. Look for unsubscribe-related words (e.g., "unsubscribe", "opt-out").
2. Identify the `[text][index]` for the unsubscribe action.
3. Select that link's index, or return -1 if there is none.

**Note**: URLs are omitted; rely on the text and context clues.

**Output**: The unsubscribe link's index, or -1 if not found."""


def format_message_prompt(message: Message, content: str) -> str:
    """
    Lay out a message for the model: heading, header bullets, then body.
    """
    metadata = message.metadata()
    bullets = "\n".join(f"- **{key}**: {value}" for key, value in metadata.items())
    heading = f"# {message.subject or ''} - {message.snippet or ''}"
    return f"{heading}\n\n{bullets}\n\n{content}"
