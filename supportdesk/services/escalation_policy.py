"""Escalation policy: answer automatically or hand the conversation to a human.

Matching is a case-insensitive substring test, so a keyword anywhere in the
message escalates even amid unrelated text ("my manager said hi" escalates).
The policy prefers false positives over missed escalations.
"""

from enum import Enum
from typing import Iterable, Optional


ESCALATION_KEYWORDS = (
    "speak to admin",
    "talk to human",
    "real person",
    "human support",
    "superadmin",
    "talk to someone",
    "speak to someone",
    "contact support",
    "need help from admin",
    "escalate",
    "manager",
    "supervisor",
)


class Decision(str, Enum):
    """Outcome of the escalation policy for one inbound message."""

    AUTO_REPLY = "auto_reply"
    ESCALATE = "escalate"


def find_escalation_keyword(
    message_text: Optional[str],
    keywords: Iterable[str] = ESCALATION_KEYWORDS
) -> Optional[str]:
    """
    Return the first keyword contained in the message, ignoring case.

    Args:
        message_text: Raw inbound text
        keywords: Phrases that signal a wish to reach a human

    Returns:
        The matching keyword, or None
    """
    if not message_text:
        return None

    lowered = message_text.lower()
    for keyword in keywords:
        if keyword and keyword.lower() in lowered:
            return keyword
    return None


def decide(
    message_text: Optional[str],
    forward_requested: bool = False,
    keywords: Iterable[str] = ESCALATION_KEYWORDS
) -> Decision:
    """
    Decide whether a message gets a generated reply or goes to an operator.

    Args:
        message_text: Raw inbound text
        forward_requested: The caller explicitly asked to forward to a human
        keywords: Phrases that signal a wish to reach a human

    Returns:
        Decision.ESCALATE or Decision.AUTO_REPLY
    """
    if forward_requested:
        return Decision.ESCALATE
    if find_escalation_keyword(message_text, keywords) is not None:
        return Decision.ESCALATE
    return Decision.AUTO_REPLY
