"""Exception hierarchy for the support desk."""


class SupportDeskError(Exception):
    """Base class for support desk errors."""


class ConversationNotFoundError(SupportDeskError):
    """Referenced conversation id does not exist."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id


class StorageWriteError(SupportDeskError):
    """An append, flag update or status update was not durably recorded."""


class GatewayError(SupportDeskError):
    """The text-completion gateway failed. Recovered with a fallback reply."""


class GatewayTimeoutError(GatewayError):
    """The gateway did not answer within the configured timeout."""


class GatewayRateLimitedError(GatewayError):
    """The gateway is throttling requests. Transient, the caller may retry."""


class GatewayUnavailableError(GatewayError):
    """The gateway is out of quota, not configured or down."""
