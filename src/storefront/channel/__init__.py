"""Channel adapter registry.

Email is the only channel that leaves the process; in-app notifications are
delivered by being stored. The fake email adapter is used until a real one is
installed with ``set_email_adapter``.
"""

from storefront.channel.email_port import EmailPort
from storefront.channel.fake_email import FakeEmailAdapter

_email_adapter: EmailPort | None = None


def get_email_adapter() -> EmailPort:
    global _email_adapter
    if _email_adapter is None:
        _email_adapter = FakeEmailAdapter()
    return _email_adapter


def set_email_adapter(adapter: EmailPort) -> None:
    global _email_adapter
    _email_adapter = adapter


def reset_channels() -> None:
    """Reset channel singletons (useful for testing)."""
    global _email_adapter
    _email_adapter = None
