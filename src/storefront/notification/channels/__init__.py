"""Notification adapter registry.

Fake adapters are installed by default; a deployment swaps in real ones
with :func:`set_email_adapter` / :func:`set_invoice_adapter` at startup.
"""

from storefront.notification.channels.email_port import EmailPort
from storefront.notification.channels.invoice_port import InvoicePort

_email_adapter: EmailPort | None = None
_invoice_adapter: InvoicePort | None = None


def get_email_adapter() -> EmailPort:
    global _email_adapter
    if _email_adapter is None:
        from storefront.notification.channels.fake_email import FakeEmailAdapter

        _email_adapter = FakeEmailAdapter()
    return _email_adapter


def set_email_adapter(adapter: EmailPort) -> None:
    global _email_adapter
    _email_adapter = adapter


def get_invoice_adapter() -> InvoicePort:
    global _invoice_adapter
    if _invoice_adapter is None:
        from storefront.notification.channels.fake_invoice import FakeInvoiceAdapter

        _invoice_adapter = FakeInvoiceAdapter()
    return _invoice_adapter


def set_invoice_adapter(adapter: InvoicePort) -> None:
    global _invoice_adapter
    _invoice_adapter = adapter


def reset_channels():
    """Drop configured adapters; the next lookup installs fresh fakes."""
    global _email_adapter, _invoice_adapter
    _email_adapter = None
    _invoice_adapter = None
