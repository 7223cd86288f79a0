"""Invoice port: renders an invoice for an order and mails it to the customer."""

from abc import ABC, abstractmethod


class InvoicePort(ABC):
    @abstractmethod
    def generate_and_send(self, order: dict, to: str) -> dict:
        """Produce the invoice document for ``order`` and deliver it to ``to``.

        Returns:
            dict with keys: invoice_number, status ("sent" or "failed"), error (optional)
        """
        ...
