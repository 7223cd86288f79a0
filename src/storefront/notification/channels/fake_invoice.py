"""Fake invoice adapter: builds the invoice as a dict instead of a PDF."""

from storefront.notification.channels.invoice_port import InvoicePort


class FakeInvoiceAdapter(InvoicePort):
    def __init__(self):
        self.invoices: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Invoice generation failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Invoice generation failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def generate_and_send(self, order: dict, to: str) -> dict:
        if not self.should_succeed:
            return {"invoice_number": None, "status": "failed", "error": self.failure_reason}

        invoice_number = f"INV-{order['order_number']}"
        self.invoices.append(
            {
                "invoice_number": invoice_number,
                "to": to,
                "order_number": order["order_number"],
                "lines": [
                    {
                        "name": item["name"],
                        "quantity": item["quantity"],
                        "price": item["price"],
                        "amount": round(item["price"] * item["quantity"], 2),
                    }
                    for item in order["items"]
                ],
                "subtotal": order["subtotal"],
                "shipping_cost": order["shipping_cost"],
                "tax": order["tax"],
                "total": order["total"],
            }
        )
        return {"invoice_number": invoice_number, "status": "sent"}

    def reset(self):
        self.invoices.clear()
        self.should_succeed = True
        self.failure_reason = "Invoice generation failed"
