"""Order cancelled template."""


class OrderCancelledTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason")
        return {
            "subject": f"Order {order_number} cancelled",
            "body": (
                f"Hi {context.get('full_name', 'there')},\n\n"
                f"Your order {order_number} has been cancelled."
                + (f"\nReason: {reason}" if reason else "")
                + "\n\nIf you did not request this, please contact us."
            ),
        }
