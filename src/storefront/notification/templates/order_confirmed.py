"""Order confirmed template: sent when an admin confirms a pending order."""


class OrderConfirmedTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order {order_number} confirmed",
            "body": (
                f"Hi {context.get('full_name', 'there')},\n\n"
                f"Your order {order_number} has been confirmed and will be processed soon.\n\n"
                f"Order Total: {context.get('currency', 'INR')} {context.get('total', 0.0):.2f}\n\n"
                "We'll notify you once your order ships."
            ),
        }
