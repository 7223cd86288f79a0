"""Order placed template: sent as soon as the order is recorded."""


class OrderPlacedTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        currency = context.get("currency", "INR")
        lines = "\n".join(
            f"  {item['name']} x {item['quantity']} @ {currency} {item['price']:.2f}" for item in context.get("items", [])
        )
        shipping = context.get("shipping_cost", 0.0)
        return {
            "subject": f"Order {order_number} placed",
            "body": (
                f"Hi {context.get('full_name', 'there')},\n\n"
                f"Thank you for your order {order_number}.\n\n"
                f"{lines}\n\n"
                f"Subtotal: {currency} {context.get('subtotal', 0.0):.2f}\n"
                f"Shipping: {'FREE' if not shipping else f'{currency} {shipping:.2f}'}\n"
                f"Total: {currency} {context.get('total', 0.0):.2f}\n\n"
                "Payment: cash on delivery. We'll let you know once your order is confirmed."
            ),
        }
