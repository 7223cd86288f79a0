from protean import current_domain
from storefront.notification.channels import set_email_adapter
from storefront.notification.channels.fake_email import FakeEmailAdapter
from storefront.order.cancellation import cancel_order
from storefront.order.lifecycle import update_order_status
from storefront.order.order import Order
from storefront.order.placement import place_order
from structlog.contextvars import bound_contextvars, get_contextvars, merge_contextvars
from structlog.testing import capture_logs


def _place(make_product, address, price=200.0):
    product = make_product(price=price)
    return place_order("user-001", [{"product_id": str(product.id), "quantity": 1}], address)


class TestPlacementNotifications:
    def test_order_placed_email_and_invoice(self, make_product, address, email_adapter, invoice_adapter):
        order = _place(make_product, address)

        assert len(email_adapter.sent_emails) == 1
        email = email_adapter.sent_emails[0]
        assert email["to"] == "asha@example.com"
        assert order.order_number in email["subject"]

        assert len(invoice_adapter.invoices) == 1
        invoice = invoice_adapter.invoices[0]
        assert invoice["invoice_number"] == f"INV-{order.order_number}"
        assert invoice["total"] == 250.0

    def test_failed_email_does_not_affect_order(self, make_product, address, email_adapter):
        email_adapter.configure(should_succeed=False)

        order = _place(make_product, address)

        assert current_domain.repository_for(Order).find_by_number(order.order_number).status == "pending"
        assert email_adapter.sent_emails == []

    def test_raising_adapter_is_swallowed(self, make_product, address):
        adapter = FakeEmailAdapter()
        adapter.configure(raise_on_send=True, failure_reason="SMTP down")
        set_email_adapter(adapter)

        order = _place(make_product, address)

        assert current_domain.repository_for(Order).find_by_number(order.order_number) is not None

    def test_failed_invoice_still_sends_email(self, make_product, address, email_adapter, invoice_adapter):
        invoice_adapter.configure(should_succeed=False)

        _place(make_product, address)

        assert len(email_adapter.sent_emails) == 1
        assert invoice_adapter.invoices == []


class TestLifecycleNotifications:
    def test_confirmation_email(self, make_product, address, email_adapter):
        order = _place(make_product, address)
        email_adapter.reset()

        update_order_status(order.order_number, status="confirmed")

        assert len(email_adapter.sent_emails) == 1
        assert "confirmed" in email_adapter.sent_emails[0]["subject"]

    def test_no_email_for_other_transitions(self, make_product, address, email_adapter):
        order = _place(make_product, address)
        email_adapter.reset()

        update_order_status(order.order_number, status="processing")

        assert email_adapter.sent_emails == []

    def test_cancellation_email(self, make_product, address, email_adapter):
        order = _place(make_product, address)
        email_adapter.reset()

        cancel_order(order.order_number, requested_by="user-001", role="customer", reason="Changed my mind")

        assert len(email_adapter.sent_emails) == 1
        assert "Changed my mind" in email_adapter.sent_emails[0]["body"]


def _logged(entries, event):
    return next(entry for entry in entries if entry["event"] == event)


class TestLogContext:
    def test_placement_log_carries_order_and_user(self, make_product, address):
        with capture_logs(processors=[merge_contextvars]) as entries:
            order = _place(make_product, address)

        placed = _logged(entries, "order_placed")
        assert placed["order_number"] == order.order_number
        assert placed["user_id"] == "user-001"
        assert get_contextvars() == {}

    def test_status_update_log_carries_order(self, make_product, address):
        order = _place(make_product, address)

        with capture_logs(processors=[merge_contextvars]) as entries:
            update_order_status(order.order_number, status="confirmed")

        assert _logged(entries, "order_updated")["order_number"] == order.order_number
        assert get_contextvars() == {}

    def test_cancellation_log_carries_order_and_requester(self, make_product, address):
        order = _place(make_product, address)

        with capture_logs(processors=[merge_contextvars]) as entries:
            cancel_order(order.order_number, requested_by="user-001", role="customer")

        cancelled = _logged(entries, "order_cancelled")
        assert cancelled["order_number"] == order.order_number
        assert cancelled["user_id"] == "user-001"
        assert cancelled["cancelled_by"] == "customer"
        assert get_contextvars() == {}

    def test_enclosing_context_is_restored(self, make_product, address):
        with bound_contextvars(request_id="req-7", user_id="outer"):
            _place(make_product, address)
            assert get_contextvars() == {"request_id": "req-7", "user_id": "outer"}
