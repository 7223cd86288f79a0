from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number) -> Order:
        order = self._dao.query.filter(order_number=order_number).all().first
        if order is None:
            raise NotFoundError({"order_number": ["Order not found"]}, order_number=order_number)
        return order

    def search(self, user_id=None, status=None, page=1, limit=10) -> tuple[list[Order], int]:
        """Newest-first page of orders, optionally scoped to a user and status.

        Returns the page and the total number of matching orders.
        """
        criteria = {}
        if user_id is not None:
            criteria["user_id"] = str(user_id)
        if status:
            criteria["status"] = status

        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return results.items, results.total
