from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import NotFoundError


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id) -> Product | None:
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            return None

    def find_by_slug(self, slug) -> Product | None:
        return self._dao.query.filter(slug=slug).all().first

    def find_many(self, product_ids) -> dict[str, Product]:
        """Load products by id; ids with no product are absent from the result."""
        products = {}
        for product_id in {str(pid) for pid in product_ids}:
            product = self.find(product_id)
            if product is not None:
                products[product_id] = product
        return products

    def decrement_stock(self, product_id, quantity, reference=None) -> Product:
        """Take stock from a product and stage it in the current unit of work.

        Raises ``NotFoundError`` for an unknown product and ``InsufficientStock``
        when fewer than ``quantity`` units remain.
        """
        product = self.find(product_id)
        if product is None:
            raise NotFoundError({"product_id": ["Product not found"]}, product_id=str(product_id))

        product.decrement_stock(quantity, reference=reference)
        self.add(product)
        return product
