"""Domain initialization and configuration.

The storefront is a single bounded context: catalogue, carts and orders share
one domain so that a stock decrement, the order it pays for and the cart it
empties commit in the same unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_dir="logs", log_file_prefix="storefront")

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
