"""Pharmacy bounded context: catalog, stock reservation and order intake.

Products are the only aggregate. Every stock mutation goes through the
ProductStore (``pharmacy.store``) so that concurrent orders serialize per
product; reads for search and autocomplete are served from the CatalogCache.
"""

from protean.domain import Domain

from pharmacy.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
pharmacy = Domain(name="pharmacy")
