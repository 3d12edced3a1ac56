"""Product Catalog Service.

Provides category, product and review management together with the
product query engine used for filtered listings.
"""

from shopcatalog.catalog.categories import CategoryDeletion, CategoryManager
from shopcatalog.catalog.models import Category, Product, Review
from shopcatalog.catalog.products import ProductCreate, ProductManager, ProductUpdate
from shopcatalog.catalog.query import PaginatedResult, ProductFilter, ProductQueryEngine, SortOption
from shopcatalog.catalog.repository import CategoryRepository, ProductRepository, ReviewRepository
from shopcatalog.catalog.reviews import RatingAggregator, RatingSummary, ReviewCreate, ReviewManager

__all__ = [
    # Models
    "Category",
    "Product",
    "Review",
    # Repositories
    "CategoryRepository",
    "ProductRepository",
    "ReviewRepository",
    # Managers
    "CategoryDeletion",
    "CategoryManager",
    "ProductCreate",
    "ProductManager",
    "ProductUpdate",
    "RatingAggregator",
    "RatingSummary",
    "ReviewCreate",
    "ReviewManager",
    # Query
    "PaginatedResult",
    "ProductFilter",
    "ProductQueryEngine",
    "SortOption",
]
