"""Product catalog for the cart simulator"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..core.result import OperationResult, FailureReason
from ..models.product import Product, DEFAULT_MAX_NAME_LENGTH
from .storage import JsonFileStore, StorageError

logger = logging.getLogger(__name__)


def sample_products() -> list[Product]:
    """Demonstration catalog seeded into an empty store"""
    return [
        # Electronics
        Product(id="prod-001", name="Samsung Galaxy A54 Smartphone", price=1299.99, category="Electronics",
                description='6.4" screen, 128GB, 50MP triple camera', stock=15, rating=4.5, discount=10),
        Product(id="prod-002", name="JBL Bluetooth Headphones", price=199.99, category="Electronics",
                description="Wireless with noise cancelling, 30h battery", stock=25, rating=4.3, discount=15),
        Product(id="prod-003", name="10000mAh Power Bank", price=89.99, category="Electronics",
                description="USB-C input with fast charging output", stock=30, rating=4.2),
        Product(id="prod-004", name='LG 43" 4K Smart TV', price=1899.99, category="Electronics",
                description="4K LED TV with WebOS, HDR10 and voice control", stock=8, rating=4.6, discount=20),

        # Clothing and accessories
        Product(id="prod-005", name="Basic Cotton T-Shirt", price=39.99, category="Clothing",
                description="100% cotton, several colours available", stock=50, rating=4.1),
        Product(id="prod-006", name="Nike Air Running Shoes", price=299.99, category="Footwear",
                description="Running shoes with Air Max cushioning", stock=20, rating=4.7, discount=25),
        Product(id="prod-007", name="Women's Denim Jacket", price=129.99, category="Clothing",
                description="Classic denim jacket, sizes S to XL", stock=18, rating=4.4, discount=30),
        Product(id="prod-008", name="Casio Digital Watch", price=159.99, category="Accessories",
                description="Water resistant watch with stopwatch", stock=12, rating=4.3),

        # Home and decoration
        Product(id="prod-009", name="Non-Stick Cookware Set", price=249.99, category="Home",
                description="5 non-stick pans with lids", stock=15, rating=4.5, discount=35),
        Product(id="prod-010", name="LED Desk Lamp", price=79.99, category="Decoration",
                description="Adjustable lamp with 3 brightness levels", stock=22, rating=4.2),
        Product(id="prod-011", name="Cordless Handheld Vacuum", price=189.99, category="Appliances",
                description="Cordless vacuum with HEPA filter", stock=10, rating=4.4, discount=20),
        Product(id="prod-012", name="Queen Bed Sheet Set", price=99.99, category="Home",
                description="4-piece 100% cotton set, several prints", stock=25, rating=4.1, discount=15),

        # Beauty and care
        Product(id="prod-013", name="Shampoo and Conditioner Kit", price=49.99, category="Beauty",
                description="For oily hair, with natural extracts", stock=35, rating=4.3),
        Product(id="prod-014", name="Women's Perfume 100ml", price=159.99, category="Fragrances",
                description="Floral fragrance with jasmine notes", stock=18, rating=4.6, discount=40),
        Product(id="prod-015", name="Facial Moisturizer", price=69.99, category="Personal Care",
                description="Anti-ageing cream with hyaluronic acid", stock=28, rating=4.4, discount=25),

        # Books and stationery
        Product(id="prod-016", name='"The Power of Habit" Book', price=34.99, category="Books",
                description="Bestseller on building good habits", stock=40, rating=4.8),
        Product(id="prod-017", name="200-Sheet College Notebook", price=19.99, category="Stationery",
                description="Spiral notebook with coloured dividers", stock=60, rating=4.0),

        # Sports and leisure
        Product(id="prod-018", name="29er Mountain Bike", price=899.99, category="Sports",
                description="21 gears and disc brakes", stock=5, rating=4.5, discount=15),
        Product(id="prod-019", name="Official Football", price=79.99, category="Sports",
                description="Official FIFA ball, hand stitched", stock=25, rating=4.3),
        Product(id="prod-020", name="Premium Yoga Mat", price=89.99, category="Fitness",
                description="Non-slip mat, 6mm thick", stock=20, rating=4.4, discount=20),
    ]


class ProductDatabase:
    """Product catalog persisted to a JSON file"""

    def __init__(
        self,
        store: JsonFileStore,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
        seed_sample_data: bool = True,
    ):
        self.store = store
        self.max_name_length = max_name_length
        self.seed_sample_data = seed_sample_data
        self.products: dict[str, Product] = {}

    # ==================== Persistence ====================

    def load(self) -> None:
        """Load the catalog, seeding sample products if the file is missing"""
        records = self.store.load()
        self.products.clear()

        if records is None:
            if self.seed_sample_data:
                self._seed()
            return

        for record in records:
            try:
                product = Product.model_validate(record)
            except ValidationError as e:
                raise StorageError(f"Invalid product record in {self.store.path}: {e}") from e
            self.products[product.id] = product

        logger.info(f"Loaded {len(self.products)} products")

    def save(self) -> None:
        self.store.save([p.model_dump(mode="json") for p in self.products.values()])

    def _seed(self) -> None:
        for product in sample_products():
            self.products[product.id] = product
        self.save()
        logger.info(f"Seeded catalog with {len(self.products)} sample products")

    # ==================== Queries ====================

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def get_all_products(self) -> list[Product]:
        """Get all products"""
        return list(self.products.values())

    def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock_only: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Search products with filters.

        Prices are compared against the discounted final price.

        Returns:
            Tuple of (matching products, total count)
        """
        results = self.get_all_products()

        # Filter by search query
        if query:
            query_lower = query.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower()
                or query_lower in p.category.lower()
                or query_lower in p.description.lower()
            ]

        # Filter by category
        if category:
            results = [p for p in results if p.category.lower() == category.lower()]

        # Filter by price range
        if min_price is not None:
            results = [p for p in results if p.final_price >= min_price]
        if max_price is not None:
            results = [p for p in results if p.final_price <= max_price]

        # Filter by stock
        if in_stock_only:
            results = [p for p in results if p.stock > 0]

        # Get total before pagination
        total = len(results)

        # Apply pagination
        end = offset + limit if limit is not None else None
        results = results[offset:end]

        return results, total

    def get_products_by_category(self, category: str) -> list[Product]:
        products, _ = self.search_products(category=category)
        return products

    def get_discounted_products(self) -> list[Product]:
        return [p for p in self.products.values() if p.discount > 0]

    def get_top_rated_products(self, min_rating: float = 4.0) -> list[Product]:
        """Products rated at least min_rating, best first"""
        rated = [p for p in self.products.values() if p.rating >= min_rating]
        return sorted(rated, key=lambda p: p.rating, reverse=True)

    def get_products_by_price_range(self, min_price: float, max_price: float) -> list[Product]:
        products, _ = self.search_products(min_price=min_price, max_price=max_price)
        return products

    def get_categories(self) -> list[str]:
        return sorted({p.category for p in self.products.values()})

    # ==================== Mutations ====================

    def add_product(self, product: Product) -> OperationResult:
        """Validate and add a product to the catalog"""
        errors = product.validate(self.max_name_length)
        if errors:
            return OperationResult.failure(
                FailureReason.VALIDATION_FAILED,
                f"Invalid product: {', '.join(errors)}",
                errors=errors,
            )

        self.products[product.id] = product
        self.save()
        logger.info(f"Added product {product.id} ({product.name})")
        return OperationResult.success(product)

    def update_product(self, product_id: str, **changes) -> OperationResult:
        """Apply changes to a product, undoing them if the result is invalid"""
        product = self.products.get(product_id)
        if not product:
            return OperationResult.failure(FailureReason.PRODUCT_NOT_FOUND, "Product not found")

        previous = product.model_dump()
        product.update(**changes)

        errors = product.validate(self.max_name_length)
        if errors:
            product.update(**previous)
            product.updated_at = previous["updated_at"]
            return OperationResult.failure(
                FailureReason.VALIDATION_FAILED,
                f"Invalid product: {', '.join(errors)}",
                errors=errors,
            )

        self.save()
        return OperationResult.success(product)

    def remove_product(self, product_id: str) -> bool:
        """Remove a product from the catalog"""
        if product_id not in self.products:
            return False

        del self.products[product_id]
        self.save()
        logger.info(f"Removed product {product_id}")
        return True

    def check_stock(self, product_id: str, quantity: int) -> bool:
        product = self.products.get(product_id)
        return product.is_available(quantity) if product else False

    def reduce_stock(self, product_id: str, quantity: int) -> OperationResult:
        """Take quantity out of a product's stock and persist the catalog"""
        product = self.products.get(product_id)
        if not product:
            return OperationResult.failure(FailureReason.PRODUCT_NOT_FOUND, "Product not found")

        result = product.reduce_stock(quantity)
        if result:
            self.save()
        return result

    def increase_stock(self, product_id: str, quantity: int) -> OperationResult:
        product = self.products.get(product_id)
        if not product:
            return OperationResult.failure(FailureReason.PRODUCT_NOT_FOUND, "Product not found")

        product.increase_stock(quantity)
        self.save()
        return OperationResult.success(product.stock)
