"""
Catalog services - category and product CRUD

Product images live in upload storage; the product row only keeps their
public paths. Removing an image from a product, or deleting the product,
also removes the stored file.
"""
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.core.exceptions import NotFoundException, ValidationException
from apps.core.storage import delete_uploads, save_uploads
from .filters import ProductFilter
from .models import Category, Product

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    'name', 'sku', 'stock', 'rating', 'current_price', 'original_price',
    'colors', 'sizes', 'description',
)


class CategoryService:
    """CRUD over categories. Deleting a category does not check for products."""

    def list(self) -> List[Category]:
        return list(Category.objects.all())

    def get(self, category_id) -> Category:
        try:
            return Category.objects.get(pk=category_id)
        except (Category.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundException("Category", category_id)

    def create(self, name: str) -> Category:
        category = Category.objects.create(name=name.strip())
        logger.info(f"[CATALOG] Created category {category.id} ({category.name})")
        return category

    def update(self, category_id, name: Optional[str]) -> Category:
        category = self.get(category_id)
        if name:
            category.name = name.strip()
            category.save(update_fields=['name', 'updated_at'])
        return category

    def delete(self, category_id) -> None:
        category = self.get(category_id)
        orphaned = category.products.count()
        category.delete()
        if orphaned:
            logger.warning(f"[CATALOG] Deleted category {category_id} still used by {orphaned} products")


class ProductService:
    """
    CRUD and read-time filtering over products.

    Usage:
        service = ProductService()
        products = service.list(ProductFilter.from_query(request.query_params))
    """

    def list(self, product_filter: Optional[ProductFilter] = None) -> List[Product]:
        products = Product.objects.select_related('category').order_by('-created_at')
        if product_filter is None or product_filter.is_empty:
            return list(products)
        return product_filter.apply(products)

    def list_by_category_name(self, name: str) -> List[Product]:
        return self.list(ProductFilter(category=name))

    def get(self, product_id) -> Product:
        try:
            return Product.objects.select_related('category').get(pk=product_id)
        except (Product.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundException("Product", product_id)

    def create(self, data: Dict[str, Any], images: Iterable = ()) -> Product:
        """
        Create a product from validated data.

        Args:
            data: Validated product fields; ``category`` is a category id
            images: Uploaded image files

        Returns:
            The saved product with its category loaded
        """
        category = self._resolve_category(data.get('category'))
        paths = save_uploads(images)
        try:
            product = Product.objects.create(
                category=category,
                images=paths,
                **{k: data[k] for k in PRODUCT_FIELDS if data.get(k) is not None}
            )
        except Exception:
            delete_uploads(paths)
            raise

        logger.info(f"[CATALOG] Created product {product.id} ({product.name}) with {len(paths)} images")
        return product

    def update(
        self,
        product_id,
        data: Dict[str, Any],
        images: Iterable = (),
        remove_images: Iterable[str] = ()
    ) -> Product:
        """
        Partially update a product.

        Empty ``colors``/``sizes`` lists leave the stored values untouched.
        ``remove_images`` entries may be full paths or bare file names.
        """
        product = self.get(product_id)

        if data.get('category'):
            product.category = self._resolve_category(data['category'])

        for key in PRODUCT_FIELDS:
            if key not in data or data[key] is None:
                continue
            if key in ('colors', 'sizes') and not data[key]:
                continue
            setattr(product, key, data[key])

        to_remove = set(remove_images or ())
        kept, removed = [], []
        for path in product.images or []:
            if path in to_remove or os.path.basename(path) in to_remove:
                removed.append(path)
            else:
                kept.append(path)

        new_paths = save_uploads(images)
        product.images = kept + new_paths

        try:
            product.save()
        except Exception:
            delete_uploads(new_paths)
            raise

        # Removed files are deleted once the saved row no longer lists them
        delete_uploads(removed)

        logger.info(f"[CATALOG] Updated product {product.id}")
        return product

    def delete(self, product_id) -> None:
        product = self.get(product_id)
        images = list(product.images or [])
        product.delete()
        delete_uploads(images)
        logger.info(f"[CATALOG] Deleted product {product_id} and {len(images)} images")

    def _resolve_category(self, category_id) -> Category:
        if not category_id:
            raise ValidationException("Category is required", field="category")
        try:
            return Category.objects.get(pk=category_id)
        except (Category.DoesNotExist, ValueError, DjangoValidationError):
            raise ValidationException("Invalid category", field="category")
