"""
Catalog Models
Tables: Categories, Products
"""
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from apps.core.models import BaseModel


class Category(BaseModel):
    """
    Product category shown in the storefront navigation.
    """
    name = models.CharField(max_length=255)

    class Meta:
        db_table = 'catalog_categories'
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name


class Product(BaseModel):
    """
    Product in the catalog.

    Deleting the category leaves the product in place with no category.
    """
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=50, blank=True, null=True)
    images = models.JSONField(default=list, blank=True, help_text="Public upload paths")
    stock = models.PositiveIntegerField(default=0)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))]
    )
    current_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    original_price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    colors = models.JSONField(default=list, blank=True)
    sizes = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'catalog_products'
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.current_price})"
