"""
Synthetic Data Generator for the Storefront platform

This script generates categories, products, customers and orders. Orders are
placed through the order service so totals, discounts and order numbers are
computed exactly as at checkout.

Run: python scripts/generate_data.py
"""
import os
import sys
import random
import uuid
from decimal import Decimal

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

from faker import Faker
from apps.accounts.models import User
from apps.catalog.models import Category, Product
from apps.orders.cart import Cart, CartLine
from apps.orders.models import Order
from apps.orders.services import OrderService, ShippingAddress

fake = Faker()

CATEGORY_NAMES = ['Kurtis', 'Shalwar Kameez', 'Dupattas', 'Abayas', 'Kids', 'Accessories']

PRODUCT_TEMPLATES = [
    ('Lawn Kurti', 'Kurtis', 1500, 4500),
    ('Embroidered Kurti', 'Kurtis', 2500, 7500),
    ('Cotton Suit', 'Shalwar Kameez', 3000, 9000),
    ('Chiffon Suit', 'Shalwar Kameez', 5000, 15000),
    ('Silk Dupatta', 'Dupattas', 1200, 3500),
    ('Printed Dupatta', 'Dupattas', 800, 2000),
    ('Nida Abaya', 'Abayas', 3500, 9500),
    ('Girls Frock', 'Kids', 1000, 3000),
    ('Clutch Bag', 'Accessories', 900, 2800),
]

COLORS = ['Black', 'White', 'Maroon', 'Teal', 'Mustard', 'Pink', 'Navy']
SIZES = ['XS', 'S', 'M', 'L', 'XL']


def generate_categories():
    """Generate the fixed category list."""
    print(f"Generating {len(CATEGORY_NAMES)} categories...")
    categories = {name: Category.objects.create(name=name) for name in CATEGORY_NAMES}
    print(f"Created {len(categories)} categories")
    return categories


def generate_products(categories, count=40):
    """Generate dummy products."""
    print(f"Generating {count} products...")
    products = []

    for _ in range(count):
        name_base, category, min_price, max_price = random.choice(PRODUCT_TEMPLATES)
        variation = ['Classic', 'Festive', 'Summer', 'Luxury', ''][random.randint(0, 4)]
        current_price = Decimal(random.randrange(min_price, max_price, 50))

        product = Product.objects.create(
            name=f"{variation} {name_base}".strip(),
            category=categories[category],
            sku=f"SKU-{uuid.uuid4().hex[:8].upper()}",
            stock=random.randint(0, 120),
            rating=Decimal(str(round(random.uniform(3, 5), 1))),
            current_price=current_price,
            original_price=current_price + Decimal(random.choice([0, 500, 1000])),
            colors=random.sample(COLORS, k=random.randint(1, 3)),
            sizes=random.sample(SIZES, k=random.randint(1, 4)),
            description=fake.paragraph(nb_sentences=3),
        )
        products.append(product)

    print(f"Created {len(products)} products")
    return products


def generate_users(count=25):
    """Generate dummy storefront customers."""
    print(f"Generating {count} users...")
    users = []

    for _ in range(count):
        user = User(
            name=fake.name(),
            email=fake.unique.email(),
            phone=fake.msisdn()[:11],
        )
        user.set_password('password123')
        user.save()
        users.append(user)

    print(f"Created {len(users)} users")
    return users


def generate_orders(users, products, count=60):
    """Place dummy orders through the order service."""
    print(f"Generating {count} orders...")
    service = OrderService()
    statuses = [value for value, _ in Order.STATUS_CHOICES]
    status_weights = [30, 25, 35, 10]
    orders = []

    for _ in range(count):
        user = random.choice(users)
        picked = random.sample(products, k=random.randint(1, 3))
        cart = Cart.of(
            CartLine(
                product_id=product.id,
                quantity=random.randint(1, 3),
                price=product.current_price,
                name=product.name,
                sku=product.sku,
            )
            for product in picked
        )
        address = ShippingAddress(
            street=fake.street_address(),
            city=fake.city(),
            state=fake.state(),
            postal_code=fake.postcode(),
            country='PK',
        )

        order = service.create(
            cart=cart,
            shipping_address=address,
            payment_method=random.choice(['cash_on_delivery', 'easypaisa_jazzcash']),
            user_id=user.id,
        )

        order_status = random.choices(statuses, weights=status_weights)[0]
        if order_status != order.order_status:
            order = service.set_status(order.pk, order_status)
        orders.append(order)

    print(f"Created {len(orders)} orders")
    return orders


def clear_data():
    """Remove previously generated rows."""
    print("Clearing existing data...")
    Order.objects.all().delete()
    Product.objects.all().delete()
    Category.objects.all().delete()
    User.objects.all().delete()


def main():
    clear_data()
    categories = generate_categories()
    products = generate_products(categories)
    users = generate_users()
    generate_orders(users, products)
    print("\nData generation complete!")


if __name__ == '__main__':
    main()
