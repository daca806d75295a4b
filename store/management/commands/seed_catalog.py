import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from store.catalog import FALLBACK_PRODUCTS
from store.models import Brand, Category, Product, ProductVariant

logger = logging.getLogger(__name__)

CATEGORIES = ('Men', 'Women', 'Kid', 'Unisex')
BRANDS = ('Nike', 'Adidas', 'Balenciaga')
ADULT_SIZES = ('39', '40', '41', '42', '43')
KID_SIZES = ('30', '31', '32', '33')
COLORS = ('Black', 'White')


class Command(BaseCommand):
    help = "Seed categories, brands and shoe products with stocked variants."

    def add_arguments(self, parser):
        parser.add_argument('--stock', type=int, default=10, help="Stock for every seeded variant.")
        parser.add_argument('--admin-email', help="Also create an admin account with this email.")
        parser.add_argument('--admin-password', help="Password for --admin-email.")

    @transaction.atomic
    def handle(self, *args, **options):
        categories = {name: Category.objects.get_or_create(name=name)[0] for name in CATEGORIES}
        brands = {name: Brand.objects.get_or_create(name=name)[0] for name in BRANDS}

        created = 0
        for data in FALLBACK_PRODUCTS:
            product, was_created = Product.objects.get_or_create(
                name=data['name'],
                defaults={
                    'description': data['description'],
                    'price': Decimal(data['price']),
                    'discount_price': Decimal(data['discount_price']) if data.get('discount_price') else None,
                    'category': categories[data['category']],
                    'brand': brands.get(data['brand']),
                    'is_featured': data.get('is_featured', False),
                    'is_special_deal': data.get('is_special_deal', False),
                },
            )
            if not was_created:
                continue
            created += 1
            sizes = KID_SIZES if data['category'] == 'Kid' else ADULT_SIZES
            ProductVariant.objects.bulk_create(
                ProductVariant(product=product, size=size, color=color, stock_quantity=options['stock'])
                for size in sizes
                for color in COLORS
            )

        if options.get('admin_email'):
            User = get_user_model()
            if not User.objects.filter(email__iexact=options['admin_email']).exists():
                User.objects.create_superuser(options['admin_email'], options.get('admin_password'))
                self.stdout.write(f"Created admin {options['admin_email']}")

        logger.info("Catalog seeded with %s new products", created)
        self.stdout.write(self.style.SUCCESS(f"Seeded {created} products."))
