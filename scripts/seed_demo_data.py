"""
Seed script: Populate the invoicing database with demo data.

What it creates:
- One user per role (biller, manager, admin) with the given password.
- Customers (~20) and products (~40) with initial stock.
- A handful of invoices created through InvoiceService, so stock is decremented
  exactly as it would be through the API.

Run from the project root (uses DATABASE_URL / POSTGRES_* from the environment or .env):
    python scripts/seed_demo_data.py --password Demo!2025 --customers 20 --products 40 --invoices 10

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `facturacion.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import logging
import random
from decimal import Decimal

from facturacion.common.exceptions import InsufficientStock
from facturacion.core.config import get_settings
from facturacion.database.database import Base, build_engine, build_session_factory
from facturacion.modules.auth.models import User
from facturacion.modules.auth.schemas import Role
from facturacion.modules.auth.utils import hash_password
from facturacion.modules.customers.models import Customer
from facturacion.modules.invoices.models import Invoice
from facturacion.modules.invoices.schemas import InvoiceCreate, InvoiceLineItemCreate
from facturacion.modules.invoices.service import InvoiceService
from facturacion.modules.products.models import Product

logger = logging.getLogger("seed")

FIRST_NAMES = ["Juan", "María", "Carlos", "Ana", "Luis", "Camila", "Andrés", "Laura", "Jorge", "Paula"]
LAST_NAMES = ["Pérez", "López", "Gómez", "Rodríguez", "Martínez", "García", "Torres", "Ramírez"]
PRODUCT_NAMES = [
    "Martillo", "Destornillador", "Alicate", "Llave inglesa", "Taladro", "Serrucho", "Nivel",
    "Cinta métrica", "Clavos", "Tornillos", "Tuercas", "Brocha", "Pintura", "Lija", "Pegante",
]


def create_users(db, password: str):
    users = []
    for role in Role:
        username = f"demo-{role.value}"
        user = db.query(User).filter(User.username == username).first()
        if not user:
            user = User(username=username, password=hash_password(password), role=role, is_active=True)
            db.add(user)
        users.append(user)
    db.commit()
    return users


def create_customers(db, count: int):
    customers = []
    for i in range(count):
        name = f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)} {i + 1}"
        existing = db.query(Customer).filter(Customer.name == name).first()
        if existing:
            customers.append(existing)
            continue
        customer = Customer(
            name=name,
            address=f"Calle {random.randint(1, 200)} # {random.randint(1, 99)}-{random.randint(1, 99)}",
            phone=f"3{random.randint(100000000, 999999999)}",
            email=f"cliente{i + 1}@example.com",
        )
        db.add(customer)
        customers.append(customer)
    db.commit()
    return customers


def create_products(db, count: int):
    products = []
    for i in range(count):
        name = f"{PRODUCT_NAMES[i % len(PRODUCT_NAMES)]} #{i + 1}"
        existing = db.query(Product).filter(Product.name == name).first()
        if existing:
            products.append(existing)
            continue
        product = Product(
            name=name,
            description=f"Producto demo {name}",
            price=Decimal(random.randint(100, 50000)) / 100,
            quantity=random.randint(0, 200),
        )
        db.add(product)
        products.append(product)
    db.commit()
    return products


def create_invoices(db, customers, products, count: int, created_by):
    service = InvoiceService(db)
    created = 0
    for _ in range(count):
        in_stock = [p for p in products if p.quantity > 0]
        if not in_stock:
            break
        picked = random.sample(in_stock, k=min(len(in_stock), random.randint(1, 4)))
        data = InvoiceCreate(
            customer_id=random.choice(customers).id,
            items=[
                InvoiceLineItemCreate(product_id=p.id, quantity=random.randint(1, max(1, min(5, p.quantity))))
                for p in picked
            ],
        )
        try:
            service.create_invoice(data, created_by=created_by)
            created += 1
        except InsufficientStock as e:
            logger.warning(f"Skipped invoice: {e.message}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed demo data for the invoicing API")
    parser.add_argument("--password", default="Demo!2025")
    parser.add_argument("--customers", type=int, default=20)
    parser.add_argument("--products", type=int, default=40)
    parser.add_argument("--invoices", type=int, default=10)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Nombres deterministas para que re-ejecutar no duplique registros
    random.seed(2025)

    settings = get_settings()
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    db = build_session_factory(engine)()
    try:
        users = create_users(db, args.password)
        admin = next(u for u in users if u.role == Role.ADMIN)

        print("Creating customers...")
        customers = create_customers(db, args.customers)
        print(f"Customers: {len(customers)}")

        print("Creating products...")
        products = create_products(db, args.products)
        print(f"Products: {len(products)}")

        print("Creating invoices (affect stock)...")
        created = create_invoices(db, customers, products, args.invoices, admin.id)
        print(f"Invoices created: {created} (total in database: {db.query(Invoice).count()})")

        print("\nSeed completed.")
        print("Login credentials (POST /auth/login):")
        for user in users:
            print(f"  {user.username:<14} role={user.role.value:<8} password={args.password}")
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    main()
