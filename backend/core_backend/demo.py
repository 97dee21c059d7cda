"""
Sandbox data set: two cafeterias with a marketer chain, three waiter sections,
five tables, four kitchen stations, four staff members and a small menu.

Seeding goes through the services so the same validation applies as for live
data. Identifiers are fixed so table QR codes and demo links stay stable.
"""
import logging
from decimal import Decimal

logger = logging.getLogger(__name__)

DEMO_CAFETERIA_ID = "100101"

MARKETERS = [
    {"marketer_id": "1000", "name": "Regional Partner", "parent_id": None},
    {"marketer_id": "1001", "name": "Sandbox Marketer", "parent_id": "1000"},
]

CAFETERIAS = [
    {
        "cafeteria_id": "100101",
        "name": "Sandbox Cafeteria",
        "code": "1001AB",
        "points": 100000,
        "marketer_id": "1001",
        "description": "A cozy cafeteria serving fresh breakfast and lunch",
        "address": "123 Main Street, Downtown",
        "phone": "+1 (555) 123-4567",
        "latitude": Decimal("40.712800"),
        "longitude": Decimal("-74.006000"),
        "opening_hours": "Mon-Fri: 7AM-8PM, Sat-Sun: 8AM-6PM",
    },
    {
        "cafeteria_id": "100102",
        "name": "City Center Cafe",
        "code": "1001AC",
        "points": 150000,
        "marketer_id": "1001",
        "description": "Modern cafe with specialty coffee and pastries",
        "address": "456 Park Avenue, Midtown",
        "phone": "+1 (555) 234-5678",
        "latitude": Decimal("40.758900"),
        "longitude": Decimal("-73.985100"),
        "opening_hours": "Mon-Sun: 6AM-10PM",
    },
]

SECTIONS = [
    ("sec-001", "A", "Section A"),
    ("sec-002", "B", "Section B"),
    ("sec-003", "C", "Section C"),
]

KITCHEN_CATEGORIES = [
    ("kcat-001", "Hot", "Hot dishes"),
    ("kcat-002", "Cold", "Cold dishes"),
    ("kcat-003", "Drinks", "Beverages"),
    ("kcat-004", "Desserts", "Desserts"),
]

TABLES = [
    ("tbl-001", "sec-001", "A-01", 2, "1001ABT01"),
    ("tbl-002", "sec-001", "A-02", 4, "1001ABT02"),
    ("tbl-003", "sec-002", "B-01", 2, "1001ABT03"),
    ("tbl-004", "sec-002", "B-02", 6, "1001ABT04"),
    ("tbl-005", "sec-003", "C-01", 4, "1001ABT05"),
]

STAFF = [
    ("staff-001", "John", "waiter", None),
    ("staff-002", "Jane", "waiter", None),
    ("staff-003", "Chef Mike", "kitchen", "kcat-001"),
    ("staff-004", "Chef Sarah", "kitchen", "kcat-002"),
]

MENU_CATEGORIES = [
    ("cat-001", "Breakfast", "Start your day right"),
    ("cat-002", "Lunch", "Hearty midday meals"),
    ("cat-003", "Drinks", "Hot and cold beverages"),
]

MENU_ITEMS = [
    ("item-001", "cat-001", "Classic Breakfast", "Eggs, bacon, toast", "8.99", "kcat-001"),
    ("item-002", "cat-001", "Pancake Stack", "Three fluffy pancakes", "6.99", "kcat-001"),
    ("item-003", "cat-002", "Cheeseburger", "Beef patty with cheese", "11.99", "kcat-001"),
    ("item-004", "cat-002", "Caesar Salad", "Romaine lettuce, parmesan", "8.99", "kcat-002"),
    ("item-005", "cat-003", "Coffee", "Freshly brewed coffee", "2.99", "kcat-003"),
    ("item-006", "cat-003", "Orange Juice", "Freshly squeezed", "3.99", "kcat-003"),
]


def seed_demo_data(container) -> bool:
    """Load the sandbox data set. Returns False if it is already present."""
    if container.cafeterias.get_cafeteria(DEMO_CAFETERIA_ID) is not None:
        logger.info("Demo data already present, skipping seed")
        return False

    with container.repositories.atomic():
        for marketer in MARKETERS:
            container.ledger.register_marketer(**marketer)

        for cafeteria in CAFETERIAS:
            # Trial clock not started for sandbox cafeterias
            container.cafeterias.register_cafeteria(trial_started_at=None, **cafeteria)

        for section_id, name, description in SECTIONS:
            container.cafeterias.add_waiter_section(
                DEMO_CAFETERIA_ID, name, description, section_id=section_id
            )

        for category_id, name, description in KITCHEN_CATEGORIES:
            container.cafeterias.add_kitchen_category(
                DEMO_CAFETERIA_ID, name, description, category_id=category_id
            )

        for table_id, section_id, number, capacity, reference in TABLES:
            container.cafeterias.add_waiter_table(
                DEMO_CAFETERIA_ID, section_id, number, reference, capacity=capacity, table_id=table_id
            )

        for staff_id, name, role, kitchen_category_id in STAFF:
            container.staff.add_staff(
                DEMO_CAFETERIA_ID, name, role, kitchen_category_id=kitchen_category_id, staff_id=staff_id
            )

        for category_id, name, description in MENU_CATEGORIES:
            container.cafeterias.add_menu_category(name, description, category_id=category_id)

        for item_id, category_id, name, description, price, kitchen_category_id in MENU_ITEMS:
            container.cafeterias.add_menu_item(
                category_id,
                name,
                price,
                description=description,
                kitchen_category_id=kitchen_category_id,
                item_id=item_id,
            )

    logger.info("Seeded demo data")
    return True
