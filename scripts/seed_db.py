"""
Menu Seeding Script

Clears the menu and loads the starter items with full stock.
Run from project root: python scripts/seed_db.py

Requires DATABASE_URL (environment or .env).
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from sqlalchemy import delete

from restaurant_pos.core.config import get_settings, setup_logging
from restaurant_pos.database import Database
from restaurant_pos.models import MenuItem


MENU_ITEMS = [
    {
        "name": "Nala",
        "description": (
            "Pork solantulem cooked with kokum and spices, Kasundi mustard, "
            "apple jam, salted cucumber, lettuce and homemade mayonnaise."
        ),
        "price": 400,
        "images": ["/pork_1.jpg", "/pork_2.jpg", "/pork_3.jpg"],
        "vegetarian": False,
        "allergens": ["Pork", "Egg", "Mustard Seeds"],
        "ingredients": [
            "Pork Solantulem (Kokum)", "Homemade Mayonaise", "Kasundi Mustard",
            "Cucumber", "Lettuce leaves", "Spiced Apple Jam", "Baguette",
        ],
        "category": "Sandwich",
        "stock": 25,
    },
    {
        "name": "Rafiki",
        "description": (
            "Grilled chicken in a green chilli and lemongrass marinade, lemongrass "
            "labneh, pickled carrots, radish, salted cucumbers and basil."
        ),
        "price": 400,
        "images": ["/chicken_1.jpg", "/chicken_2.jpg", "/chicken_3.jpg"],
        "vegetarian": False,
        "allergens": ["Lemongrass", "Chicken", "Fish Sauce", "Soy Sauce", "Curd"],
        "ingredients": [
            "Green Chilli and Lemongrass Chicken", "Pickled Carrot and Radish",
            "Salted Cucumber", "Lemongrass Labneh", "Fish Sauce", "Soy Sauce", "Baguette",
        ],
        "category": "Sandwich",
        "stock": 40,
    },
    {
        "name": "Jazz",
        "description": (
            "Smoky baked tahini eggplant, hummus, labneh, garlic toum, spiced "
            "tomato jam, basil and homemade mozzarella."
        ),
        "price": 350,
        "images": ["/veg_1.jpg", "/veg_2.jpg"],
        "vegetarian": True,
        "allergens": ["Eggplant", "Sesame Seeds", "Chickpeas", "Milk", "Curd"],
        "ingredients": [
            "Baked Tahini Eggplant", "Hummus", "Labneh", "Garlic Toum",
            "Spiced Tomato Jam", "Mozarella", "Basil Leaves", "Baguette",
        ],
        "category": "Sandwich",
        "stock": 60,
    },
    {
        "name": "Lorry",
        "description": "Goan Beef Roast. Kasundi Mustard. Jiardenera. Kewpie Mayo. French Baguette.",
        "price": 400,
        "images": ["/pork_new_1.JPG"],
        "vegetarian": False,
        "allergens": ["Pork", "Mustard Seeds", "Egg", "Mayonnaise"],
        "ingredients": ["Goan Pork Roast", "Kasundi Mustard", "Jiardenera", "Kewpie Mayo", "French Baguette"],
        "category": "Sandwich",
        "stock": 25,
    },
    {
        "name": "Pastel de Nata",
        "description": "Portuguese egg custard tart pastry. (Sold individually)",
        "price": 50,
        "images": ["/pastel_de_nata_placeholder.jpg"],
        "vegetarian": True,
        "allergens": ["Egg", "Milk", "Wheat"],
        "ingredients": ["Egg", "Milk", "Sugar", "Flour", "Butter", "Cinnamon"],
        "category": "Side",
        "stock": 50,
    },
    {
        "name": "Lemonade",
        "description": "Refreshing homemade lemonade.",
        "price": 100,
        "images": ["/lemonade_placeholder.jpg"],
        "vegetarian": True,
        "allergens": [],
        "ingredients": ["Lemon Juice", "Water", "Sugar"],
        "category": "Drink",
        "stock": 100,
    },
]


def build_menu_item(data: dict) -> MenuItem:
    fields = {k: v for k, v in data.items() if k != "stock"}
    return MenuItem(**fields, initial_stock=data["stock"], current_stock=data["stock"])


async def seed_database() -> int:
    """Replace the menu with MENU_ITEMS. Returns the number of items inserted."""
    settings = get_settings()
    setup_logging(settings)
    database = Database(settings)

    print("=" * 60)
    print("🌱 SEEDING MENU")
    print("=" * 60)

    try:
        await database.create_all()

        async with database.session() as session:
            async with session.begin():
                print("🧹 Clearing existing menu items...")
                await session.execute(delete(MenuItem))

                print(f"📥 Inserting {len(MENU_ITEMS)} menu items...")
                session.add_all(build_menu_item(data) for data in MENU_ITEMS)

        print("✅ Seed data inserted successfully!")
        return len(MENU_ITEMS)
    finally:
        await database.dispose()
        print("🔌 Database connection closed.")


if __name__ == "__main__":
    asyncio.run(seed_database())
