"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Default admin account and starter menu. create_app() calls seed_defaults()
on startup; running this file seeds the configured database directly.
"""

import logging

from domain import Role

log = logging.getLogger(__name__)

STARTER_MENU = [
    {"name": "Italian Bruschetta", "description": "Toasted Italian bread, fresh tomato, basil and olive oil.",
     "price": "28.00", "category": "Starters", "image": "https://picsum.photos/400/300?random=1"},
    {"name": "Tapioca Cubes", "description": "Tapioca and curd cheese cubes with pepper jelly.",
     "price": "32.90", "category": "Starters", "image": "https://picsum.photos/400/300?random=2"},
    {"name": "Mushroom Risotto", "description": "Arborio rice, fresh mushroom mix and parmesan.",
     "price": "58.00", "category": "Mains", "image": "https://picsum.photos/400/300?random=3"},
    {"name": "Filet au Poivre", "description": "Filet medallion, green pepper sauce and rustic potatoes.",
     "price": "79.90", "category": "Mains", "image": "https://picsum.photos/400/300?random=4"},
    {"name": "Grilled Salmon", "description": "Salmon steak with vegetables sauteed in butter.",
     "price": "65.50", "category": "Mains", "image": "https://picsum.photos/400/300?random=5"},
    {"name": "Italian Soda", "description": "Sparkling water with fruit syrup.",
     "price": "14.00", "category": "Drinks", "image": "https://picsum.photos/400/300?random=6"},
    {"name": "Craft IPA", "description": "500ml, citrus notes and balanced bitterness.",
     "price": "22.00", "category": "Drinks", "image": "https://picsum.photos/400/300?random=7"},
    {"name": "Petit Gateau", "description": "Chocolate cake with a molten centre and vanilla ice cream.",
     "price": "26.00", "category": "Desserts", "image": "https://picsum.photos/400/300?random=8"},
]


def seed_defaults(store, config, menu=True):
    if not store.get_users():
        store.add_user({
            "name": config["DEFAULT_ADMIN_NAME"],
            "email": config["DEFAULT_ADMIN_EMAIL"],
            "password": config["DEFAULT_ADMIN_PASSWORD"],
            "role": Role.ADMIN.value,
        })
        log.info("created default admin %s", config["DEFAULT_ADMIN_EMAIL"])
    if menu and not store.get_menu():
        for item in STARTER_MENU:
            store.add_menu_item(item)
        log.info("seeded starter menu (%d items)", len(STARTER_MENU))


if __name__ == "__main__":
    from app import create_app

    logging.basicConfig(level=logging.INFO)
    app = create_app()
    with app.app_context():
        seed_defaults(app.extensions["store"], app.config)
    print(f"Seeded. Email={app.config['DEFAULT_ADMIN_EMAIL']}, Password={app.config['DEFAULT_ADMIN_PASSWORD']}")
