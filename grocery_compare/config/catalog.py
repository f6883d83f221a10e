# grocery_compare/config/catalog.py

"""Curated keyword list of tracked staple products.

Promotions are only surfaced when their product name matches one of
these keywords (bidirectional, case-insensitive substring match), so
"Basmati Rice 1kg" is covered by "Basmati Rice".
"""

MAIN_PRODUCT_LIST: tuple[str, ...] = (
    # Price-controlled staples (first schedule)
    "Long Grain White Rice",
    "Basmati Rice",
    "White Flour",
    "Vegetable Oil",
    "White Sugar",
    "Full Cream Powder Milk",
    "Bread",
    "Whole Frozen Chicken",
    "Butter",
    "Margarine",
    "Cheddar Cheese",
    "Onions",
    "Sardines in Oil",
    "Sardines",
    "Corned Beef",
    "Red Lentils",
    "Lentils",
    "Yellow Split Peas",
    "Split Peas",
    "Dholl",
    # High consumption staples
    "Eggs",
    "Potatoes",
    "Macaroni",
    "Tea",
    # Popular brands
    "Milo",
    "Apollo Noodle Curry",
    "Apollo Noodle Chicken",
    "Apollo Noodle",
    "Sunquick",
    "WetaBix",
    "Weetabix",
    # Broad variations
    "Rice",
    "Flour",
    "Oil",
    "Sugar",
    "Milk",
    "Chicken",
    "Cheese",
    "Noodle",
    "Noodles",
    "Beef",
    "Peas",
    "Lentil",
    "Beverage",
    "Cereal",
    # French
    "Riz Long Blanc",
    "Riz Basmati",
    "Farine Blanche",
    "Huile Végétale",
    "Sucre Blanc",
    "Lait en Poudre Crème Entière",
    "Pain",
    "Poulet Congelé Entier",
    "Beurre",
    "Fromage Cheddar",
    "Oignons",
    "Sardines à l'Huile",
    "Lentilles Rouges",
    "Lentilles",
    "Pois Cassés Jaunes",
    "Pois Cassés",
    "Œufs",
    "Pommes de Terre",
    "Thé",
    "Nouilles Apollo Curry",
    "Nouilles Apollo Poulet",
    "Nouilles Apollo",
    "Riz",
    "Farine",
    "Huile",
    "Sucre",
    "Lait",
    "Poulet",
    "Fromage",
    "Nouille",
    "Nouilles",
    "Boeuf",
    "Pois",
    "Lentille",
    "Boisson",
    "Céréale",
)
