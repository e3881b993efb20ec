# usage/conversions.py
"""
Product catalog data used by the usage pipeline.

- ConversionTable: product number -> units per case. Read-only configuration,
  built once at import time as DEFAULT_CONVERSIONS and passed into the
  reconciler so tests can swap in their own table.
- PRODUCT_GROUPS: product number -> business group shown on the usage page.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

DEFAULT_CONVERSION = Decimal("1")


class ConversionTable:
    """
    Immutable lookup of conversion factors keyed by product number.
    Unknown product numbers resolve to the table's default (1).
    """

    def __init__(self, factors: Mapping[str, Union[int, float, str, Decimal]], default: Decimal = DEFAULT_CONVERSION):
        cleaned = {}
        for number, factor in factors.items():
            value = Decimal(str(factor))
            if value <= 0:
                raise ValueError(f"Conversion for {number} must be positive, got {factor}")
            cleaned[number] = value
        self._factors = MappingProxyType(cleaned)
        self.default = default

    def get(self, product_number: str) -> Decimal:
        return self._factors.get((product_number or "").strip(), self.default)

    def lookup(self, product_number: str) -> Optional[Decimal]:
        """Factor for a known product, None for unknown ones"""
        return self._factors.get((product_number or "").strip())

    def __contains__(self, product_number) -> bool:
        return product_number in self._factors

    def __len__(self) -> int:
        return len(self._factors)

    def items(self):
        return self._factors.items()


_CONVERSION_DATA: Dict[str, Union[int, str]] = {
    # Meat
    "P10002": 40,    # Chicken, Orange Dark Battered
    "P10028": 40,    # Chicken, Teriyaki Thigh Marinated
    "P10019": 40,    # Chicken, Dark Diced Marinated
    "P10027": 40,    # Chicken, Breast Strip Battered
    "P10008": 40,    # Chicken, Breast Sliced Marinated
    "P10018": 20,    # Chicken, Breast Bites Battered
    "P5020": 40,     # Beef, Top Sirloin Steak
    "P5017": 30,     # Beef, BB Strip Breaded
    "P5007": 40,     # Beef, Sliced Marinated

    # Seafood
    "P16032": 20,    # Shrimp, Battered Tempura 29/33

    # Produce
    "P19149": 32,    # Cabbage, Shredded
    "P19013": 20,    # Broccoli
    "P19909": 30,    # Bell Pepper, Red
    "P19055": 40,    # Zucchini
    "P19048": 50,    # Onion, Yellow Fresh
    "P19186": 20,    # Bean, Green Washed & Trimmed
    "P19016": 50,    # Cabbage
    "P19045": 10,    # Mushroom, Fresh
    "P19085": 30,    # Celery
    "P19169": 18,    # Baby Broccoli
    "P19910": 11,    # Bell Pepper, Yellow
    "P19187": 4,     # Onion, Green
    "P19147": 12,    # Kale, Shredded
    "P19046": 8,     # Onion, Green

    # Grocery
    "P1079": 400,    # Cookies, Fortune
    "P1102": 30,     # Noodles, Chow Mein
    "P1260": 100,    # Rangoon, Cream Cheese
    "P1112": 50,     # Rice, Long Grain
    "P1107": 35,     # Oil, Salad
    "P1001": 200,    # Springroll, Veg
    "P1004": 60,     # Eggroll, Chicken
    "P1129": 50,     # Sugar
    "P1684": 125,    # Apple, Crisps Dried
    "P19054": 20,    # Peas & Carrots
    "P1249": 32,     # Sauce, Honey Walnut
    "P2002": 30,     # Eggs, Liquid Cage Free
    "P1404": 40,     # Sauce, Honey
    "P1295": 35,     # Sauce, Sweet and Sour
    "P1792": 40,     # Sauce, Crispy Shrimp & Beef
    "P1580": 40,     # Sauce, Stir Fry Black Pepper
    "P1116": "4.8",  # Sauce, Cooking Basic
    "P1158": 6,      # Nuts, Walnut Glazed
    "P1272": 50,     # Starch, Modified
    "P19052": 6,     # Nuts, Peanuts
    "P1093": 12,     # Ginger, Garlic Blend
    "P1268": 40,     # Sauce, Stir Fry
    "P1131": 4,      # Vinegar, White
    "P1233": 40,     # Sauce, SweetFire
    "P19002": 20,    # Pineapple, Chunk

    # Paper - beverages
    "P25980": 32,    # Dasani Water 16.9 oz
    "P25911": 24,    # Coke Classic (bottled)
    "P25973": 24,    # Coke Mexican Glass
    "P25959": 24,    # Coke Zero (bottled)
    "P25908": 24,    # Powerade Mountain Berry Blast
    "P25341": 24,    # Tea Black
    "P25353": 50,    # Honest Kids Apple Juice
    "P25422": 12,    # Concentrate Peach Lychee Refresher
    "P25421": 12,    # Concentrate Watermelon Mango Refresher
    "P25424": 12,    # Concentrate Pomegranate Pineapple Refresher
    "P25423": 12,    # Concentrate Mango Guava Tea Refresher
    "P25004": 5,     # Coke Diet BIB
    "P25003": 5,     # Coke Classic BIB
    "P25005": 5,     # Dr. Pepper BIB
    "P25027": 5,     # Sprite BIB
    "P25943": 5,     # Minute Maid Lemonade BIB
    "P25346": 5,     # Fanta Strawberry BIB
    "P25006": 5,     # Fanta Orange BIB
    "P25933": 5,     # Fuze Raspberry BIB
    "P25077": 5,     # Coke Cherry BIB
    "P25244": 5,     # Barqs Rootbeer BIB
    "P25403": 24,    # Sprite Mexican (glass)

    # Paper - disposables
    "P35432": 7200,  # Napkin, Kraft Interfold
    "P35048": 2000,  # Fork, Plastic Black Heavy
    "P35719": 200,   # Container, PP 3 Compartment Hinged
    "P35213": 2000,  # Straw, 8.75" Clear Wrapped
    "P35509": 504,   # Lid, 20-22 oz Bowl Clear
    "P36029": 250,   # Bag, Plastic Wave 19x17
    "P35508": 504,   # Bowl, 20-22 oz Black Square
    "P35149": 1000,  # Cup, 12 oz Paper Kid
    "P35130": 450,   # Pail, 8 oz
    "P35062": 2000,  # Lid, 22 oz Cold Cup
    "P35580": 3000,  # Chopsticks, Bamboo Wrapped
    "P35275": 1000,  # Bag, Glassine 4.75 x 8.25
    "P35542": 1500,  # Kit, Cutlery
    "P35040": 1000,  # Cup, 22 oz Paper
    "P35094": 500,   # Plate, 9.25" Fiber 3 Compartment
    "P35406": 1000,  # Lid, Flat 12-24 oz
    "P35081": 450,   # Pail, 26 oz
    "P35268": 750,   # Cup, 30 oz Paper
    "P35380": 600,   # Cup, 24 oz Color Print PET
    "P35634": 300,   # Pail, Kid Panda Carton
    "P35659": 1000,  # Container, Fiber 3 Compartment
    "P35065": 1000,  # Lid, 30-32 oz Cold Cup
    "P35126": 450,   # Pail, 16 oz
    "P35269": 600,   # Cup, 42 oz Paper

    # Condiments
    "P1124": 1000,   # Sauce, Soy Packet
    "P1151": 700,    # Sauce, Chili Packet
    "P1652": 500,    # Sauce, Sweet & Sour Packets
    "P1566": 311,    # Sauce, Teriyaki Packet
    "P23001": 500,   # Sauce, Mustard Packets
}

DEFAULT_CONVERSIONS = ConversionTable(_CONVERSION_DATA)


OTHER_GROUP = "OTHERS"

# Business groups, in display order
PRODUCT_GROUPS: Dict[str, frozenset] = {
    "WIC": frozenset({"P10002", "P10028", "P10019", "P10027", "P10008", "P10018"}),
    "Seafood": frozenset({"P16032"}),
    "WIF Beef": frozenset({"P5007", "P5017", "P5020"}),
    "Appetizers": frozenset({"P1260", "P1001", "P1004"}),
    "Sides": frozenset({"P1102", "P1112", "P2002", "P19149"}),
    "Sauce Cart": frozenset({
        "P1093", "P1580", "P1404", "P1233", "P1249",
        "P1268", "P1107", "P1295", "P1792", "P19002",
    }),
    "Condements": frozenset({"P1652", "P1566", "P1151", "P1124", "P23001"}),
    "Vegetables": frozenset({
        "P19013", "P19016", "P19045", "P19048", "P19054", "P19055", "P19085",
        "P19147", "P19169", "P19186", "P19187", "P19909", "P19910",
    }),
    "BIBs": frozenset({
        "P25003", "P25004", "P25005", "P25006", "P25027",
        "P25244", "P25346", "P25933", "P25943", "P25077",
    }),
    "PCB": frozenset({"P25421", "P25422", "P25423", "P25424", "P25343", "P25341"}),
    "Bottles": frozenset({"P25908", "P25911", "P25973", "P25980", "P25959", "P25417", "P25403"}),
    "FoH Packaging": frozenset({"P35081", "P35126", "P35130", "P35509", "P35508", "P35719"}),
    "Cups & lids": frozenset({
        "P35149", "P35380", "P35268", "P35269", "P35406", "P35062", "P35065", "P35040",
    }),
    "Prep Area": frozenset({"P1158", "P19052", "P1116", "P1129", "P1131", "P1272"}),
    "FoH": frozenset({"P1079", "P35048", "P35213", "P35432"}),
    "Catering": frozenset({"P35659", "P35542"}),
    "Cub": frozenset({"P25353", "P1684"}),
    "Bags": frozenset({"P35522", "P35275", "P36029", "P35521"}),
}


def group_for_product(product_number: str) -> str:
    for group, numbers in PRODUCT_GROUPS.items():
        if product_number in numbers:
            return group
    return OTHER_GROUP


def all_groups() -> list:
    return list(PRODUCT_GROUPS.keys()) + [OTHER_GROUP]
