"""Static word tables used by the ingredient name normalizer.

All tables are immutable (``frozenset`` / ``MappingProxyType``) and built once
at import time. Synonym targets are UK canonical forms and must themselves be
stable under normalization: no target may contain a prep word, a modifier, a
form word or another synonym key.
"""

from __future__ import annotations

from types import MappingProxyType

# US (and common variant) name → UK canonical name.
# Keys are written singular; the normalizer also accepts an "s"/"es" plural.
INGREDIENT_SYNONYMS: MappingProxyType[str, str] = MappingProxyType({
    # Vegetables
    "eggplant": "aubergine",
    "zucchini": "courgette",
    "arugula": "rocket",
    "green onion": "spring onion",
    "scallion": "spring onion",
    "bell pepper": "pepper",
    "red bell pepper": "red pepper",
    "green bell pepper": "green pepper",
    "yellow bell pepper": "yellow pepper",
    "capsicum": "pepper",
    "snow pea": "mangetout",
    "fava bean": "broad bean",
    "rutabaga": "swede",
    "beet": "beetroot",
    "cilantro": "coriander",
    "napa cabbage": "chinese cabbage",
    "bok choy": "pak choi",
    "corn": "sweetcorn",
    "romaine lettuce": "cos lettuce",
    "romaine": "cos lettuce",
    "butter lettuce": "gem lettuce",
    "endive": "chicory",
    # Meat & seafood
    "ground beef": "beef mince",
    "ground pork": "pork mince",
    "ground lamb": "lamb mince",
    "ground turkey": "turkey mince",
    "ground chicken": "chicken mince",
    "shrimp": "prawn",
    "canadian bacon": "back bacon",
    # Dairy & eggs
    "heavy cream": "double cream",
    "whipping cream": "double cream",
    "light cream": "single cream",
    "skim milk": "skimmed milk",
    "yogurt": "yoghurt",
    "plain yogurt": "natural yoghurt",
    "sharp cheddar": "mature cheddar",
    "extra sharp cheddar": "extra mature cheddar",
    # Baking & pantry
    "all purpose flour": "plain flour",
    "self rising flour": "self raising flour",
    "bread flour": "strong flour",
    "whole wheat flour": "wholemeal flour",
    "superfine sugar": "caster sugar",
    "powdered sugar": "icing sugar",
    "confectioners sugar": "icing sugar",
    "turbinado sugar": "demerara sugar",
    "dark brown sugar": "muscovado sugar",
    "molasses": "treacle",
    "blackstrap molasses": "black treacle",
    "baking soda": "bicarbonate of soda",
    "cornstarch": "cornflour",
    # Stock & broth
    "chicken broth": "chicken stock",
    "beef broth": "beef stock",
    "vegetable broth": "vegetable stock",
    "fish broth": "fish stock",
    "broth": "stock",
    "bouillon": "stock",
    # Condiments & sauces
    "marinara sauce": "tomato sauce",
    "tomato puree": "passata",
    "tomato ketchup": "ketchup",
    "catsup": "ketchup",
    "mayo": "mayonnaise",
    # Oils
    "canola oil": "rapeseed oil",
    "peanut oil": "groundnut oil",
    # Pulses & grains
    "garbanzo bean": "chickpea",
    "navy bean": "haricot bean",
    "white kidney bean": "cannellini bean",
    "lima bean": "butter bean",
    "brown rice": "wholegrain rice",
    "rolled oat": "porridge oat",
    "oatmeal": "porridge oat",
    # Spices
    "chili": "chilli",
    "chili powder": "chilli powder",
    "red pepper flake": "chilli flake",
    "tumeric": "turmeric",
})

# Preparation words, stripped anywhere as whole tokens (stage 4).
# "ground", "powdered", "whole" and "smoked" are deliberately absent: they are
# part of synonym keys or distinguish real products.
PREP_WORDS: frozenset[str] = frozenset({
    "diced", "chopped", "minced", "sliced", "peeled", "grated", "shredded",
    "crushed", "cubed", "halved", "quartered", "julienned", "mashed",
    "pureed", "deseeded", "pitted", "cored", "trimmed", "washed", "rinsed",
    "drained", "strained", "sifted", "beaten", "whisked", "melted",
    "softened", "toasted", "roasted", "fried", "sauteed", "grilled",
    "steamed", "boiled", "blanched", "poached", "marinated", "seasoned",
    "finely", "roughly", "thinly", "coarsely", "freshly", "lightly",
    "and", "or", "optional", "approx", "approximately", "about", "heaped",
    "level", "packed", "room temperature", "to taste", "as needed",
    "for garnish", "for serving",
})

# Freshness / quality / size / dietary modifiers (stage 5). Hyphenated forms
# are listed with spaces because hyphens are split before matching.
MODIFIER_WORDS: frozenset[str] = frozenset({
    # freshness & packaging state
    "fresh", "dried", "frozen", "chilled", "canned", "tinned", "jarred",
    "raw", "ripe", "cooked", "uncooked", "ready to eat",
    # quality & sourcing
    "organic", "free range", "cage free", "grass fed", "wild caught",
    "farm raised", "outdoor bred", "british", "local", "premium",
    "good quality", "extra virgin", "virgin", "lean", "extra lean",
    # size
    "large", "medium", "small", "extra large", "jumbo", "baby", "mini",
    "thick", "thin",
    # dietary
    "low fat", "reduced fat", "fat free", "non fat", "nonfat", "low sodium",
    "reduced sodium", "salt free", "unsalted", "salted", "sugar free",
    "no added sugar", "unsweetened", "sweetened", "gluten free",
    "dairy free", "vegan", "vegetarian",
})

# Form / portion / container words (stage 7).
FORM_WORDS: frozenset[str] = frozenset({
    "clove", "cloves", "cube", "cubes", "pod", "pods", "piece", "pieces",
    "head", "heads", "bunch", "bunches", "sprig", "sprigs", "stalk",
    "stalks", "stem", "stems", "leaf", "leaves", "slice", "slices",
    "wedge", "wedges", "strip", "strips", "chunk", "chunks", "fillet",
    "fillets", "breast", "breasts", "thigh", "thighs", "drumstick",
    "drumsticks", "wing", "wings", "rasher", "rashers", "tin", "tins",
    "can", "cans", "jar", "jars", "packet", "packets", "pack", "packs",
    "bag", "bags", "bottle", "bottles", "carton", "cartons", "punnet",
    "punnets", "sachet", "sachets", "pouch", "pouches",
})

# Irregular plurals singularized by lookup before the suffix rules apply.
IRREGULAR_PLURALS: MappingProxyType[str, str] = MappingProxyType({
    "leaves": "leaf",
    "loaves": "loaf",
    "halves": "half",
    "cookies": "cookie",
    "brownies": "brownie",
    "smoothies": "smoothie",
    "veggies": "veggie",
    "calves": "calf",
    "knives": "knife",
    "mice": "mouse",
})

# "-es" is dropped only when the remaining stem ends with one of these.
ES_PLURAL_STEM_ENDINGS: tuple[str, ...] = ("ss", "sh", "ch", "x", "z")

# Words ending in these are never treated as plurals.
NON_PLURAL_ENDINGS: tuple[str, ...] = ("ss", "us", "is")
