# lider_proxy/services/suggestions.py

"""Offline suggestion generation used when the upstream is unreachable."""

COMMON_SUGGESTIONS: dict[str, list[str]] = {
    "lec": [
        "leche",
        "leche descremada",
        "leche entera",
        "leche condensada",
        "lechuga",
    ],
    "pan": ["pan", "pan integral", "pan molde", "pan hallulla", "panceta"],
    "arr": ["arroz", "arroz grado 1", "arroz integral", "arrollado"],
    "car": ["carne", "carne molida", "carne vacuno", "carnitas", "carbón"],
    "pol": [
        "pollo",
        "pollo entero",
        "pollo trozado",
        "pollo pechuga",
        "polenta",
    ],
    "que": [
        "queso",
        "queso gauda",
        "queso mantecoso",
        "queso fresco",
        "queque",
    ],
    "hue": ["huevos", "huevos blancos", "huevos color", "huevos codorniz"],
    "yog": ["yogurt", "yogurt natural", "yogurt griego", "yogurt light"],
    "man": ["mantequilla", "manzana", "manjar", "mandarina", "mango"],
    "cer": ["cereal", "cerveza", "cernir", "cerdo"],
}

GENERIC_QUALIFIERS: tuple[str, ...] = (
    "natural",
    "light",
    "premium",
    "casero",
    "integral",
)


def generate_fallback_suggestions(term: str) -> list[str]:
    """Suggest completions for *term* without touching the network.

    The first three characters are matched against a table of common
    grocery terms; anything else gets the term plus fixed qualifiers.
    Never returns an empty list.
    """
    cleaned = term.strip()
    prefix = cleaned[:3].lower()
    if len(prefix) == 3 and prefix in COMMON_SUGGESTIONS:
        return list(COMMON_SUGGESTIONS[prefix])
    return [f"{cleaned} {qualifier}" for qualifier in GENERIC_QUALIFIERS]
