"""
Menu Style Catalog
Themes, typography styles, layouts and page sizes offered by the generator wizard.
The descriptions are what the designer prompt receives for each selected key.
"""

THEMES = {
    "minimalism": "Clean, simple, elegant design with lots of white space, minimal decorations, and focus on typography",
    "scandinavian": "Light, airy, natural feel with soft colors, organic shapes, and cozy warmth",
    "loft": "Raw, urban, industrial style with exposed textures, bold typography, and modern edge",
    "neon": "Bold, vibrant 80s retrowave style with neon accents, dark backgrounds, and synthwave aesthetics",
    "japanese": "Peaceful, balanced, refined zen aesthetic with Japanese minimalism and harmonious layout",
    "greek": "Mediterranean warmth with terracotta tones, rustic textures, and tavern-style charm",
    "fine-dining": "Luxurious, sophisticated, classic elegance with gold accents and refined typography",
    "eco": "Green, sustainable, fresh organic feel with natural elements and earthy warmth",
}

FONT_STYLES = {
    "elegant": "Refined serif fonts with delicate strokes, thin weights, and sophisticated letterforms",
    "bold": "Impactful sans-serif fonts with heavy weights and strong visual presence",
    "handwritten": "Personal, artisanal script fonts that feel hand-lettered and warm",
    "modern": "Clean, contemporary geometric sans-serif with perfect circles and clean lines",
    "retro": "Vintage-inspired display fonts with nostalgic signage style and decorative elements",
}

LAYOUTS = {
    "single": "Single column layout - clean minimalist design with items stacked vertically, easy to read top to bottom",
    "two-column": "Two column layout - compact and scannable with dishes organized side by side",
    "card-grid": "Card grid layout - items displayed in card boxes, perfect for menus with images or featured items",
}

# value -> (label, dimensions)
MENU_SIZES = {
    "a4": ("A4", "210mm x 297mm"),
    "letter": ("Letter", "8.5in x 11in"),
    "square": ("Square", "11in x 11in"),
    "webpage": ("Web Page", "Responsive"),
    "tall-poster": ("Tall Poster", "11in x 17in"),
    "a5": ("A5", "148mm x 210mm"),
    "half-letter": ("Half Letter", "5.5in x 8.5in"),
}


def describe_theme(key: str) -> str:
    return THEMES.get(key, key)


def describe_font_style(key: str) -> str:
    return FONT_STYLES.get(key, key)


def describe_layout(key: str) -> str:
    return LAYOUTS.get(key, key)


def describe_size(key: str) -> str:
    """'A4 (210mm x 297mm)' for known sizes, the upper-cased key otherwise."""
    if key.lower() in MENU_SIZES:
        label, dimensions = MENU_SIZES[key.lower()]
        return f"{label.upper()} ({dimensions})"
    return key.upper()


def get_style_catalog() -> dict:
    """Options for the generator wizard"""
    return {
        "themes": [{"value": k, "description": v} for k, v in THEMES.items()],
        "font_styles": [{"value": k, "description": v} for k, v in FONT_STYLES.items()],
        "layouts": [{"value": k, "description": v} for k, v in LAYOUTS.items()],
        "sizes": [
            {"value": k, "label": label, "dimensions": dims}
            for k, (label, dims) in MENU_SIZES.items()
        ],
    }
