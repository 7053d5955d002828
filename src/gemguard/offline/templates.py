"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Canned response templates rendered while the API is offline.
"""

from __future__ import annotations

DESCRIPTION_OPENERS: tuple[str, ...] = (
    "This product stands out with quality materials and a modern design.",
    "Combining strong performance with a sleek design, this product meets everyday needs.",
    "Durable and easy to use, this product is built for long-lasting use.",
    "Technology and aesthetics come together in this product, with user experience first.",
    "Designed around your needs, this product delivers dependable performance.",
)

DESCRIPTION_BODY = (
    "{{ opener }} This {{ category }} item from {{ brand }}"
    "{% if price %}, priced at {{ price }},{% endif %}"
    " is winning over its buyers."
)

BASE_TAGS: tuple[tuple[str, ...], ...] = (
    ("quality", "modern", "reliable"),
    ("premium", "durable", "stylish"),
    ("innovative", "practical", "functional"),
    ("trendy", "high-tech", "handy"),
    ("popular", "special", "preferred"),
)

CATEGORY_TAGS: dict[str, tuple[str, ...]] = {
    "electronics": ("technology", "digital", "modern"),
    "clothing": ("fashion", "style", "trend"),
    "home-living": ("home", "comfort", "living"),
    "sports": ("active", "health", "performance"),
    "books": ("knowledge", "education", "culture"),
    "toys": ("fun", "kids", "play"),
}
DEFAULT_CATEGORY_TAGS: tuple[str, ...] = ("quality", "product")

VISUAL_SEARCH: tuple[str, ...] = (
    "Similar products were found in this image, matched on category and color.",
    "Image analysis complete. Products with similar design features were found.",
    "Image processing result: product category and style features identified.",
)
VISUAL_MATCH_REASON = "Matched on category and visual features"
VISUAL_CONFIDENCE = 0.75
VISUAL_MAX_MATCHES = 4

RECOMMENDATIONS: tuple[str, ...] = (
    "These products are recommended based on your history and preferences.",
    "Shoppers who viewed similar products also liked these options.",
    "{% if name %}{{ name }}, these{% else %}These{% endif %}"
    " picks were selected to match your interests.",
)

GENERIC = (
    "The AI service is currently unavailable due to heavy load. "
    "Please try again in a few minutes."
)

MAX_TAGS = 6
