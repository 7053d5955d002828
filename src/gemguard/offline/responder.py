"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Offline responder producing synthetic answers from local templates.
"""

from __future__ import annotations

import json
import random
from collections.abc import Sequence
from typing import Any

from jinja2 import Environment, StrictUndefined, Template

from ..types import GenerationOptions, JSONObject, SyntheticResponse
from . import templates

DESCRIPTION_KEYWORDS = ("product description",)
TAG_KEYWORDS = ("tag",)
RECOMMENDATION_KEYWORDS = ("recommendation",)


class OfflineResponder:
    """
    Render `SyntheticResponse` values while the breaker is offline.

    Template selection is random; pass a seeded `random.Random` for
    reproducible output.
    """

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._jinja = Environment(undefined=StrictUndefined, autoescape=False)
        self._compiled: dict[str, Template] = {}

    def _render(self, source: str, **context: Any) -> str:
        template = self._compiled.get(source)
        if template is None:
            template = self._jinja.from_string(source)
            self._compiled[source] = template
        return template.render(**context)

    def _pick(self, choices: Sequence[Any]) -> Any:
        return choices[self._rng.randrange(len(choices))]

    def describe_product(self, product: JSONObject | None = None) -> SyntheticResponse:
        product = product or {}
        text = self._render(
            templates.DESCRIPTION_BODY,
            opener=self._pick(templates.DESCRIPTION_OPENERS),
            category=product.get("category") or "product",
            brand=product.get("brand") or "the brand",
            price=product.get("price"),
        )
        return SyntheticResponse(text=text, kind="description")

    def tag_product(self, product: JSONObject | None = None) -> SyntheticResponse:
        product = product or {}
        category = product.get("category")
        brand = product.get("brand")
        tags = [
            *self._pick(templates.BASE_TAGS),
            *templates.CATEGORY_TAGS.get(str(category), templates.DEFAULT_CATEGORY_TAGS),
        ]
        if isinstance(brand, str) and brand:
            tags.append(brand.lower())
        return SyntheticResponse(
            text=json.dumps(tags[: templates.MAX_TAGS], ensure_ascii=False),
            kind="tags",
        )

    def recommend(self, user_profile: JSONObject | None = None) -> SyntheticResponse:
        profile = user_profile or {}
        text = self._render(self._pick(templates.RECOMMENDATIONS), name=profile.get("name"))
        return SyntheticResponse(text=text, kind="recommendations")

    def visual_search(self, products: Sequence[JSONObject] = ()) -> SyntheticResponse:
        matched = [
            {**product, "match_reason": templates.VISUAL_MATCH_REASON}
            for product in list(products)[: templates.VISUAL_MAX_MATCHES]
        ]
        return SyntheticResponse(
            text=self._pick(templates.VISUAL_SEARCH),
            kind="visual_search",
            finish_reason=None,
            matched_products=matched,
            confidence=templates.VISUAL_CONFIDENCE,
        )

    def generic(self) -> SyntheticResponse:
        return SyntheticResponse(text=templates.GENERIC, kind="generic")

    def respond_to_prompt(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> SyntheticResponse:
        """Route a text prompt to the matching template family by keyword."""
        options = options or GenerationOptions()
        lowered = (prompt or "").lower()
        if any(word in lowered for word in DESCRIPTION_KEYWORDS):
            return self.describe_product(options.product)
        if any(word in lowered for word in TAG_KEYWORDS):
            return self.tag_product(options.product)
        if any(word in lowered for word in RECOMMENDATION_KEYWORDS):
            return self.recommend(options.user_profile)
        return self.generic()
