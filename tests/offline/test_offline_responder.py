from __future__ import annotations

import json
import random

import pytest

from gemguard import GenerationOptions, OfflineResponder, SyntheticResponse
from gemguard.offline import templates


def _responder(seed: int = 7) -> OfflineResponder:
    return OfflineResponder(rng=random.Random(seed))


def test_description_mentions_category_brand_and_price():
    response = _responder().describe_product(
        {"category": "electronics", "brand": "Acme", "price": "$49"}
    )
    assert isinstance(response, SyntheticResponse)
    assert response.is_offline is True
    assert response.kind == "description"
    assert response.finish_reason == "STOP"
    assert "electronics item from Acme, priced at $49," in response.text
    assert any(response.text.startswith(opener) for opener in templates.DESCRIPTION_OPENERS)


def test_description_falls_back_without_product_context():
    text = _responder().describe_product().text
    assert "product item from the brand is winning" in text
    assert "priced" not in text


def test_tags_are_a_json_list_with_category_and_brand():
    response = _responder().tag_product({"category": "sports", "brand": "Nimbus"})
    tags = json.loads(response.text)
    assert response.kind == "tags"
    assert tags[3:] == ["active", "health", "performance"]
    assert len(tags) == templates.MAX_TAGS
    assert "nimbus" not in tags


def test_tags_use_default_category_and_lowercased_brand():
    tags = json.loads(_responder().tag_product({"category": "garden", "brand": "GreenCo"}).text)
    assert tags[3:] == ["quality", "product", "greenco"]


def test_recommendations_render_with_and_without_name():
    responder = _responder(0)
    texts = {responder.recommend({"name": "Sam"}).text for _ in range(60)}
    assert "Sam, these picks were selected to match your interests." in texts
    anonymous = {responder.recommend().text for _ in range(60)}
    assert "These picks were selected to match your interests." in anonymous


def test_visual_search_caps_matches_and_sets_confidence():
    products = [{"id": str(i), "name": f"item {i}"} for i in range(6)]
    response = _responder().visual_search(products)
    assert response.kind == "visual_search"
    assert response.finish_reason is None
    assert response.confidence == 0.75
    assert [p["id"] for p in response.matched_products] == ["0", "1", "2", "3"]
    assert all(p["match_reason"] == templates.VISUAL_MATCH_REASON for p in response.matched_products)
    assert "match_reason" not in products[0]
    assert response.text in templates.VISUAL_SEARCH


@pytest.mark.parametrize(
    ("prompt", "kind"),
    [
        ("Write a PRODUCT DESCRIPTION for this mug", "description"),
        ("Suggest tags for a lamp", "tags"),
        ("Give me a recommendation list", "recommendations"),
        ("Summarize the reviews", "generic"),
        ("", "generic"),
    ],
)
def test_prompt_routing_by_keyword(prompt, kind):
    response = _responder().respond_to_prompt(prompt, GenerationOptions())
    assert response.kind == kind


def test_generic_text_is_fixed():
    assert _responder().generic().text == templates.GENERIC
