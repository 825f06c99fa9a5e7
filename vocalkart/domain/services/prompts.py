import json
from typing import Any, Dict, Optional, Sequence

from vocalkart.domain.models.product import Product, ScoredCandidate

_VOCAB_RULES = (
    'CRITICAL: price_comparison must be EXACTLY one of: "cheaper", "similar", "more_expensive"\n'
    'CRITICAL: quality_comparison must be EXACTLY one of: "better", "similar", "good"'
)


def _price(value: Optional[float]) -> str:
    if not value:
        return "Unknown"
    return f"{value:g}"


def ranking_prompt(product_name: str, category: str, source: Product, candidates: Sequence[ScoredCandidate]) -> str:
    """Ask the model to pick and justify the best 3 of the supplied candidates."""
    lines = "\n".join(
        f"{i}. {c.product.name} by {c.product.brand} - {c.product.category} - Rs {_price(c.product.price)}"
        for i, c in enumerate(candidates, start=1)
    )
    return (
        f'You are an Indian product alternatives expert. Rank and validate these Indian product alternatives '
        f'for "{product_name}" ({category}).\n\n'
        f"Candidates:\n{lines}\n\n"
        f"Original product price: Rs {_price(source.price)}\n\n"
        "Return JSON array with top 3 alternatives. Each should have:\n"
        "{\n"
        '  "name": "<exact name from candidates>",\n'
        '  "brand": "<exact brand from candidates>",\n'
        '  "match_score": <1-100>,\n'
        '  "reason": "<why it\'s a good alternative in 1-2 sentences>",\n'
        '  "quality_comparison": "better" | "similar" | "good",\n'
        '  "price_comparison": "cheaper" | "similar" | "more_expensive",\n'
        '  "reason_tags": ["same_category", "nutrition_similar", "popular_brand"],\n'
        '  "confidence": "low|medium|high"\n'
        "}\n\n" + _VOCAB_RULES
    )


def generation_prompt(product_name: str, category: str, source: Product) -> str:
    """Ask the model to invent 3 Indian alternatives when the store has none."""
    brand = source.brand or "Unknown"
    return (
        f'You are an Indian product alternatives expert. The foreign product "{product_name}" by {brand} '
        f"in category {category} (Rs {_price(source.price)}) needs Indian alternatives.\n\n"
        "Generate 3 authentic Indian alternatives. Return JSON array with each having:\n"
        "{\n"
        '  "name": "<product name>",\n'
        '  "brand": "<Indian brand>",\n'
        '  "category": "<category>",\n'
        '  "price": <estimated INR as number>,\n'
        '  "match_score": <1-100>,\n'
        '  "reason": "<why it\'s a good alternative in 1-2 sentences>",\n'
        '  "quality_comparison": "better" | "similar" | "good",\n'
        '  "price_comparison": "cheaper" | "similar" | "more_expensive",\n'
        '  "reason_tags": ["same_category", "similar_use"],\n'
        '  "confidence": "medium"\n'
        "}\n\n" + _VOCAB_RULES + "\n\n"
        "Only suggest well-known, authentic Indian brands."
    )


def validation_prompt(off_payload: Dict[str, Any]) -> str:
    return (
        "You are a strict product data validator. Analyze the OpenFoodFacts product JSON and return ONLY "
        "valid JSON with these exact keys:\n"
        "{\n"
        '  "barcode": "<string>",\n'
        '  "name": "<string>",\n'
        '  "brand": "<string>",\n'
        '  "categories": "<string>",\n'
        '  "countries": "<comma separated countries>",\n'
        '  "is_indian": "true|false|unknown",\n'
        '  "reason": "<short explanation>",\n'
        '  "confidence": "low|medium|high",\n'
        '  "source_urls": ["<url1>", "<url2>"]\n'
        "}\n\n"
        "Rules:\n"
        '- is_indian should be "true" if product is manufactured in India OR brand is Indian-owned\n'
        '- is_indian should be "false" if brand is foreign-owned (even if manufactured in India)\n'
        '- confidence should be "high" only if you\'re certain based on the data\n'
        "- Include source_urls if you have references\n\n"
        f"OpenFoodFacts Data:\n{json.dumps(off_payload, indent=2, ensure_ascii=False, default=str)}"
    )


def retrieval_prompt(barcode: str) -> str:
    return (
        f'You are a product retriever. Search for product with barcode "{barcode}". Return ONLY valid JSON:\n'
        "{\n"
        f'  "barcode": "{barcode}",\n'
        '  "name": "<product name>",\n'
        '  "brand": "<brand name>",\n'
        '  "categories": "<categories>",\n'
        '  "countries": "<countries>",\n'
        '  "is_indian": "true|false|unknown",\n'
        '  "confidence": "low|medium|high",\n'
        '  "source_urls": ["<authoritative url1>", "<url2>"]\n'
        "}\n\n"
        'IMPORTANT: Only return confidence "high" if you found authoritative sources (manufacturer website, '
        "major retailer). Include source_urls. If you can't find reliable information, return confidence \"low\"."
    )


def price_prompt(
    name: str,
    brand: str,
    category: str,
    country_of_origin: str,
    is_indian: bool,
    quantity: Optional[str] = None,
) -> str:
    return (
        "You are a product data validator for the Indian retail market. "
        "Estimate a realistic retail price in Indian Rupees (INR).\n\n"
        "Product Details:\n"
        f"- Name: {name}\n"
        f"- Brand: {brand}\n"
        f"- Category: {category}\n"
        f"- Weight/Quantity: {quantity or 'unknown'}\n"
        f"- Country of Origin: {country_of_origin}\n"
        f"- Is Indian Product: {'true' if is_indian else 'false'}\n\n"
        "Instructions:\n"
        "- Estimate average Indian retail market price\n"
        "- For foreign products, consider import markup (typically 1.5-2x base price)\n"
        "- Consider brand popularity and positioning (premium vs mass market)\n"
        "- Account for size/volume in pricing\n"
        "- Use realistic Indian retail context (not international MRP)\n"
        "- For beverages: typical range 20-150 INR\n"
        "- For snacks: typical range 10-200 INR\n"
        "- For packaged foods: typical range 30-500 INR\n\n"
        "Return ONLY a number representing the price in INR. No currency symbols, no text, just the number.\n"
        "Example: 120"
    )


SEARCH_SYSTEM_PROMPT = (
    "You are a product search assistant. Search the internet for products matching the user's query "
    "and return up to 5 results as structured JSON."
)


def search_prompt(query: str, category: Optional[str], indian_only: bool) -> str:
    text = f"Search for products: {query}"
    if category and category != "all":
        text += f" in category {category}"
    if indian_only:
        text += " (Indian products only)"
    return text


RETURN_PRODUCTS_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "return_products",
        "description": "Return search results",
        "parameters": {
            "type": "object",
            "properties": {
                "products": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "brand": {"type": "string"},
                            "country_of_origin": {"type": "string"},
                            "category": {"type": "string"},
                            "price": {"type": "number"},
                            "description": {"type": "string"},
                            "availability": {"type": "string"},
                            "where_to_buy": {"type": "array", "items": {"type": "string"}},
                            "rating": {"type": "number"},
                        },
                    },
                }
            },
        },
    },
}
