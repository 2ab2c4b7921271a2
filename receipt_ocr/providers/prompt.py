from __future__ import annotations

_EXAMPLE = """{
  "total": 180000,
  "currency": "IDR",
  "merchant": "Moris Grocier",
  "date": "2025-11-17",
  "items": [
    {"name": "Orange Juice 1L", "quantity": 2, "pricePerUnit": 32000, "totalPrice": 64000},
    {"name": "Bread White", "quantity": 1, "pricePerUnit": 25000, "totalPrice": 25000}
  ]
}"""


def build_prompt(image_count: int) -> str:
	multi = image_count > 1
	subject = (
		"receipt (split across multiple photos, combine all items into ONE result)"
		if multi
		else "receipt image"
	)

	rules = [
		"- All prices in original currency, as shown on the receipt",
		"- Detect currency from symbols: $ -> USD, Rp -> IDR, ₽ -> RUB, € -> EUR",
		"- If the currency symbol is unclear, infer it from merchant location or name",
		"- If an item uses a different currency than the receipt, set its own currency field",
		"- If quantity is not specified, use 1",
		"- pricePerUnit = totalPrice / quantity",
		"- Extract ALL items" + (" across ALL photos" if multi else ""),
	]
	if multi:
		rules.append("- Deduplicate items that appear on overlapping photos")
	rules.append("- Return ONLY valid JSON, no other text")

	return (
		f"Parse this {subject} and extract structured data.\n\n"
		"Return ONLY valid JSON in this exact format (no explanations, no markdown):\n"
		f"{_EXAMPLE}\n\n"
		"Required fields:\n"
		"1. total - final receipt total (number)\n"
		"2. currency - 3-letter currency code (USD, IDR, RUB, EUR, etc.)\n"
		"3. merchant - store/merchant name (string)\n"
		"4. date - purchase date in YYYY-MM-DD format (string)\n"
		"5. items - array of {name, quantity, pricePerUnit, totalPrice}\n\n"
		"Rules:\n" + "\n".join(rules)
	)
