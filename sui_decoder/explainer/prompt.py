import json

from sui_decoder.core.types import TransactionRecord

PROMPT_TEMPLATE = """
You are a Sui blockchain expert. Explain this transaction in simple, plain English for a non-technical user.

Use this exact Markdown structure:

### Summary
One-sentence summary (e.g., "You swapped 12 SUI for 450 USDC on Cetus")

### Key Actions
- Bullet points of transfers, mints, burns, etc.

### Gas Fee
How much SUI was used for gas

### Under the Hood
Package + function called (e.g., Cetus::swap, DeepBook::place_limit_order)

Transaction JSON:
```json
{transaction_json}
```
"""


def build_prompt(record: TransactionRecord) -> str:
    """Embed the full serialized record in the fixed explanation template."""
    transaction_json = json.dumps(record.data, indent=2)
    return PROMPT_TEMPLATE.strip().replace("{transaction_json}", transaction_json)
