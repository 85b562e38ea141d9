"""Fetch Sui transactions and stream plain-English explanations of them."""
