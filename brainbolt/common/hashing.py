"""
Answer hashing helpers.

Correct answers are stored only as a SHA-256 digest of their normalized
form. Submitted answers go through the same normalization before hashing,
so comparison never touches plaintext answers.
"""

import hashlib
import hmac


def normalize_answer(answer: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return answer.strip().lower()


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_answer(answer: str) -> str:
    """Digest of the normalized answer, as stored in the catalog."""
    return sha256_hex(normalize_answer(answer))


def answer_matches(answer: str, expected_hash: str) -> bool:
    """Check a submitted answer against a stored digest."""
    return hmac.compare_digest(hash_answer(answer), expected_hash or "")
