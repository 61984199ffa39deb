import re
from typing import List

# printf-style substitution markers, e.g. %d, %s, %5.2f, %-3d, %%
PLACEHOLDER_REGEX = re.compile(r'%[+0#-]*[\d.]*[diuoxXfFeEgGaAcspn%]')

LITERAL_PERCENT = '%%'


def extract(text: str) -> List[str]:
    """Return the placeholder tokens of ``text`` in left-to-right order."""
    if not isinstance(text, str):
        return []
    return PLACEHOLDER_REGEX.findall(text)


def normalize(token: str) -> str:
    """Strip whitespace so cosmetically spaced tokens compare equal."""
    return re.sub(r'\s+', '', token)


def signature(text: str) -> str:
    """
    Build an order-insensitive signature of the substitution tokens in ``text``.

    The literal ``%%`` escape is not a substitution and does not take part in
    the comparison.

    Args:
        text: The string to scan.

    Returns:
        The normalized tokens, sorted and joined with commas.
    """
    tokens = [normalize(token) for token in extract(text) if token != LITERAL_PERCENT]
    return ','.join(sorted(tokens))


def counts_match(source_text: str, reference: str) -> bool:
    return len(extract(source_text)) == len(extract(reference))


def align_to(source_text: str, reference: str) -> str:
    """
    Re-stitch the placeholders of a translated string to match its reference.

    When both strings carry the same number of tokens, the tokens of
    ``source_text`` are replaced left to right with the reference's tokens in
    the reference's order. The surrounding translated prose is untouched.
    If the reference has no tokens or the counts differ, ``source_text`` is
    returned unchanged.

    Args:
        source_text: The translated string.
        reference: The reference-language string.

    Returns:
        The aligned string.
    """
    reference_tokens = extract(reference)
    if not reference_tokens or len(reference_tokens) != len(extract(source_text)):
        return source_text

    replacements = iter(reference_tokens)
    return PLACEHOLDER_REGEX.sub(lambda _match: next(replacements), source_text)
