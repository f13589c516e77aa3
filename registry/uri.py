"""
NFT Registry - Metadata URI Resolution

Pure helpers mapping a base URI and token ID to the token's metadata
document locator.
"""

METADATA_SUFFIX = ".json"
PATH_SEPARATOR = "/"


def format_token_id(token_id: int) -> str:
    """Decimal text of a token ID."""
    return str(int(token_id))


class URIResolver:
    """Metadata locator builder: ``{base_uri}/{token_id}.json``."""

    def __init__(self, suffix: str = METADATA_SUFFIX, separator: str = PATH_SEPARATOR):
        self.suffix = suffix
        self.separator = separator

    def resolve(self, base_uri: str, token_id: int) -> str:
        return f"{base_uri}{self.separator}{format_token_id(token_id)}{self.suffix}"


def resolve_token_uri(base_uri: str, token_id: int) -> str:
    """Convenience function using the default resolver."""
    return URIResolver().resolve(base_uri, token_id)
