import nh3

DEFAULT_ALLOWED_TAGS = frozenset({"b", "i", "em", "strong", "p", "br"})
DESCRIPTION_ALLOWED_TAGS = DEFAULT_ALLOWED_TAGS | {"ul", "ol", "li"}

# Content inside these tags is dropped along with the tags themselves.
DISCARD_CONTENT_TAGS = frozenset({"script", "style", "iframe", "textarea", "noscript"})


def sanitize_html(content: str, allowed_tags: frozenset[str] = DEFAULT_ALLOWED_TAGS) -> str:
    """Keep only ``allowed_tags``, without any attributes."""
    return nh3.clean(
        content,
        tags=set(allowed_tags),
        clean_content_tags=set(DISCARD_CONTENT_TAGS),
        attributes={},
        link_rel=None,
        strip_comments=True,
    )


def sanitize_event_description(description: str) -> str:
    return sanitize_html(description, DESCRIPTION_ALLOWED_TAGS)


def sanitize_review_content(content: str) -> str:
    return sanitize_html(content)


def sanitize_user_bio(bio: str) -> str:
    return sanitize_html(bio)
