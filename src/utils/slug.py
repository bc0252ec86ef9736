import re


def slugify(text: str) -> str:
    # drop punctuation, then collapse whitespace and underscores into single hyphens
    slug = re.sub(r"[^\w\s-]", "", text).strip().lower()
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")
