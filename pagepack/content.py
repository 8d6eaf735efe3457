from __future__ import annotations

import re

import yaml

from .errors import ConfigurationError
from .models import Page

PAGE_MARKER = ".page"
TITLE_WORD_RE = re.compile(r"\b(?<!-)\w")


def parse_front_matter(text: str) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() in {"---", "..."}:
            end = i
            break
    if end is None:
        return {}, clean_text

    try:
        meta = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid front matter: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ConfigurationError("Front matter must be a mapping")
    body = "\n".join(lines[end + 1 :])
    return meta, body


def title_from_filename(page: Page) -> str:
    name = page.src.name
    suffix = f"{PAGE_MARKER}{page.ext}"
    if name.endswith(suffix):
        name = name[: -len(suffix)]
    name = name.replace("_", " ")
    return TITLE_WORD_RE.sub(lambda match: match.group(0).upper(), name)


def get_title(page: Page, title: str) -> str:
    if title:
        return title
    return title_from_filename(page)
