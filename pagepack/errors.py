from __future__ import annotations


class PagepackError(Exception):
    pass


class ConfigurationError(PagepackError):
    pass


class SourceNotFound(PagepackError):
    def __init__(self, url: str, reason: str = "File not found") -> None:
        super().__init__(f"{reason}: {url}")
        self.url = url


class UnsupportedFormat(PagepackError):
    pass


class UnsupportedPageType(UnsupportedFormat):
    pass


class UnsupportedResourceType(UnsupportedFormat):
    pass


class DocumentStructureError(PagepackError):
    pass


class TemplateFunctionError(PagepackError):
    pass
