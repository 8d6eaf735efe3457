from __future__ import annotations

from typing import Optional

from .errors import ConfigurationError


def compile_scss(text: str, include_path: Optional[str] = None) -> str:
    import sass

    include_paths = [include_path] if include_path else []
    try:
        return sass.compile(string=text, include_paths=include_paths)
    except sass.CompileError as exc:
        raise ConfigurationError(f"SCSS compilation failed: {exc}") from exc


def compile_less(text: str, include_path: Optional[str] = None) -> str:
    import dukpy

    options = {"paths": [include_path]} if include_path else {}
    try:
        return dukpy.less_compile(text, options=options)
    except Exception as exc:  # error types depend on the bundled compiler
        raise ConfigurationError(f"LESS compilation failed: {exc}") from exc


def transpile_typescript(text: str) -> str:
    import dukpy

    try:
        return dukpy.typescript_compile(text)
    except Exception as exc:  # error types depend on the bundled compiler
        raise ConfigurationError(f"TypeScript transpilation failed: {exc}") from exc


def minify_html(text: str) -> str:
    import htmlmin

    return htmlmin.minify(
        text,
        remove_comments=True,
        remove_empty_space=True,
        reduce_boolean_attributes=True,
        keep_pre=True,
    )
