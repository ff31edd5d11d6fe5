"""Load ProwlConfig from prowl.yaml if present.

Merges file config with keyword overrides.  Overrides take precedence.

File format (YAML shown; TOML takes the same keys)::

    prowl:
      base_path: /api
      path_param_format: "{{{}}}"
      openapi_path: openapi.yaml
      prefixes:
        - [Get, GET]
        - [Update, PUT]
"""

from __future__ import annotations

from pathlib import Path

from prowl._errors import ConfigError
from prowl.config import ProwlConfig
from prowl.routes.naming import HttpMethod, PrefixRule

# Keys that may appear in a config file; callables only come from code
_FILE_KEYS: frozenset[str] = frozenset({
    "base_path",
    "path_param_format",
    "prefixes",
    "openapi_path",
    "openapi_title",
    "openapi_version",
})


def load_config(root: Path, **overrides: object) -> ProwlConfig:
    """Load ProwlConfig from root, optionally merging prowl.yaml.

    Looks for prowl.yaml, prowl.yml, or prowl.toml in root.  If found,
    loads and merges with overrides.  Overrides take precedence.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.

    """
    file_config = _read_prowl_config(root)
    merged = {**file_config, **overrides}
    if "prefixes" in merged:
        merged["prefixes"] = _parse_prefixes(merged["prefixes"])
    if "openapi_path" in merged and merged["openapi_path"] is not None:
        path = Path(str(merged["openapi_path"]))
        merged["openapi_path"] = path if path.is_absolute() else root / path
    try:
        return ProwlConfig(**merged)  # type: ignore[arg-type]
    except TypeError as exc:
        msg = f"Invalid prowl configuration: {exc}"
        raise ConfigError(msg) from exc


def _read_prowl_config(root: Path) -> dict[str, object]:
    """Read prowl config from yaml/toml if present.  Returns empty dict otherwise."""
    for name in ("prowl.yaml", "prowl.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "prowl.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    import yaml

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_prowl_section(data, path)


def _parse_toml(path: Path) -> dict[str, object]:
    import tomllib

    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_prowl_section(data, path)


def _flatten_prowl_section(data: object, path: Path) -> dict[str, object]:
    """Extract prowl.* keys into top-level config."""
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at the top level"
        raise ConfigError(msg)

    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _FILE_KEYS:
            result[k] = v
    section = data.get("prowl")
    if isinstance(section, dict):
        for k, v in section.items():
            if k not in _FILE_KEYS:
                msg = f"{path}: unknown prowl setting {k!r}"
                raise ConfigError(msg)
            result[k] = v
    return result


def _parse_prefixes(value: object) -> tuple[PrefixRule, ...]:
    """Accept PrefixRule objects, ``[prefix, verb]`` pairs or ``{prefix: verb}``."""
    if isinstance(value, dict):
        value = list(value.items())
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        msg = f"prefixes must be a list of [prefix, verb] pairs, got {type(value).__name__}"
        raise ConfigError(msg)

    rules: list[PrefixRule] = []
    for item in value:
        if isinstance(item, PrefixRule):
            rules.append(item)
            continue
        if isinstance(item, dict) and {"prefix", "method"} <= item.keys():
            item = (item["prefix"], item["method"])
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            msg = f"Invalid prefix rule {item!r}: expected [prefix, verb]"
            raise ConfigError(msg)
        prefix, verb = item
        name = str(verb).upper()
        try:
            method = HttpMethod("OPTIONS" if name == "OPTION" else name)
        except ValueError as exc:
            msg = f"Invalid HTTP verb {verb!r} for prefix {prefix!r}"
            raise ConfigError(msg) from exc
        rules.append(PrefixRule(str(prefix), method))
    return tuple(rules)
