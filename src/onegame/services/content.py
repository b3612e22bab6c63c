from __future__ import annotations

import json
from dataclasses import fields
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from onegame.engine.match import MatchConfig

PRESET_NAMES = ("CLASSIC", "TOURNAMENT", "CUSTOM")


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def _load_schema(path: Path) -> object:
    return _load_json(path)


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _config_from_mapping(raw: Mapping[str, object]) -> MatchConfig:
    known = {f.name for f in fields(MatchConfig)}
    kwargs: dict[str, object] = {k: v for k, v in raw.items() if k in known}
    if "bots" in kwargs:
        bots = kwargs["bots"]
        if not isinstance(bots, list):
            raise ContentError("bots must be a list")
        kwargs["bots"] = tuple(sorted(bots))
    return MatchConfig(**kwargs)  # type: ignore[arg-type]


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def config_from_dict(self, raw: object, *, context: str = "match config") -> MatchConfig:
        """Validate a free-form config (e.g. sent by a lobby) and build a MatchConfig."""
        schema = _load_schema(self._schema_dir / "match_config.schema.json")
        validate_json(raw, schema, context=context)
        if not isinstance(raw, dict):
            raise ContentError(f"{context} must be an object")
        cfg = _config_from_mapping(raw)
        if any(b >= cfg.seat_count for b in cfg.bots):
            raise ContentError(f"{context}: bot seats {list(cfg.bots)} exceed seat_count {cfg.seat_count}")
        return cfg

    def load_presets(self) -> dict[str, MatchConfig]:
        path = self._data_dir / "presets.json"
        schema = _load_schema(self._schema_dir / "presets.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("presets.json must be an object")
        raw_presets = raw.get("presets")
        if not isinstance(raw_presets, dict):
            raise ContentError("presets.json.presets must be an object")

        out: dict[str, MatchConfig] = {}
        for name, item in raw_presets.items():
            out[name] = self.config_from_dict(item, context=f"{path}:{name}")
        return out

    def preset(self, name: str) -> MatchConfig:
        presets = self.load_presets()
        try:
            return presets[name.upper()]
        except KeyError as e:
            raise ContentError(f"Unknown preset {name!r}; expected one of {', '.join(PRESET_NAMES)}") from e

    def validate_seat_view(self, view: Mapping[str, object]) -> None:
        schema = _load_schema(self._schema_dir / "seat_view.schema.json")
        validate_json(dict(view), schema, context="seat view")

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_presets()
