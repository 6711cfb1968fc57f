# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""config.py
Configuration loader for cliroute processors.

A config file (YAML or TOML) declares processor settings, global option bundles
and handlers. Actions, converters, hooks and custom bundles are dotted import
paths.

Example (YAML):

    settings:
      program: deployctl
    bundles:
      - help
      - name: timeout
        default_timeout: 30
    handlers:
      - name: deploy
        route: deploy <target>
        action: mytools.deploy.run
        examples: ["deploy web --tag v1,v2"]
        options:
          - aliases: --tag|-t
            arity: vector
            csv: true
      - name: status
        route: status
        action: mytools.deploy.status

A handler without `options` infers them from the action's signature;
`option_metadata` then overrides individual parameters.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

import toml
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cliroute.bundles import BUILTIN_BUNDLES, GlobalOptionBundle
from cliroute.exceptions import CliConfigurationError
from cliroute.handler import Handler
from cliroute.hook_manager import HookManager, HookType
from cliroute.importer import resolve_action, resolve_dotted_path
from cliroute.logger import logger
from cliroute.processor import CliProcessor
from cliroute.schema import OptionSpec, Schema, split_aliases
from cliroute.settings import ProcessorSettings

TYPE_NAMES: dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "path": Path,
    "uuid": uuid.UUID,
    "decimal": Decimal,
    "datetime": datetime,
    "date": date,
    "timedelta": timedelta,
    "duration": timedelta,
}


def resolve_type(name: str) -> Any:
    """Map a config type name ("int", "path") or dotted path to a type."""
    if name.lower() in TYPE_NAMES:
        return TYPE_NAMES[name.lower()]
    return resolve_dotted_path(name)


class RawOption(BaseModel):
    """Option declaration as written in a config file."""

    aliases: str | list[str]
    arity: str = "scalar"
    dest: str | None = None
    type: str = "str"
    converter: str | None = None
    csv: bool = False
    collection: str = "list"
    comparer: str | None = None
    required: bool = False
    default: Any = None
    description: str = ""
    sample: str | None = None

    model_config = ConfigDict(extra="forbid")

    def to_option(self) -> OptionSpec:
        return OptionSpec(
            tuple(split_aliases(self.aliases)),
            arity=self.arity,
            dest=self.dest,
            type=resolve_type(self.type),
            converter=resolve_action(self.converter) if self.converter else None,
            csv=self.csv,
            collection=self.collection,
            comparer=self.comparer,
            required=self.required,
            default=self.default,
            description=self.description,
            sample=self.sample,
        )


class RawHandler(BaseModel):
    """Handler declaration as written in a config file."""

    name: str
    action: str
    route: str = ""
    description: str | None = None
    examples: list[str] = Field(default_factory=list)
    options: list[RawOption] | None = None
    option_metadata: dict[str, Any] = Field(default_factory=dict)
    hidden: bool = False
    logging_hooks: bool = False

    before_hooks: list[str] = Field(default_factory=list)
    success_hooks: list[str] = Field(default_factory=list)
    error_hooks: list[str] = Field(default_factory=list)
    after_hooks: list[str] = Field(default_factory=list)
    teardown_hooks: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def build_hooks(self) -> HookManager:
        hooks = HookManager()
        for hook_type, paths in (
            (HookType.BEFORE, self.before_hooks),
            (HookType.ON_SUCCESS, self.success_hooks),
            (HookType.ON_ERROR, self.error_hooks),
            (HookType.AFTER, self.after_hooks),
            (HookType.ON_TEARDOWN, self.teardown_hooks),
        ):
            for path in paths:
                hooks.register(hook_type, resolve_action(path))
        return hooks

    def to_handler(self) -> Handler:
        action = resolve_action(self.action)
        common = {
            "hidden": self.hidden,
            "logging_hooks": self.logging_hooks,
            "hooks": self.build_hooks(),
        }
        if self.options is None:
            return Handler.from_callable(
                action,
                self.route,
                name=self.name,
                description=self.description,
                examples=self.examples,
                option_metadata=self.option_metadata,
                **common,
            )
        command_schema = Schema.from_route(
            self.route,
            options=[option.to_option() for option in self.options],
            description=self.description or "",
            examples=self.examples,
        )
        return Handler(name=self.name, action=action, command_schema=command_schema, **common)


class RawBundle(BaseModel):
    """Bundle reference: a built-in name or dotted path plus constructor arguments."""

    name: str
    model_config = ConfigDict(extra="allow")

    def to_bundle(self) -> GlobalOptionBundle:
        bundle_class = BUILTIN_BUNDLES.get(self.name) or resolve_dotted_path(self.name)
        if not (isinstance(bundle_class, type) and issubclass(bundle_class, GlobalOptionBundle)):
            raise CliConfigurationError(f"'{self.name}' is not a GlobalOptionBundle.")
        return bundle_class(**(self.model_extra or {}))


class CliRouteConfig(BaseModel):
    """cliroute configuration model."""

    settings: ProcessorSettings = Field(default_factory=ProcessorSettings)
    bundles: list[RawBundle] | None = None
    handlers: list[RawHandler] = Field(default_factory=list)

    @field_validator("bundles", mode="before")
    @classmethod
    def expand_bundle_names(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value

    def to_processor(self) -> CliProcessor:
        bundles = None if self.bundles is None else [raw.to_bundle() for raw in self.bundles]
        processor = CliProcessor(bundles=bundles, settings=self.settings)
        for raw_handler in self.handlers:
            processor.add_handler(raw_handler.to_handler())
        return processor


def loader(file_path: Path | str) -> CliProcessor:
    """
    Load a cliroute processor from a YAML or TOML file.

    Args:
        file_path (Path | str): Path to the config file.

    Returns:
        CliProcessor: A processor with the declared settings, bundles and handlers.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file format is unsupported or the content is invalid.
        CliConfigurationError: If an import path or declaration is invalid.
    """
    if isinstance(file_path, (str, Path)):
        path = Path(file_path)
    else:
        raise TypeError("file_path must be a string or Path object.")

    if not path.is_file():
        raise FileNotFoundError(f"No such config file: {file_path}")

    suffix = path.suffix
    with path.open("r", encoding="UTF-8") as config_file:
        if suffix in (".yaml", ".yml"):
            raw_config = yaml.safe_load(config_file)
        elif suffix == ".toml":
            raw_config = toml.load(config_file)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    if not isinstance(raw_config, dict) or "handlers" not in raw_config:
        raise ValueError(
            "Configuration file must contain a dictionary with a list of handlers.\n"
            "Example:\n"
            "handlers:\n"
            "  - name: deploy\n"
            "    route: deploy <target>\n"
            "    action: my_module.deploy"
        )

    logger.debug("Loading cliroute config from %s", path)
    return CliRouteConfig.model_validate(raw_config).to_processor()
