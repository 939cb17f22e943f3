"""Frozen, typed view of a canonical configuration document."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from geocoder_registry.constants import FAKE_IP_KEY, PROFILING_KEY, PROVIDERS_KEY


@dataclass(frozen=True, slots=True)
class PluginRef:
    id: str
    enabled: bool = True

    @classmethod
    def from_document(cls, payload: Mapping[str, Any]) -> PluginRef:
        reference = payload["reference"]
        return cls(id=reference["id"], enabled=reference["enabled"])

    def to_document(self) -> dict[str, Any]:
        return {"reference": {"enabled": self.enabled, "id": self.id}}


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    """One named provider entry; ``options`` is opaque and handed over verbatim."""

    name: str
    factory: str
    options: Any = field(default_factory=dict)
    cache: Any = None
    cache_lifetime: Any = None
    cache_precision: Any = None
    limit: Any = None
    locale: Any = None
    logger: Any = None
    aliases: tuple[str, ...] = ()
    plugins: tuple[PluginRef, ...] = ()

    @classmethod
    def from_document(cls, name: str, payload: Mapping[str, Any]) -> ProviderSpec:
        return cls(
            name=name,
            factory=payload["factory"],
            options=copy.deepcopy(payload["options"]),
            cache=payload["cache"],
            cache_lifetime=payload["cache_lifetime"],
            cache_precision=payload["cache_precision"],
            limit=payload["limit"],
            locale=payload["locale"],
            logger=payload["logger"],
            aliases=tuple(payload["aliases"]),
            plugins=tuple(PluginRef.from_document(item) for item in payload["plugins"]),
        )

    @property
    def enabled_plugin_ids(self) -> tuple[str, ...]:
        """Plugin service ids to attach, in declaration order."""

        return tuple(plugin.id for plugin in self.plugins if plugin.enabled)

    def to_document(self) -> dict[str, Any]:
        return {
            "factory": self.factory,
            "options": copy.deepcopy(self.options),
            "cache": self.cache,
            "cache_lifetime": self.cache_lifetime,
            "cache_precision": self.cache_precision,
            "limit": self.limit,
            "locale": self.locale,
            "logger": self.logger,
            "aliases": list(self.aliases),
            "plugins": [plugin.to_document() for plugin in self.plugins],
        }


@dataclass(frozen=True, slots=True)
class ProfilingConfig:
    enabled: bool


@dataclass(frozen=True, slots=True)
class FakeIpConfig:
    enabled: bool = False
    ip: str | None = None


@dataclass(frozen=True, slots=True)
class GeocoderConfig:
    """Root of the typed configuration; providers keep their declared order."""

    providers: tuple[ProviderSpec, ...]
    profiling: ProfilingConfig
    fake_ip: FakeIpConfig

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> GeocoderConfig:
        """Build from a document produced by the normalizer (assumed canonical)."""

        providers = document[PROVIDERS_KEY]
        profiling = document[PROFILING_KEY]
        fake_ip = document[FAKE_IP_KEY]
        return cls(
            providers=tuple(
                ProviderSpec.from_document(name, payload) for name, payload in providers.items()
            ),
            profiling=ProfilingConfig(enabled=profiling["enabled"]),
            fake_ip=FakeIpConfig(enabled=fake_ip["enabled"], ip=fake_ip["ip"]),
        )

    def provider(self, name: str) -> ProviderSpec:
        for spec in self.providers:
            if spec.name == name:
                return spec
        raise KeyError(name)

    @property
    def provider_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.providers)

    def to_document(self) -> dict[str, Any]:
        return {
            PROVIDERS_KEY: {spec.name: spec.to_document() for spec in self.providers},
            PROFILING_KEY: {"enabled": self.profiling.enabled},
            FAKE_IP_KEY: {"enabled": self.fake_ip.enabled, "ip": self.fake_ip.ip},
        }


__all__ = [
    "FakeIpConfig",
    "GeocoderConfig",
    "PluginRef",
    "ProfilingConfig",
    "ProviderSpec",
]
