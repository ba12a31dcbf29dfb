"""Per-service capability sets and the static registry."""

from typing import Dict, FrozenSet, Tuple

from models.errors import UnknownService
from models.upload import Feature


class CapabilitySet:
    """
    Optional features a paste service offers.

    Subclasses declare ``supported`` and ``mandated``; a mandated feature is
    always supported and is applied regardless of what the request asks for.
    """

    name: str = ""
    supported: FrozenSet[Feature] = frozenset()
    mandated: FrozenSet[Feature] = frozenset()

    def supports(self, feature: Feature) -> bool:
        return feature in self.supported or feature in self.mandated

    def mandates(self, feature: Feature) -> bool:
        return feature in self.mandated

    @property
    def supports_private(self) -> bool:
        return self.supports(Feature.PRIVATE)

    @property
    def supports_auth(self) -> bool:
        return self.supports(Feature.AUTHED)

    @property
    def forces_auth(self) -> bool:
        return self.mandates(Feature.AUTHED)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, supports_private={self.supports_private}, "
            f"supports_auth={self.supports_auth}, forces_auth={self.forces_auth})"
        )


class GistCapabilities(CapabilitySet):
    name = "gist"
    supported = frozenset({Feature.PRIVATE, Feature.AUTHED})


class PastebinCapabilities(CapabilitySet):
    """Pastebin refuses pastes without an API key."""
    name = "pastebin"
    supported = frozenset({Feature.PRIVATE})
    mandated = frozenset({Feature.AUTHED})


class HastebinCapabilities(CapabilitySet):
    name = "hastebin"


class BitbucketCapabilities(CapabilitySet):
    """Bitbucket snippets require an account."""
    name = "bitbucket"
    supported = frozenset({Feature.PRIVATE})
    mandated = frozenset({Feature.AUTHED})


class PasteGgCapabilities(CapabilitySet):
    name = "pastegg"
    supported = frozenset({Feature.PRIVATE, Feature.AUTHED})


class SprungeCapabilities(CapabilitySet):
    name = "sprunge"


class FedoraCapabilities(CapabilitySet):
    """paste.fedoraproject.org takes anonymous, public pastes only."""
    name = "fedora"


CAPABILITY_REGISTRY: Dict[str, CapabilitySet] = {
    capabilities.name: capabilities
    for capabilities in (
        GistCapabilities(),
        PastebinCapabilities(),
        HastebinCapabilities(),
        BitbucketCapabilities(),
        PasteGgCapabilities(),
        SprungeCapabilities(),
        FedoraCapabilities(),
    )
}


def get_capabilities(service: str) -> CapabilitySet:
    """
    Look up the capability set of a service.

    Raises:
        UnknownService: If no service is registered under ``service``
    """
    try:
        return CAPABILITY_REGISTRY[service]
    except KeyError:
        raise UnknownService(service) from None


def service_names() -> Tuple[str, ...]:
    """Known service identifiers, sorted."""
    return tuple(sorted(CAPABILITY_REGISTRY))
