from raptar.ecosystems.repository import (
    Ecosystem,
    EcosystemManifest,
    EcosystemRepository,
)

__all__ = ["Ecosystem", "EcosystemManifest", "EcosystemRepository"]
