"""Read the runtime module's ``pom.xml`` for the key namespace and description.

A malformed descriptor is never fatal: it is logged and treated as absent.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lxml import etree

from .resources import ResourceEntry, ResourceMap
from .utils.logging import translate_logger

LOG = translate_logger.getChild("descriptor")

RUNTIME_POM = Path("runtime") / "pom.xml"
DEFAULT_NAMESPACE = "extension"
DESCRIPTION_KEY_SUFFIX = "meta-description"


@dataclass(frozen=True)
class ProjectDescriptor:
    artifact_id: Optional[str] = None
    description: Optional[str] = None


def _local_text(root: etree._Element, name: str) -> Optional[str]:
    """Text of the project's own ``<name>`` (direct child), else the first one anywhere."""
    own = root.xpath(f"./*[local-name()='{name}']")
    nodes = own or root.xpath(f"//*[local-name()='{name}']")
    if not nodes:
        return None
    text = (nodes[0].text or "").strip()
    return text or None


def read_descriptor(extension_root: Path) -> ProjectDescriptor:
    pom = Path(extension_root) / RUNTIME_POM
    if not pom.exists():
        LOG.debug("No runtime descriptor at %s", pom)
        return ProjectDescriptor()
    try:
        parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False)
        root = etree.parse(str(pom), parser).getroot()
    except (etree.XMLSyntaxError, OSError) as e:
        LOG.warning("Failed to read runtime descriptor %s: %s", pom, e)
        return ProjectDescriptor()
    return ProjectDescriptor(
        artifact_id=_local_text(root, "artifactId"),
        description=_local_text(root, "description"),
    )


def resolve_namespace(descriptor: ProjectDescriptor) -> str:
    if descriptor.artifact_id:
        return descriptor.artifact_id
    LOG.warning("Could not determine runtime artifactId, using generic key prefix")
    return DEFAULT_NAMESPACE


def description_key(namespace: str) -> str:
    return f"{namespace}-{DESCRIPTION_KEY_SUFFIX}"


def add_description_entry(translations: ResourceMap, namespace: str, descriptor: ProjectDescriptor) -> ResourceMap:
    """Add ``<namespace>-meta-description`` unless the key is already present."""
    if descriptor.description:
        translations.setdefault(description_key(namespace), ResourceEntry(descriptor.description, False))
    return translations
