"""Run settings composer.

Injects the test adapter path into a caller-supplied run settings
document while leaving every other setting in place.
"""

import io
import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional

from ..errors import MalformedConfiguration

logger = logging.getLogger(__name__)


RUN_CONFIGURATION = "RunConfiguration"
TEST_ADAPTERS_PATHS = "TestAdaptersPaths"

# ElementTree generates ns0, ns1, ... itself and refuses to register them
_RESERVED_PREFIX = re.compile(r"ns\d+$")

DEFAULT_RUN_SETTINGS = (
    "<RunSettings>"
    "<DataCollectionRunSettings><DataCollectors /></DataCollectionRunSettings>"
    "</RunSettings>"
)


class RunConfiguration:
    """The run configuration section managed by the harness."""

    settings_name = RUN_CONFIGURATION

    def __init__(self, test_adapters_path: str):
        self.test_adapters_path = str(test_adapters_path)

    def to_xml(self, namespace: str = "") -> ET.Element:
        """Build the <RunConfiguration> element with its adapter path entry."""
        element = ET.Element(_qualified(self.settings_name, namespace))
        paths = ET.SubElement(element, _qualified(TEST_ADAPTERS_PATHS, namespace))
        paths.text = self.test_adapters_path
        return element


def compose_run_settings(settings_xml: Optional[str], test_adapters_path: str) -> str:
    """Return run settings XML with the test adapter path filled in.

    An existing <RunConfiguration> section gets a new <TestAdaptersPaths>
    child appended; otherwise a whole section is added to the root. An
    adapter path already present is not replaced, so composing twice
    yields two entries.

    Comments, processing instructions and namespace prefixes inside the
    root element are written back as supplied. The harness-managed
    section is created in the root element's namespace.

    Args:
        settings_xml: Caller run settings. Empty or None uses the defaults.
        test_adapters_path: Directory holding the runner's adapter plugins.

    Returns:
        The composed run settings document as a string.

    Raises:
        MalformedConfiguration: If settings_xml is not well-formed XML.
    """
    if not settings_xml or not settings_xml.strip():
        settings_xml = DEFAULT_RUN_SETTINGS

    try:
        root, namespaces = _parse(settings_xml)
    except ET.ParseError as e:
        raise MalformedConfiguration(str(e)) from e

    namespace = _namespace_of(root.tag)
    default_namespace = None
    for prefix, uri in namespaces:
        if not prefix:
            if uri == namespace and default_namespace is None:
                default_namespace = uri
        elif _RESERVED_PREFIX.match(prefix):
            logger.debug("Prefix %s is reserved by ElementTree and will be renamed", prefix)
        else:
            ET.register_namespace(prefix, uri)

    run_configuration = RunConfiguration(test_adapters_path)
    run_config_element = run_configuration.to_xml(namespace)

    existing = root.find(run_config_element.tag)
    if existing is None:
        root.append(run_config_element)
    else:
        existing.append(run_config_element[0])

    try:
        return ET.tostring(root, encoding="unicode", default_namespace=default_namespace)
    except ValueError as e:
        # Unqualified elements below a root in a default namespace
        raise MalformedConfiguration(str(e)) from e


def _parse(settings_xml: str) -> tuple[ET.Element, list[tuple[str, str]]]:
    """Parse settings keeping comments and PIs; also return (prefix, uri) declarations."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    root = ET.fromstring(settings_xml, parser=parser)
    namespaces = [
        declaration
        for _event, declaration in ET.iterparse(io.StringIO(settings_xml), events=("start-ns",))
    ]
    return root, namespaces


def _namespace_of(tag: str) -> str:
    if tag.startswith("{"):
        return tag[1:tag.index("}")]
    return ""


def _qualified(name: str, namespace: str) -> str:
    return f"{{{namespace}}}{name}" if namespace else name
