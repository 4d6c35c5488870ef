from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from runner_harness import MalformedConfiguration, compose_run_settings
from runner_harness.settings import DEFAULT_RUN_SETTINGS


ADAPTER_PATH = "/work/TestAssets/artifacts"


def test_empty_settings_get_one_run_configuration() -> None:
    root = ET.fromstring(compose_run_settings("", ADAPTER_PATH))

    assert root.tag == "RunSettings"
    sections = root.findall("RunConfiguration")
    assert len(sections) == 1
    paths = sections[0].findall("TestAdaptersPaths")
    assert [p.text for p in paths] == [ADAPTER_PATH]


def test_none_settings_start_from_defaults() -> None:
    root = ET.fromstring(compose_run_settings(None, ADAPTER_PATH))
    defaults = ET.fromstring(DEFAULT_RUN_SETTINGS)

    assert root.find("DataCollectionRunSettings") is not None
    assert len(list(root)) == len(list(defaults)) + 1


def test_existing_section_keeps_its_children() -> None:
    settings = (
        "<RunSettings>"
        "<RunConfiguration><TargetPlatform>x64</TargetPlatform><MaxCpuCount>2</MaxCpuCount></RunConfiguration>"
        "<MSTest><Parallelize>true</Parallelize></MSTest>"
        "</RunSettings>"
    )

    root = ET.fromstring(compose_run_settings(settings, ADAPTER_PATH))

    sections = root.findall("RunConfiguration")
    assert len(sections) == 1
    children = [(child.tag, child.text) for child in sections[0]]
    assert children == [
        ("TargetPlatform", "x64"),
        ("MaxCpuCount", "2"),
        ("TestAdaptersPaths", ADAPTER_PATH),
    ]
    assert root.find("MSTest/Parallelize").text == "true"


def test_section_is_added_when_missing() -> None:
    settings = "<RunSettings><MSTest><CaptureTraceOutput>false</CaptureTraceOutput></MSTest></RunSettings>"

    root = ET.fromstring(compose_run_settings(settings, ADAPTER_PATH))

    assert [child.tag for child in root] == ["MSTest", "RunConfiguration"]
    assert root.find("RunConfiguration/TestAdaptersPaths").text == ADAPTER_PATH


def test_existing_adapter_path_is_not_deduplicated() -> None:
    once = compose_run_settings("", ADAPTER_PATH)
    twice = compose_run_settings(once, "/other/adapters")

    paths = ET.fromstring(twice).findall("RunConfiguration/TestAdaptersPaths")
    assert [p.text for p in paths] == [ADAPTER_PATH, "/other/adapters"]


@pytest.mark.parametrize(
    "settings",
    [
        "<RunSettings><RunConfiguration></RunSettings>",
        "not xml at all",
        "<RunSettings>",
    ],
)
def test_malformed_settings_are_rejected(settings: str) -> None:
    with pytest.raises(MalformedConfiguration):
        compose_run_settings(settings, ADAPTER_PATH)


def test_comments_and_processing_instructions_are_kept() -> None:
    settings = (
        "<RunSettings>"
        "<!-- keep me -->"
        "<?adapter-hint fast?>"
        "<RunConfiguration><MaxCpuCount>1</MaxCpuCount><!-- cpu --></RunConfiguration>"
        "</RunSettings>"
    )

    composed = compose_run_settings(settings, ADAPTER_PATH)

    assert "<!-- keep me -->" in composed
    assert "<?adapter-hint fast?>" in composed
    assert "<MaxCpuCount>1</MaxCpuCount><!-- cpu --><TestAdaptersPaths>" in composed


def test_namespace_prefixes_are_kept() -> None:
    settings = '<RunSettings xmlns:x="urn:x"><x:Foo>1</x:Foo></RunSettings>'

    composed = compose_run_settings(settings, ADAPTER_PATH)

    assert 'xmlns:x="urn:x"' in composed
    assert "<x:Foo>1</x:Foo>" in composed
    root = ET.fromstring(composed)
    assert root.find("{urn:x}Foo").text == "1"
    assert root.find("RunConfiguration/TestAdaptersPaths").text == ADAPTER_PATH


def test_default_namespace_is_kept() -> None:
    settings = '<RunSettings xmlns="urn:settings"><RunConfiguration /></RunSettings>'

    composed = compose_run_settings(settings, ADAPTER_PATH)

    assert composed.startswith('<RunSettings xmlns="urn:settings">')
    root = ET.fromstring(composed)
    paths = root.findall("{urn:settings}RunConfiguration/{urn:settings}TestAdaptersPaths")
    assert [p.text for p in paths] == [ADAPTER_PATH]
