"""Unit tests for LinkResolver and placeholder helpers."""

import pytest

from helpers import SAMPLE_ABI, make_unit
from linked_deployments.exceptions import (
    IncompleteLinkingError,
    InvalidAddressError,
    UnresolvedDependencyError,
)
from linked_deployments.linking import (
    PLACEHOLDER_LENGTH,
    LinkResolver,
    default_placeholder,
    find_placeholders,
    validate_address,
)
from linked_deployments.registry import ArtifactRegistry
from linked_deployments.types import Artifact, Unit

LIB1_ADDRESS = "0xAbCdEf0123456789abcdef0123456789ABCDEF01"
LIB2_ADDRESS = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def registry(lib_main_units) -> ArtifactRegistry:
    registry = ArtifactRegistry("development")
    registry.initialize(lib_main_units)
    return registry


class TestDefaultPlaceholder:
    """Test the default_placeholder function."""

    def test_pads_to_address_width(self):
        placeholder = default_placeholder("IceGlobal")

        assert len(placeholder) == PLACEHOLDER_LENGTH
        assert placeholder.startswith("__IceGlobal_")
        assert placeholder.endswith("__")

    def test_truncates_long_names(self):
        placeholder = default_placeholder("A" * 60)
        assert len(placeholder) == PLACEHOLDER_LENGTH


class TestFindPlaceholders:
    """Test the find_placeholders function."""

    def test_finds_distinct_placeholders_in_order(self):
        lib1 = default_placeholder("Lib1")
        lib2 = default_placeholder("Lib2")
        bytecode = f"0x6080{lib2}73{lib1}5b{lib2}00"

        assert find_placeholders(bytecode) == [lib2, lib1]

    def test_finds_hashed_solc_placeholders(self):
        hashed = "__$" + "a" * 34 + "$__"
        assert find_placeholders(f"6080{hashed}00") == [hashed]

    def test_plain_hex_has_none(self):
        assert find_placeholders("0x6080604052") == []


class TestValidateAddress:
    """Test the validate_address function."""

    def test_accepts_mixed_case_address(self):
        assert validate_address(LIB1_ADDRESS) == LIB1_ADDRESS

    @pytest.mark.parametrize(
        "address", ["", "0x1234", "1" * 40, "0x" + "g" * 40, "0x" + "1" * 41, None]
    )
    def test_rejects_malformed_address(self, address):
        with pytest.raises(InvalidAddressError):
            validate_address(address)


class TestResolve:
    """Test the resolve() method."""

    def test_no_dependencies_is_noop(self, registry: ArtifactRegistry, lib_main_units):
        """Test that a unit without dependencies is returned unmodified."""
        lib1 = lib_main_units[0]
        assert LinkResolver().resolve(lib1, registry) == lib1.artifact.bytecode

    def test_substitutes_every_occurrence(self, registry: ArtifactRegistry, lib_main_units):
        """Test that all placeholders are replaced with lowercase addresses."""
        registry.record_deployed("Lib1", LIB1_ADDRESS)
        registry.record_deployed("Lib2", LIB2_ADDRESS)
        main = lib_main_units[2]

        linked = LinkResolver().resolve(main, registry)

        assert find_placeholders(linked) == []
        assert "_" not in linked
        assert linked.count(LIB1_ADDRESS[2:].lower()) == 2
        assert linked.count(LIB2_ADDRESS[2:]) == 2
        assert len(linked) == len(main.artifact.bytecode)

    def test_does_not_modify_artifact(self, registry: ArtifactRegistry, lib_main_units):
        registry.record_deployed("Lib1", LIB1_ADDRESS)
        registry.record_deployed("Lib2", LIB2_ADDRESS)
        main = lib_main_units[2]
        template = main.artifact.bytecode

        LinkResolver().resolve(main, registry)

        assert main.artifact.bytecode == template

    def test_pending_dependency_raises_unresolved(
        self, registry: ArtifactRegistry, lib_main_units
    ):
        """Test that linking before a dependency is deployed never proceeds."""
        registry.record_deployed("Lib1", LIB1_ADDRESS)

        with pytest.raises(UnresolvedDependencyError) as exc_info:
            LinkResolver().resolve(lib_main_units[2], registry)

        assert exc_info.value.unit == "Main"
        assert exc_info.value.dependency == "Lib2"

    def test_failed_dependency_raises_unresolved(
        self, registry: ArtifactRegistry, lib_main_units
    ):
        registry.record_deployed("Lib1", LIB1_ADDRESS)
        registry.record_failed("Lib2", "reverted")

        with pytest.raises(UnresolvedDependencyError):
            LinkResolver().resolve(lib_main_units[2], registry)

    def test_dependency_missing_from_registry_raises_unresolved(self):
        registry = ArtifactRegistry("development")
        main = make_unit("Main", ["Lib1"])
        registry.initialize([main])

        with pytest.raises(UnresolvedDependencyError):
            LinkResolver().resolve(main, registry)

    def test_invalid_address_raises(self, registry: ArtifactRegistry, lib_main_units):
        registry.record_deployed("Lib1", "0x1234")
        registry.record_deployed("Lib2", LIB2_ADDRESS)

        with pytest.raises(InvalidAddressError):
            LinkResolver().resolve(lib_main_units[2], registry)

    def test_declared_link_references_are_used(self):
        """Test substitution of explicit (hashed) placeholder tokens."""
        hashed = "__$" + "0" * 34 + "$__"
        artifact = Artifact(
            abi=SAMPLE_ABI,
            bytecode=f"0x6080{hashed}5b{hashed}00",
            link_references={"Lib1": [hashed]},
        )
        unit = Unit(name="Main", artifact=artifact, dependencies=("Lib1",))
        registry = ArtifactRegistry.seeded("development", {"Lib1": LIB2_ADDRESS})

        linked = LinkResolver().resolve(unit, registry)

        assert linked == f"0x6080{LIB2_ADDRESS[2:]}5b{LIB2_ADDRESS[2:]}00"

    def test_undeclared_placeholder_raises_incomplete(self):
        """Test that a placeholder for an undeclared library is reported."""
        other = default_placeholder("Other")
        artifact = Artifact(
            abi=SAMPLE_ABI,
            bytecode=f"0x6080{default_placeholder('Lib1')}5b{other}00",
        )
        unit = Unit(name="Main", artifact=artifact, dependencies=("Lib1",))
        registry = ArtifactRegistry.seeded("development", {"Lib1": LIB1_ADDRESS})

        with pytest.raises(IncompleteLinkingError) as exc_info:
            LinkResolver().resolve(unit, registry)

        assert exc_info.value.unit == "Main"
        assert exc_info.value.placeholders == [other]

    def test_stray_non_hex_raises_incomplete(self):
        artifact = Artifact(
            abi=SAMPLE_ABI,
            bytecode=f"0x6080{default_placeholder('Lib1')}zz00",
        )
        unit = Unit(name="Main", artifact=artifact, dependencies=("Lib1",))
        registry = ArtifactRegistry.seeded("development", {"Lib1": LIB1_ADDRESS})

        with pytest.raises(IncompleteLinkingError):
            LinkResolver().resolve(unit, registry)

    def test_placeholders_for_falls_back_to_default(self, lib_main_units):
        main = lib_main_units[2]
        assert LinkResolver.placeholders_for(main, "Lib1") == [default_placeholder("Lib1")]
