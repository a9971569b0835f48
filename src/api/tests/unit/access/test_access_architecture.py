"""Architecture tests using pytest-archon.

These tests enforce the layer boundaries of the access bounded context.
"""

from pytest_archon import archrule


class TestAccessDomainLayerBoundaries:
    """The domain layer is pure business logic."""

    def test_domain_does_not_import_outer_layers(self):
        (
            archrule("access_domain_no_outer_layers")
            .match("access.domain*")
            .should_not_import(
                "access.application*",
                "access.infrastructure*",
                "access.presentation*",
                "access.dependencies*",
            )
            .check("access")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects stay usable without a database or web framework."""
        (
            archrule("access_domain_no_frameworks")
            .match("access.domain*")
            .should_not_import("sqlalchemy*", "fastapi*", "starlette*", "httpx*")
            .check("access")
        )


class TestAccessPortsLayerBoundaries:
    def test_ports_do_not_import_implementations(self):
        (
            archrule("access_ports_no_infrastructure")
            .match("access.ports*")
            .should_not_import(
                "access.infrastructure*",
                "access.application*",
                "sqlalchemy*",
                "httpx*",
            )
            .check("access")
        )


class TestAccessApplicationLayerBoundaries:
    """Services talk to ports, never to concrete adapters or HTTP."""

    def test_application_does_not_import_infrastructure(self):
        (
            archrule("access_application_no_infrastructure")
            .match("access.application*")
            .should_not_import("access.infrastructure*")
            .check("access")
        )

    def test_application_does_not_import_presentation(self):
        (
            archrule("access_application_no_presentation")
            .match("access.application*")
            .should_not_import("access.presentation*", "fastapi*")
            .check("access")
        )


class TestAccessPresentationLayerBoundaries:
    def test_presentation_does_not_import_infrastructure(self):
        """Routes reach adapters only through the dependency providers."""
        (
            archrule("access_presentation_no_infrastructure")
            .match("access.presentation*")
            .should_not_import("access.infrastructure*", "sqlalchemy*")
            .check("access", only_direct_imports=True)
        )
