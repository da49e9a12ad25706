"""Architecture tests for the membership bounded context.

Membership is the source of access decisions for the whole application,
so it must not depend on the contexts that ask it questions. Within the
context, the domain layer stays free of persistence concerns.
"""

from pytest_archon import archrule


class TestMembershipBoundedContextIsolation:
    """Tests that membership does not import other bounded contexts."""

    def test_membership_does_not_import_hooks(self):
        """Hooks ask membership for Master access, never the other way round."""
        (
            archrule("membership_no_hooks")
            .match("membership*")
            .should_not_import("hooks*")
            .check("membership")
        )


class TestMembershipLayerBoundaries:
    """Tests for dependencies between the layers of the context."""

    def test_domain_does_not_import_infrastructure(self):
        """Aggregates and the ancestor chain are pure business logic."""
        (
            archrule("membership_domain_no_infrastructure")
            .match("membership.domain*")
            .should_not_import("membership.infrastructure*")
            .check("membership")
        )

    def test_domain_does_not_import_application(self):
        (
            archrule("membership_domain_no_application")
            .match("membership.domain*")
            .should_not_import("membership.application*")
            .check("membership")
        )

    def test_domain_does_not_import_sqlalchemy(self):
        """Domain objects should be usable without a database."""
        (
            archrule("membership_domain_no_sqlalchemy")
            .match("membership.domain*")
            .should_not_import("sqlalchemy*")
            .check("membership")
        )

    def test_ports_do_not_import_infrastructure(self):
        """Ports define interfaces; implementations depend on them."""
        (
            archrule("membership_ports_no_infrastructure")
            .match("membership.ports*")
            .should_not_import("membership.infrastructure*")
            .check("membership")
        )

    def test_application_does_not_import_infrastructure(self):
        """Services receive repositories through their constructors."""
        (
            archrule("membership_application_no_infrastructure")
            .match("membership.application*")
            .should_not_import("membership.infrastructure*")
            .check("membership")
        )
