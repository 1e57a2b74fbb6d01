"""Unit tests for dependency resolution and analysis."""

import logging
import unittest
import sys
import os

# Add repository root and tests directory to path for imports
tests_dir = os.path.dirname(os.path.dirname(os.path.realpath(__file__)))
sys.path.append(os.path.dirname(tests_dir))
sys.path.append(tests_dir)

from fixtures.plan_samples import (
    config_resource,
    cross_module_plan,
    depends_on_plan,
    edge_pairs,
    module_call,
    output_plan,
    plan_document,
    refs,
    resource_change,
    vpc_subnet_plan,
)
from tfops.dependencies import (
    analyze_dependencies,
    build_resolution_context,
    resolve_dependency_address,
)
from tfops.models import GraphOptions
from tfops.plan import parse_plan


def _context(*addresses):
    return {address: address.replace(".", "_") for address in addresses}


class TestResolveDependencyAddress(unittest.TestCase):
    """Test the fixed-priority address resolver."""

    def test_exact_match(self):
        ctx = _context("aws_vpc.main")
        self.assertEqual(resolve_dependency_address("aws_vpc.main", "", ctx), "aws_vpc.main")

    def test_resource_attribute_is_stripped(self):
        ctx = _context("aws_vpc.main")
        self.assertEqual(
            resolve_dependency_address("aws_vpc.main.id", "", ctx), "aws_vpc.main"
        )

    def test_data_source_attribute_is_stripped(self):
        ctx = _context("data.aws_ami.ubuntu")
        self.assertEqual(
            resolve_dependency_address("data.aws_ami.ubuntu.image_id", "", ctx),
            "data.aws_ami.ubuntu",
        )

    def test_module_resource_attribute_is_stripped(self):
        ctx = _context("module.network.aws_subnet.public")
        self.assertEqual(
            resolve_dependency_address("module.network.aws_subnet.public.id", "", ctx),
            "module.network.aws_subnet.public",
        )

    def test_module_local_reference(self):
        ctx = _context("module.app.aws_instance.web")
        self.assertEqual(
            resolve_dependency_address("aws_instance.web.id", "module.app", ctx),
            "module.app.aws_instance.web",
        )

    def test_module_local_requires_prefix(self):
        ctx = _context("module.app.aws_instance.web")
        self.assertIsNone(resolve_dependency_address("aws_instance.web.id", "", ctx))

    def test_root_match_wins_over_module_local(self):
        """A root resource with the same relative address is chosen first."""
        ctx = _context("aws_instance.web", "module.app.aws_instance.web")
        self.assertEqual(
            resolve_dependency_address("aws_instance.web.id", "module.app", ctx),
            "aws_instance.web",
        )

    def test_module_output_reference_does_not_resolve(self):
        ctx = _context("module.network.aws_subnet.public")
        self.assertIsNone(
            resolve_dependency_address("module.network.subnet_id", "", ctx)
        )

    def test_variables_and_locals(self):
        ctx = _context("var.region", "local.tags")
        self.assertEqual(resolve_dependency_address("var.region", "", ctx), "var.region")
        self.assertEqual(
            resolve_dependency_address("local.tags.Name", "", ctx), "local.tags"
        )

    def test_unresolved_is_logged_at_debug(self):
        log = logging.getLogger("tests.resolver")
        with self.assertLogs(log, level="DEBUG") as captured:
            result = resolve_dependency_address("aws_s3_bucket.x.arn", "", {}, log)
        self.assertIsNone(result)
        self.assertTrue(any("Could not resolve" in line for line in captured.output))


class TestResolutionContext(unittest.TestCase):
    """Test build_resolution_context."""

    def setUp(self):
        self.plan = parse_plan(
            plan_document(
                resource_changes=[
                    resource_change("data.aws_ami.ubuntu", actions=["read"], mode="data"),
                    resource_change("aws_vpc.main"),
                    resource_change(
                        "module.app.aws_instance.web", module_address="module.app"
                    ),
                ],
                output_changes={"vpc_id": ["create"]},
                variables={"region": "us-east-1"},
                config_variables={"region": {}, "token": {"sensitive": True}},
                local_values={"tags": {}},
            )
        )

    def test_all_categories_in_order(self):
        ctx = build_resolution_context(self.plan, GraphOptions())
        self.assertEqual(
            list(ctx),
            [
                "data.aws_ami.ubuntu",
                "aws_vpc.main",
                "module.app.aws_instance.web",
                "output.vpc_id",
                "var.region",
                "var.token",
                "local.tags",
            ],
        )
        self.assertEqual(ctx["module.app.aws_instance.web"], "module_app_aws_instance_web")

    def test_exclusions(self):
        options = GraphOptions(
            no_data_sources=True,
            no_outputs=True,
            no_variables=True,
            no_locals=True,
            no_modules=True,
        )
        ctx = build_resolution_context(self.plan, options)
        self.assertEqual(list(ctx), ["aws_vpc.main"])

    def test_context_is_read_only(self):
        ctx = build_resolution_context(self.plan, GraphOptions())
        with self.assertRaises(TypeError):
            ctx["aws_s3_bucket.new"] = "x"


class TestAnalyzeDependencies(unittest.TestCase):
    """Test edge derivation scenarios."""

    def _edges(self, document, **options):
        return edge_pairs(analyze_dependencies(parse_plan(document), GraphOptions(**options)))

    def test_implicit_reference(self):
        self.assertEqual(
            self._edges(vpc_subnet_plan()), [("aws_vpc_main", "aws_subnet_public")]
        )

    def test_explicit_depends_on_with_duplicate_reference(self):
        edges = self._edges(depends_on_plan())
        self.assertEqual(
            edges,
            [
                ("aws_vpc_main", "aws_instance_web"),
                ("aws_subnet_public", "aws_instance_web"),
            ],
        )

    def test_cross_module_fan_out(self):
        edges = self._edges(cross_module_plan())
        self.assertIn(
            ("module_network_aws_subnet_public", "module_app_aws_instance_web"), edges
        )
        self.assertIn(("module_network_aws_subnet_public", "module_app_aws_eip_web"), edges)
        self.assertIn(("module_app_aws_instance_web", "module_app_aws_eip_web"), edges)
        # module.app2 shares the "module.app" text prefix but is another module
        self.assertNotIn(
            ("module_network_aws_subnet_public", "module_app2_aws_instance_web"), edges
        )
        self.assertEqual(len(edges), 3)

    def test_output_reference(self):
        self.assertEqual(
            self._edges(output_plan()), [("aws_instance_web", "output_instance_id")]
        )

    def test_no_outputs_drops_output_edges(self):
        self.assertEqual(self._edges(output_plan(), no_outputs=True), [])

    def test_no_modules_skips_module_calls(self):
        self.assertEqual(self._edges(cross_module_plan(), no_modules=True), [])

    def test_excluded_categories_yield_no_edges(self):
        document = plan_document(
            resource_changes=[
                resource_change("data.aws_ami.ubuntu", actions=["read"], mode="data"),
                resource_change("aws_instance.web"),
            ],
            resources=[
                config_resource(
                    "aws_instance.web",
                    expressions={
                        "ami": refs("data.aws_ami.ubuntu.id"),
                        "type": refs("var.instance_type"),
                        "tags": refs("local.tags"),
                    },
                ),
            ],
            variables={"instance_type": "t3.micro"},
            local_values={"tags": {}},
        )
        edges = self._edges(
            document, no_data_sources=True, no_variables=True, no_locals=True
        )
        self.assertEqual(edges, [])

    def test_self_reference_is_dropped(self):
        document = plan_document(
            resource_changes=[resource_change("aws_security_group.sg")],
            resources=[
                config_resource(
                    "aws_security_group.sg",
                    expressions={"self_ref": refs("aws_security_group.sg.id")},
                    depends_on=["aws_security_group.sg"],
                )
            ],
        )
        self.assertEqual(self._edges(document), [])

    def test_resource_missing_from_changes_is_skipped(self):
        document = plan_document(
            resource_changes=[resource_change("aws_vpc.main")],
            resources=[
                config_resource("aws_vpc.main"),
                config_resource("aws_subnet.gone", expressions={"v": refs("aws_vpc.main.id")}),
            ],
        )
        self.assertEqual(self._edges(document), [])

    def test_nested_module_calls_are_recursed(self):
        document = plan_document(
            resource_changes=[
                resource_change("aws_vpc.main"),
                resource_change(
                    "module.app.module.db.aws_db_instance.main",
                    module_address="module.app.module.db",
                ),
                resource_change(
                    "module.app.module.db.aws_db_subnet_group.main",
                    module_address="module.app.module.db",
                ),
            ],
            resources=[config_resource("aws_vpc.main")],
            module_calls={
                "app": module_call(
                    module_calls={
                        "db": module_call(
                            expressions={"vpc_id": refs("aws_vpc.main.id")},
                            resources=[
                                config_resource(
                                    "module.app.module.db.aws_db_instance.main",
                                    expressions={
                                        "subnets": refs("aws_db_subnet_group.main.name")
                                    },
                                ),
                                config_resource(
                                    "module.app.module.db.aws_db_subnet_group.main"
                                ),
                            ],
                        )
                    },
                )
            },
        )
        edges = self._edges(document)
        self.assertEqual(
            edges,
            [
                ("aws_vpc_main", "module_app_module_db_aws_db_instance_main"),
                ("aws_vpc_main", "module_app_module_db_aws_db_subnet_group_main"),
                (
                    "module_app_module_db_aws_db_subnet_group_main",
                    "module_app_module_db_aws_db_instance_main",
                ),
            ],
        )

    def test_edges_are_unique_and_endpoints_known(self):
        document = plan_document(
            resource_changes=[
                resource_change("aws_vpc.main"),
                resource_change("aws_subnet.a"),
            ],
            resources=[
                config_resource("aws_vpc.main"),
                config_resource(
                    "aws_subnet.a",
                    expressions={
                        "vpc_id": refs("aws_vpc.main.id", "aws_vpc.main"),
                        "other": [refs("aws_vpc.main.arn"), refs("aws_vpc.main")],
                    },
                    depends_on=["aws_vpc.main"],
                ),
            ],
        )
        edges = self._edges(document)
        self.assertEqual(edges, [("aws_vpc_main", "aws_subnet_a")])

    def test_injected_logger_receives_trace(self):
        log = logging.getLogger("tests.analyzer")
        with self.assertLogs(log, level="DEBUG") as captured:
            analyze_dependencies(parse_plan(vpc_subnet_plan()), GraphOptions(), log=log)
        self.assertTrue(any("Added implicit dependency edge" in l for l in captured.output))
        self.assertTrue(any("Skipped duplicate edge" in l for l in captured.output))


if __name__ == "__main__":
    unittest.main()
