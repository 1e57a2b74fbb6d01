"""Unit tests for node extraction and graph building."""

import unittest
from unittest import mock
import sys
import os

# Add repository root and tests directory to path for imports
tests_dir = os.path.dirname(os.path.dirname(os.path.realpath(__file__)))
sys.path.append(os.path.dirname(tests_dir))
sys.path.append(tests_dir)

from fixtures.plan_samples import (
    load_sample_plan,
    plan_document,
    resource_change,
)
from tfops import graphmaker
from tfops.exceptions import GraphBuildError
from tfops.models import GraphNode, GraphOptions, NodeType
from tfops.plan import parse_plan


class TestExtractNodes(unittest.TestCase):
    """Test extract_nodes function."""

    def setUp(self):
        self.plan = parse_plan(load_sample_plan())

    def test_node_order_and_ids(self):
        nodes = graphmaker.extract_nodes(self.plan, GraphOptions())
        self.assertEqual(
            [n.id for n in nodes],
            [
                "data_aws_ami_ubuntu",
                "aws_vpc_main",
                "aws_subnet_public",
                "aws_instance_web",
                "module_network_aws_subnet_private",
                "module_app_aws_security_group_app",
                "output_instance_id",
                "output_vpc_cidr",
                "var_instance_type",
                "var_db_password",
                "local_subnet_cidr",
            ],
        )

    def test_resource_node_fields(self):
        nodes = {n.address: n for n in graphmaker.extract_nodes(self.plan, GraphOptions())}
        web = nodes["aws_instance.web"]
        self.assertEqual(web.type, "aws_instance")
        self.assertEqual(web.name, "web")
        self.assertEqual(web.provider, "aws")
        self.assertEqual(web.module, "")
        self.assertEqual(web.actions, ("create",))
        self.assertTrue(web.sensitive)
        self.assertEqual(web.category, NodeType.RESOURCE)

        private = nodes["module.network.aws_subnet.private"]
        self.assertEqual(private.module, "module.network")
        self.assertFalse(private.sensitive)

        self.assertEqual(nodes["data.aws_ami.ubuntu"].category, NodeType.DATA)

    def test_variable_nodes(self):
        nodes = {n.address: n for n in graphmaker.extract_nodes(self.plan, GraphOptions())}
        self.assertEqual(nodes["var.instance_type"].actions, ("no-op",))
        self.assertFalse(nodes["var.instance_type"].sensitive)
        self.assertTrue(nodes["var.db_password"].sensitive)
        self.assertEqual(nodes["var.db_password"].type, "variable")
        self.assertEqual(nodes["var.db_password"].category, NodeType.VARIABLE)
        self.assertEqual(nodes["local.subnet_cidr"].category, NodeType.LOCAL)
        self.assertEqual(nodes["output.instance_id"].category, NodeType.OUTPUT)

    def test_variables_never_duplicated(self):
        nodes = graphmaker.extract_nodes(self.plan, GraphOptions())
        var_ids = [n.id for n in nodes if n.type == "variable"]
        self.assertEqual(var_ids, ["var_instance_type", "var_db_password"])

    def test_exclusion_flags(self):
        options = GraphOptions(
            no_data_sources=True,
            no_outputs=True,
            no_variables=True,
            no_locals=True,
            no_modules=True,
        )
        nodes = graphmaker.extract_nodes(self.plan, options)
        self.assertEqual(
            [n.id for n in nodes],
            ["aws_vpc_main", "aws_subnet_public", "aws_instance_web"],
        )

    def test_provider_empty_for_single_segment_type(self):
        plan = parse_plan(
            plan_document(resource_changes=[resource_change("terraform.data")])
        )
        node = graphmaker.extract_nodes(plan, GraphOptions())[0]
        self.assertEqual(node.provider, "")

    def test_module_data_source_category(self):
        plan = parse_plan(
            plan_document(
                resource_changes=[
                    resource_change(
                        "module.app.data.aws_ami.ubuntu",
                        mode="data",
                        actions=["read"],
                        module_address="module.app",
                    )
                ]
            )
        )
        node = graphmaker.extract_nodes(plan, GraphOptions())[0]
        self.assertEqual(node.category, NodeType.DATA)

    def test_nested_module_category(self):
        data = GraphNode(
            id="module_a_module_b_data_aws_ami_x",
            address="module.a.module.b.data.aws_ami.x",
            type="aws_ami",
            name="x",
            module="module.a.module.b",
        )
        managed = GraphNode(
            id="module_data_aws_vpc_main",
            address="module.data.aws_vpc.main",
            type="aws_vpc",
            name="main",
            module="module.data",
        )
        self.assertEqual(data.category, NodeType.DATA)
        self.assertEqual(managed.category, NodeType.RESOURCE)


class TestBuildGraph(unittest.TestCase):
    """Test build_graph function."""

    def setUp(self):
        self.plan = parse_plan(load_sample_plan())

    def test_sample_plan_edges(self):
        graph = graphmaker.build_graph(self.plan, GraphOptions())
        self.assertEqual(
            [(e.source, e.target) for e in graph.edges],
            [
                ("aws_vpc_main", "aws_subnet_public"),
                ("local_subnet_cidr", "aws_subnet_public"),
                ("aws_vpc_main", "aws_instance_web"),
                ("data_aws_ami_ubuntu", "aws_instance_web"),
                ("var_instance_type", "aws_instance_web"),
                ("aws_subnet_public", "aws_instance_web"),
                ("aws_vpc_main", "module_network_aws_subnet_private"),
                (
                    "module_network_aws_subnet_private",
                    "module_app_aws_security_group_app",
                ),
                ("aws_instance_web", "output_instance_id"),
                ("aws_vpc_main", "output_vpc_cidr"),
            ],
        )

    def test_graph_invariants_for_every_option_combination(self):
        flags = ["no_data_sources", "no_outputs", "no_variables", "no_locals", "no_modules"]
        for mask in range(2 ** len(flags)):
            options = GraphOptions(
                **{flag: bool(mask & (1 << i)) for i, flag in enumerate(flags)}
            )
            graph = graphmaker.build_graph(self.plan, options)
            ids = [node.id for node in graph.nodes]
            pairs = [(e.source, e.target) for e in graph.edges]
            with self.subTest(options=options):
                self.assertEqual(len(ids), len(set(ids)))
                self.assertEqual(len(pairs), len(set(pairs)))
                for source, target in pairs:
                    self.assertNotEqual(source, target)
                    self.assertIn(source, ids)
                    self.assertIn(target, ids)

    def test_no_outputs_removes_output_nodes_and_edges(self):
        graph = graphmaker.build_graph(self.plan, GraphOptions(no_outputs=True))
        self.assertFalse(any(n.type == "output" for n in graph.nodes))
        self.assertFalse(any(e.target.startswith("output_") for e in graph.edges))

    def test_deterministic(self):
        first = graphmaker.build_graph(self.plan, GraphOptions())
        second = graphmaker.build_graph(self.plan, GraphOptions())
        self.assertEqual(first, second)

    def test_empty_plan(self):
        graph = graphmaker.build_graph(parse_plan(plan_document()))
        self.assertEqual(graph.nodes, [])
        self.assertEqual(graph.edges, [])

    def test_unexpected_failure_is_wrapped(self):
        with mock.patch.object(
            graphmaker, "analyze_dependencies", side_effect=KeyError("boom")
        ):
            with self.assertRaises(GraphBuildError) as ctx:
                graphmaker.build_graph(self.plan, GraphOptions())
        self.assertIn("failed to analyze dependencies", str(ctx.exception))
        self.assertIsInstance(ctx.exception.cause, KeyError)


if __name__ == "__main__":
    unittest.main()
